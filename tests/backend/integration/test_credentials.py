import asyncio

import pytest

from vidtube.core.errors import AuthError, ConflictError, NotFoundError, ValidationError
from vidtube.core.security import verify_password
from vidtube.models.user import User
from vidtube.services.credentials import CredentialStore


pytestmark = pytest.mark.asyncio


def _register(store: CredentialStore, username="alice", email="a@x.com", **overrides):
    kwargs = dict(
        username=username,
        email=email,
        full_name="Alice A",
        password="secret1",
        avatar_url="u1",
        cover_image_url=None,
    )
    kwargs.update(overrides)
    return store.register(**kwargs)


async def test_register_normalizes_and_hashes(db):
    store = CredentialStore()
    public = await _register(store, username="  Alice ", email=" A@X.com ")

    assert public.username == "alice"
    assert public.email == "a@x.com"
    assert public.avatarUrl == "u1"
    assert public.coverImageUrl is None

    dumped = public.model_dump()
    assert "password" not in dumped and "passwordHash" not in dumped
    assert "refreshToken" not in dumped

    row = await User.get(id=public.id)
    assert row.password_hash != "secret1"
    assert verify_password("secret1", row.password_hash)


async def test_register_requires_fields_and_avatar(db):
    store = CredentialStore()
    with pytest.raises(ValidationError):
        await _register(store, username="   ")
    with pytest.raises(ValidationError):
        await _register(store, password="")
    with pytest.raises(ValidationError) as exc:
        await _register(store, avatar_url=None)
    assert "Avatar" in exc.value.message
    assert await User.all().count() == 0


async def test_register_duplicate_username_or_email_conflicts(db):
    store = CredentialStore()
    await _register(store)
    with pytest.raises(ConflictError):
        await _register(store, username="ALICE", email="other@x.com")
    with pytest.raises(ConflictError):
        await _register(store, username="bob", email="a@x.com")


async def test_concurrent_registration_yields_one_conflict(db):
    store = CredentialStore()
    results = await asyncio.gather(
        _register(store, username="alice", email="a1@x.com"),
        _register(store, username="alice", email="a2@x.com"),
        return_exceptions=True,
    )
    successes = [r for r in results if not isinstance(r, Exception)]
    conflicts = [r for r in results if isinstance(r, ConflictError)]
    assert len(successes) == 1
    assert len(conflicts) == 1
    assert await User.filter(username="alice").count() == 1


async def test_unique_constraint_is_translated_to_conflict(db, monkeypatch):
    """Even if the pre-check misses, the insert failure surfaces as ConflictError."""
    store = CredentialStore()
    await _register(store)

    class _NeverExists:
        async def exists(self):
            return False

    monkeypatch.setattr(User, "filter", classmethod(lambda cls, *a, **kw: _NeverExists()))
    with pytest.raises(ConflictError):
        await _register(store, email="new@x.com")


async def test_find_by_identifier_matches_either_field(db):
    store = CredentialStore()
    public = await _register(store)

    by_name = await store.find_by_identifier(username="ALICE")
    by_email = await store.find_by_identifier(email="a@x.com")
    assert str(by_name.id) == public.id
    assert str(by_email.id) == public.id
    assert await store.find_by_identifier(username="nobody") is None

    with pytest.raises(ValidationError):
        await store.find_by_identifier()


async def test_find_by_identifier_prefers_username_match(db):
    store = CredentialStore()
    alice = await _register(store)
    bob = await _register(store, username="bob", email="b@x.com")

    user = await store.find_by_identifier(username="alice", email="b@x.com")
    assert str(user.id) == alice.id
    user = await store.find_by_identifier(username="nobody", email="b@x.com")
    assert str(user.id) == bob.id


async def test_ensure_available(db):
    store = CredentialStore()
    await _register(store)

    await store.ensure_available("bob", "b@x.com")
    with pytest.raises(ConflictError):
        await store.ensure_available(" ALICE ", "new@x.com")
    with pytest.raises(ConflictError):
        await store.ensure_available("bob", "A@X.com")


async def test_get_user_unknown_or_malformed_id(db):
    store = CredentialStore()
    with pytest.raises(NotFoundError) as exc:
        await store.get_user("not-a-uuid")
    assert exc.value.__cause__ is None
    assert exc.value.__suppress_context__ is True
    with pytest.raises(NotFoundError):
        await store.get_user("6f1e8c1e-7b7d-4c4e-9a51-1f2f0a0b0c0d")


async def test_update_password(db):
    store = CredentialStore()
    public = await _register(store)

    with pytest.raises(AuthError):
        await store.update_password(public.id, "wrong", "secret2")
    with pytest.raises(ValidationError):
        await store.update_password(public.id, "secret1", "")

    await store.update_password(public.id, "secret1", "secret2")
    row = await User.get(id=public.id)
    assert verify_password("secret2", row.password_hash)
    assert not verify_password("secret1", row.password_hash)


async def test_update_password_only_writes_digest(db):
    """Unrelated fields, even ones that would not pass validation today, are left alone."""
    store = CredentialStore()
    public = await _register(store)
    await User.filter(id=public.id).update(full_name="")

    await store.update_password(public.id, "secret1", "secret2")
    row = await User.get(id=public.id)
    assert row.full_name == ""
    assert verify_password("secret2", row.password_hash)


async def test_update_profile(db):
    store = CredentialStore()
    alice = await _register(store)
    await _register(store, username="bob", email="b@x.com")

    updated = await store.update_profile(alice.id, "Alice Updated", " NEW@x.com ")
    assert updated.fullName == "Alice Updated"
    assert updated.email == "new@x.com"

    with pytest.raises(ConflictError):
        await store.update_profile(alice.id, "Alice", "b@x.com")
    with pytest.raises(ValidationError):
        await store.update_profile(alice.id, "", "x@x.com")


async def test_update_images(db):
    store = CredentialStore()
    alice = await _register(store)

    assert (await store.update_avatar(alice.id, "u2")).avatarUrl == "u2"
    assert (await store.update_cover_image(alice.id, "c1")).coverImageUrl == "c1"
    with pytest.raises(ValidationError):
        await store.update_avatar(alice.id, "")
