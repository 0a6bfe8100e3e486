# vidtube/services/credentials.py
"""
Credential store.

Owns the identity fields of a user record and its password digest:
registration, lookup, password verification and profile updates. Also
persists the user's single refresh token on behalf of the session manager.
"""
import logging
import uuid
from typing import Optional

from tortoise.exceptions import IntegrityError
from tortoise.expressions import Q

from vidtube.core.errors import AuthError, ConflictError, NotFoundError, ValidationError, require_fields
from vidtube.core.security import hash_password, verify_password
from vidtube.models.user import User
from vidtube.schemas.user import PublicUser

logger = logging.getLogger("uvicorn.error")


def parse_id(value, label: str = "User") -> uuid.UUID:
    """Coerce an id to UUID; anything unparsable cannot exist, so it is NotFound."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        raise NotFoundError(f"{label} not found") from None


class CredentialStore:
    """Service layer for user identity and credentials."""

    async def register(
        self,
        username: Optional[str],
        email: Optional[str],
        full_name: Optional[str],
        password: Optional[str],
        avatar_url: Optional[str],
        cover_image_url: Optional[str] = None,
    ) -> PublicUser:
        """
        Create a new user account.

        Raises:
            ValidationError: a required field is empty, or no avatar was given
            ConflictError: username or email already taken
        """
        fields = require_fields(username=username, email=email, fullName=full_name, password=password)
        if not (avatar_url or "").strip():
            raise ValidationError("Avatar file is required", errors=[{"field": "avatar", "message": "required"}])

        username_n = User.normalize_username(fields["username"])
        email_n = User.normalize_email(fields["email"])

        # Fast path only; the unique constraints below are the real guarantee
        await self.ensure_available(username_n, email_n)

        try:
            user = await User.create(
                username=username_n,
                email=email_n,
                full_name=fields["fullName"],
                password_hash=hash_password(password),
                avatar_url=avatar_url.strip(),
                cover_image_url=(cover_image_url or "").strip() or None,
            )
        except IntegrityError:
            # Lost a registration race between the pre-check and the insert
            logger.info("[credentials] unique constraint hit on register username=%s", username_n)
            raise ConflictError("User with email or username already exists")

        logger.info("[credentials] registered user id=%s username=%s", user.id, user.username)
        return PublicUser.from_model(user)

    async def ensure_available(self, username: Optional[str], email: Optional[str]) -> None:
        """
        Fail early if the username or email is already registered.

        Raises:
            ConflictError: either value is taken
        """
        username_n = User.normalize_username(username)
        email_n = User.normalize_email(email)
        if await User.filter(Q(username=username_n) | Q(email=email_n)).exists():
            raise ConflictError("User with email or username already exists")

    async def verify_password(self, user: User, plain: str) -> bool:
        return verify_password(plain or "", user.password_hash)

    async def find_by_identifier(self, username: Optional[str] = None, email: Optional[str] = None) -> Optional[User]:
        """
        Look a user up by username or email (either may match).

        When both are given and they belong to different users, the
        username match wins.

        Raises:
            ValidationError: neither identifier supplied
        """
        username_n = User.normalize_username(username)
        email_n = User.normalize_email(email)
        if not username_n and not email_n:
            raise ValidationError("username or email is required")

        if username_n:
            user = await User.get_or_none(username=username_n)
            if user:
                return user
        if email_n:
            return await User.get_or_none(email=email_n)
        return None

    async def get_user(self, user_id) -> User:
        user = await User.get_or_none(id=parse_id(user_id))
        if not user:
            raise NotFoundError("User not found")
        return user

    async def get_public(self, user_id) -> PublicUser:
        return PublicUser.from_model(await self.get_user(user_id))

    async def update_profile(self, user_id, full_name: Optional[str], email: Optional[str]) -> PublicUser:
        fields = require_fields(fullName=full_name, email=email)
        user = await self.get_user(user_id)
        email_n = User.normalize_email(fields["email"])

        if email_n != user.email and await User.filter(email=email_n).exclude(id=user.id).exists():
            raise ConflictError("Email already registered")

        user.full_name = fields["fullName"]
        user.email = email_n
        try:
            await user.save(update_fields=["full_name", "email", "updated_at"])
        except IntegrityError:
            raise ConflictError("Email already registered")
        return PublicUser.from_model(user)

    async def update_password(self, user_id, old_password: Optional[str], new_password: Optional[str]) -> None:
        """
        Change a user's password after verifying the old one.

        Only the digest (and updated_at) are written back; unrelated fields
        are not re-validated.
        """
        require_fields(oldPassword=old_password, newPassword=new_password)
        user = await self.get_user(user_id)
        if not await self.verify_password(user, old_password):
            raise AuthError("Invalid old password")

        user.password_hash = hash_password(new_password)
        await user.save(update_fields=["password_hash", "updated_at"])
        logger.info("[credentials] password changed for user id=%s", user.id)

    async def update_avatar(self, user_id, avatar_url: Optional[str]) -> PublicUser:
        if not (avatar_url or "").strip():
            raise ValidationError("Avatar file is missing")
        user = await self.get_user(user_id)
        user.avatar_url = avatar_url.strip()
        await user.save(update_fields=["avatar_url", "updated_at"])
        return PublicUser.from_model(user)

    async def update_cover_image(self, user_id, cover_image_url: Optional[str]) -> PublicUser:
        if not (cover_image_url or "").strip():
            raise ValidationError("Cover image file is missing")
        user = await self.get_user(user_id)
        user.cover_image_url = cover_image_url.strip()
        await user.save(update_fields=["cover_image_url", "updated_at"])
        return PublicUser.from_model(user)

    # ------------------------------------------------------------------
    # Refresh token persistence (used by SessionTokenManager)
    # ------------------------------------------------------------------
    async def store_refresh_token(self, user_id, token: str) -> None:
        """Unconditionally overwrite the user's current refresh token."""
        await User.filter(id=parse_id(user_id)).update(refresh_token=token)

    async def swap_refresh_token(self, user_id, expected: str, token: str) -> bool:
        """
        Replace the refresh token only if the stored one still equals `expected`.

        Single conditional UPDATE; returns False when another rotation or a
        logout got there first.
        """
        updated = await User.filter(id=parse_id(user_id), refresh_token=expected).update(refresh_token=token)
        return updated == 1

    async def clear_refresh_token(self, user_id) -> None:
        await User.filter(id=parse_id(user_id)).update(refresh_token=None)


# Create singleton instance
credential_store = CredentialStore()
