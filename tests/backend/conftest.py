import os
import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise

from vidtube.core import db as db_module
from vidtube.core.security import hash_password
from vidtube.main import app
from vidtube.models.user import User
from vidtube.models.video import Video
from vidtube.services.storage_base import MediaStorage
from vidtube.services.storage_factory import get_media_storage


TEST_DB_URL = "sqlite://:memory:"
os.environ["DATABASE_URL"] = TEST_DB_URL
db_module.DB_URL = TEST_DB_URL
db_module.TORTOISE_ORM["connections"]["default"] = TEST_DB_URL


async def _init_test_db() -> None:
    """
    Initialize a clean in-memory SQLite database for every test.
    Ensures tables are recreated from scratch.
    """
    if Tortoise._inited:
        await Tortoise.close_connections()
    await Tortoise.init(config=db_module.TORTOISE_ORM)
    await Tortoise.generate_schemas()


class FakeMediaStorage(MediaStorage):
    """Records uploads in memory and hands back predictable URLs."""

    def __init__(self):
        self.uploads: list[tuple[str, bytes]] = []

    @property
    def name(self) -> str:
        return "In-memory fake"

    async def upload(self, filename: str, data: bytes) -> str:
        self.uploads.append((filename, data))
        return f"https://cdn.test/{len(self.uploads)}-{filename}"


@pytest_asyncio.fixture
async def db():
    """Fresh database for service-level tests (no HTTP client)."""
    await _init_test_db()
    yield
    await Tortoise.close_connections()


@pytest.fixture
def media_storage():
    storage = FakeMediaStorage()
    app.dependency_overrides[get_media_storage] = lambda: storage
    yield storage
    app.dependency_overrides.pop(get_media_storage, None)


@pytest_asyncio.fixture
async def client(media_storage):
    """
    Provide an HTTPX AsyncClient bound to the FastAPI app with a fresh DB.
    https base URL so the secure auth cookies round-trip.
    """
    await _init_test_db()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="https://testserver") as async_client:
        yield async_client
    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def create_user():
    """
    Factory fixture to create users directly via ORM.
    """

    async def _create_user(username: str | None = None, password: str = "UserPass!23") -> tuple[User, str]:
        name = username or f"user_{uuid.uuid4().hex[:6]}"
        user = await User.create(
            username=name,
            email=f"{name}@example.com",
            full_name=name.title(),
            password_hash=hash_password(password),
            avatar_url=f"https://cdn.test/{name}.png",
        )
        return user, password

    return _create_user


@pytest_asyncio.fixture
async def create_video():
    """Factory fixture for videos owned by a given user."""

    async def _create_video(owner: User, title: str = "A video") -> Video:
        return await Video.create(
            owner=owner,
            title=title,
            description=f"{title} description",
            video_url=f"https://cdn.test/{uuid.uuid4().hex}.mp4",
            thumbnail_url=f"https://cdn.test/{uuid.uuid4().hex}.jpg",
            duration_sec=12.5,
        )

    return _create_video

