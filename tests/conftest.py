"""
Pytest fixtures for test database, client, admin authentication and the
mail/media collaborators.

Each test gets a fresh SQLite database file with the full schema, so tests
are isolated and can open several sessions at once for concurrency checks.
"""

import os
import tempfile

_TEST_ROOT = tempfile.mkdtemp(prefix="ticketing-tests-")

# Settings are cached on first use: configure the environment before importing the app
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_ROOT}/unused.db"
os.environ["REDIS_ENABLED"] = "false"
os.environ["CLIENT_BASE_URL"] = "https://tickets.example.com"
os.environ["MEDIA_BASE_URL"] = "https://media.example.com/uploads"
os.environ["MEDIA_UPLOAD_DIR"] = os.path.join(_TEST_ROOT, "media")
os.environ["SENDGRID_API_KEY"] = ""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from ticketing.main import app
from ticketing.api.deps import get_mail_transport, get_media_storage
from ticketing.core.security import create_access_token, hash_password
from ticketing.db.base import Base
from ticketing.db.session import get_db
from ticketing.models.admin import Admin
from ticketing.models.event import Event
from ticketing.services.media_storage import LocalMediaStorage

from helpers import RecordingMailer


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path):
    """Fresh database file with all tables."""
    test_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'ticketing_test.db'}",
        connect_args={"timeout": 30},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_factory(engine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def media_storage(tmp_path) -> LocalMediaStorage:
    return LocalMediaStorage(str(tmp_path / "media"), "https://media.example.com/uploads")


@pytest_asyncio.fixture(scope="function")
async def client(session_factory, mailer, media_storage) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client with per-request test sessions and in-memory collaborators."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mail_transport] = lambda: mailer
    app.dependency_overrides[get_media_storage] = lambda: media_storage

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def test_admin(db_session: AsyncSession) -> Admin:
    admin = Admin(
        name="Gate Admin",
        email="admin@example.com",
        hashed_password=hash_password("adminpassword123"),
    )
    db_session.add(admin)
    await db_session.commit()
    await db_session.refresh(admin)
    return admin


@pytest_asyncio.fixture
async def admin_headers(test_admin: Admin) -> dict:
    token = create_access_token(data={"sub": test_admin.id, "is_admin": True})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def test_event(db_session: AsyncSession) -> Event:
    event = Event(
        id="E1",
        title="Test Concert",
        description="A test event",
        date="2026-12-05",
        event_time="7:00 PM - 10:00 PM",
        category="Music",
        address="Test Venue, 1 Main St",
        location="Manila",
        standard_price="500",
        vip_price="1500",
        sponsor_logos=[],
    )
    db_session.add(event)
    await db_session.commit()
    await db_session.refresh(event)
    return event
