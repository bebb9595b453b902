import os
from typing import AsyncGenerator, List

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Use in-memory SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Settings are read once at import, so the environment is fixed before importing the app
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["GALLERY_BACKEND"] = "sql"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ADMIN_PASSWORD"] = "gallery-admin-secret"
os.environ["ADMIN_PASSWORD_HASH"] = ""
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret"
for _name in (
    "DISCORD_WEBHOOK_DEFAULT",
    "DISCORD_WEBHOOK_CONTACT",
    "DISCORD_WEBHOOK_REPORT",
    "TELEGRAM_BOT_TOKEN",
    "TELEGRAM_CHANNEL_ID",
    "TELEGRAM_ADMIN_CHAT_IDS",
):
    os.environ[_name] = ""

from affiliate_gallery.database import Base, get_db  # noqa: E402
from affiliate_gallery.main import app  # noqa: E402
from affiliate_gallery.models import User  # noqa: E402
from affiliate_gallery.services.notification_service import NotificationService, get_notification_service  # noqa: E402
from affiliate_gallery.utils.auth import hash_password  # noqa: E402
from affiliate_gallery.utils.jwt_auth import create_access_token  # noqa: E402

ADMIN_PASSWORD = "gallery-admin-secret"
USER_PASSWORD = "user-password"


@pytest_asyncio.fixture
async def test_engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(name="session")
async def session_fixture(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


class RecordedRequests(list):
    """Outbound requests captured by the mock transport, plus the status to answer with."""

    status_code = 200

    def urls(self) -> List[str]:
        return [str(request.url) for request in self]


@pytest.fixture
def outbound() -> RecordedRequests:
    return RecordedRequests()


@pytest_asyncio.fixture
async def notifier(outbound: RecordedRequests) -> AsyncGenerator[NotificationService, None]:
    def handler(request: httpx.Request) -> httpx.Response:
        outbound.append(request)
        return httpx.Response(outbound.status_code, json={"ok": outbound.status_code < 400})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
        yield NotificationService(client=http_client, max_retries=1)


@pytest_asyncio.fixture(name="client")
async def client_fixture(session_factory, notifier) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client against the app with the test database and mocked notifications."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_service] = lambda: notifier

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


async def _create_user(session: AsyncSession, username: str, role: str) -> User:
    user = User(username=username, password_hash=hash_password(USER_PASSWORD), role=role)
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


@pytest_asyncio.fixture
async def admin_user(session: AsyncSession) -> User:
    return await _create_user(session, "admin", "admin")


@pytest_asyncio.fixture
async def manager_user(session: AsyncSession) -> User:
    return await _create_user(session, "manager", "manager")


def token_for(user: User) -> str:
    return create_access_token({"sub": str(user.id), "role": user.role, "username": user.username})


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    return {"Authorization": f"Bearer {token_for(admin_user)}"}


@pytest.fixture
def manager_headers(manager_user: User) -> dict:
    return {"Authorization": f"Bearer {token_for(manager_user)}"}


@pytest.fixture
def password_headers() -> dict:
    return {"X-Admin-Password": ADMIN_PASSWORD}


@pytest.fixture
def item_payload() -> dict:
    return {
        "name": "Sunset Stream",
        "description": "Evening session",
        "category": "onlyfans",
        "imageUrl": "https://img.example.com/sunset.jpg",
        "affiliateUrl": "https://aff.example.com/sunset",
        "isFeatured": True,
    }
