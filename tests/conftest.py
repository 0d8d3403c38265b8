"""
Pytest configuration and fixtures.

This file is automatically discovered by pytest and provides
shared fixtures for all test modules.

Every test gets its own in-memory SQLite database, so tests never see
each other's rows. The image CDN is replaced by an httpx.MockTransport
(see FakeCDN) and the app talks to both through dependency overrides.

References:
-----------
- Pytest Fixtures: https://docs.pytest.org/en/stable/fixture.html
- FastAPI Testing: https://fastapi.tiangolo.com/advanced/async-tests/
- httpx MockTransport: https://www.python-httpx.org/advanced/transports/
"""

import base64
import os
from typing import AsyncGenerator, Dict, List, Set
from urllib.parse import parse_qs

# Settings are read at import time; configure them before importing parkadmin.
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-that-is-long-enough-0001")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-key-that-is-long-enough-01")
os.environ.setdefault("GOOGLE_CLIENT_ID", "test-client-id.apps.googleusercontent.com")
os.environ.setdefault("ADMIN_EMAILS", "boss@example.com")
os.environ.setdefault("LOG_FORMAT", "text")

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from parkadmin.core.security import create_access_token  # noqa: E402
from parkadmin.db.base import Base  # noqa: E402
from parkadmin.db.deps import get_db  # noqa: E402
from parkadmin.main import app  # noqa: E402
from parkadmin.models.user import User  # noqa: E402
from parkadmin.services.cdn import CloudinaryClient  # noqa: E402
from parkadmin.services.images import ImagePipeline, get_image_pipeline  # noqa: E402


def make_data_uri(payload: bytes, mime: str = "image/png") -> str:
    """Build a base64 data URI the way the admin frontend sends images."""
    return f"data:{mime};base64,{base64.b64encode(payload).decode()}"


# ================================
# Fake image CDN
# ================================

class FakeCDN:
    """
    In-process stand-in for the Cloudinary REST API.

    - ``reject``: data URIs whose upload answers 500
    - ``fail_destroy``: every destroy call answers 500
    """

    def __init__(self):
        self.uploaded: List[str] = []
        self.destroyed: List[str] = []
        self.reject: Set[str] = set()
        self.fail_destroy = False
        self._counter = 0

    def handler(self, request: httpx.Request) -> httpx.Response:
        form = {key: values[0] for key, values in parse_qs(request.content.decode()).items()}
        action = request.url.path.rsplit("/", 1)[-1]

        if action == "upload":
            if form.get("file") in self.reject:
                return httpx.Response(500, json={"error": {"message": "upload rejected"}})
            self._counter += 1
            public_id = f"park-admin/img{self._counter}"
            url = f"https://res.cloudinary.com/demo/image/upload/v1700000000/{public_id}.png"
            self.uploaded.append(url)
            return httpx.Response(200, json={"public_id": public_id, "secure_url": url})

        if action == "destroy":
            if self.fail_destroy:
                return httpx.Response(500, json={"error": {"message": "destroy failed"}})
            self.destroyed.append(form["public_id"])
            return httpx.Response(200, json={"result": "ok"})

        return httpx.Response(404, json={"error": {"message": "unknown action"}})


@pytest.fixture
def fake_cdn() -> FakeCDN:
    return FakeCDN()


@pytest_asyncio.fixture
async def pipeline(fake_cdn: FakeCDN) -> AsyncGenerator[ImagePipeline, None]:
    """ImagePipeline wired to FakeCDN, with short timeouts."""
    async with httpx.AsyncClient(transport=httpx.MockTransport(fake_cdn.handler)) as http:
        cdn = CloudinaryClient("demo", "key", "secret", "park-admin", http)
        yield ImagePipeline(cdn, max_images=5, upload_timeout=5, delete_timeout=5)


# ================================
# Database Fixtures
# ================================

@pytest_asyncio.fixture
async def test_engine():
    """
    Fresh in-memory database per test.

    StaticPool keeps the single SQLite connection alive, so every session
    created from this engine sees the same tables.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# ================================
# FastAPI Client Fixtures
# ================================

@pytest_asyncio.fixture
async def client(session_factory, pipeline: ImagePipeline) -> AsyncGenerator[AsyncClient, None]:
    """
    Async HTTP client bound to the app.

    Overrides the database and image pipeline dependencies. Each request
    gets its own session, as in production; fixtures that seed data use
    db_session and commit.

    Usage:
        async def test_something(client: AsyncClient):
            response = await client.get("/api/v1/highlights")
            assert response.status_code == 200
    """
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_image_pipeline] = lambda: pipeline

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ================================
# User Fixtures
# ================================

async def _make_user(db: AsyncSession, email: str, allowed: bool, admin: bool) -> User:
    user = User(
        email=email,
        name=email.split("@")[0].title(),
        is_allowed=allowed,
        is_admin=admin,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def editor(db_session: AsyncSession) -> User:
    """Allowed, non-admin user."""
    return await _make_user(db_session, "editor@example.com", allowed=True, admin=False)


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await _make_user(db_session, "admin@example.com", allowed=True, admin=True)


@pytest_asyncio.fixture
async def pending_user(db_session: AsyncSession) -> User:
    """Signed up with Google but not yet let in."""
    return await _make_user(db_session, "pending@example.com", allowed=False, admin=False)


def bearer(user: User) -> Dict[str, str]:
    token = create_access_token({"sub": user.id, "email": user.email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(editor: User) -> Dict[str, str]:
    return bearer(editor)


@pytest.fixture
def admin_headers(admin_user: User) -> Dict[str, str]:
    return bearer(admin_user)


@pytest.fixture
def headers_for():
    """Factory: ``headers_for(user)`` → Authorization header for that user."""
    return bearer


@pytest.fixture
def data_uri():
    """Factory: ``data_uri(b"bytes")`` → base64 data URI."""
    return make_data_uri
