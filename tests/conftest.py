"""
Shared test fixtures for the REPOPA test suite.

Each test gets its own in-memory SQLite database (aiosqlite) wired into
the app through ``dependency_overrides``.
"""

import os
import sys
from collections.abc import AsyncGenerator, Awaitable, Callable

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key-for-the-repopa-suite"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["CORS_ORIGINS"] = '["*"]'

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from repopa.api.v1.deps import get_db
from repopa.auth.roles import Role
from repopa.core.security import create_session_token, get_password_hash
from repopa.db.base import Base
from repopa.main import app, seed_roles
from repopa.models.user import User


@pytest.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Fresh schema per test; the app's get_db is pointed at it."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    yield factory
    app.dependency_overrides.pop(get_db, None)
    await engine.dispose()


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def role_ids(db_session: AsyncSession) -> dict[Role, int]:
    return await seed_roles(db_session)


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def make_user(db_session: AsyncSession, role_ids: dict[Role, int]) -> Callable[..., Awaitable[User]]:
    """Factory: persist a user with a real bcrypt hash."""

    async def _make(
        email: str,
        password: str = "secret123",
        role: Role | None = Role.ADMINISTRATOR,
        *,
        role_id: int | None = None,
        name: str = "Test User",
        is_active: bool = True,
    ) -> User:
        user = User(
            full_name=name,
            email=email,
            password_hash=get_password_hash(password),
            role_id=role_id if role_id is not None else (role_ids[role] if role else None),
            is_active=is_active,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make


def _token_for(role: Role, subject: int = 1, **kwargs) -> str:
    claims = {"sub": str(subject), "name": "Tester", "email": "tester@repopa.local", "role": role.value}
    token, _ = create_session_token(claims, **kwargs)
    return token


def _headers_for(role: Role, subject: int = 1, **kwargs) -> dict[str, str]:
    return {"Authorization": f"Bearer {_token_for(role, subject, **kwargs)}"}


@pytest.fixture
def make_token() -> Callable[..., str]:
    """Factory: sign a token for a role without touching the database."""
    return _token_for


@pytest.fixture
def make_headers() -> Callable[..., dict[str, str]]:
    return _headers_for


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return _headers_for(Role.ADMINISTRATOR)


@pytest.fixture
def editor_headers() -> dict[str, str]:
    return _headers_for(Role.DATA_ENTRY, subject=2)


@pytest.fixture
def reader_headers() -> dict[str, str]:
    return _headers_for(Role.READ_ONLY, subject=3)
