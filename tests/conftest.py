"""Pytest configuration and fixtures for the RBAC service.

Uses app.main:app for HTTP tests and app.infrastructure.persistence.database
for DB-dependent fixtures. All imports use app.*.
"""

import os

# Settings validation requires a secret; set one before the app is imported.
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")

from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.dependencies import get_authorization_service, get_current_user
from app.application.dtos.user import UserResult
from app.application.services import AuthorizationService
from app.core.config import get_settings
from app.infrastructure.persistence import database
from app.main import app


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def db_session() -> AsyncSession:
    """Database session inside a transaction. Rolls back after the test.

    Requires DATABASE_URL. Skips (pytest.skip) when Postgres is not
    configured. Use @pytest.mark.requires_db to mark tests that need this
    fixture; run without DB via: pytest -m 'not requires_db'.
    """
    if not get_settings().database_url:
        pytest.skip(
            "Postgres not configured: set DATABASE_URL, then run: uv run alembic upgrade head"
        )
    database._ensure_engine()
    async with database.AsyncSessionLocal() as session:
        await session.begin()
        yield session
        await session.rollback()


@pytest.fixture
def admin() -> UserResult:
    return UserResult(id="admin-1", email="admin@example.com", role="admin", is_active=True)


@pytest.fixture
def mechanic() -> UserResult:
    return UserResult(id="mech-1", email="mech@example.com", role="mechanic", is_active=True)


@pytest.fixture
def resolver() -> AsyncMock:
    """Resolver double for route tests; denies everything unless a test says otherwise."""
    resolver = AsyncMock()
    resolver.has_permission.return_value = False
    resolver.has_any_permission.return_value = False
    resolver.has_all_permissions.return_value = False
    return resolver


@pytest.fixture
def as_user(resolver: AsyncMock):
    """Return a function that makes requests run as the given user (no token, no DB)."""

    def _as(user: UserResult) -> None:
        app.dependency_overrides[get_current_user] = lambda: user
        app.dependency_overrides[get_authorization_service] = lambda: AuthorizationService(
            permission_resolver=resolver
        )

    return _as


@pytest.fixture
def override():
    """Return a function that replaces a service dependency with a fixed instance."""

    def _override(dependency, value) -> None:
        app.dependency_overrides[dependency] = lambda: value

    return _override
