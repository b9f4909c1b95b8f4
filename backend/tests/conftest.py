"""Shared test fixtures.

API tests run against an in-memory SQLite database; authentication is
replaced by a seeded user.
"""

import pytest
from fastapi import Depends
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.database import get_db
from app.core.security import get_current_user
from app.main import app
from app.models import Base, User
from app.services.user_service import UserService


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


async def _provision(session_factory, keycloak_id: str, email: str, full_name: str) -> int:
    async with session_factory() as session:
        user = await UserService(session).provision(keycloak_id, email, full_name)
        await session.commit()
        return user.id


@pytest.fixture
async def user_id(session_factory):
    return await _provision(session_factory, "kc-jane", "jane@example.com", "Jane Doe")


@pytest.fixture
async def other_user_id(session_factory):
    return await _provision(session_factory, "kc-john", "john@example.com", "John Roe")


@pytest.fixture
async def client(session_factory, user_id):
    """Async test client for the FastAPI app, authenticated as the seeded user."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def override_current_user(db: AsyncSession = Depends(get_db)):
        return await db.get(User, user_id)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_current_user
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def category_ids(client) -> dict[str, int]:
    """Default categories of the seeded user, by name."""
    response = await client.get("/api/v1/categories")
    return {c["name"]: c["id"] for c in response.json()}
