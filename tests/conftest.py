"""Fixtures de test / Test fixtures.

Base SQLite en memoire partagee par connexion unique, injectee a la place de get_db.
In-memory SQLite shared through a single connection, injected in place of get_db.
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import motormate.models  # noqa: F401
from motormate.database import Base, get_db
from motormate.main import app
from motormate.models.user import User
from motormate.utils.auth import create_access_token


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
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
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def _get_test_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_test_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def _make_user(session_factory, google_id: str, email: str) -> User:
    async with session_factory() as session:
        user = User(google_id=google_id, email=email, username=email.split("@")[0], auth_method="google")
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user


@pytest.fixture
async def user(session_factory):
    return await _make_user(session_factory, "google-alice", "alice@example.com")


@pytest.fixture
async def other_user(session_factory):
    return await _make_user(session_factory, "google-bob", "bob@example.com")


@pytest.fixture
def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def other_headers(other_user):
    return {"Authorization": f"Bearer {create_access_token(other_user.id)}"}
