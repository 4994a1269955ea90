"""
Test infrastructure for the Blog Articles API.

Strategy
--------
- SQLite in-memory via aiosqlite; no Postgres needed in CI.
- StaticPool makes every session share one connection, which is required
  because an in-memory SQLite database lives and dies with its connection.
- The app's get_db dependency is overridden to use the test session
  factory.
- Tables are created before and dropped after each test.
- Redis is disabled by setting cache._redis = None (CacheManager treats
  that as a permanent miss); tests of the cache itself request the
  fake_redis fixture instead.
- bcrypt runs at its minimum cost so hashing does not dominate runtime.
"""
import os

os.environ.setdefault("BCRYPT_ROUNDS", "4")

import fakeredis
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from blog_api.cache import cache
from blog_api.database import Base, get_db, transaction
from blog_api.main import app
from blog_api.middleware import install_query_counter
from blog_api.models import Article, User
from blog_api.security import create_access_token, hash_password

# ---------------------------------------------------------------------------
# Test database engine — SQLite in-memory with aiosqlite
# ---------------------------------------------------------------------------

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine_test = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

install_query_counter(engine_test)

async_session_test = async_sessionmaker(
    engine_test,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def override_get_db():
    async with transaction(async_session_test) as session:
        yield session


app.dependency_overrides[get_db] = override_get_db


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

PASSWORD = "s3cret-pass"


async def create_user(db: AsyncSession, name: str, email: str | None = None) -> User:
    """Persist and commit a user so HTTP requests can see it."""
    user = User(
        name=name,
        email=email or f"{name.lower()}@example.com",
        password_hash=hash_password(PASSWORD),
        token_version=0,
    )
    db.add(user)
    await db.commit()
    return user


async def create_article(db: AsyncSession, user: User, title: str, body: str = "Body") -> Article:
    article = Article(title=title, body=body, user_id=user.id)
    db.add(article)
    await db.commit()
    return article


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.token_version)}"}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after to guarantee isolation."""
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session() -> AsyncSession:
    async with async_session_test() as session:
        yield session


@pytest_asyncio.fixture
async def async_client() -> AsyncClient:
    cache._redis = None
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def alice(db_session: AsyncSession) -> User:
    return await create_user(db_session, "Alice")


@pytest_asyncio.fixture
async def bob(db_session: AsyncSession) -> User:
    return await create_user(db_session, "Bob")


@pytest_asyncio.fixture
async def fake_redis(async_client: AsyncClient):
    """
    Back the cache with an in-process fakeredis server for one test.

    Depends on async_client so it runs after that fixture clears the
    cache client.
    """
    redis = fakeredis.FakeAsyncRedis(decode_responses=True)
    await redis.flushall()
    cache._redis = redis
    yield redis
    cache._redis = None
    await redis.flushall()
    await redis.aclose()
