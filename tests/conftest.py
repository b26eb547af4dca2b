"""Pytest fixtures for testing."""
import os

# Must be set before any app imports that trigger Settings validation
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./.pytest-linkshelf.db"
os.environ["DEV_MODE"] = "true"
os.environ.pop("JINA_API_KEY", None)

from collections.abc import AsyncGenerator, Generator  # noqa: E402

import pytest  # noqa: E402
import respx  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from core.config import Settings, get_settings  # noqa: E402
from models.base import Base  # noqa: E402

JINA_READER_URL = "https://r.jina.ai/"
TEST_JINA_KEY = "test-jina-key"


@pytest.fixture
def settings() -> Settings:
    """Settings used by the app under test (dev mode, Jina key configured)."""
    return Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite://",
        dev_mode=True,
        jina_api_key=TEST_JINA_KEY,
        jina_reader_url=JINA_READER_URL,
        jina_timeout=5.0,
        jina_max_retries=1,
    )


@pytest.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine]:
    """Create a fresh in-memory database for each test."""
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(async_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Create an async session on the per-test database."""
    session_factory = async_sessionmaker(
        bind=async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(
    db_session: AsyncSession,
    settings: Settings,
) -> AsyncGenerator[AsyncClient]:
    """Create a test client with database session and settings overrides."""
    get_settings.cache_clear()

    from api.main import app
    from db.session import get_async_session

    async def override_get_async_session() -> AsyncGenerator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_async_session] = override_get_async_session
    app.dependency_overrides[get_settings] = lambda: settings

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def jina_mock() -> Generator[respx.MockRouter]:
    """Mock the Jina AI reader; requests through ASGITransport are not intercepted."""
    with respx.mock(assert_all_called=False) as respx_mock:
        yield respx_mock
