import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import src.domain  # noqa: F401  registers table metadata
from src.depends import engine_options, get_session


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path):
    """Fresh file-backed SQLite database per test

    A file (not :memory:) so that concurrent sessions use separate
    connections and contend on the real database lock.
    """
    test_db_url = f"sqlite+aiosqlite:///{tmp_path / 'loyalty_test.db'}"

    engine = create_async_engine(test_db_url, echo=False, future=True, **engine_options(test_db_url, 30))

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    """Factory for independent sessions, one per simulated terminal"""
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Create a new database session for each test"""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    """Create test client; every request gets its own session, as in production"""
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
