import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import src.domain  # noqa: F401  registers every table on SQLModel.metadata
from config import ApplicationConfig
from src.adapter.services.engine import build_connect_args, apply_sqlite_locking
from src.depends import build_event_bus, get_event_publisher, get_session


class IntegrationConfig(ApplicationConfig):
    AUTO_CREATE_TABLES = False
    ENABLE_LOGGING_MIDDLEWARE = False


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path):
    """Create a fresh SQLite database file per test"""
    test_db_url = f"sqlite+aiosqlite:///{tmp_path / 'ledger_test.db'}"

    engine = create_async_engine(
        test_db_url,
        echo=False,
        future=True,
        connect_args=build_connect_args(test_db_url, 5000),
    )
    apply_sqlite_locking(engine)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Create a new database session for each test"""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def seed(session_factory):
    """Insert rows in their own committed transaction"""

    async def _seed(*objects):
        async with session_factory() as session:
            session.add_all(objects)
            await session.commit()
        return objects

    return _seed


@pytest_asyncio.fixture
async def fetch_all(session_factory):
    """Run a select in a fresh session and return its scalars"""

    async def _fetch_all(statement):
        async with session_factory() as session:
            result = await session.execute(statement)
            return result.scalars().all()

    return _fetch_all


@pytest_asyncio.fixture
async def client(session_factory):
    """Create test client; each request gets its own session like in production"""
    from src.api.app import create_app

    app = create_app(IntegrationConfig)
    bus = build_event_bus(session_factory, fee_percent=2.0)

    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_event_publisher] = lambda: bus

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def run(session_factory):
    """Execute a use case in its own session, closed afterwards like a request scope"""

    async def _run(build_use_case, *args, **kwargs):
        async with session_factory() as session:
            return await build_use_case(session).execute(*args, **kwargs)

    return _run
