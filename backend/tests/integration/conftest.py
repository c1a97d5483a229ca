"""Shared fixtures: an in-memory SQLite item store and an app wired to it."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import StaticPool

from carbonflow.config import Settings
from carbonflow.infrastructure.database import Base, create_engine_from_settings, create_session_factory
from carbonflow.infrastructure.database.item_store import ItemStore
from carbonflow.main import create_app


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        app_env="test",
        database_url="sqlite:///:memory:",
        cors_origins=["http://test"],
    )


@pytest_asyncio.fixture
async def engine(settings: Settings):
    engine = create_engine_from_settings(
        settings,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine):
    async with create_session_factory(engine)() as session:
        yield session
        await session.rollback()


@pytest.fixture
def store(session) -> ItemStore:
    return ItemStore(session)


@pytest.fixture
def app(settings: Settings, engine):
    return create_app(settings, engine=engine)


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
