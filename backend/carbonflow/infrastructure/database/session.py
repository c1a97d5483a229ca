"""SQLAlchemy database session and engine configuration.

The engine is built explicitly by the application factory and kept on
``app.state``; nothing here connects at import time.
"""

from collections.abc import AsyncGenerator
from typing import Any

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from carbonflow.config import Settings


def _get_async_url(url: str) -> str:
    """Convert a sync SQLAlchemy URL to an async one."""
    if url.startswith("sqlite:///"):
        return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def _connect_args(async_url: str, timeout: float) -> dict[str, Any]:
    """Driver-level request timeout for every storage call."""
    if async_url.startswith("sqlite+aiosqlite"):
        return {"timeout": timeout}
    if async_url.startswith("postgresql+asyncpg"):
        return {"timeout": timeout, "command_timeout": timeout}
    return {}


def create_engine_from_settings(settings: Settings, **kwargs: Any) -> AsyncEngine:
    """Build the async engine for ``settings.database_url``."""
    async_url = _get_async_url(settings.database_url)
    connect_args = {
        **_connect_args(async_url, settings.storage_timeout_seconds),
        **kwargs.pop("connect_args", {}),
    }
    return create_async_engine(
        async_url,
        echo=False,
        connect_args=connect_args,
        **kwargs,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: yields one async DB session (unit of work) per request."""
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
