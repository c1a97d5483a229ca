"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncEngine

from carbonflow.config import Settings, get_settings
from carbonflow.infrastructure.database import (
    Base,
    create_engine_from_settings,
    create_session_factory,
)
from carbonflow.infrastructure.logging.log_config import setup_logging
from carbonflow.presentation.api.errors import register_exception_handlers
from carbonflow.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: configure logging, create the item table, dispose the engine."""
    settings: Settings = app.state.settings
    engine: AsyncEngine = app.state.engine
    setup_logging(settings)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Item store ready (%s)", engine.url.render_as_string(hide_password=True))

    yield

    # Shutdown
    if app.state.owns_engine:
        await engine.dispose()


def create_app(settings: Settings | None = None, engine: AsyncEngine | None = None) -> FastAPI:
    """Factory function that builds and configures the FastAPI application.

    The storage engine is created here (or injected, e.g. by tests) and
    shared by every request through ``app.state``.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.owns_engine = engine is None
    app.state.engine = engine or create_engine_from_settings(settings)
    app.state.session_factory = create_session_factory(app.state.engine)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Mount API routes
    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "carbonflow.main:app",
        host="0.0.0.0",
        port=8020,
        reload=True,
    )
