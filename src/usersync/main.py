"""FastAPI application factory and lifespan management."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from usersync import __version__
from usersync.config import Settings, settings as default_settings
from usersync.db.engine import create_db_engine, create_session_factory, create_tables
from usersync.logging_config import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the database engine for the app's lifetime."""
    config: Settings = app.state.settings
    engine = create_db_engine(config.effective_database_url)

    # Local dev has no migrations; create tables directly
    if "sqlite" in config.effective_database_url:
        await create_tables(engine)
        logger.info("SQLite tables created (local mode)")

    app.state.db_engine = engine
    app.state.db_session_factory = create_session_factory(engine)

    if not app.state.webhook_secret:
        logger.error("Webhook secret not set; every delivery will be answered with 500")

    logger.info("usersync started (db=%s)", "sqlite" if "sqlite" in config.effective_database_url else "postgresql")
    yield

    await engine.dispose()
    logger.info("usersync shutdown complete")


def create_app(config: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    config = config or default_settings
    app = FastAPI(
        title="usersync",
        version=__version__,
        description="Applies signed identity provider webhooks to the user store.",
        lifespan=lifespan,
    )

    # Read once at startup and injected into handlers
    app.state.settings = config
    app.state.webhook_secret = config.webhook_secret
    app.state.webhook_tolerance = config.webhook_tolerance_seconds

    from usersync.api.middleware.trace_id import TraceIdMiddleware
    app.add_middleware(TraceIdMiddleware)

    from usersync.errors.handlers import register_exception_handlers
    register_exception_handlers(app)

    from usersync.api.router import api_router
    app.include_router(api_router)

    return app


configure_logging(log_level=default_settings.log_level, json_output=default_settings.json_logs)

app = create_app()
