"""FastAPI application for the Layback Garments backend.

This package provides REST endpoints for:
- Health checks (/, /health, /ready)
- Payment webhooks (/api/paystack/webhook, /api/stripe/webhook)
- Job applications (/api/applications)
- User registration (/api/register)

Startup order:
1. create_app() loads settings; a missing secret raises ConfigurationError
   before anything is served.
2. The lifespan builds the database service, checks the store answers, and
   wires the services onto app.state.
3. On shutdown the connection pool is drained.
"""

import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.exceptions import register_exception_handlers
from api.middleware.correlation import CorrelationIdMiddleware
from api.routes import applications_router, health_router, users_router, webhooks_router
from shared import __version__
from shared.config import Settings, load_settings
from shared.services.application_service import JobApplicationService
from shared.services.database import DatabaseService, StoreUnavailableError
from shared.services.user_service import UserService
from shared.services.webhook_handler import WebhookHandler
from shared.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings: Settings = app.state.settings

    database: DatabaseService | None = app.state.database
    owns_database = database is None
    if database is None:
        logger.info("Initializing DB pool...")
        database = DatabaseService.from_settings(settings)

    if not database.ping():
        if owns_database:
            database.dispose()
        raise StoreUnavailableError("Database did not answer during startup")
    if settings.is_development:
        database.create_schema()
    logger.info("DB pool ready")

    app.state.database = database
    app.state.webhook_handler = WebhookHandler.from_settings(settings, database)
    app.state.application_service = JobApplicationService(
        database,
        upload_dir=settings.upload_dir,
        max_upload_bytes=settings.max_upload_bytes,
    )
    app.state.user_service = UserService(database)
    app.state.started_at = time.monotonic()
    logger.info("Serving in %s mode", settings.environment)

    try:
        yield
    finally:
        logger.info("Shutting down gracefully...")
        if owns_database:
            database.dispose()


def create_app(
    settings: Settings | None = None,
    database: DatabaseService | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Pre-loaded settings. Loaded from the environment if omitted.
        database: Pre-built database service. Created from settings in the
            lifespan if omitted, and then also disposed there.

    Raises:
        ConfigurationError: If required configuration is missing.
    """
    if settings is None:
        settings = load_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Layback Garments API",
        description="Payment webhooks, job applications and user registration",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIdMiddleware)

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(webhooks_router, prefix="/api")
    app.include_router(applications_router, prefix="/api")
    app.include_router(users_router, prefix="/api")

    return app


def run_server(host: str = "0.0.0.0", port: int | None = None, reload: bool = False) -> None:
    """Run the API with uvicorn.

    Args:
        host: Host to bind to (default: 0.0.0.0)
        port: Port to listen on (default: $PORT or 3000)
        reload: Enable hot reload for development (default: False)
    """
    import os

    import uvicorn

    load_dotenv()
    uvicorn.run(
        "api.main:create_app",
        factory=True,
        host=host,
        port=port or int(os.environ.get("PORT", "3000")),
        reload=reload,
    )


if __name__ == "__main__":
    run_server()
