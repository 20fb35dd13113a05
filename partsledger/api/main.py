"""
FastAPI application factory.

Creates and configures the main application instance.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from partsledger import __version__
from partsledger.api.middleware import ErrorHandlerMiddleware, LoggingMiddleware
from partsledger.api.middleware.error_handler import setup_exception_handlers
from partsledger.api.routes import health_router, orders_router, parts_router, stock_router
from partsledger.config import configure_logging, get_logger, get_settings

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan handler.

    Applies pending migrations and opens the connection pool on startup,
    closes the pool on shutdown.
    """
    settings = get_settings()

    logger.info(
        "application_starting",
        host=settings.api.host,
        port=settings.api.port,
        environment=settings.environment,
    )

    try:
        from partsledger.infrastructure.storage.sqlite import get_pool
        from partsledger.infrastructure.storage.sqlite.migrations.migrator import run_migrations

        await run_migrations()
        logger.info("database_initialized", db_path=str(settings.storage.db_path))

        await get_pool()
        logger.info("connection_pool_ready")

    except Exception as e:
        logger.error("database_init_failed", error=str(e))
        raise

    logger.info("application_started")

    yield

    logger.info("application_stopping")

    from partsledger.infrastructure.storage.sqlite import close_pool

    await close_pool()
    logger.info("application_stopped")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    settings = get_settings()

    app = FastAPI(
        title="Parts Ledger API",
        description="Parts catalog, stock ledger and purchase-order approval workflow",
        version=__version__,
        docs_url="/docs" if settings.api.debug else None,
        redoc_url="/redoc" if settings.api.debug else None,
        lifespan=lifespan,
    )

    # Add middleware
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(ErrorHandlerMiddleware)

    # CORS
    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    setup_exception_handlers(app)

    # Register routers
    app.include_router(health_router)
    app.include_router(parts_router)
    app.include_router(stock_router)
    app.include_router(orders_router)

    return app


# Application instance for ASGI servers and tests
app = create_app()


def run() -> None:
    """Run the API server with uvicorn."""
    import uvicorn

    configure_logging()
    settings = get_settings()
    uvicorn.run(
        "partsledger.api.main:create_app",
        factory=True,
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.debug,
        log_config=None,
    )


if __name__ == "__main__":
    run()
