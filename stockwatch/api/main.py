"""
FastAPI application factory.

Creates and configures the main application instance.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stockwatch import __version__
from stockwatch.api.middleware import ErrorHandlerMiddleware, LoggingMiddleware
from stockwatch.api.middleware.error_handler import setup_exception_handlers
from stockwatch.api.routes import (
    alerts_router,
    health_router,
    inventory_router,
    purchase_orders_router,
)
from stockwatch.config import configure_logging, get_logger, get_settings

logger = get_logger(__name__, component="api")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan handler.

    Initializes the database and the process monitoring loop on startup,
    stops the loop and closes the pool on shutdown.
    """
    settings = get_settings()

    logger.info(
        "application_starting",
        host=settings.api.host,
        port=settings.api.port,
        debug=settings.api.debug,
    )

    try:
        from stockwatch.infrastructure.storage.sqlite import get_pool
        from stockwatch.infrastructure.storage.sqlite.migrations import run_migrations

        await run_migrations()
        await get_pool()
        logger.info("database_initialized")

    except Exception as e:
        logger.error("database_init_failed", error=str(e))
        raise

    if settings.monitoring.autostart:
        from stockwatch.application.monitoring import start_monitoring

        await start_monitoring(settings=settings)

    logger.info("application_started")

    yield

    logger.info("application_stopping")

    from stockwatch.application.monitoring import shutdown_monitoring

    await shutdown_monitoring()

    try:
        from stockwatch.infrastructure.storage.sqlite import close_pool, reset_stock_repository

        reset_stock_repository()
        await close_pool()

    except Exception as e:
        logger.warning("connection_pool_close_failed", error=str(e))

    logger.info("application_stopped")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    settings = get_settings()
    configure_logging()

    app = FastAPI(
        title="Stockwatch API",
        description="Stock level monitoring, low-stock alerts and auto-reorder",
        version=__version__,
        docs_url="/docs" if settings.api.debug else None,
        redoc_url="/redoc" if settings.api.debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(LoggingMiddleware)
    app.add_middleware(ErrorHandlerMiddleware)

    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    setup_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(inventory_router)
    app.include_router(alerts_router)
    app.include_router(purchase_orders_router)

    # Root health endpoint (for k8s/docker health checks)
    @app.get("/health")
    async def root_health() -> dict[str, str]:
        """Simple health check at root level."""
        return {"status": "healthy", "version": __version__}

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "stockwatch.api.main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.debug,
    )
