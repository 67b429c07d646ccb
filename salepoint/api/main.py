"""
FastAPI application factory.

The lifespan brings the sale database up to the latest schema before the
pool opens. Failing integrity checks are logged, not fatal.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from salepoint import __version__
from salepoint.api.middleware import ErrorHandlerMiddleware, LoggingMiddleware
from salepoint.api.middleware.error_handler import setup_exception_handlers
from salepoint.api.routes import (
    catalog_router,
    customers_router,
    health_router,
    sales_router,
)
from salepoint.config import configure_logging, get_logger, get_settings
from salepoint.core.exceptions import StorageError
from salepoint.infrastructure.storage.sqlite import close_pool, get_pool
from salepoint.infrastructure.storage.sqlite.migrations import Migrator

logger = get_logger(__name__)


async def prepare_database() -> None:
    """Apply pending migrations and report the resulting schema state."""
    migrator = Migrator(get_settings().storage.db_path)

    failed = [r.version for r in await migrator.run() if not r.success]
    if failed:
        raise StorageError(
            "Database migrations failed",
            code="MIGRATION_FAILED",
            details={"versions": failed},
        )

    status = await migrator.status()
    failing = [c["check"] for c in await migrator.verify() if c["status"] != "PASS"]
    if failing:
        logger.error("schema_checks_failed", checks=failing)
    logger.info(
        "database_ready",
        schema_version=status["current_version"],
        migrations=len(status["applied_migrations"]),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    configure_logging()
    logger.info(
        "application_starting",
        host=settings.api.host,
        port=settings.api.port,
        tax_enabled=settings.sales.tax_enabled,
    )

    try:
        await prepare_database()
        await get_pool()
    except Exception as e:
        logger.error("database_init_failed", error=str(e))
        raise

    logger.info("application_started")
    try:
        yield
    finally:
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
        title="Salepoint POS API",
        description="Sale capture, finalization and receipts for point-of-sale terminals",
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
    app.include_router(catalog_router)
    app.include_router(customers_router)
    app.include_router(sales_router)

    # Root health endpoint (for container health checks)
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
        "salepoint.api.main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.debug,
    )
