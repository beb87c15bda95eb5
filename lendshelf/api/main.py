"""
LendShelf API

FastAPI application entry point.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from fastapi import FastAPI

from lendshelf import __version__
from lendshelf.storage.database import create_tables, seed_roles
from .routes import (
    auth_router,
    books_router,
    checkouts_router,
    health_router,
    users_router,
)
from .middleware import (
    setup_cors,
    setup_logging,
    setup_exception_handlers,
    LoggingConfig,
    get_cors_config,
)
from .dependencies import (
    configure_token_url,
    get_settings,
    init_database,
    init_services,
    Settings,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# =============================================================================
# Application Lifespan
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Handles startup and shutdown tasks:
    - Open the connection pool
    - Create tables and seed roles (when enabled)
    - Dispose the pool on shutdown
    """
    settings = app.state.settings
    logger.info(f"Starting LendShelf in {settings.environment} mode")

    logger.info("Initializing database...")
    pool = init_database(settings)

    try:
        if settings.auto_create_tables:
            await create_tables(pool)
            await seed_roles(pool)

        logger.info("Initializing services...")
        app.state.services = init_services(settings, pool)

        logger.info("LendShelf started successfully")

        yield

    finally:
        logger.info("Shutting down LendShelf...")
        await pool.dispose()
        logger.info("Shutdown complete")


# =============================================================================
# Application Factory
# =============================================================================

def create_app(settings: Settings = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Application settings. If None, loads from environment.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="LendShelf",
        description="Shared library: register books, lend and return them.",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    api_prefix = settings.api_prefix
    configure_token_url(api_prefix)

    # ==========================================================================
    # Middleware (last added = outermost)
    # ==========================================================================

    # 1. Exception handling
    setup_exception_handlers(app)

    # 2. CORS
    setup_cors(app, config=get_cors_config(settings))

    # 3. Logging (outermost, so the request id is set before anything else runs)
    setup_logging(
        app,
        config=LoggingConfig.from_settings(settings),
        structured=settings.environment != "development",
    )

    # ==========================================================================
    # Routers
    # ==========================================================================

    app.include_router(health_router, prefix=api_prefix)
    app.include_router(auth_router, prefix=api_prefix)
    app.include_router(users_router, prefix=api_prefix)
    # /books/checkouts must be matched before /books/{book_id}
    app.include_router(checkouts_router, prefix=api_prefix)
    app.include_router(books_router, prefix=api_prefix)

    # ==========================================================================
    # Root Routes
    # ==========================================================================

    @app.get("/", include_in_schema=False)
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "LendShelf",
            "version": __version__,
            "status": "running",
            "docs": "/docs" if settings.debug else None,
        }

    return app


# =============================================================================
# Application Instance
# =============================================================================

app = create_app()


# =============================================================================
# CLI Entry Point
# =============================================================================

def main():
    """Run the application using uvicorn."""
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "lendshelf.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        workers=1 if settings.debug else 4,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    main()
