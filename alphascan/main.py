"""Main application entry point with app factory and lifespan management."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from alphascan.api import create_api_app
from alphascan.cache import close_valkey_client, get_valkey_client, valkey_enabled
from alphascan.core.config import settings
from alphascan.core.logging import get_logger, setup_logging
from alphascan.scanner import close_market_context


logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: connect the shared cache tier, release clients on exit."""
    setup_logging()
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")

    if valkey_enabled():
        try:
            await get_valkey_client()
            logger.info("Valkey connection established")
        except Exception as e:
            logger.warning(f"Valkey connection failed (in-process cache only): {e}")

    yield

    logger.info("Shutting down...")
    await close_market_context()
    if valkey_enabled():
        await close_valkey_client()
    logger.info("Shutdown complete")


def create_app() -> FastAPI:
    """Create the main FastAPI application."""
    api_app = create_api_app()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.mount("/api", api_app)

    @app.get("/")
    async def root():
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "docs": "/api/docs" if settings.debug else None,
            "health": "/api/health",
        }

    return app


app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run(
        "alphascan.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
