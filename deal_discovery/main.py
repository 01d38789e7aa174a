"""FastAPI application entry point."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any, cast

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from deal_discovery.api.v1.router import api_router
from deal_discovery.config import settings
from deal_discovery.core.logging import setup_logging
from deal_discovery.services.search_service import SearchService
from deal_discovery.services.search_session import SearchSessionRegistry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    setup_logging()

    logger.info(
        "Starting Deal Discovery",
        extra={
            "environment": settings.environment,
            "version": settings.app_version,
            "deal_library_base_url": settings.deal_library_base_url,
        },
    )

    yield

    logger.info("Shutting down Deal Discovery")


def create_app(search_service: SearchService | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description=(
            "Routes free-text marketing questions to the right deal library "
            "analysis and ranks returned deals by relevance."
        ),
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    service = search_service or SearchService()
    app.state.search_service = service
    app.state.search_sessions = SearchSessionRegistry(service)

    # CORS middleware
    app.add_middleware(
        cast(Any, CORSMiddleware),
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include API router
    app.include_router(api_router, prefix=settings.api_v1_prefix)

    @app.get(
        "/health",
        summary="Health check",
        description="Return service health status and version information.",
    )
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": settings.app_version,
            "environment": settings.environment,
        }

    return app


app = create_app()
