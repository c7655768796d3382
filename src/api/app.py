"""
FastAPI Application Factory.

Usage:
    # Development
    uvicorn api.app:create_app --factory --reload

    # Production
    uvicorn api.app:app --host 0.0.0.0 --port 8080

    # Or use the convenience function
    from api.app import create_app
    app = create_app()
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config.settings import get_settings
from core.logging import configure_logging, get_logger
from core.middleware import RequestTracingMiddleware
from matching.errors import CatalogUnavailable


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Configure logging on startup; the catalog client is created lazily."""
    settings = get_settings()

    configure_logging(
        json_logs=settings.is_production,
        log_level="DEBUG" if settings.debug else settings.log_level,
    )

    logger.info(
        "Starting archetype matching API",
        environment=settings.environment,
        port=settings.port,
        archetype_table=settings.archetype_table,
    )

    yield

    logger.info("Shutting down archetype matching API")


async def catalog_unavailable_handler(request: Request, exc: CatalogUnavailable) -> JSONResponse:
    """Catalog outages are the only fatal matching error: 503."""
    logger.error("Archetype catalog unavailable", error=str(exc), gender=exc.gender)
    return JSONResponse(
        status_code=503,
        content={
            "error": "catalog_unavailable",
            "detail": str(exc),
        },
    )


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application
    """
    settings = get_settings()

    app = FastAPI(
        title="Archetype Matching API",
        description="""
        Body-scan archetype matching.

        ## Main Endpoints

        - `POST /api/scan/match` - Select the closest catalog archetypes for a
          semantic body profile and build their K-envelope

        ## Health Checks

        - `/health` - Basic health check
        - `/health/detailed` - Catalog connectivity
        - `/ready` - Readiness probe
        - `/live` - Liveness probe
        """,
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    # =========================================================================
    # Middleware (order matters - first added = outermost)
    # =========================================================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestTracingMiddleware)

    app.add_exception_handler(CatalogUnavailable, catalog_unavailable_handler)

    # =========================================================================
    # Routes
    # =========================================================================

    from api.routes.health import router as health_router
    app.include_router(health_router, tags=["Health"])

    from api.routes.scan_match import router as scan_match_router
    app.include_router(scan_match_router)

    return app


# Create default app instance for uvicorn
# Usage: uvicorn api.app:app
app = create_app()
