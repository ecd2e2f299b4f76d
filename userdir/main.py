"""
FastAPI Application Entry Point.

User directory service: registration, login sessions, profile reads and
updates, and paginated search over a cached user store.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from userdir.core.config import Settings
from userdir.core.container import Container, get_container, get_settings_dep
from userdir.core.errors import ErrorCode, ServiceError, http_status_for

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    app_name: str
    app_version: str
    timestamp: str
    debug: bool
    store_provider: str
    cache_provider: str


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events:
    - Startup: connect the user store (and create its schema if configured)
    - Shutdown: close the store and the Redis client
    """
    container: Container = app.state.container
    await container.startup()

    yield

    await container.shutdown()


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Render a ServiceError as {"code", "detail"} with its mapped status."""
    status_code = http_status_for(exc.code)
    if exc.code == ErrorCode.INTERNAL:
        logger.error(f"{request.method} {request.url.path}: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path}: {exc.code.value}: {exc.message}")
    return JSONResponse(
        status_code=status_code,
        content={"code": exc.code.value, "detail": exc.message},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render unexpected exceptions as Internal without leaking details."""
    logger.exception(f"{request.method} {request.url.path}: unhandled error: {exc}")
    return JSONResponse(
        status_code=http_status_for(ErrorCode.INTERNAL),
        content={"code": ErrorCode.INTERNAL.value, "detail": "Internal server error"},
    )


def create_app(container: Container | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        container: Optional container override. If None, uses the cached default.

    Returns:
        Configured FastAPI application instance.
    """
    container = container or get_container()
    settings = container.settings

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description=(
            "User directory service. Register and authenticate users, "
            "manage login sessions and browse the directory."
        ),
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.container = container

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.debug else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Register routes
    register_routes(app)

    return app


def register_routes(app: FastAPI) -> None:
    """
    Register all application routes.

    Args:
        app: FastAPI application instance.
    """
    from userdir.api.v1 import api_router

    app.include_router(
        api_router,
        prefix="/api/v1",
    )

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["Health"],
        summary="Health Check",
        description="Check if the service is running and return configuration metadata.",
    )
    async def health_check(
        settings: Settings = Depends(get_settings_dep),
    ) -> HealthResponse:
        """
        Health check endpoint for readiness probes.

        Returns service status and configuration metadata.
        """
        return HealthResponse(
            status="healthy",
            app_name=settings.app_name,
            app_version=settings.app_version,
            timestamp=datetime.now(timezone.utc).isoformat(),
            debug=settings.debug,
            store_provider=settings.store.provider.value,
            cache_provider=settings.cache.provider.value,
        )

    @app.get(
        "/",
        tags=["Root"],
        summary="Root",
        description="Service index with links to the API and health check.",
    )
    async def root(settings: Settings = Depends(get_settings_dep)) -> dict:
        """Service index."""
        return {
            "service": settings.app_name,
            "version": settings.app_version,
            "api": "/api/v1/users",
            "health": "/health",
        }


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=logging.DEBUG if app.state.container.settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "userdir.main:app",
        host="0.0.0.0",
        port=8000,
        reload=app.state.container.settings.debug,
    )
