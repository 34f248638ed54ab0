#!/usr/bin/env python3
"""
FastAPI Application Entry Point

Configures the cache service application: lifespan (runtime start/close),
middleware, exception handlers and routes.

Author: Creo Platform Team
Date: 2026-01-14
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from creo_cache.application.api.middleware.error_handler import (
    ErrorHandlingMiddleware,
    RequestIdMiddleware,
)
from creo_cache.application.api.routes.cache import router as cache_router
from creo_cache.application.api.routes.health import router as health_router
from creo_cache.application.runtime import CacheRuntime
from creo_cache.config.settings import Settings, get_settings
from creo_cache.core.exceptions import (
    CacheCoreError,
    CacheError,
    EmptyRegistryError,
    RemoteUnavailableError,
    WarmCancelledError,
)
from creo_cache.core.logging.logger import get_logger, get_request_id, setup_logging

logger = get_logger(__name__)


# ============================================================================
# Application Lifespan
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Build (or reuse) the CacheRuntime, start it, and close it on shutdown.

    A backend that is down at startup does not stop the process: the
    admin health endpoint reports it and the other cache endpoints answer 503.
    """
    settings: Settings = app.state.settings
    setup_logging(log_level=settings.logging.LOG_LEVEL, log_format=settings.logging.LOG_FORMAT)

    logger.info(
        "Starting cache service",
        environment=settings.app.ENVIRONMENT,
        version=settings.app.APP_VERSION,
        backend=settings.cache.CACHE_BACKEND,
    )

    runtime: CacheRuntime | None = getattr(app.state, "runtime", None)
    if runtime is None:
        runtime = CacheRuntime.build(settings)
        app.state.runtime = runtime

    try:
        await runtime.start()
    except CacheError as e:
        logger.error("Cache backend unavailable at startup", error=e.message)

    try:
        yield
    finally:
        logger.info("Shutting down cache service")
        await runtime.close()
        logger.info("Application shutdown complete")


# ============================================================================
# Exception Handlers
# ============================================================================


def _error_response(status_code: int, error: str, exc: CacheCoreError) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "message": exc.message,
            "errorType": type(exc).__name__,
            "requestId": exc.request_id or get_request_id(),
        },
    )


async def backend_error_handler(request: Request, exc: CacheError) -> JSONResponse:
    logger.error(
        f"Cache backend error: {exc.message}",
        error_type=type(exc).__name__,
        path=request.url.path,
        details=exc.details,
    )
    return _error_response(503, "cache_backend_unavailable", exc)


async def remote_error_handler(request: Request, exc: RemoteUnavailableError) -> JSONResponse:
    logger.warning(f"Remote unavailable: {exc.message}", path=request.url.path)
    return _error_response(503, "remote_unavailable", exc)


async def empty_registry_handler(request: Request, exc: EmptyRegistryError) -> JSONResponse:
    return _error_response(409, "no_warm_jobs", exc)


async def warm_cancelled_handler(request: Request, exc: WarmCancelledError) -> JSONResponse:
    return _error_response(503, "warm_cancelled", exc)


async def core_error_handler(request: Request, exc: CacheCoreError) -> JSONResponse:
    logger.error(
        f"Cache service error: {exc.message}", error_type=type(exc).__name__, path=request.url.path
    )
    return _error_response(500, "cache_error", exc)


# ============================================================================
# Application Factory
# ============================================================================


def create_app(settings: Settings | None = None, runtime: CacheRuntime | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings to use; defaults to the process-wide instance
        runtime: Pre-built runtime (tests pass one with an in-memory backend);
                 built from settings at startup when omitted

    Returns:
        FastAPI: Configured application instance
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app.APP_NAME,
        version=settings.app.APP_VERSION,
        description="Shared cache administration: health, statistics, clearing and warming",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    if runtime is not None:
        app.state.runtime = runtime

    # Last added runs first: request ID is bound before errors are logged
    app.add_middleware(
        ErrorHandlingMiddleware, include_traceback=(settings.app.ENVIRONMENT == "development")
    )
    app.add_middleware(RequestIdMiddleware)

    app.add_exception_handler(CacheError, backend_error_handler)
    app.add_exception_handler(RemoteUnavailableError, remote_error_handler)
    app.add_exception_handler(EmptyRegistryError, empty_registry_handler)
    app.add_exception_handler(WarmCancelledError, warm_cancelled_handler)
    app.add_exception_handler(CacheCoreError, core_error_handler)

    base_path = settings.app.API_PREFIX
    app.include_router(health_router, prefix=base_path)
    app.include_router(cache_router, prefix=base_path)

    @app.get("/", tags=["Root"])
    async def root():
        return {
            "name": settings.app.APP_NAME,
            "version": settings.app.APP_VERSION,
            "environment": settings.app.ENVIRONMENT,
            "docs": "/docs",
            "health": f"{base_path}/health",
        }

    return app


def run() -> None:
    """Serve the application with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "creo_cache.application.app:create_app",
        factory=True,
        host=settings.app.API_HOST,
        port=settings.app.API_PORT,
        log_level=settings.logging.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
