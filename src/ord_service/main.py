# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""ORD Service - Main Application Entry Point.

Read-only, tenant-scoped Open Resource Discovery catalog exposed through an
OData-style JSON API. Any catalog response can be compacted on demand with
``?compact=true``.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncGenerator

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from .config import get_settings
from .database import check_database, close_db
from .errors import ORDError, ORDErrorCode, error_response, ord_error_handler
from .logging_config import configure_logging, get_logger
from .middleware import (
    MetricsMiddleware,
    ResponseAggregatorMiddleware,
    TenantGuardMiddleware,
    TraceIdMiddleware,
    get_metrics,
    get_metrics_content_type,
)
from .routers import catalog_router

configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings = get_settings()
    logger.info(
        "Starting ORD Service",
        version=settings.app_version,
        environment=settings.environment,
        response_aggregation_enabled=settings.response_aggregation_enabled,
    )

    yield

    logger.info("Shutting down ORD Service")
    await close_db()


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render framework HTTP errors (unknown routes, bad methods) in the ORD envelope."""
    if exc.status_code == 404:
        error = ORDError(
            code=ORDErrorCode.RESOURCE_NOT_FOUND,
            message=f"No resource at '{request.url.path}'",
            details={"path": request.url.path},
        )
    elif exc.status_code == 405:
        error = ORDError(
            code=ORDErrorCode.METHOD_NOT_ALLOWED,
            message=f"Method {request.method} is not allowed on '{request.url.path}'",
            details={"method": request.method, "path": request.url.path},
        )
    else:
        error = ORDError(
            code=(
                ORDErrorCode.INTERNAL_ERROR
                if exc.status_code >= 500
                else ORDErrorCode.INVALID_REQUEST
            ),
            message=str(exc.detail),
        )
    return error_response(
        error,
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler: log and hide internals unless in debug mode."""
    settings = get_settings()
    logger.exception("unhandled_exception", path=request.url.path, error=str(exc))
    return error_response(
        ORDError(
            code=ORDErrorCode.INTERNAL_ERROR,
            message=str(exc) if settings.debug else "Internal server error",
        )
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description=(
            "Open Resource Discovery catalog. Entity sets are served as OData "
            "collections; add `?compact=true` to receive ORD resources with "
            "flattened value lists and grouped labels."
        ),
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware executes in reverse order of registration.
    # 1. Response aggregator (innermost, sees the router's JSON)
    app.add_middleware(
        ResponseAggregatorMiddleware,
        enabled=settings.response_aggregation_enabled,
    )

    # 2. Tenant guard
    app.add_middleware(TenantGuardMiddleware, header_name=settings.tenant_header)

    # 3. Metrics
    if settings.enable_metrics:
        app.add_middleware(MetricsMiddleware)

    # 4. Trace ID
    app.add_middleware(TraceIdMiddleware)

    # 5. CORS (outermost)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=[settings.tenant_header, "Content-Type", "X-Trace-Id"],
    )

    app.add_exception_handler(ORDError, ord_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # =========================================================================
    # Health & observability
    # =========================================================================

    @app.get("/health", tags=["Health"])
    async def health_check() -> dict[str, Any]:
        """Liveness: the process is up."""
        return {
            "status": "healthy",
            "version": settings.app_version,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.get("/ready", tags=["Health"])
    async def readiness_check() -> JSONResponse:
        """Readiness: the catalog database answers."""
        if not await check_database():
            return error_response(
                ORDError(
                    code=ORDErrorCode.SERVICE_UNAVAILABLE,
                    message="Catalog database is not reachable",
                    details={"checks": {"database": False}},
                )
            )
        return JSONResponse({"status": "ready", "checks": {"database": True}})

    if settings.enable_metrics:

        @app.get("/metrics", tags=["Health"])
        async def metrics() -> Response:
            """Prometheus metrics endpoint."""
            return Response(content=get_metrics(), media_type=get_metrics_content_type())

    app.include_router(catalog_router)

    return app


# Create the application instance
app = create_app()


def main() -> None:
    """Run the application with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "ord_service.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
