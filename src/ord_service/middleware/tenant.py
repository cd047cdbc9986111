# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Tenant guard middleware.

Every catalog request must name its tenant in a header (``Tenant`` by
default). Requests without one, or with a blank value, are rejected with
400 before reaching the routers. The tenant id is stored on
``request.state.tenant_id`` and in the request context, where log
records pick it up.
"""

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from ..context import tenant_id_var
from ..errors import TenantRequiredError, error_response

logger = structlog.get_logger(__name__)

# Tenant-independent documents and operational endpoints
EXEMPT_PATHS = frozenset({
    "/",
    "/$metadata",
    "/health",
    "/ready",
    "/metrics",
    "/docs",
    "/redoc",
    "/openapi.json",
})


class TenantGuardMiddleware(BaseHTTPMiddleware):
    """Reject catalog requests that carry no usable tenant header."""

    def __init__(self, app, header_name: str = "Tenant"):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        tenant_id = request.headers.get(self.header_name, "").strip()
        if not tenant_id:
            logger.info("tenant_header_missing", header=self.header_name)
            return error_response(TenantRequiredError(self.header_name))

        request.state.tenant_id = tenant_id
        tenant_id_var.set(tenant_id)

        return await call_next(request)
