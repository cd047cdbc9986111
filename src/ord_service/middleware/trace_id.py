# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Trace ID middleware.

Accepts the caller's ``X-Trace-Id`` or generates one, stores it in the
request context (read by log records and error envelopes) and echoes it on
the response.
"""

import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from ..context import tenant_id_var, trace_id_var

TRACE_ID_HEADER = "X-Trace-Id"


class TraceIdMiddleware(BaseHTTPMiddleware):
    """Open the request context for one catalog call."""

    async def dispatch(self, request: Request, call_next) -> Response:
        trace_id = request.headers.get(TRACE_ID_HEADER) or uuid.uuid4().hex
        trace_id_var.set(trace_id)
        tenant_id_var.set("")

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(path=request.url.path, method=request.method)

        response = await call_next(request)
        response.headers[TRACE_ID_HEADER] = trace_id
        return response
