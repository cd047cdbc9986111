# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Prometheus metrics middleware.

Exposes HTTP request metrics for the catalog endpoints.
"""

import re
import time

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from ..config import get_settings

settings = get_settings()
PREFIX = settings.metrics_prefix

HTTP_REQUESTS_TOTAL = Counter(
    f"{PREFIX}_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    f"{PREFIX}_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0),
)

HTTP_REQUESTS_IN_PROGRESS = Gauge(
    f"{PREFIX}_http_requests_in_progress",
    "HTTP requests currently in progress",
    ["method", "endpoint"],
)

SERVICE_INFO = Gauge(
    f"{PREFIX}_service_info",
    "Service information",
    ["version", "environment"],
)
SERVICE_INFO.labels(version=settings.app_version, environment=settings.environment).set(1)

# Single-entity paths like /apis(1234) collapse to /apis({id})
ENTITY_KEY_PATTERN = re.compile(r"^/(?P<entity_set>[A-Za-z]+)\(.*\)$")

EXCLUDED_PATHS = frozenset({"/metrics", "/health", "/ready"})


def normalize_path(path: str) -> str:
    """Normalize path to prevent high cardinality in metrics."""
    match = ENTITY_KEY_PATTERN.match(path)
    if match:
        return f"/{match.group('entity_set')}({{id}})"
    return path


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware to collect Prometheus metrics for HTTP requests."""

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.url.path in EXCLUDED_PATHS:
            return await call_next(request)

        method = request.method
        endpoint = normalize_path(request.url.path)

        HTTP_REQUESTS_IN_PROGRESS.labels(method=method, endpoint=endpoint).inc()
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
            status_code = response.status_code
        except Exception:
            status_code = 500
            raise
        finally:
            duration = time.perf_counter() - start_time
            HTTP_REQUESTS_TOTAL.labels(
                method=method, endpoint=endpoint, status_code=status_code
            ).inc()
            HTTP_REQUEST_DURATION_SECONDS.labels(
                method=method, endpoint=endpoint
            ).observe(duration)
            HTTP_REQUESTS_IN_PROGRESS.labels(method=method, endpoint=endpoint).dec()

        return response


def get_metrics() -> bytes:
    """Generate Prometheus metrics in text format."""
    return generate_latest()


def get_metrics_content_type() -> str:
    """Get the content type for Prometheus metrics."""
    return CONTENT_TYPE_LATEST
