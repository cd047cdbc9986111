"""Middleware components."""

from .metrics import MetricsMiddleware, get_metrics, get_metrics_content_type
from .response_aggregator import ResponseAggregatorMiddleware
from .tenant import TenantGuardMiddleware
from .trace_id import TraceIdMiddleware

__all__ = [
    # Metrics
    "MetricsMiddleware",
    "get_metrics",
    "get_metrics_content_type",
    # Response post-processing (?compact=true)
    "ResponseAggregatorMiddleware",
    # Tenancy
    "TenantGuardMiddleware",
    # Tracing
    "TraceIdMiddleware",
]
