# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Response Aggregator Middleware.

Captures the JSON body produced by the catalog routers and, when the caller
passes ``?compact=true``, rewrites it with the Aggregator before it is sent:

    tags:   [{"value": "a"}]                 ->  ["a"]
    labels: [{"key": "k", "value": "v"}]     ->  {"k": ["v"]}

Pipeline position:
  Request → TraceId → Metrics → TenantGuard → ResponseAggregator → router

A body declared as JSON that does not parse fails the request with a 500
error envelope; the unparsed body is never forwarded.
"""

import json
from typing import Any, Callable

import structlog
from fastapi import Request, Response
from prometheus_client import Counter
from starlette.middleware.base import BaseHTTPMiddleware

from ..config import get_settings
from ..errors import MalformedResponseError, error_response
from ..transformer.aggregator import Aggregator

logger = structlog.get_logger(__name__)

settings = get_settings()
prefix = settings.metrics_prefix

COMPACT_PARAM = "compact"
COMPACT_ENABLED_VALUE = "true"
JSON_CONTENT_TYPE = "application/json"

# =============================================================================
# Prometheus Metrics
# =============================================================================

RESPONSE_AGGREGATION_TOTAL = Counter(
    f"{prefix}_response_aggregation_total",
    "Total responses seen by the response aggregator",
    ["result"],  # result: "aggregated", "passthrough", "error"
)


# =============================================================================
# Helpers
# =============================================================================


def is_compact_requested(request: Request) -> bool:
    """``compact`` must be exactly the string "true" (case-sensitive)."""
    return request.query_params.get(COMPACT_PARAM) == COMPACT_ENABLED_VALUE


def is_json_content_type(content_type: str | None) -> bool:
    return bool(content_type) and JSON_CONTENT_TYPE in content_type


def aggregate_body(body: bytes) -> bytes:
    """Parse, aggregate and re-serialize a JSON body.

    Raises:
        MalformedResponseError: body is not UTF-8 or not well-formed JSON.
    """
    try:
        tree: Any = json.loads(body.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise MalformedResponseError(f"invalid utf-8: {e.reason}") from e
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"{e.msg} at line {e.lineno} column {e.colno}") from e

    Aggregator.aggregate(tree)

    return json.dumps(
        tree,
        ensure_ascii=False,
        allow_nan=False,
        separators=(",", ":"),
    ).encode("utf-8")


# =============================================================================
# Middleware
# =============================================================================


class ResponseAggregatorMiddleware(BaseHTTPMiddleware):
    """Middleware that compacts ORD resources in JSON responses on demand.

    Only processes:
    - Requests carrying ``compact=true``
    - Responses with an ``application/json`` content type
    """

    def __init__(self, app, enabled: bool = True):
        super().__init__(app)
        self.enabled = enabled

    async def dispatch(
        self,
        request: Request,
        call_next: Callable,
    ) -> Response:
        if not self.enabled or not is_compact_requested(request):
            RESPONSE_AGGREGATION_TOTAL.labels(result="passthrough").inc()
            return await call_next(request)

        response = await call_next(request)

        content_type = response.headers.get("content-type", "")
        if not is_json_content_type(content_type):
            RESPONSE_AGGREGATION_TOTAL.labels(result="passthrough").inc()
            return response

        original_body = b""
        async for chunk in response.body_iterator:
            if isinstance(chunk, str):
                original_body += chunk.encode("utf-8")
            else:
                original_body += chunk

        try:
            final_body = aggregate_body(original_body)
        except MalformedResponseError as e:
            logger.error(
                "response_aggregation_failed",
                path=request.url.path,
                status_code=response.status_code,
                original_size=len(original_body),
                reason=e.details.get("reason") if e.details else None,
            )
            RESPONSE_AGGREGATION_TOTAL.labels(result="error").inc()
            return error_response(e)

        RESPONSE_AGGREGATION_TOTAL.labels(result="aggregated").inc()
        logger.debug(
            "response_aggregated",
            path=request.url.path,
            original_size=len(original_body),
            final_size=len(final_body),
        )

        aggregated = Response(content=final_body, status_code=response.status_code)
        # Raw pairs keep repeated headers such as Set-Cookie or Vary
        aggregated.raw_headers = [
            (name, value)
            for name, value in response.raw_headers
            if name.lower() != b"content-length"
        ]
        aggregated.raw_headers.append((b"content-length", str(len(final_body)).encode("latin-1")))
        return aggregated
