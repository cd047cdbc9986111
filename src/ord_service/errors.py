# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""ORD Service error codes and exceptions.

Every error leaves the service in the same envelope:

```json
{
  "error": {
    "code": "INVALID_QUERY_OPTION",
    "message": "Unknown navigation property 'bundles' in $expand",
    "details": {"option": "$expand", "value": "bundles"},
    "trace_id": "5f0c..."
  }
}
```

``trace_id`` is the request's ``X-Trace-Id`` and is present whenever the
error is rendered during a request.
"""

from enum import Enum
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .context import get_trace_id


class ORDErrorCode(str, Enum):
    """Standard ORD Service error codes."""

    # 400 Bad Request
    INVALID_REQUEST = "INVALID_REQUEST"
    INVALID_QUERY_OPTION = "INVALID_QUERY_OPTION"
    UNSUPPORTED_FORMAT = "UNSUPPORTED_FORMAT"
    TENANT_REQUIRED = "TENANT_REQUIRED"

    # 404 Not Found
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"

    # 405 Method Not Allowed
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"

    # 500 Internal Server Error
    MALFORMED_RESPONSE = "MALFORMED_RESPONSE"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # 503 Service Unavailable
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"


ERROR_CODE_TO_HTTP_STATUS: dict[ORDErrorCode, int] = {
    ORDErrorCode.INVALID_REQUEST: 400,
    ORDErrorCode.INVALID_QUERY_OPTION: 400,
    ORDErrorCode.UNSUPPORTED_FORMAT: 400,
    ORDErrorCode.TENANT_REQUIRED: 400,
    ORDErrorCode.RESOURCE_NOT_FOUND: 404,
    ORDErrorCode.METHOD_NOT_ALLOWED: 405,
    ORDErrorCode.MALFORMED_RESPONSE: 500,
    ORDErrorCode.INTERNAL_ERROR: 500,
    ORDErrorCode.SERVICE_UNAVAILABLE: 503,
}


class ORDErrorDetail(BaseModel):
    """Standard error response body."""

    code: str = Field(
        ...,
        description="Machine-readable error code",
        examples=["RESOURCE_NOT_FOUND", "TENANT_REQUIRED"],
    )
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] | None = Field(
        None,
        description="Additional context for debugging",
    )
    trace_id: str | None = Field(
        None,
        description="X-Trace-Id of the request that failed",
    )


class ORDErrorResponse(BaseModel):
    """Wrapper for error responses."""

    error: ORDErrorDetail


class ORDError(Exception):
    """Base exception for ORD Service errors.

    Usage:
        raise ORDError(
            code=ORDErrorCode.INVALID_QUERY_OPTION,
            message="$top must be a non-negative integer",
            details={"option": "$top", "value": raw},
        )
    """

    def __init__(
        self,
        code: ORDErrorCode | str,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        self.code = code if isinstance(code, ORDErrorCode) else ORDErrorCode(code)
        self.message = message
        self.details = details
        super().__init__(message)

    @property
    def http_status(self) -> int:
        """Get HTTP status code for this error."""
        return ERROR_CODE_TO_HTTP_STATUS.get(self.code, 500)

    def to_dict(self, trace_id: str | None = None) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        error: dict[str, Any] = {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }
        if trace_id:
            error["trace_id"] = trace_id
        return {"error": error}

    def to_response(self) -> ORDErrorResponse:
        """Convert to Pydantic response model."""
        return ORDErrorResponse(
            error=ORDErrorDetail(
                code=self.code.value,
                message=self.message,
                details=self.details,
            )
        )


# =============================================================================
# Specific Error Classes (Convenience)
# =============================================================================


class InvalidQueryOptionError(ORDError):
    """Raised when an OData system query option cannot be honoured."""

    def __init__(self, option: str, value: str, message: str | None = None):
        super().__init__(
            code=ORDErrorCode.INVALID_QUERY_OPTION,
            message=message or f"Invalid value for {option}: '{value}'",
            details={"option": option, "value": value},
        )


class UnsupportedFormatError(ORDError):
    """Raised when $format asks for anything but JSON."""

    def __init__(self, requested: str):
        super().__init__(
            code=ORDErrorCode.UNSUPPORTED_FORMAT,
            message=f"Unsupported $format '{requested}', only 'json' is available",
            details={"format": requested, "supported": ["json"]},
        )


class TenantRequiredError(ORDError):
    """Raised when a catalog request carries no usable tenant header."""

    def __init__(self, header: str):
        super().__init__(
            code=ORDErrorCode.TENANT_REQUIRED,
            message=f"Missing or blank '{header}' header",
            details={"header": header},
        )


class ResourceNotFoundError(ORDError):
    """Raised when a single entity lookup finds nothing."""

    def __init__(self, entity_set: str, entity_id: str):
        super().__init__(
            code=ORDErrorCode.RESOURCE_NOT_FOUND,
            message=f"No entity '{entity_id}' in '{entity_set}'",
            details={"entity_set": entity_set, "id": entity_id},
        )


class MalformedResponseError(ORDError):
    """Raised when a response declared as JSON cannot be parsed for compaction."""

    def __init__(self, reason: str):
        super().__init__(
            code=ORDErrorCode.MALFORMED_RESPONSE,
            message="Response body could not be parsed as JSON",
            details={"reason": reason},
        )


# =============================================================================
# Exception handlers
# =============================================================================


async def ord_error_handler(request: Request, exc: ORDError) -> JSONResponse:
    """Render an ORDError using the standard envelope."""
    return error_response(exc)


def error_response(
    error: ORDError,
    status_code: int | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build the JSON response for an error, tagged with the current trace id.

    ``status_code`` overrides the code's default status for framework errors
    that keep their own (e.g. 415 rendered as INVALID_REQUEST).
    """
    return JSONResponse(
        status_code=status_code or error.http_status,
        content=error.to_dict(trace_id=get_trace_id() or None),
        headers=headers,
    )
