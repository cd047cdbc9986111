# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Tests for the ORD Service error code system."""

import json

import pytest

from ord_service.errors import (
    ERROR_CODE_TO_HTTP_STATUS,
    InvalidQueryOptionError,
    MalformedResponseError,
    ORDError,
    ORDErrorCode,
    ORDErrorResponse,
    ResourceNotFoundError,
    TenantRequiredError,
    UnsupportedFormatError,
    error_response,
    ord_error_handler,
)


class TestORDErrorCode:
    """Test ORDErrorCode enum."""

    def test_error_codes_are_strings(self):
        """Enum values match their names."""
        for code in ORDErrorCode:
            assert code.value == code.name

    def test_all_codes_have_http_status(self):
        for code in ORDErrorCode:
            assert code in ERROR_CODE_TO_HTTP_STATUS, f"Missing HTTP status for {code}"

    def test_http_status_ranges(self):
        for code, status in ERROR_CODE_TO_HTTP_STATUS.items():
            assert 400 <= status < 600, f"Invalid HTTP status {status} for {code}"


class TestORDError:
    """Test ORDError exception class."""

    def test_basic_error(self):
        error = ORDError(code=ORDErrorCode.INTERNAL_ERROR, message="boom")
        assert error.http_status == 500
        assert str(error) == "boom"
        assert error.to_dict() == {
            "error": {"code": "INTERNAL_ERROR", "message": "boom", "details": None}
        }

    def test_trace_id_included_when_given(self):
        error = ORDError(code=ORDErrorCode.METHOD_NOT_ALLOWED, message="no")
        assert error.http_status == 405
        assert error.to_dict(trace_id="trace-1")["error"]["trace_id"] == "trace-1"
        assert "trace_id" not in error.to_dict()["error"]

    def test_code_from_string(self):
        error = ORDError(code="TENANT_REQUIRED", message="no tenant")
        assert error.code is ORDErrorCode.TENANT_REQUIRED
        assert error.http_status == 400

    def test_unknown_code_string(self):
        with pytest.raises(ValueError):
            ORDError(code="NOT_A_CODE", message="x")

    def test_to_response_model(self):
        error = ResourceNotFoundError("apis", "api-1")
        response = error.to_response()
        assert isinstance(response, ORDErrorResponse)
        assert response.error.code == "RESOURCE_NOT_FOUND"
        assert response.error.details == {"entity_set": "apis", "id": "api-1"}


class TestSpecificErrors:
    """Test the convenience subclasses."""

    def test_invalid_query_option_default_message(self):
        error = InvalidQueryOptionError("$top", "abc")
        assert error.http_status == 400
        assert error.message == "Invalid value for $top: 'abc'"
        assert error.details == {"option": "$top", "value": "abc"}

    def test_unsupported_format(self):
        error = UnsupportedFormatError("xml")
        assert error.code is ORDErrorCode.UNSUPPORTED_FORMAT
        assert error.details["supported"] == ["json"]

    def test_tenant_required(self):
        error = TenantRequiredError("Tenant")
        assert "Tenant" in error.message
        assert error.http_status == 400

    def test_malformed_response(self):
        error = MalformedResponseError("Expecting value at line 1 column 1")
        assert error.http_status == 500
        assert error.details == {"reason": "Expecting value at line 1 column 1"}

    @pytest.mark.parametrize(
        "error",
        [
            InvalidQueryOptionError("$skip", "-1"),
            UnsupportedFormatError("atom"),
            TenantRequiredError("Tenant"),
            ResourceNotFoundError("packages", "p"),
            MalformedResponseError("bad"),
        ],
    )
    def test_all_are_ord_errors(self, error):
        assert isinstance(error, ORDError)


class TestRendering:
    """Test the JSON responses built from errors."""

    def test_error_response(self):
        response = error_response(ResourceNotFoundError("apis", "x"))
        assert response.status_code == 404
        body = json.loads(response.body)
        assert body["error"]["code"] == "RESOURCE_NOT_FOUND"

    async def test_exception_handler(self):
        response = await ord_error_handler(None, TenantRequiredError("Tenant"))
        assert response.status_code == 400
        assert json.loads(response.body)["error"]["details"] == {"header": "Tenant"}

    def test_error_response_status_override(self):
        error = ORDError(code=ORDErrorCode.INVALID_REQUEST, message="Unsupported media type")
        response = error_response(error, status_code=415, headers={"X-Reason": "media"})
        assert response.status_code == 415
        assert response.headers["x-reason"] == "media"
        assert json.loads(response.body)["error"]["code"] == "INVALID_REQUEST"

    def test_outside_request_has_no_trace_id(self):
        body = json.loads(error_response(TenantRequiredError("Tenant")).body)
        assert "trace_id" not in body["error"]
