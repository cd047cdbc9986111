# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Request-scoped values shared by middleware, logging and error rendering.

TraceIdMiddleware sets the trace id, TenantGuardMiddleware the tenant. Both
are read back by the log processor and by ``error_response`` so an error
envelope can be matched to its log lines.
"""

from contextvars import ContextVar

trace_id_var: ContextVar[str] = ContextVar("trace_id", default="")
tenant_id_var: ContextVar[str] = ContextVar("tenant_id", default="")


def get_trace_id() -> str:
    """Trace id of the current request, empty outside a request."""
    return trace_id_var.get()


def get_tenant_id() -> str:
    """Tenant of the current request, empty until the tenant guard ran."""
    return tenant_id_var.get()
