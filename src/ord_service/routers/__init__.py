"""API routers."""

from .catalog import get_catalog_repository, get_tenant_id, router as catalog_router

__all__ = [
    "catalog_router",
    "get_catalog_repository",
    "get_tenant_id",
]
