# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Catalog endpoints.

One collection route (``GET /apis``) and one single-entity route
(``GET /apis(<id>)``) per entity set, plus the service and metadata
documents. Collections are wrapped in the OData envelope:

    {"@odata.context": "$metadata#apis", "value": [...]}
"""

from typing import Any, Callable

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import get_settings
from ..database import get_db
from ..errors import ResourceNotFoundError, TenantRequiredError
from ..odata.entity_sets import ENTITY_SETS, EntitySet
from ..odata.query import (
    apply_select,
    parse_expand,
    parse_format,
    parse_query_options,
    parse_select,
)
from ..repositories.catalog import CatalogRepository

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["catalog"])


# =============================================================================
# Dependencies
# =============================================================================


def get_catalog_repository(db: AsyncSession = Depends(get_db)) -> CatalogRepository:
    """Provide a repository bound to the request's database session."""
    return CatalogRepository(db)


def get_tenant_id(request: Request) -> str:
    """Resolve the caller's tenant.

    Normally set by TenantGuardMiddleware; falls back to reading the header
    so the router also works when mounted without the middleware.
    """
    tenant_id = getattr(request.state, "tenant_id", None)
    if tenant_id:
        return tenant_id

    header = get_settings().tenant_header
    tenant_id = request.headers.get(header, "").strip()
    if not tenant_id:
        raise TenantRequiredError(header)
    return tenant_id


def _strip_key(raw: str) -> str:
    """Entity keys may be quoted: ``apis('abc')`` or ``apis(abc)``."""
    key = raw.strip()
    if len(key) >= 2 and key[0] == key[-1] == "'":
        key = key[1:-1].replace("''", "'")
    return key


# =============================================================================
# Service documents
# =============================================================================


@router.get("/", summary="Service document")
async def service_document() -> dict[str, Any]:
    """List the entity sets exposed by the service."""
    return {
        "@odata.context": "$metadata",
        "value": [
            {"name": name, "kind": "EntitySet", "url": name}
            for name in ENTITY_SETS
        ],
    }


@router.get("/$metadata", summary="Metadata document")
async def metadata_document(request: Request) -> dict[str, Any]:
    """Describe properties and navigations of every entity set."""
    parse_format(request.query_params.get("$format"))
    return {
        "$Version": "4.0",
        "entitySets": {
            name: {
                "properties": list(entity_set.properties),
                "navigationProperties": {
                    nav.name: nav.target for nav in entity_set.navigations
                },
                "filterable": list(entity_set.filterable),
                "orderable": list(entity_set.orderable),
            }
            for name, entity_set in ENTITY_SETS.items()
        },
    }


# =============================================================================
# Entity sets
# =============================================================================


def _collection_endpoint(entity_set: EntitySet) -> Callable:
    async def list_collection(
        request: Request,
        tenant_id: str = Depends(get_tenant_id),
        repository: CatalogRepository = Depends(get_catalog_repository),
    ) -> JSONResponse:
        settings = get_settings()
        options = parse_query_options(
            request.query_params,
            entity_set,
            default_top=settings.default_page_size,
            max_top=settings.max_page_size,
        )

        entities = await repository.list_entities(entity_set, tenant_id, options)
        logger.debug(
            "catalog_collection_listed",
            entity_set=entity_set.name,
            count=len(entities),
            top=options.top,
            skip=options.skip,
        )

        return JSONResponse(
            {
                "@odata.context": f"$metadata#{entity_set.name}",
                "value": [
                    options.apply_select(entity_set.serialize(entity, options.expand))
                    for entity in entities
                ],
            }
        )

    return list_collection


def _entity_endpoint(entity_set: EntitySet) -> Callable:
    async def get_entity(
        key: str,
        request: Request,
        tenant_id: str = Depends(get_tenant_id),
        repository: CatalogRepository = Depends(get_catalog_repository),
    ) -> JSONResponse:
        params = request.query_params
        parse_format(params.get("$format"))
        expand = parse_expand(params["$expand"], entity_set) if "$expand" in params else []
        select = parse_select(params["$select"], entity_set) if "$select" in params else None

        entity_id = _strip_key(key)
        entity = await repository.get_entity(entity_set, tenant_id, entity_id, expand)
        if entity is None:
            raise ResourceNotFoundError(entity_set.name, entity_id)

        data = apply_select(entity_set.serialize(entity, expand), select, expand)

        return JSONResponse({"@odata.context": f"$metadata#{entity_set.name}/$entity", **data})

    return get_entity


for _entity_set in ENTITY_SETS.values():
    router.add_api_route(
        f"/{_entity_set.name}",
        _collection_endpoint(_entity_set),
        methods=["GET"],
        name=f"list_{_entity_set.name}",
        summary=f"List {_entity_set.name}",
    )
    router.add_api_route(
        f"/{_entity_set.name}({{key}})",
        _entity_endpoint(_entity_set),
        methods=["GET"],
        name=f"get_{_entity_set.name}",
        summary=f"Get one of {_entity_set.name} by id",
    )
