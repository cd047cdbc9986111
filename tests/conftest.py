# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Pytest configuration and shared fixtures.

Catalog tests never touch PostgreSQL: the repository dependency is replaced
with an in-memory fake serving transient ORM instances.
"""

from datetime import datetime, timezone
from typing import Any, Sequence

import pytest
from fastapi.testclient import TestClient

from ord_service.config import clear_settings_cache
from ord_service.main import create_app
from ord_service.models import (
    APIDefinition,
    ConsumptionBundle,
    EventDefinition,
    Package,
    Product,
    Tombstone,
    Vendor,
)
from ord_service.odata.entity_sets import EntitySet
from ord_service.odata.query import QueryOptions
from ord_service.routers import get_catalog_repository

TENANT = "tenant-a"
OTHER_TENANT = "tenant-b"


class FakeCatalogRepository:
    """In-memory stand-in for CatalogRepository."""

    def __init__(self, entities: Sequence[Any]):
        self.entities = list(entities)
        self.calls: list[tuple[str, Any]] = []

    def _rows(self, entity_set: EntitySet, tenant_id: str) -> list[Any]:
        return [
            entity
            for entity in self.entities
            if isinstance(entity, entity_set.model) and entity.tenant_id == tenant_id
        ]

    async def list_entities(
        self, entity_set: EntitySet, tenant_id: str, options: QueryOptions
    ) -> list[Any]:
        self.calls.append(("list", options))
        rows = self._rows(entity_set, tenant_id)

        for clause in options.filters:
            if clause.operator == "eq":
                rows = [r for r in rows if getattr(r, clause.attribute) == clause.value]
            else:
                rows = [r for r in rows if getattr(r, clause.attribute) != clause.value]

        rows.sort(key=lambda r: r.id)
        if options.orderby:
            for item in reversed(options.orderby):
                rows.sort(
                    key=lambda r: getattr(r, item.attribute) or "",
                    reverse=item.descending,
                )
        else:
            rows.sort(key=lambda r: getattr(r, entity_set.default_order) or "")

        return rows[options.skip : options.skip + options.top]

    async def get_entity(
        self,
        entity_set: EntitySet,
        tenant_id: str,
        entity_id: str,
        expand: Sequence[str] = (),
    ) -> Any | None:
        self.calls.append(("get", entity_id))
        for entity in self._rows(entity_set, tenant_id):
            if entity.id == entity_id:
                return entity
        return None


# =============================================================================
# Catalog fixtures
# =============================================================================


def build_catalog() -> list[Any]:
    """A small catalog: one package with two APIs and an event, plus extras."""
    updated = datetime(2026, 1, 15, 9, 30, tzinfo=timezone.utc)

    bundle = ConsumptionBundle(
        id="bundle-1",
        tenant_id=TENANT,
        ord_id="sap.s4:consumptionBundle:basic:v1",
        title="Basic Auth Bundle",
        tags=["auth"],
        labels={},
    )

    orders = APIDefinition(
        id="api-orders",
        tenant_id=TENANT,
        ord_id="sap.s4:apiResource:orders:v1",
        title="Orders API",
        version="1.0.0",
        api_protocol="rest",
        visibility="public",
        release_status="active",
        tags=["automotive", "finance"],
        countries=["DE", "US"],
        line_of_business=["Sales"],
        industry=["Retail"],
        labels={"country": ["DE", "US"], "team": ["orders"]},
        resource_definitions=[
            {
                "type": "openapi-v3",
                "mediaType": "application/json",
                "url": "/openapi/orders.json",
            }
        ],
        last_update=updated,
    )
    orders.consumption_bundles = [bundle]

    billing = APIDefinition(
        id="api-billing",
        tenant_id=TENANT,
        ord_id="sap.s4:apiResource:billing:v1",
        title="Billing API",
        version="2.1.0",
        api_protocol="odata-v4",
        visibility="private",
        release_status="beta",
        tags=["finance"],
        labels={},
        last_update=updated,
    )

    order_events = EventDefinition(
        id="event-orders",
        tenant_id=TENANT,
        ord_id="sap.s4:eventResource:orders:v1",
        title="Order Events",
        visibility="public",
        release_status="active",
        tags=["events"],
        labels={"channel": ["kafka"]},
    )

    package = Package(
        id="package-1",
        tenant_id=TENANT,
        ord_id="sap.s4:package:core:v1",
        title="Core Package",
        vendor="sap:vendor:SAP:",
        policy_level="sap:core:v1",
        tags=["core"],
        labels={"domain": ["erp"]},
    )
    package.apis = [orders, billing]
    package.events = [order_events]

    product = Product(
        id="product-1",
        tenant_id=TENANT,
        ord_id="sap:product:S4HANA:",
        title="S/4HANA",
        vendor="sap:vendor:SAP:",
        tags=["erp"],
        labels={},
    )

    vendor = Vendor(
        id="vendor-1",
        tenant_id=TENANT,
        ord_id="sap:vendor:SAP:",
        title="SAP SE",
        partners=["microsoft:vendor:Microsoft:"],
        tags=[],
        labels={},
    )
    vendor.products = [product]

    tombstone = Tombstone(
        id="tombstone-1",
        tenant_id=TENANT,
        ord_id="sap.s4:apiResource:legacy:v1",
        removal_date=datetime(2025, 12, 1, tzinfo=timezone.utc),
    )

    foreign_api = APIDefinition(
        id="api-foreign",
        tenant_id=OTHER_TENANT,
        title="Foreign API",
        tags=["secret"],
        labels={},
    )

    return [bundle, orders, billing, order_events, package, product, vendor, tombstone, foreign_api]


@pytest.fixture(autouse=True)
def reset_settings():
    """Reset settings cache before each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def catalog() -> list[Any]:
    return build_catalog()


@pytest.fixture
def repository(catalog) -> FakeCatalogRepository:
    return FakeCatalogRepository(catalog)


@pytest.fixture
def app(repository):
    """Application with the catalog repository replaced by the in-memory fake."""
    application = create_app()
    application.dependency_overrides[get_catalog_repository] = lambda: repository
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    """Create test client for the FastAPI app."""
    return TestClient(app)


@pytest.fixture
def tenant_headers() -> dict[str, str]:
    return {"Tenant": TENANT}
