# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Entity sets exposed by the catalog.

Each entity set ties a URL segment (``/apis``) to its ORM model, the schema
that renders it, and the navigation properties that ``$expand`` may follow.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import Any

from sqlalchemy import String, Text, inspect
from sqlalchemy.dialects.postgresql import JSONB

from ..models import (
    APIDefinition,
    ConsumptionBundle,
    EventDefinition,
    Package,
    Product,
    Tombstone,
    Vendor,
)
from ..schemas.catalog import (
    APIResource,
    ConsumptionBundleResource,
    EventResource,
    ORDModel,
    PackageResource,
    ProductResource,
    TombstoneResource,
    VendorResource,
)


@dataclass(frozen=True)
class Navigation:
    """Navigation property reachable with ``$expand``."""

    name: str
    target: str
    attribute: str


@dataclass(frozen=True)
class EntitySet:
    """A collection of catalog entities addressable under ``/<name>``."""

    name: str
    model: type[Any]
    schema: type[ORDModel]
    navigations: tuple[Navigation, ...] = ()
    # Relationships the schema reads even when nothing is expanded
    eager: tuple[str, ...] = ()
    default_order: str = "title"

    def navigation(self, name: str) -> Navigation | None:
        for nav in self.navigations:
            if nav.name == name:
                return nav
        return None

    @cached_property
    def properties(self) -> dict[str, str]:
        """Wire name -> Python attribute name, in schema order."""
        return {
            (info.alias or name): name
            for name, info in self.schema.model_fields.items()
        }

    @cached_property
    def _columns(self) -> dict[str, Any]:
        return {column.key: column for column in inspect(self.model).columns}

    @cached_property
    def orderable(self) -> dict[str, str]:
        """Properties backed by a scalar column."""
        return {
            wire: attr
            for wire, attr in self.properties.items()
            if attr in self._columns
            and not isinstance(self._columns[attr].type, JSONB)
        }

    @cached_property
    def filterable(self) -> dict[str, str]:
        """Properties backed by a string column."""
        return {
            wire: attr
            for wire, attr in self.orderable.items()
            if isinstance(self._columns[attr].type, (String, Text))
        }

    def serialize(self, entity: Any, expand: tuple[str, ...] | list[str] = ()) -> dict[str, Any]:
        """Render an entity (and its expanded navigations) as a JSON dict."""
        data = self.schema.from_entity(entity).model_dump(by_alias=True, mode="json")
        for name in expand:
            nav = self.navigation(name)
            if nav is None:
                continue
            target = ENTITY_SETS[nav.target]
            data[name] = [target.serialize(child) for child in getattr(entity, nav.attribute)]
        return data


ENTITY_SETS: dict[str, EntitySet] = {
    entity_set.name: entity_set
    for entity_set in (
        EntitySet(
            name="packages",
            model=Package,
            schema=PackageResource,
            navigations=(
                Navigation("apis", "apis", "apis"),
                Navigation("events", "events", "events"),
            ),
        ),
        EntitySet(
            name="consumptionBundles",
            model=ConsumptionBundle,
            schema=ConsumptionBundleResource,
            navigations=(
                Navigation("apis", "apis", "apis"),
                Navigation("events", "events", "events"),
            ),
        ),
        EntitySet(
            name="apis",
            model=APIDefinition,
            schema=APIResource,
            eager=("consumption_bundles",),
        ),
        EntitySet(
            name="events",
            model=EventDefinition,
            schema=EventResource,
            eager=("consumption_bundles",),
        ),
        EntitySet(
            name="products",
            model=Product,
            schema=ProductResource,
        ),
        EntitySet(
            name="vendors",
            model=Vendor,
            schema=VendorResource,
            navigations=(Navigation("products", "products", "products"),),
        ),
        EntitySet(
            name="tombstones",
            model=Tombstone,
            schema=TombstoneResource,
            default_order="ord_id",
        ),
    )
}


def get_entity_set(name: str) -> EntitySet:
    """Look up an entity set by its URL segment."""
    return ENTITY_SETS[name]
