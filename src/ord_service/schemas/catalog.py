# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Pydantic schemas rendering catalog entities in the ORD JSON shape.

Field names are snake_case in Python and camelCase on the wire. List facets
are wrapped one object per value and labels are flattened to key/value
pairs, which is the shape ``?compact=true`` later folds back:

    tags:   ["a", "b"]          ->  [{"value": "a"}, {"value": "b"}]
    labels: {"k": ["v1", "v2"]} ->  [{"key": "k", "value": "v1"},
                                     {"key": "k", "value": "v2"}]
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


def _wrap_values(v: Any) -> Any:
    if v is None:
        return []
    if isinstance(v, list):
        return [item if isinstance(item, dict) else {"value": item} for item in v]
    return v


class ORDModel(BaseModel):
    """Base schema: camelCase aliases, population by field name."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @classmethod
    def from_entity(cls, entity: Any) -> "ORDModel":
        """Build the schema from an ORM entity's matching attributes."""
        data = {
            name: getattr(entity, name)
            for name in cls.model_fields
            if hasattr(entity, name)
        }
        data.update(cls.extra_fields(entity))
        return cls.model_validate(data)

    @classmethod
    def extra_fields(cls, entity: Any) -> dict[str, Any]:
        """Hook for fields that do not map 1:1 to an entity attribute."""
        return {}


class ValueItem(ORDModel):
    """Single wrapped value of a list facet."""

    value: Any


class LabelItem(ORDModel):
    """Single key/value label pair."""

    key: str
    value: Any


class BundleReference(ORDModel):
    """Reference from an API or event to a consumption bundle."""

    ord_id: str | None = None
    id: str


class ResourceDefinition(ORDModel):
    """Pointer to the machine-readable definition of an API or event."""

    type: str | None = None
    media_type: str | None = None
    url: str | None = None


class ResourceBase(ORDModel):
    """Fields common to every ORD resource."""

    id: str
    ord_id: str | None = None
    title: str
    short_description: str | None = None
    description: str | None = None
    version: str | None = None
    last_update: datetime | None = None
    tags: list[ValueItem] = []
    countries: list[ValueItem] = []
    line_of_business: list[ValueItem] = []
    industry: list[ValueItem] = []
    labels: list[LabelItem] = []

    @field_validator("tags", "countries", "line_of_business", "industry", mode="before")
    @classmethod
    def wrap_values(cls, v: Any) -> Any:
        return _wrap_values(v)

    @field_validator("labels", mode="before")
    @classmethod
    def flatten_labels(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, dict):
            pairs = []
            for key, values in v.items():
                if not isinstance(values, list):
                    values = [values]
                pairs.extend({"key": key, "value": value} for value in values)
            return pairs
        return v


class PackageResource(ResourceBase):
    """ORD package."""

    vendor: str | None = None
    policy_level: str | None = None


class ConsumptionBundleResource(ResourceBase):
    """ORD consumption bundle."""


class _DefinitionResource(ResourceBase):
    visibility: str | None = None
    release_status: str | None = None
    part_of_package: str | None = None
    part_of_consumption_bundles: list[BundleReference] = []
    resource_definitions: list[ResourceDefinition] = []

    @classmethod
    def extra_fields(cls, entity: Any) -> dict[str, Any]:
        return {
            "part_of_package": entity.package_id,
            "part_of_consumption_bundles": [
                {"ord_id": bundle.ord_id, "id": bundle.id}
                for bundle in entity.consumption_bundles
            ],
            "resource_definitions": entity.resource_definitions or [],
        }


class APIResource(_DefinitionResource):
    """ORD API resource."""

    api_protocol: str | None = None


class EventResource(_DefinitionResource):
    """ORD event resource."""


class ProductResource(ResourceBase):
    """ORD product."""

    vendor: str | None = None
    parent: str | None = None


class VendorResource(ResourceBase):
    """ORD vendor."""

    partners: list[ValueItem] = []

    @field_validator("partners", mode="before")
    @classmethod
    def wrap_partners(cls, v: Any) -> Any:
        return _wrap_values(v)


class TombstoneResource(ORDModel):
    """Marker for a removed resource."""

    id: str
    ord_id: str
    removal_date: datetime
