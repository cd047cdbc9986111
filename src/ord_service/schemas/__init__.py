"""Pydantic schemas."""

from .catalog import (
    APIResource,
    ConsumptionBundleResource,
    EventResource,
    PackageResource,
    ProductResource,
    TombstoneResource,
    VendorResource,
)

__all__ = [
    "PackageResource",
    "ConsumptionBundleResource",
    "APIResource",
    "EventResource",
    "ProductResource",
    "VendorResource",
    "TombstoneResource",
]
