"""SQLAlchemy models."""

from .base import Base
from .catalog import (
    APIDefinition,
    ConsumptionBundle,
    EventDefinition,
    Package,
    Product,
    Tombstone,
    Vendor,
)

__all__ = [
    "Base",
    "Package",
    "ConsumptionBundle",
    "APIDefinition",
    "EventDefinition",
    "Product",
    "Vendor",
    "Tombstone",
]
