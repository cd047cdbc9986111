# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""ORD catalog entities.

Read-only from this service's point of view: rows are written by the
aggregation pipeline that discovers ORD documents.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Table, and_
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, foreign, mapped_column, relationship

from .base import Base, ResourceMixin, TenantMixin

api_bundle_references = Table(
    "api_bundle_references",
    Base.metadata,
    Column("api_id", ForeignKey("api_definitions.id", ondelete="CASCADE"), primary_key=True),
    Column(
        "bundle_id",
        ForeignKey("consumption_bundles.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)

event_bundle_references = Table(
    "event_bundle_references",
    Base.metadata,
    Column(
        "event_id",
        ForeignKey("event_definitions.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "bundle_id",
        ForeignKey("consumption_bundles.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Package(Base, ResourceMixin):
    """ORD package grouping APIs and events of one vendor."""

    __tablename__ = "packages"

    vendor: Mapped[str | None] = mapped_column(String(255))
    policy_level: Mapped[str | None] = mapped_column(String(64))

    apis: Mapped[list["APIDefinition"]] = relationship(
        "APIDefinition", back_populates="package"
    )
    events: Mapped[list["EventDefinition"]] = relationship(
        "EventDefinition", back_populates="package"
    )

    __table_args__ = (Index("idx_packages_tenant_ord", "tenant_id", "ord_id"),)

    def __repr__(self) -> str:
        return f"<Package {self.tenant_id}/{self.id}>"


class ConsumptionBundle(Base, ResourceMixin):
    """Set of APIs and events that can be consumed with the same credentials."""

    __tablename__ = "consumption_bundles"

    apis: Mapped[list["APIDefinition"]] = relationship(
        "APIDefinition",
        secondary=api_bundle_references,
        back_populates="consumption_bundles",
    )
    events: Mapped[list["EventDefinition"]] = relationship(
        "EventDefinition",
        secondary=event_bundle_references,
        back_populates="consumption_bundles",
    )

    def __repr__(self) -> str:
        return f"<ConsumptionBundle {self.tenant_id}/{self.id}>"


class APIDefinition(Base, ResourceMixin):
    """API resource."""

    __tablename__ = "api_definitions"

    package_id: Mapped[str | None] = mapped_column(
        String(64), ForeignKey("packages.id", ondelete="SET NULL")
    )
    api_protocol: Mapped[str | None] = mapped_column(String(64))
    visibility: Mapped[str | None] = mapped_column(String(32))
    release_status: Mapped[str | None] = mapped_column(String(32))
    resource_definitions: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONB, default=list, server_default="[]"
    )

    package: Mapped["Package"] = relationship("Package", back_populates="apis")
    consumption_bundles: Mapped[list[ConsumptionBundle]] = relationship(
        ConsumptionBundle,
        secondary=api_bundle_references,
        back_populates="apis",
    )

    __table_args__ = (Index("idx_api_definitions_package", "package_id"),)

    def __repr__(self) -> str:
        return f"<APIDefinition {self.tenant_id}/{self.id}>"


class EventDefinition(Base, ResourceMixin):
    """Event resource."""

    __tablename__ = "event_definitions"

    package_id: Mapped[str | None] = mapped_column(
        String(64), ForeignKey("packages.id", ondelete="SET NULL")
    )
    visibility: Mapped[str | None] = mapped_column(String(32))
    release_status: Mapped[str | None] = mapped_column(String(32))
    resource_definitions: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONB, default=list, server_default="[]"
    )

    package: Mapped["Package"] = relationship("Package", back_populates="events")
    consumption_bundles: Mapped[list[ConsumptionBundle]] = relationship(
        ConsumptionBundle,
        secondary=event_bundle_references,
        back_populates="events",
    )

    __table_args__ = (Index("idx_event_definitions_package", "package_id"),)

    def __repr__(self) -> str:
        return f"<EventDefinition {self.tenant_id}/{self.id}>"


class Product(Base, ResourceMixin):
    """Commercial product, optionally nested under a parent product."""

    __tablename__ = "products"

    vendor: Mapped[str | None] = mapped_column(String(255))
    parent: Mapped[str | None] = mapped_column(String(255))

    def __repr__(self) -> str:
        return f"<Product {self.tenant_id}/{self.id}>"


class Vendor(Base, ResourceMixin):
    """Vendor of products and packages."""

    __tablename__ = "vendors"

    partners: Mapped[list[str]] = mapped_column(JSONB, default=list, server_default="[]")

    # Products reference their vendor by ORD id, not by primary key
    products: Mapped[list[Product]] = relationship(
        Product,
        primaryjoin=lambda: and_(
            Vendor.ord_id == foreign(Product.vendor),
            Vendor.tenant_id == foreign(Product.tenant_id),
        ),
        viewonly=True,
    )

    def __repr__(self) -> str:
        return f"<Vendor {self.tenant_id}/{self.id}>"


class Tombstone(Base, TenantMixin):
    """Marker for a resource that was removed from the catalog."""

    __tablename__ = "tombstones"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    ord_id: Mapped[str] = mapped_column(String(255), nullable=False)
    removal_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<Tombstone {self.tenant_id}/{self.ord_id}>"
