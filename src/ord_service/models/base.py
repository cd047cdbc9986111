# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Base model and mixins shared by the catalog entities."""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import DateTime, MetaData, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# Naming convention for constraints (helps with Alembic migrations)
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Base class for all models."""

    metadata = MetaData(naming_convention=convention)


class TenantMixin:
    """Mixin that scopes a row to a tenant."""

    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)


class ResourceMixin(TenantMixin):
    """Columns common to every ORD resource.

    List facets (tags, countries, ...) are stored as plain JSON arrays of
    strings, labels as a JSON object of ``key -> [values]``.
    """

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    ord_id: Mapped[str | None] = mapped_column(String(255))
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    short_description: Mapped[str | None] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text)
    version: Mapped[str | None] = mapped_column(String(64))
    tags: Mapped[list[str]] = mapped_column(JSONB, default=list, server_default="[]")
    countries: Mapped[list[str]] = mapped_column(JSONB, default=list, server_default="[]")
    line_of_business: Mapped[list[str]] = mapped_column(
        JSONB, default=list, server_default="[]"
    )
    industry: Mapped[list[str]] = mapped_column(JSONB, default=list, server_default="[]")
    labels: Mapped[dict[str, Any]] = mapped_column(JSONB, default=dict, server_default="{}")
    last_update: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
