# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Repository for tenant-scoped catalog queries.

All queries are read-only and always filtered on the caller's tenant.
Navigations requested with ``$expand`` are loaded eagerly with
``selectinload`` so serialization never triggers lazy loads.
"""

from typing import Any, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..odata.entity_sets import ENTITY_SETS, EntitySet
from ..odata.query import QueryOptions


def _loader_options(entity_set: EntitySet, expand: Sequence[str]) -> list[Any]:
    """Eager-load options for the schema's own needs plus each expansion."""
    model = entity_set.model
    options: list[Any] = [
        selectinload(getattr(model, attribute)) for attribute in entity_set.eager
    ]
    for name in expand:
        nav = entity_set.navigation(name)
        if nav is None:
            continue
        loader = selectinload(getattr(model, nav.attribute))
        target = ENTITY_SETS[nav.target]
        if target.eager:
            options.extend(
                loader.selectinload(getattr(target.model, attribute))
                for attribute in target.eager
            )
        else:
            options.append(loader)
    return options


class CatalogRepository:
    """Repository for catalog database operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_entities(
        self,
        entity_set: EntitySet,
        tenant_id: str,
        options: QueryOptions,
    ) -> list[Any]:
        """List one page of an entity set for a tenant."""
        model = entity_set.model
        query = select(model).where(model.tenant_id == tenant_id)

        for clause in options.filters:
            column = getattr(model, clause.attribute)
            if clause.operator == "eq":
                query = query.where(column == clause.value)
            else:
                query = query.where(column != clause.value)

        if options.orderby:
            for item in options.orderby:
                column = getattr(model, item.attribute)
                query = query.order_by(column.desc() if item.descending else column.asc())
        else:
            query = query.order_by(getattr(model, entity_set.default_order))
        # Stable paging across rows sharing the sort key
        query = query.order_by(model.id)

        query = query.options(*_loader_options(entity_set, options.expand))
        query = query.offset(options.skip).limit(options.top)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_entity(
        self,
        entity_set: EntitySet,
        tenant_id: str,
        entity_id: str,
        expand: Sequence[str] = (),
    ) -> Any | None:
        """Get a single entity by id, or None when absent for this tenant."""
        model = entity_set.model
        result = await self.session.execute(
            select(model)
            .where(model.tenant_id == tenant_id)
            .where(model.id == entity_id)
            .options(*_loader_options(entity_set, expand))
        )
        return result.scalar_one_or_none()
