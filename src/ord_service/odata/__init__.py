"""OData entity sets and system query options."""

from .entity_sets import ENTITY_SETS, EntitySet, Navigation, get_entity_set
from .query import FilterClause, OrderBy, QueryOptions, parse_format, parse_query_options

__all__ = [
    "ENTITY_SETS",
    "EntitySet",
    "Navigation",
    "get_entity_set",
    "QueryOptions",
    "OrderBy",
    "FilterClause",
    "parse_format",
    "parse_query_options",
]
