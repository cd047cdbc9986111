# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""OData system query options.

Supported subset:

    $top=10  $skip=20
    $expand=apis,events
    $select=title,version
    $orderby=title desc,version
    $filter=apiProtocol eq 'rest' and visibility ne 'private'
    $format=json

Anything outside this subset is rejected with INVALID_QUERY_OPTION rather
than silently ignored.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Mapping

from ..errors import InvalidQueryOptionError, UnsupportedFormatError
from .entity_sets import EntitySet

SUPPORTED_FORMATS = frozenset({"json", "application/json"})

_FILTER_CLAUSE = re.compile(
    r"\s*(?P<prop>[A-Za-z_][A-Za-z0-9_]*)\s+(?P<op>eq|ne)\s+'(?P<literal>(?:[^']|'')*)'\s*"
)
_FILTER_AND = re.compile(r"and(?=\s)")


@dataclass(frozen=True)
class OrderBy:
    """One ``$orderby`` item."""

    attribute: str
    descending: bool = False


@dataclass(frozen=True)
class FilterClause:
    """One ``prop eq|ne 'literal'`` comparison."""

    attribute: str
    operator: str
    value: str


@dataclass
class QueryOptions:
    """Parsed system query options for one request."""

    top: int
    skip: int = 0
    expand: list[str] = field(default_factory=list)
    select: list[str] | None = None
    orderby: list[OrderBy] = field(default_factory=list)
    filters: list[FilterClause] = field(default_factory=list)

    def apply_select(self, data: dict) -> dict:
        return apply_select(data, self.select, self.expand)


def apply_select(data: dict, select: list[str] | None, expand: list[str]) -> dict:
    """Drop properties not named in ``$select`` (id and expansions stay)."""
    if select is None:
        return data
    keep = {"id", *select, *expand}
    return {key: value for key, value in data.items() if key in keep}


def _split_list(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


def _parse_non_negative_int(option: str, raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise InvalidQueryOptionError(
            option, raw, f"{option} must be a non-negative integer"
        ) from None
    if value < 0:
        raise InvalidQueryOptionError(option, raw, f"{option} must be a non-negative integer")
    return value


def parse_format(raw: str | None) -> None:
    """Only JSON is served; anything else is a client error."""
    if raw is None:
        return
    if raw.strip().lower() not in SUPPORTED_FORMATS:
        raise UnsupportedFormatError(raw)


def parse_expand(raw: str, entity_set: EntitySet) -> list[str]:
    expand: list[str] = []
    for item in _split_list(raw):
        if "(" in item or "/" in item:
            raise InvalidQueryOptionError(
                "$expand", item, "Nested $expand options are not supported"
            )
        if entity_set.navigation(item) is None:
            raise InvalidQueryOptionError(
                "$expand",
                item,
                f"Unknown navigation property '{item}' on '{entity_set.name}'",
            )
        if item not in expand:
            expand.append(item)
    return expand


def parse_select(raw: str, entity_set: EntitySet) -> list[str] | None:
    items = _split_list(raw)
    if not items or "*" in items:
        return None
    for item in items:
        if item not in entity_set.properties and entity_set.navigation(item) is None:
            raise InvalidQueryOptionError(
                "$select",
                item,
                f"Unknown property '{item}' on '{entity_set.name}'",
            )
    return items


def parse_orderby(raw: str, entity_set: EntitySet) -> list[OrderBy]:
    orderby: list[OrderBy] = []
    for item in _split_list(raw):
        parts = item.split()
        if len(parts) > 2 or (len(parts) == 2 and parts[1] not in ("asc", "desc")):
            raise InvalidQueryOptionError("$orderby", item)
        attribute = entity_set.orderable.get(parts[0])
        if attribute is None:
            raise InvalidQueryOptionError(
                "$orderby",
                item,
                f"Cannot order '{entity_set.name}' by '{parts[0]}'",
            )
        orderby.append(OrderBy(attribute=attribute, descending=parts[-1] == "desc"))
    return orderby


def parse_filter(raw: str, entity_set: EntitySet) -> list[FilterClause]:
    expression = raw.strip()
    if expression.startswith("(") and expression.endswith(")"):
        expression = expression[1:-1]

    clauses: list[FilterClause] = []
    position = 0
    while True:
        match = _FILTER_CLAUSE.match(expression, position)
        if match is None:
            raise InvalidQueryOptionError(
                "$filter",
                raw,
                "Only \"<property> eq|ne '<value>'\" comparisons joined by 'and' are supported",
            )
        attribute = entity_set.filterable.get(match.group("prop"))
        if attribute is None:
            raise InvalidQueryOptionError(
                "$filter",
                raw,
                f"Cannot filter '{entity_set.name}' by '{match.group('prop')}'",
            )
        clauses.append(
            FilterClause(
                attribute=attribute,
                operator=match.group("op"),
                value=match.group("literal").replace("''", "'"),
            )
        )
        position = match.end()
        if position == len(expression):
            return clauses

        conjunction = _FILTER_AND.match(expression, position)
        if conjunction is None:
            raise InvalidQueryOptionError("$filter", raw)
        position = conjunction.end()


def parse_query_options(
    params: Mapping[str, str],
    entity_set: EntitySet,
    default_top: int,
    max_top: int,
) -> QueryOptions:
    """Parse and validate the system query options of a collection request."""
    parse_format(params.get("$format"))

    top = default_top
    if "$top" in params:
        top = _parse_non_negative_int("$top", params["$top"])
    top = min(top, max_top)

    skip = 0
    if "$skip" in params:
        skip = _parse_non_negative_int("$skip", params["$skip"])

    options = QueryOptions(top=top, skip=skip)
    if "$expand" in params:
        options.expand = parse_expand(params["$expand"], entity_set)
    if "$select" in params:
        options.select = parse_select(params["$select"], entity_set)
    if "$orderby" in params:
        options.orderby = parse_orderby(params["$orderby"], entity_set)
    if "$filter" in params:
        options.filters = parse_filter(params["$filter"], entity_set)
    return options
