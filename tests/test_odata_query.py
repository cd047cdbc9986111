# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Tests for OData system query option parsing."""

import pytest

from ord_service.errors import InvalidQueryOptionError, UnsupportedFormatError
from ord_service.odata import get_entity_set, parse_format, parse_query_options
from ord_service.odata.query import (
    FilterClause,
    OrderBy,
    apply_select,
    parse_expand,
    parse_filter,
    parse_orderby,
    parse_select,
)

APIS = get_entity_set("apis")
PACKAGES = get_entity_set("packages")


def _parse(params, entity_set=APIS, default_top=100, max_top=1000):
    return parse_query_options(params, entity_set, default_top=default_top, max_top=max_top)


class TestPaging:
    def test_defaults(self):
        options = _parse({})
        assert options.top == 100
        assert options.skip == 0
        assert options.expand == []
        assert options.select is None

    def test_top_and_skip(self):
        options = _parse({"$top": "5", "$skip": "10"})
        assert (options.top, options.skip) == (5, 10)

    def test_top_capped(self):
        assert _parse({"$top": "5000"}, max_top=1000).top == 1000

    def test_default_top_capped(self):
        assert _parse({}, default_top=500, max_top=50).top == 50

    @pytest.mark.parametrize("option", ["$top", "$skip"])
    @pytest.mark.parametrize("raw", ["-1", "ten", "1.5", ""])
    def test_invalid_integers(self, option, raw):
        with pytest.raises(InvalidQueryOptionError) as exc_info:
            _parse({option: raw})
        assert exc_info.value.details == {"option": option, "value": raw}
        assert exc_info.value.http_status == 400


class TestFormat:
    @pytest.mark.parametrize("raw", [None, "json", "JSON", "application/json"])
    def test_json_accepted(self, raw):
        parse_format(raw)

    @pytest.mark.parametrize("raw", ["xml", "atom", "application/xml"])
    def test_other_formats_rejected(self, raw):
        with pytest.raises(UnsupportedFormatError):
            parse_format(raw)


class TestExpand:
    def test_known_navigations(self):
        assert parse_expand("apis, events", PACKAGES) == ["apis", "events"]

    def test_duplicates_collapsed(self):
        assert parse_expand("apis,apis", PACKAGES) == ["apis"]

    def test_unknown_navigation(self):
        with pytest.raises(InvalidQueryOptionError) as exc_info:
            parse_expand("bundles", PACKAGES)
        assert "bundles" in exc_info.value.message

    def test_apis_have_no_navigations(self):
        with pytest.raises(InvalidQueryOptionError):
            parse_expand("events", APIS)

    @pytest.mark.parametrize("raw", ["apis($select=title)", "apis/events"])
    def test_nested_options_rejected(self, raw):
        with pytest.raises(InvalidQueryOptionError):
            parse_expand(raw, PACKAGES)


class TestSelect:
    def test_wire_names(self):
        assert parse_select("title,apiProtocol", APIS) == ["title", "apiProtocol"]

    def test_star_selects_everything(self):
        assert parse_select("*", APIS) is None

    def test_unknown_property(self):
        with pytest.raises(InvalidQueryOptionError):
            parse_select("api_protocol", APIS)

    def test_navigation_is_selectable(self):
        assert parse_select("title,apis", PACKAGES) == ["title", "apis"]

    def test_apply_select_keeps_id_and_expansions(self):
        data = {"id": "p1", "title": "T", "version": "1", "apis": []}
        assert apply_select(data, ["title"], ["apis"]) == {"id": "p1", "title": "T", "apis": []}

    def test_apply_select_without_select(self):
        data = {"id": "p1", "title": "T"}
        assert apply_select(data, None, []) is data


class TestOrderBy:
    def test_single_and_multiple(self):
        assert parse_orderby("title desc,version", APIS) == [
            OrderBy(attribute="title", descending=True),
            OrderBy(attribute="version", descending=False),
        ]

    def test_explicit_asc(self):
        assert parse_orderby("lastUpdate asc", APIS) == [OrderBy("last_update")]

    def test_json_columns_not_orderable(self):
        with pytest.raises(InvalidQueryOptionError):
            parse_orderby("tags", APIS)

    def test_bad_direction(self):
        with pytest.raises(InvalidQueryOptionError):
            parse_orderby("title sideways", APIS)


class TestFilter:
    def test_single_eq(self):
        assert parse_filter("apiProtocol eq 'rest'", APIS) == [
            FilterClause(attribute="api_protocol", operator="eq", value="rest")
        ]

    def test_and_with_ne(self):
        clauses = parse_filter("(visibility ne 'private' and releaseStatus eq 'active')", APIS)
        assert clauses == [
            FilterClause("visibility", "ne", "private"),
            FilterClause("release_status", "eq", "active"),
        ]

    def test_escaped_quote(self):
        assert parse_filter("title eq 'O''Reilly'", APIS)[0].value == "O'Reilly"

    @pytest.mark.parametrize(
        "raw",
        [
            "apiProtocol gt 'rest'",
            "apiProtocol eq rest",
            "apiProtocol eq 'rest' or title eq 'x'",
            "tags eq 'finance'",
            "unknown eq 'x'",
            "",
        ],
    )
    def test_unsupported_expressions(self, raw):
        with pytest.raises(InvalidQueryOptionError):
            parse_filter(raw, APIS)

    def test_parsed_through_query_options(self):
        options = _parse({"$filter": "visibility eq 'public'"})
        assert options.filters == [FilterClause("visibility", "eq", "public")]
