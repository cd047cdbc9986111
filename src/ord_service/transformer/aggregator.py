# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Aggregator - compacts ORD resources inside a parsed JSON document.

Stateless, operates in place on the dict/list tree produced by ``json.loads``.
Only fields reachable through the known sub-resource keys are visited, so
unrelated objects elsewhere in the document that happen to carry ``tags`` or
``labels`` are left alone.

Two rewrites are applied to every resource found:

    tags: [{"value": "a"}, {"value": "b"}]      ->  tags: ["a", "b"]
    labels: [{"key": "k", "value": "v1"},
             {"key": "k", "value": "v2"}]       ->  labels: {"k": ["v1", "v2"]}
"""

from __future__ import annotations

from typing import Any

# Fields whose value is itself a resource or a list of resources.
# Visited in this order.
SUBRESOURCE_KEYS: tuple[str, ...] = ("value", "products", "packages", "apis", "events")

# Fields holding a list of {"value": x} wrappers.
SIMPLE_ARRAY_KEYS: tuple[str, ...] = ("tags", "countries", "lineOfBusiness", "industry")

LABELS_KEY = "labels"

_VALUE = "value"
_KEY = "key"


class Aggregator:
    """Stateless engine rewriting ORD resources into their compact form."""

    @staticmethod
    def aggregate(node: Any) -> None:
        """Compact every resource reachable from ``node``.

        ``node`` is either a single resource (dict), a list of resources,
        or a scalar (ignored). Mutates in place and returns nothing.
        """
        if isinstance(node, list):
            for element in node:
                Aggregator._visit_resource(element)
        elif isinstance(node, dict):
            Aggregator._visit_resource(node)

    @staticmethod
    def _visit_resource(resource: Any) -> None:
        if not isinstance(resource, dict):
            return

        Aggregator.rewrite_resource(resource)

        for key in SUBRESOURCE_KEYS:
            if key in resource:
                Aggregator.aggregate(resource[key])

    @staticmethod
    def rewrite_resource(resource: dict[str, Any]) -> None:
        """Apply both rewrite rules to the fields of a single resource."""
        for key in SIMPLE_ARRAY_KEYS:
            value = resource.get(key)
            if isinstance(value, list):
                resource[key] = Aggregator.compact_array(value)

        labels = resource.get(LABELS_KEY)
        if isinstance(labels, list):
            resource[LABELS_KEY] = Aggregator.group_labels(labels)

    @staticmethod
    def compact_array(elements: list[Any]) -> list[Any]:
        """Flatten ``[{"value": x}, ...]`` into ``[x, ...]``.

        Objects without a ``value`` field and nested lists are dropped.
        Scalars are kept as they are, which makes an already compacted
        array come out unchanged.
        """
        result: list[Any] = []
        for element in elements:
            if isinstance(element, dict):
                if _VALUE in element:
                    result.append(element[_VALUE])
            elif not isinstance(element, list):
                result.append(element)
        return result

    @staticmethod
    def group_labels(elements: list[Any]) -> dict[str, list[Any]]:
        """Group ``[{"key": k, "value": v}, ...]`` into ``{k: [v, ...]}``.

        Keys keep their first-occurrence order, values their encounter order.
        Elements missing ``key`` or ``value`` (or with a non-string key)
        are skipped.
        """
        grouped: dict[str, list[Any]] = {}
        for element in elements:
            if not isinstance(element, dict):
                continue
            if _KEY not in element or _VALUE not in element:
                continue
            key = element[_KEY]
            if not isinstance(key, str):
                continue
            grouped.setdefault(key, []).append(element[_VALUE])
        return grouped


def aggregate(tree: Any) -> None:
    """Module-level shortcut for :meth:`Aggregator.aggregate`."""
    Aggregator.aggregate(tree)
