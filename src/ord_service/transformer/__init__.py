# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Response transformer.

Rewrites ORD resources in catalog responses into a compact, client-friendly
shape when the caller asks for it with ``?compact=true``.
"""

from .aggregator import (
    LABELS_KEY,
    SIMPLE_ARRAY_KEYS,
    SUBRESOURCE_KEYS,
    Aggregator,
    aggregate,
)

__all__ = [
    "Aggregator",
    "aggregate",
    "SUBRESOURCE_KEYS",
    "SIMPLE_ARRAY_KEYS",
    "LABELS_KEY",
]
