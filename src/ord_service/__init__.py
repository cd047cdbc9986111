# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""ORD Service - read-only Open Resource Discovery catalog."""

__version__ = "0.1.0"
