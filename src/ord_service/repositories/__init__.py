"""Data access repositories."""

from .catalog import CatalogRepository

__all__ = ["CatalogRepository"]
