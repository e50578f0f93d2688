"""Command catalog loading and resolution."""

from .catalog import Catalog, CatalogEntry

__all__ = [
    "Catalog",
    "CatalogEntry",
]
