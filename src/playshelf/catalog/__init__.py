"""The fixed list of apps the storefront lists."""

from .catalog import ALL_CATEGORIES, Catalog, CatalogEntry

__all__ = ["ALL_CATEGORIES", "Catalog", "CatalogEntry"]
