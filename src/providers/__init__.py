"""Catalog provider layer.

This package decouples the ProductMatcher and GroceryOptimizer from
concrete catalog sources (local JSON snapshot vs. remote catalog service).
"""

from src.providers.catalog_provider import CatalogLookup
from src.providers.local_provider import LocalCatalogProvider
from src.providers.api_provider import APICatalogProvider

__all__ = [
    "CatalogLookup",
    "LocalCatalogProvider",
    "APICatalogProvider",
]
