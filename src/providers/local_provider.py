"""Local (JSON-backed) catalog provider.

Wraps :class:`CatalogDB` so the engine can program against
:class:`CatalogLookup` without knowing the data source.
"""

from typing import List, Sequence

from src.data_layer.catalog_db import CatalogDB
from src.data_layer.exceptions import CatalogUnavailableError
from src.data_layer.models import DeliveryInfo, Product
from src.providers.catalog_provider import CatalogLookup


class LocalCatalogProvider(CatalogLookup):
    """Provider backed by an in-memory catalog snapshot.

    The snapshot is read-only after loading, so concurrent searches need no
    locking. Unknown stores raise :class:`CatalogUnavailableError`.
    """

    def __init__(self, catalog_db: CatalogDB) -> None:
        self._catalog_db = catalog_db

    def search(self, terms: Sequence[str], supermarket_id: str) -> List[Product]:
        """Search every term in order; products deduplicated by id."""
        if not self._catalog_db.has_supermarket(supermarket_id):
            raise CatalogUnavailableError(supermarket_id, "search", detail="unknown supermarket")

        seen = set()
        products: List[Product] = []
        for term in terms:
            for product in self._catalog_db.search(term, supermarket_id):
                if product.id not in seen:
                    seen.add(product.id)
                    products.append(product)
        return products

    def search_category(
        self, category: str, supermarket_id: str, limit: int = 20
    ) -> List[Product]:
        if not self._catalog_db.has_supermarket(supermarket_id):
            raise CatalogUnavailableError(
                supermarket_id, "search_category", detail="unknown supermarket"
            )
        return self._catalog_db.get_products_by_category(category, supermarket_id)[:limit]

    def get_delivery_info(self, supermarket_id: str) -> DeliveryInfo:
        info = self._catalog_db.get_delivery_info(supermarket_id)
        if info is None:
            raise CatalogUnavailableError(
                supermarket_id, "get_delivery_info", detail="unknown supermarket"
            )
        return info
