"""Abstract base class for supermarket catalog providers.

The matcher and optimizer depend ONLY on this interface. Concrete
implementations supply products from a local JSON snapshot or a remote
catalog service without changing the matching logic.
"""

from abc import ABC, abstractmethod
from typing import List, Sequence

from src.data_layer.models import DeliveryInfo, Product


class CatalogLookup(ABC):
    """Abstraction for per-store product search and delivery metadata.

    Implementations must be safe to call from several threads at once: the
    optimizer fans lookups for different (ingredient, store) pairs out to a
    worker pool.
    """

    @abstractmethod
    def search(self, terms: Sequence[str], supermarket_id: str) -> List[Product]:
        """Return products of *supermarket_id* matching any of *terms*.

        Zero results is an empty list, never an exception. Every product
        carries its ``in_stock`` flag.

        Raises:
            CatalogUnavailableError: If the store cannot be queried.
        """
        ...

    def search_category(
        self, category: str, supermarket_id: str, limit: int = 20
    ) -> List[Product]:
        """Return up to *limit* products of *supermarket_id* in a shopping category.

        *category* is an engine category key such as ``"meat"``. Sources that
        cannot browse by category keep this default and return no products.

        Raises:
            CatalogUnavailableError: If the store cannot be queried.
        """
        return []

    @abstractmethod
    def get_delivery_info(self, supermarket_id: str) -> DeliveryInfo:
        """Return home-delivery availability and cost for a store.

        Raises:
            CatalogUnavailableError: If the store cannot be queried.
        """
        ...
