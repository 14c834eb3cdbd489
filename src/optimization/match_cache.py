"""Request-scoped cache of catalog lookups.

One optimization run searches every (ingredient, store) pair at most once.
Entries hold the raw candidate products, not ranked matches: ranking depends
on each item's quantity and unit, and is cheap to redo on the caller thread.

A MatchCache is created per optimization call and dropped when it returns.
It is never shared between concurrent requests, so it needs no lock: worker
threads hand their results back through futures and only the calling thread
writes here.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple

from src.data_layer.exceptions import CatalogUnavailableError
from src.data_layer.models import NormalizedIngredient, Product


LookupKey = Tuple[str, str]  # (cleaned ingredient name, supermarket id)


@dataclass(frozen=True)
class CachedLookup:
    """Outcome of one catalog lookup.

    Attributes:
        products: Candidate products (empty on failure or no results)
        error: The outage that prevented the lookup, if any
    """
    products: Tuple[Product, ...] = ()
    error: Optional[CatalogUnavailableError] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class MatchCache:
    """Lookup results keyed by (cleaned ingredient name, supermarket id)."""

    def __init__(self) -> None:
        self._entries: Dict[LookupKey, CachedLookup] = {}

    @staticmethod
    def key(normalized: NormalizedIngredient, supermarket_id: str) -> LookupKey:
        return normalized.cleaned_name, supermarket_id

    def __contains__(self, key: LookupKey) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LookupKey]:
        return iter(self._entries)

    def get(self, key: LookupKey) -> Optional[CachedLookup]:
        return self._entries.get(key)

    def put(self, key: LookupKey, lookup: CachedLookup) -> None:
        self._entries[key] = lookup
