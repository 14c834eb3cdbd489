"""Data models for the grocery matching engine."""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


class Unit(str, Enum):
    """Measurement units understood by the engine."""

    G = "g"
    KG = "kg"
    OZ = "oz"
    LB = "lb"
    ML = "ml"
    L = "l"
    TSP = "tsp"
    TBSP = "tbsp"
    CUP = "cup"
    PIECE = "piece"
    SLICE = "slice"
    BUNCH = "bunch"
    PINCH = "pinch"
    TO_TASTE = "to_taste"


class MatchType(str, Enum):
    """Classification of an ingredient -> product match."""

    EXACT = "exact"
    SIMILAR = "similar"
    PARTIAL = "partial"
    SUBSTITUTE = "substitute"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class NormalizedIngredient:
    """Canonical search form of a raw ingredient name.

    Attributes:
        raw_name: The name exactly as received
        cleaned_name: Lowercased name without preparation/quantity noise
        canonical_terms: Every language variant to search for, cleaned name first
        key_terms: Significant words of the cleaned name (no stop words)
        removed_terms: Preparation/quantity words that were stripped
    """
    raw_name: str
    cleaned_name: str
    canonical_terms: Tuple[str, ...]
    key_terms: Tuple[str, ...]
    removed_terms: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Product:
    """A supermarket product snapshot as returned by a catalog."""

    id: str
    name: str
    price_cents: int  # price of one package
    unit: Unit  # unit of package_quantity
    package_quantity: float
    category: str
    supermarket_id: str
    in_stock: bool = True
    brand: Optional[str] = None


@dataclass(frozen=True)
class PricePerUnit:
    """Price normalized to a comparison unit (per kg, per l or per piece)."""

    price_cents: int
    unit: Unit


@dataclass(frozen=True)
class DeliveryInfo:
    """Home delivery metadata for a supermarket."""

    available: bool
    cost_cents: Optional[int] = None


@dataclass(frozen=True)
class ProductMatchAlternative:
    """A runner-up product for a match."""

    product: Product
    confidence: float
    reason: str
    price_difference_cents: int  # alternative price minus primary price


@dataclass(frozen=True)
class ProductMatch:
    """Result of matching one ingredient against one store's catalog.

    A match with ``match_type == NOT_FOUND`` never carries a product and
    always has zero confidence; any other match always has a product.
    """
    ingredient_name: str
    quantity_needed: float
    unit_needed: Unit
    supermarket_id: str
    product: Optional[Product]
    confidence: float
    quantity_to_buy: int
    total_cost_cents: int
    match_type: MatchType
    match_reason: str = ""
    alternatives: Tuple[ProductMatchAlternative, ...] = ()
    price_per_unit: Optional[PricePerUnit] = None

    def __post_init__(self):
        not_found = self.match_type == MatchType.NOT_FOUND
        if not_found != (self.product is None):
            raise ValueError("not_found matches must have no product, all others need one")
        if not_found and self.confidence != 0:
            raise ValueError("not_found matches must have zero confidence")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence out of range: {self.confidence}")
        if self.total_cost_cents < 0:
            raise ValueError(f"total_cost_cents must be >= 0, got {self.total_cost_cents}")

    @property
    def is_available(self) -> bool:
        return self.match_type != MatchType.NOT_FOUND


@dataclass(frozen=True)
class GroceryItem:
    """One line of the shopping list, with its product matches."""

    id: str
    ingredient_name: str
    total_quantity: float
    unit: Unit
    matches: Tuple[ProductMatch, ...] = ()
    selected_match: Optional[ProductMatch] = None
    category: str = "other"

    def __post_init__(self):
        if self.selected_match is not None and self.selected_match not in self.matches:
            raise ValueError("selected_match must be one of matches")


@dataclass
class OptimizationResult:
    """Outcome of a grocery optimization run."""

    items: List[GroceryItem]
    savings_cents: int
    supermarkets: List[str]  # distinct stores used, in input order
    unavailable_items: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)
    total_cost_cents: int = 0


@dataclass
class SupermarketComparison:
    """Whole-list basket cost at a single supermarket."""

    supermarket_id: str
    total_cost_cents: int
    items_available: int
    items_unavailable: int
    delivery_available: bool
    delivery_cost_cents: Optional[int] = None

    def effective_cost_cents(self, include_delivery: bool) -> int:
        """Basket cost, plus delivery when requested and known."""
        if include_delivery and self.delivery_cost_cents is not None:
            return self.total_cost_cents + self.delivery_cost_cents
        return self.total_cost_cents
