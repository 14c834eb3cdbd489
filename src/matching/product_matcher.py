"""Ingredient -> supermarket product matching.

Given a raw ingredient name, a needed quantity/unit and a store, the matcher
searches the store's catalog with every canonical term of the normalized
ingredient and returns a ranked list of ProductMatch objects. Thin results widen
the search to key terms and then to the ingredient's shopping category.

Classification per candidate (first tier that holds):
- exact:      folded product name equals a canonical term          -> 1.0
- similar:    edit-distance similarity to some term >= threshold   -> that score
- partial:    a canonical term occurs as a whole phrase in the name
              -> 0.4 + 0.25 * len(term) / len(name)
- substitute: shares key terms with the ingredient                 -> 0.4 * overlap
Anything else is discarded.

DESIGN DECISIONS:
- Ranking key is (confidence desc, price asc, product id asc), so output never
  depends on the order the catalog returned products in
- Element 0 of the result is the primary match and carries the alternatives;
  the remaining ranked candidates follow as standalone matches
- Catalog outages and unmatched ingredients are data (not_found), never raised
- Incompatible units fall back to buying one package and say so in match_reason
"""

import logging
import math
import re
from dataclasses import replace
from typing import Dict, List, Optional, Sequence, Tuple, Union

from src.data_layer.exceptions import CatalogUnavailableError, InvalidInputError
from src.data_layer.models import (
    GroceryItem,
    MatchType,
    NormalizedIngredient,
    Product,
    ProductMatch,
    ProductMatchAlternative,
    Unit,
)
from src.data_layer.settings import MatcherConfig
from src.ingestion.ingredient_normalizer import IngredientNormalizer, infer_category
from src.matching.similarity import are_similar, fold_text, similarity
from src.output.formatters import format_price
from src.providers.catalog_provider import CatalogLookup
from src.units.unit_converter import calculate_price_per_unit, convert, parse_unit


log = logging.getLogger("matching.product_matcher")

NOT_FOUND_REASON = (
    "No products found matching this ingredient. "
    "Try searching with different terms or check another supermarket."
)

# (product, confidence, match type, reason)
ScoredCandidate = Tuple[Product, float, MatchType, str]


def validate_request(
    ingredient_name: str,
    quantity: float,
    unit: Union[Unit, str],
    supermarket_id: Optional[str] = None,
) -> Unit:
    """Reject bad matching input before any catalog work.

    Returns:
        The parsed Unit

    Raises:
        InvalidInputError: On empty name, non-positive quantity, unknown unit
            or (when given) an empty store id
    """
    if not ingredient_name or not str(ingredient_name).strip():
        raise InvalidInputError("ingredient_name", ingredient_name, "must not be empty")

    if isinstance(quantity, bool) or not isinstance(quantity, (int, float)):
        raise InvalidInputError("quantity", quantity, "must be a number")
    if not math.isfinite(quantity) or quantity <= 0:
        raise InvalidInputError("quantity", quantity, "must be a positive finite number")

    parsed = parse_unit(unit)
    if parsed is None:
        raise InvalidInputError("unit", unit, "unknown unit")

    if supermarket_id is not None and not str(supermarket_id).strip():
        raise InvalidInputError("supermarket_id", supermarket_id, "must not be empty")

    return parsed


def _singular(word: str) -> str:
    return word[:-1] if len(word) > 3 and word.endswith("s") else word


class ProductMatcher:
    """Matches ingredients to products of one store at a time.

    Usage:
        matcher = ProductMatcher(LocalCatalogProvider(CatalogDB("catalog.json")))
        matches = matcher.find_matches("chicken breast", 200, Unit.G, "mercadona")
        best = matches[0]
        print(best.match_type, best.product.name, best.total_cost_cents)
    """

    def __init__(
        self,
        catalog: CatalogLookup,
        normalizer: Optional[IngredientNormalizer] = None,
        config: Optional[MatcherConfig] = None,
    ):
        self.catalog = catalog
        self.normalizer = normalizer or IngredientNormalizer()
        self.config = config or MatcherConfig()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def find_matches(
        self,
        ingredient_name: str,
        quantity: float,
        unit: Union[Unit, str],
        supermarket_id: str,
    ) -> List[ProductMatch]:
        """Ranked product matches for one ingredient at one store.

        Args:
            ingredient_name: Free-text ingredient name (English or Spanish)
            quantity: Needed amount, > 0
            unit: Unit of quantity (Unit or a raw unit string)
            supermarket_id: Store to search

        Returns:
            Non-empty list; element 0 is the primary match. A single
            not_found match if nothing in the store qualifies.

        Raises:
            InvalidInputError: For invalid input (checked before any lookup)
        """
        parsed_unit = validate_request(ingredient_name, quantity, unit, supermarket_id)
        normalized = self.normalizer.normalize(ingredient_name)

        try:
            candidates = self.collect_candidates(normalized, supermarket_id)
        except CatalogUnavailableError as e:
            log.warning("Catalog unavailable for %s: %s", supermarket_id, e)
            return [self.unavailable_match(ingredient_name, quantity, parsed_unit, supermarket_id, e)]

        return self.rank_candidates(
            ingredient_name, normalized, candidates, quantity, parsed_unit, supermarket_id
        )

    def match_grocery_list(
        self, items: Sequence[GroceryItem], supermarket_id: str
    ) -> List[GroceryItem]:
        """Match every grocery item at one store and select its best match."""
        matched = []
        for item in items:
            matches = self.find_matches(
                item.ingredient_name, item.total_quantity, item.unit, supermarket_id
            )
            matched.append(replace(item, matches=tuple(matches), selected_match=matches[0]))
        return matched

    def match_grocery_list_multiple(
        self, items: Sequence[GroceryItem], supermarket_ids: Sequence[str]
    ) -> Dict[str, List[GroceryItem]]:
        """match_grocery_list() at every store, keyed by store id in input order.

        Repeated store ids are matched once. A store whose catalog is down
        still gets an entry, with every item not_found.
        """
        return {
            store: self.match_grocery_list(items, store)
            for store in dict.fromkeys(supermarket_ids)
        }

    def collect_candidates(
        self, normalized: NormalizedIngredient, supermarket_id: str
    ) -> List[Product]:
        """Search canonical terms, then key terms, then the inferred category.

        Each later stage runs only while the candidates found so far are fewer
        than its configured threshold.

        Raises:
            CatalogUnavailableError: If the store cannot be queried
        """
        products = self._dedupe(self.catalog.search(list(normalized.canonical_terms), supermarket_id))

        if len(products) < self.config.keyword_search_threshold:
            extra_terms = [t for t in normalized.key_terms if t not in normalized.canonical_terms]
            if extra_terms:
                products = self._dedupe(
                    products + self.catalog.search(extra_terms, supermarket_id)
                )

        if len(products) < self.config.category_search_threshold:
            products = self._dedupe(products + self._category_candidates(normalized, supermarket_id))

        if self.config.in_stock_only:
            products = [p for p in products if p.in_stock]

        log.debug(
            "%d candidates for '%s' at %s",
            len(products), normalized.cleaned_name, supermarket_id,
        )
        return products

    def rank_candidates(
        self,
        ingredient_name: str,
        normalized: NormalizedIngredient,
        candidates: Sequence[Product],
        quantity: float,
        unit: Unit,
        supermarket_id: str,
    ) -> List[ProductMatch]:
        """Classify, score and order candidates into ProductMatch objects."""
        scored: List[ScoredCandidate] = []
        for product in candidates:
            result = self.classify(normalized, product)
            if result is None:
                continue
            confidence, match_type, reason = result
            if confidence < self.config.min_confidence:
                continue
            scored.append((product, confidence, match_type, reason))

        if not scored:
            return [self.not_found_match(ingredient_name, quantity, unit, supermarket_id)]

        scored.sort(key=lambda c: (-c[1], c[0].price_cents, c[0].id))

        primary_product = scored[0][0]
        alternatives = tuple(
            self._alternative(product, confidence, primary_product)
            for product, confidence, _, _ in scored[1:self.config.max_alternatives + 1]
        )

        matches = []
        for index, (product, confidence, match_type, reason) in enumerate(scored):
            matches.append(self._build_match(
                ingredient_name, quantity, unit, supermarket_id,
                product, confidence, match_type, reason,
                alternatives if index == 0 else (),
            ))
        return matches

    def classify(
        self, normalized: NormalizedIngredient, product: Product
    ) -> Optional[Tuple[float, MatchType, str]]:
        """Confidence, match type and reason for one candidate, or None."""
        name = fold_text(product.name)
        terms = [fold_text(t) for t in normalized.canonical_terms if t]
        if not name:
            return None

        if name in terms:
            return 1.0, MatchType.EXACT, "Exact name match"

        best_term, best_score = None, 0.0
        for term in terms:
            score = similarity(name, term)
            if score > best_score:
                best_term, best_score = term, score
        if best_term is not None and are_similar(name, best_term, self.config.similarity_threshold):
            return (
                best_score,
                MatchType.SIMILAR,
                f'Similar name ({round(best_score * 100)}% similar to "{best_term}")',
            )

        contained = [
            term for term in terms
            if re.search(r"\b" + re.escape(term) + r"\b", name)
        ]
        if contained:
            term = max(contained, key=len)
            confidence = 0.4 + 0.25 * len(term) / len(name)
            return min(confidence, 0.65), MatchType.PARTIAL, f'Name contains "{term}"'

        key_terms = [fold_text(t) for t in normalized.key_terms]
        if key_terms:
            tokens = {_singular(w) for w in re.findall(r"\w+", name) if len(w) > 2}
            shared = [t for t in key_terms if _singular(t) in tokens]
            if shared:
                ratio = len(shared) / len(key_terms)
                return (
                    self.config.substitute_weight * ratio,
                    MatchType.SUBSTITUTE,
                    f"Keyword match: {', '.join(shared)}",
                )

        return None

    def not_found_match(
        self,
        ingredient_name: str,
        quantity: float,
        unit: Unit,
        supermarket_id: str,
        reason: str = NOT_FOUND_REASON,
    ) -> ProductMatch:
        return ProductMatch(
            ingredient_name=ingredient_name,
            quantity_needed=quantity,
            unit_needed=unit,
            supermarket_id=supermarket_id,
            product=None,
            confidence=0.0,
            quantity_to_buy=0,
            total_cost_cents=0,
            match_type=MatchType.NOT_FOUND,
            match_reason=reason,
        )

    def unavailable_match(
        self,
        ingredient_name: str,
        quantity: float,
        unit: Unit,
        supermarket_id: str,
        error: CatalogUnavailableError,
    ) -> ProductMatch:
        """not_found match recording a catalog outage."""
        return self.not_found_match(
            ingredient_name, quantity, unit, supermarket_id,
            reason=f"Catalog unavailable: {error.message}",
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _category_candidates(
        self, normalized: NormalizedIngredient, supermarket_id: str
    ) -> List[Product]:
        category = infer_category(normalized.cleaned_name)
        if category is None:
            return []
        try:
            return self.catalog.search_category(category, supermarket_id)
        except CatalogUnavailableError as e:
            log.warning("Category search failed for %s at %s: %s", category, supermarket_id, e)
            return []

    @staticmethod
    def _dedupe(products: Sequence[Product]) -> List[Product]:
        seen = set()
        unique = []
        for product in products:
            if product.id not in seen:
                seen.add(product.id)
                unique.append(product)
        return unique

    @staticmethod
    def packages_needed(quantity: float, unit: Unit, product: Product) -> Optional[int]:
        """Packages of product covering quantity, or None if units don't convert."""
        converted = convert(quantity, unit, product.unit)
        if converted is None or product.package_quantity <= 0:
            return None
        # Rounding absorbs float noise such as 0.2 / 0.2 -> 1.0000000000000002
        return max(1, math.ceil(round(converted / product.package_quantity, 9)))

    def _build_match(
        self,
        ingredient_name: str,
        quantity: float,
        unit: Unit,
        supermarket_id: str,
        product: Product,
        confidence: float,
        match_type: MatchType,
        reason: str,
        alternatives: Tuple[ProductMatchAlternative, ...],
    ) -> ProductMatch:
        packages = self.packages_needed(quantity, unit, product)
        if packages is None:
            packages = 1
            reason += (
                f"; cannot convert {unit.value} to {product.unit.value}, "
                "assuming one package"
            )

        return ProductMatch(
            ingredient_name=ingredient_name,
            quantity_needed=quantity,
            unit_needed=unit,
            supermarket_id=supermarket_id,
            product=product,
            confidence=min(1.0, max(0.0, confidence)),
            quantity_to_buy=packages,
            total_cost_cents=packages * product.price_cents,
            match_type=match_type,
            match_reason=reason,
            alternatives=alternatives,
            price_per_unit=calculate_price_per_unit(
                product.price_cents, product.package_quantity, product.unit
            ),
        )

    @staticmethod
    def _alternative(
        product: Product, confidence: float, primary: Product
    ) -> ProductMatchAlternative:
        difference = product.price_cents - primary.price_cents
        if difference < 0:
            reason = f"Cheaper option (save {format_price(abs(difference))})"
        else:
            reason = "Alternative brand"
        return ProductMatchAlternative(
            product=product,
            confidence=confidence,
            reason=reason,
            price_difference_cents=difference,
        )
