"""Multi-store grocery optimization.

Three operations over a grocery list and a list of candidate supermarkets:

- optimize_for_price: cheapest store per item (split shopping), then the
  configured constraints (maximum number of stores, minimum savings that
  justify splitting)
- optimize_for_availability: the single store that stocks the most items
- find_best_supermarket: whole-basket cost at every store, cheapest first

DESIGN DECISIONS:
- Catalog lookups for every unique (ingredient, store) pair run concurrently
  on a bounded thread pool; results are collected into a request-scoped
  MatchCache and everything after that runs on the calling thread
- All ranking and tie-breaks use stable keys (cost, input order), never the
  order in which lookups completed
- Cancellation aborts in-flight lookups and raises OptimizationCancelledError;
  no partial result is ever returned
- A store whose catalog is down just contributes no matches; only invalid
  input is raised to the caller
- Reported total_cost_cents and savings_cents are product costs only; delivery
  costs only influence which plan is chosen (when enabled)
"""

import itertools
import logging
import threading
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from dataclasses import replace
from typing import Dict, List, Optional, Sequence, Tuple

from src.data_layer.exceptions import (
    CatalogUnavailableError,
    InvalidInputError,
    OptimizationCancelledError,
)
from src.data_layer.models import (
    DeliveryInfo,
    GroceryItem,
    NormalizedIngredient,
    OptimizationResult,
    ProductMatch,
    SupermarketComparison,
    Unit,
)
from src.data_layer.settings import OptimizerConfig
from src.matching.product_matcher import ProductMatcher, validate_request
from src.optimization.match_cache import CachedLookup, MatchCache
from src.output.formatters import format_price
from src.providers.catalog_provider import CatalogLookup
from src.units.unit_converter import round_half_up


log = logging.getLogger("optimization.grocery_optimizer")

NO_STORES_SUGGESTION = "No supermarkets available for optimization"

# Chosen match per grocery item (None = not available in the plan's stores)
Plan = List[Optional[ProductMatch]]

# store -> per item -> ranked matches (element 0 is the primary match)
MatchTable = Dict[str, List[List[ProductMatch]]]


class GroceryOptimizer:
    """Optimizes a grocery list across supermarkets.

    Usage:
        catalog = LocalCatalogProvider(CatalogDB("catalog.json"))
        optimizer = GroceryOptimizer(ProductMatcher(catalog), catalog)
        result = optimizer.optimize_for_price(items, ["mercadona", "dia"])
        print(result.total_cost_cents, result.savings_cents, result.suggestions)
    """

    # Seconds between cancellation checks while lookups are in flight
    POLL_INTERVAL = 0.05

    def __init__(
        self,
        matcher: ProductMatcher,
        catalog: CatalogLookup,
        config: Optional[OptimizerConfig] = None,
    ):
        """Initialize the optimizer.

        Args:
            matcher: Product matcher used for every (item, store) pair
            catalog: Catalog used for delivery metadata
            config: Optimization constraints (defaults if omitted)
        """
        self.matcher = matcher
        self.catalog = catalog
        self.config = config or OptimizerConfig()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def optimize_for_price(
        self,
        items: Sequence[GroceryItem],
        supermarket_ids: Sequence[str],
        cancel_event: Optional[threading.Event] = None,
    ) -> OptimizationResult:
        """Buy every item where it is cheapest, within the configured constraints.

        Args:
            items: Grocery items to price
            supermarket_ids: Candidate stores; order breaks price ties
            cancel_event: Optional event that aborts the run when set

        Returns:
            OptimizationResult with one selected match per available item

        Raises:
            InvalidInputError: If an item or store id is invalid
            OptimizationCancelledError: If cancel_event was set
        """
        items = list(items)
        units = self._validate_items(items)
        stores = self._validate_stores(supermarket_ids)
        if not stores:
            return self._no_stores_result(items)

        table = self._match_table(items, units, stores, cancel_event, "optimize_for_price")
        best = {store: [matches[0] for matches in table[store]] for store in stores}

        plan = self._plan_for(stores, best, len(items))
        notes: List[str] = []
        delivery: Dict[str, int] = {}

        if len(self._stores_used(plan, stores)) > 1:
            delivery = self._delivery_costs(stores, cancel_event, "optimize_for_price")

        limit = self.config.max_supermarkets
        unconstrained_count = len(self._stores_used(plan, stores))
        if limit is not None and unconstrained_count > limit:
            plan = self._best_constrained_plan(stores, best, len(items), limit, delivery)
            notes.append(
                f"Shopping limited to {limit} supermarket(s) instead of {unconstrained_count}."
            )

        if len(self._stores_used(plan, stores)) > 1:
            store, single_plan = self._best_single_store_plan(stores, best, len(items), delivery)
            extra = self._plan_cost(single_plan, delivery) - self._plan_cost(plan, delivery)
            if (self._covered(single_plan) >= self._covered(plan)
                    and extra < self.config.minimum_savings_for_split_cents):
                plan = single_plan
                notes.append(self._single_store_note(store, extra))

        result_items, unavailable, total = self._apply_plan(items, plan)
        used = self._stores_used(plan, stores)
        savings = max(0, self._average_basket_cost(best, stores) - total)

        log.info(
            "Price plan: %d stores, total %d, savings %d, %d unavailable",
            len(used), total, savings, len(unavailable),
        )
        return OptimizationResult(
            items=result_items,
            savings_cents=savings,
            supermarkets=used,
            unavailable_items=unavailable,
            suggestions=self._price_suggestions(used, savings, unavailable) + notes,
            total_cost_cents=total,
        )

    def optimize_for_availability(
        self,
        items: Sequence[GroceryItem],
        supermarket_ids: Sequence[str],
        cancel_event: Optional[threading.Event] = None,
    ) -> OptimizationResult:
        """Shop at the single store that has the most items.

        Ties go to the store listed first. No cost optimization is performed,
        so savings_cents is always 0.

        Raises:
            InvalidInputError: If an item or store id is invalid
            OptimizationCancelledError: If cancel_event was set
        """
        items = list(items)
        units = self._validate_items(items)
        stores = self._validate_stores(supermarket_ids)
        if not stores:
            return self._no_stores_result(items)

        table = self._match_table(items, units, stores, cancel_event, "optimize_for_availability")

        best_store, best_count = stores[0], -1
        for store in stores:
            count = sum(1 for matches in table[store] if matches[0].is_available)
            if count > best_count:
                best_store, best_count = store, count

        result_items: List[GroceryItem] = []
        unavailable: List[str] = []
        total = 0
        for item, matches in zip(items, table[best_store]):
            if matches[0].is_available:
                result_items.append(
                    replace(item, matches=tuple(matches), selected_match=matches[0])
                )
                total += matches[0].total_cost_cents
            else:
                result_items.append(item)
                unavailable.append(item.ingredient_name)

        suggestions = []
        if unavailable:
            suggestions.append(
                f"{len(unavailable)} items not available at {best_store}. "
                "Consider checking another store for these items."
            )

        return OptimizationResult(
            items=result_items,
            savings_cents=0,
            supermarkets=[best_store],
            unavailable_items=unavailable,
            suggestions=suggestions,
            total_cost_cents=total,
        )

    def find_best_supermarket(
        self,
        items: Sequence[GroceryItem],
        supermarket_ids: Sequence[str],
        cancel_event: Optional[threading.Event] = None,
    ) -> List[SupermarketComparison]:
        """Compare whole-basket cost at every store.

        Returns:
            One comparison per store, sorted by cost (plus delivery when
            enabled), then items available descending, then input order

        Raises:
            InvalidInputError: If an item or store id is invalid
            OptimizationCancelledError: If cancel_event was set
        """
        items = list(items)
        units = self._validate_items(items)
        stores = self._validate_stores(supermarket_ids)
        if not stores:
            return []

        table = self._match_table(items, units, stores, cancel_event, "find_best_supermarket")

        comparisons = []
        for store in stores:
            primaries = [matches[0] for matches in table[store]]
            available = [m for m in primaries if m.is_available]
            self._check_cancelled(cancel_event, "find_best_supermarket", 0)
            info = self._delivery_info(store)
            comparisons.append(SupermarketComparison(
                supermarket_id=store,
                total_cost_cents=sum(m.total_cost_cents for m in available),
                items_available=len(available),
                items_unavailable=len(primaries) - len(available),
                delivery_available=info.available,
                delivery_cost_cents=info.cost_cents,
            ))

        include_delivery = self.config.include_delivery_costs
        ordered = sorted(
            enumerate(comparisons),
            key=lambda pair: (
                pair[1].effective_cost_cents(include_delivery),
                -pair[1].items_available,
                pair[0],
            ),
        )
        return [comparison for _, comparison in ordered]

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_items(items: Sequence[GroceryItem]) -> List[Unit]:
        return [
            validate_request(item.ingredient_name, item.total_quantity, item.unit)
            for item in items
        ]

    @staticmethod
    def _validate_stores(supermarket_ids: Sequence[str]) -> List[str]:
        """Store ids in input order, duplicates dropped."""
        stores: List[str] = []
        for supermarket_id in supermarket_ids:
            if not supermarket_id or not str(supermarket_id).strip():
                raise InvalidInputError("supermarket_ids", supermarket_id, "must not be empty")
            if supermarket_id not in stores:
                stores.append(supermarket_id)
        return stores

    # ------------------------------------------------------------------
    # Concurrent lookups
    # ------------------------------------------------------------------

    def _match_table(
        self,
        items: List[GroceryItem],
        units: List[Unit],
        stores: List[str],
        cancel_event: Optional[threading.Event],
        operation: str,
    ) -> MatchTable:
        """Ranked matches for every (store, item) pair."""
        self._check_cancelled(cancel_event, operation, 0)

        normalized = [self.matcher.normalizer.normalize(item.ingredient_name) for item in items]
        cache = MatchCache()
        self._fill_cache(cache, normalized, stores, cancel_event, operation)

        table: MatchTable = {}
        for store in stores:
            rows = []
            for item, unit, norm in zip(items, units, normalized):
                lookup = cache.get(MatchCache.key(norm, store))
                if lookup.failed:
                    rows.append([self.matcher.unavailable_match(
                        item.ingredient_name, item.total_quantity, unit, store, lookup.error
                    )])
                else:
                    rows.append(self.matcher.rank_candidates(
                        item.ingredient_name, norm, lookup.products,
                        item.total_quantity, unit, store,
                    ))
            table[store] = rows
            log.debug(
                "%s: %d/%d items matched",
                store, sum(1 for row in rows if row[0].is_available), len(rows),
            )
        return table

    def _fill_cache(
        self,
        cache: MatchCache,
        normalized: List[NormalizedIngredient],
        stores: List[str],
        cancel_event: Optional[threading.Event],
        operation: str,
    ) -> None:
        """Run one catalog lookup per unique (ingredient, store) key on the pool."""
        pending: Dict[Tuple[str, str], NormalizedIngredient] = {}
        for norm in normalized:
            for store in stores:
                key = MatchCache.key(norm, store)
                if key not in cache and key not in pending:
                    pending[key] = norm
        if not pending:
            return

        timeout = self.POLL_INTERVAL if cancel_event is not None else None
        executor = ThreadPoolExecutor(
            max_workers=min(self.config.max_workers, len(pending)),
            thread_name_prefix="catalog-lookup",
        )
        try:
            futures = {
                executor.submit(self._lookup, norm, key[1]): key
                for key, norm in pending.items()
            }
            not_done = set(futures)
            while not_done:
                self._check_cancelled(cancel_event, operation, len(not_done))
                _, not_done = wait(not_done, timeout=timeout, return_when=FIRST_COMPLETED)
            self._check_cancelled(cancel_event, operation, 0)

            # Submission order, not completion order
            for future, key in futures.items():
                cache.put(key, future.result())
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    def _lookup(self, normalized: NormalizedIngredient, supermarket_id: str) -> CachedLookup:
        try:
            products = self.matcher.collect_candidates(normalized, supermarket_id)
        except CatalogUnavailableError as e:
            log.warning("Catalog unavailable for %s: %s", supermarket_id, e)
            return CachedLookup(error=e)
        return CachedLookup(products=tuple(products))

    @staticmethod
    def _check_cancelled(
        cancel_event: Optional[threading.Event], operation: str, pending: int
    ) -> None:
        if cancel_event is not None and cancel_event.is_set():
            log.info("%s cancelled with %d lookups pending", operation, pending)
            raise OptimizationCancelledError(operation, pending)

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    def _delivery_info(self, supermarket_id: str) -> DeliveryInfo:
        try:
            return self.catalog.get_delivery_info(supermarket_id)
        except CatalogUnavailableError as e:
            log.warning("No delivery info for %s: %s", supermarket_id, e)
            return DeliveryInfo(available=False, cost_cents=None)

    def _delivery_costs(
        self,
        stores: List[str],
        cancel_event: Optional[threading.Event],
        operation: str,
    ) -> Dict[str, int]:
        """Delivery cost per store for plan comparisons ({} when disabled)."""
        if not self.config.include_delivery_costs:
            return {}
        costs = {}
        for store in stores:
            self._check_cancelled(cancel_event, operation, 0)
            info = self._delivery_info(store)
            costs[store] = info.cost_cents if info.available and info.cost_cents else 0
        return costs

    # ------------------------------------------------------------------
    # Plans
    # ------------------------------------------------------------------

    @staticmethod
    def _plan_for(
        stores: Sequence[str], best: Dict[str, List[ProductMatch]], item_count: int
    ) -> Plan:
        """Cheapest available match per item among stores; ties go to the earlier store."""
        plan: Plan = []
        for index in range(item_count):
            chosen = None
            for store in stores:
                match = best[store][index]
                if match.is_available and (
                    chosen is None or match.total_cost_cents < chosen.total_cost_cents
                ):
                    chosen = match
            plan.append(chosen)
        return plan

    @staticmethod
    def _covered(plan: Plan) -> int:
        return sum(1 for match in plan if match is not None)

    @staticmethod
    def _stores_used(plan: Plan, stores: Sequence[str]) -> List[str]:
        used = {match.supermarket_id for match in plan if match is not None}
        return [store for store in stores if store in used]

    @staticmethod
    def _plan_cost(plan: Plan, delivery: Dict[str, int]) -> int:
        products = sum(match.total_cost_cents for match in plan if match is not None)
        used = {match.supermarket_id for match in plan if match is not None}
        return products + sum(delivery.get(store, 0) for store in used)

    def _best_constrained_plan(
        self,
        stores: List[str],
        best: Dict[str, List[ProductMatch]],
        item_count: int,
        limit: int,
        delivery: Dict[str, int],
    ) -> Plan:
        """Best plan using at most limit stores.

        Subsets are ranked by items covered, then cost, then enumeration
        order (smaller subsets first, input order within a size).
        """
        best_key, best_plan = None, None
        subsets = itertools.chain.from_iterable(
            itertools.combinations(stores, size)
            for size in range(1, min(limit, len(stores)) + 1)
        )
        for order, subset in enumerate(subsets):
            plan = self._plan_for(subset, best, item_count)
            key = (-self._covered(plan), self._plan_cost(plan, delivery), order)
            if best_key is None or key < best_key:
                best_key, best_plan = key, plan
        return best_plan

    def _best_single_store_plan(
        self,
        stores: List[str],
        best: Dict[str, List[ProductMatch]],
        item_count: int,
        delivery: Dict[str, int],
    ) -> Tuple[str, Plan]:
        best_key, best_store, best_plan = None, None, None
        for order, store in enumerate(stores):
            plan = self._plan_for([store], best, item_count)
            key = (-self._covered(plan), self._plan_cost(plan, delivery), order)
            if best_key is None or key < best_key:
                best_key, best_store, best_plan = key, store, plan
        return best_store, best_plan

    @staticmethod
    def _apply_plan(
        items: List[GroceryItem], plan: Plan
    ) -> Tuple[List[GroceryItem], List[str], int]:
        """Items with their selected matches, unavailable names and achieved cost."""
        result_items: List[GroceryItem] = []
        unavailable: List[str] = []
        total = 0
        for item, match in zip(items, plan):
            if match is None:
                result_items.append(item)
                unavailable.append(item.ingredient_name)
            else:
                result_items.append(replace(item, matches=(match,), selected_match=match))
                total += match.total_cost_cents
        return result_items, unavailable, total

    @staticmethod
    def _average_basket_cost(best: Dict[str, List[ProductMatch]], stores: List[str]) -> int:
        """Mean over stores of each store's basket (available items only)."""
        if not stores:
            return 0
        baskets = [
            sum(m.total_cost_cents for m in best[store] if m.is_available)
            for store in stores
        ]
        return round_half_up(sum(baskets) / len(baskets))

    # ------------------------------------------------------------------
    # Suggestions
    # ------------------------------------------------------------------

    def _price_suggestions(
        self, used: List[str], savings: int, unavailable: List[str]
    ) -> List[str]:
        suggestions = []

        if len(used) > 1:
            suggestions.append(
                f"Shopping at {len(used)} stores saves you {format_price(savings)} "
                "compared to single-store shopping."
            )

        if 0 < len(unavailable) <= 3:
            suggestions.append(f"Consider substitutes for: {', '.join(unavailable)}")
        elif len(unavailable) > 3:
            suggestions.append(
                f"{len(unavailable)} items need substitutes or alternative sourcing."
            )

        if savings > self.config.large_savings_threshold_cents:
            suggestions.append("Great savings! Consider bulk buying frequently used items.")

        return suggestions

    def _single_store_note(self, store: str, extra_cents: int) -> str:
        if extra_cents <= 0:
            return f"Buying everything at {store} is cheaper than splitting once delivery is included."
        return (
            f"Buying everything at {store} costs only {format_price(extra_cents)} more, "
            f"below the {format_price(self.config.minimum_savings_for_split_cents)} "
            "needed to justify visiting several stores."
        )

    @staticmethod
    def _no_stores_result(items: List[GroceryItem]) -> OptimizationResult:
        return OptimizationResult(
            items=list(items),
            savings_cents=0,
            supermarkets=[],
            unavailable_items=[item.ingredient_name for item in items],
            suggestions=[NO_STORES_SUGGESTION],
            total_cost_cents=0,
        )
