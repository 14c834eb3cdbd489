"""Tests for multi-store grocery optimization.

Each test writes a tiny catalog to tmp_path so prices per store are explicit.
Product names equal the ingredient names, so every available item is an
exact match and costs exactly one package.
"""

import json
import threading
import time
from unittest.mock import Mock, patch

import pytest

from src.data_layer.catalog_db import CatalogDB
from src.data_layer.exceptions import (
    CatalogUnavailableError,
    InvalidInputError,
    OptimizationCancelledError,
)
from src.data_layer.models import GroceryItem, MatchType, Unit
from src.data_layer.settings import OptimizerConfig
from src.matching.product_matcher import ProductMatcher
from src.optimization.grocery_optimizer import NO_STORES_SUGGESTION, GroceryOptimizer
from src.optimization.match_cache import CachedLookup, MatchCache
from src.providers.catalog_provider import CatalogLookup
from src.providers.local_provider import LocalCatalogProvider


UNITS = {"leche": ("l", Unit.L, 1), "arroz": ("kg", Unit.KG, 1), "huevos": ("piece", Unit.PIECE, 12)}


def item(name, quantity=None):
    _, unit, package = UNITS.get(name, ("piece", Unit.PIECE, 1))
    return GroceryItem(
        id=name, ingredient_name=name, total_quantity=quantity or package, unit=unit
    )


def build_catalog(tmp_path, prices, delivery=None):
    """Write a catalog where prices = {store: {ingredient: price_cents}}."""
    delivery = delivery or {}
    supermarkets = []
    products = []
    for store, store_prices in prices.items():
        record = {"id": store, "name": store.upper()}
        if store in delivery:
            record["delivery"] = {"available": True, "cost_cents": delivery[store]}
        supermarkets.append(record)
        for name, price in store_prices.items():
            raw_unit, _, package = UNITS[name]
            products.append({
                "id": f"{store}-{name}",
                "name": name.capitalize(),
                "price_cents": price,
                "unit": raw_unit,
                "package_quantity": package,
                "category": "other",
                "supermarket_id": store,
            })

    path = tmp_path / "catalog.json"
    path.write_text(json.dumps({"supermarkets": supermarkets, "products": products}))
    return LocalCatalogProvider(CatalogDB(str(path)))


def build_optimizer(catalog, **config):
    return GroceryOptimizer(ProductMatcher(catalog), catalog, OptimizerConfig(**config))


SPLIT_PRICES = {
    "a": {"leche": 100, "arroz": 300},
    "b": {"leche": 200, "arroz": 100},
}

THREE_STORE_PRICES = {
    "a": {"leche": 100, "arroz": 500, "huevos": 500},
    "b": {"leche": 500, "arroz": 100, "huevos": 500},
    "c": {"leche": 500, "arroz": 500, "huevos": 100},
}


class TestOptimizeForPrice:
    """Tests for optimize_for_price()."""

    def test_split_shopping(self, tmp_path):
        """Test that each item is bought where it is cheapest."""
        catalog = build_catalog(tmp_path, SPLIT_PRICES)
        optimizer = build_optimizer(
            catalog, include_delivery_costs=False, minimum_savings_for_split_cents=0
        )

        result = optimizer.optimize_for_price([item("leche"), item("arroz")], ["a", "b"])

        assert result.supermarkets == ["a", "b"]
        assert result.total_cost_cents == 200
        # average basket (400 + 300) / 2 = 350
        assert result.savings_cents == 150
        assert result.unavailable_items == []
        assert result.items[0].selected_match.supermarket_id == "a"
        assert result.items[1].selected_match.supermarket_id == "b"
        assert result.suggestions == [
            "Shopping at 2 stores saves you €1.50 compared to single-store shopping."
        ]

    def test_small_savings_fall_back_to_one_store(self, tmp_path):
        """Test that a split saving less than the minimum uses the best single store."""
        catalog = build_catalog(tmp_path, SPLIT_PRICES)
        optimizer = build_optimizer(catalog, include_delivery_costs=False)

        result = optimizer.optimize_for_price([item("leche"), item("arroz")], ["a", "b"])

        assert result.supermarkets == ["b"]
        assert result.total_cost_cents == 300
        assert result.savings_cents == 50
        assert result.suggestions == [
            "Buying everything at b costs only €1.00 more, below the €5.00 "
            "needed to justify visiting several stores."
        ]

    def test_delivery_costs_can_make_one_store_cheaper(self, tmp_path):
        """Test that delivery fees are weighed when choosing the plan."""
        catalog = build_catalog(tmp_path, SPLIT_PRICES, delivery={"a": 300, "b": 300})
        optimizer = build_optimizer(catalog, minimum_savings_for_split_cents=0)

        result = optimizer.optimize_for_price([item("leche"), item("arroz")], ["a", "b"])

        assert result.supermarkets == ["b"]
        # reported totals are product costs only
        assert result.total_cost_cents == 300
        assert result.suggestions == [
            "Buying everything at b is cheaper than splitting once delivery is included."
        ]

    def test_max_supermarkets_limits_stores(self, tmp_path):
        """Test that the plan never uses more stores than configured."""
        catalog = build_catalog(tmp_path, THREE_STORE_PRICES)
        optimizer = build_optimizer(
            catalog, include_delivery_costs=False, minimum_savings_for_split_cents=0
        )
        items = [item("leche"), item("arroz"), item("huevos")]

        result = optimizer.optimize_for_price(items, ["a", "b", "c"])

        assert result.supermarkets == ["a", "b"]
        assert result.total_cost_cents == 700
        assert result.savings_cents == 400
        assert "Shopping limited to 2 supermarket(s) instead of 3." in result.suggestions

    def test_no_store_limit(self, tmp_path):
        """Test that max_supermarkets=None allows every store."""
        catalog = build_catalog(tmp_path, THREE_STORE_PRICES)
        optimizer = build_optimizer(
            catalog,
            include_delivery_costs=False,
            minimum_savings_for_split_cents=0,
            max_supermarkets=None,
        )
        items = [item("leche"), item("arroz"), item("huevos")]

        result = optimizer.optimize_for_price(items, ["a", "b", "c"])

        assert result.supermarkets == ["a", "b", "c"]
        assert result.total_cost_cents == 300
        assert result.savings_cents == 800

    def test_unknown_item_is_unavailable(self, tmp_path):
        """Test that unmatched items are listed and suggested for substitutes."""
        catalog = build_catalog(tmp_path, SPLIT_PRICES)
        optimizer = build_optimizer(catalog, include_delivery_costs=False)

        result = optimizer.optimize_for_price(
            [item("leche"), item("foo-bar-unknown")], ["a", "b"]
        )

        assert result.unavailable_items == ["foo-bar-unknown"]
        assert result.items[1].selected_match is None
        assert result.total_cost_cents == 100
        assert "Consider substitutes for: foo-bar-unknown" in result.suggestions

    def test_savings_never_negative(self, tmp_path):
        """Test that savings are clamped at zero."""
        catalog = build_catalog(tmp_path, {"a": {"leche": 100}, "b": {}})
        optimizer = build_optimizer(catalog)

        result = optimizer.optimize_for_price([item("leche")], ["a", "b"])

        assert result.total_cost_cents == 100
        assert result.savings_cents == 0

    def test_unknown_store_contributes_nothing(self, tmp_path):
        """Test that a store whose catalog fails is skipped, not raised."""
        catalog = build_catalog(tmp_path, SPLIT_PRICES)
        optimizer = build_optimizer(catalog)

        result = optimizer.optimize_for_price([item("leche")], ["zzz", "a"])

        assert result.supermarkets == ["a"]
        assert result.total_cost_cents == 100

    def test_no_stores(self, tmp_path):
        """Test the degenerate result for an empty store list."""
        catalog = build_catalog(tmp_path, SPLIT_PRICES)
        optimizer = build_optimizer(catalog)

        result = optimizer.optimize_for_price([item("leche"), item("arroz")], [])

        assert result.supermarkets == []
        assert result.total_cost_cents == 0
        assert result.savings_cents == 0
        assert result.unavailable_items == ["leche", "arroz"]
        assert result.suggestions == [NO_STORES_SUGGESTION]

    def test_empty_store_id_is_rejected(self, tmp_path):
        """Test that a blank store id is invalid input."""
        optimizer = build_optimizer(build_catalog(tmp_path, SPLIT_PRICES))
        with pytest.raises(InvalidInputError):
            optimizer.optimize_for_price([item("leche")], ["a", ""])

    def test_invalid_item_is_rejected(self, tmp_path):
        """Test that a non-positive item quantity is invalid input."""
        optimizer = build_optimizer(build_catalog(tmp_path, SPLIT_PRICES))
        bad = GroceryItem(id="x", ingredient_name="leche", total_quantity=0, unit=Unit.L)
        with pytest.raises(InvalidInputError):
            optimizer.optimize_for_price([bad], ["a"])

    def test_duplicate_stores_are_ignored(self, tmp_path):
        """Test that repeating a store id changes nothing."""
        catalog = build_catalog(tmp_path, SPLIT_PRICES)
        optimizer = build_optimizer(catalog, include_delivery_costs=False)

        once = optimizer.optimize_for_price([item("leche"), item("arroz")], ["a", "b"])
        twice = optimizer.optimize_for_price([item("leche"), item("arroz")], ["a", "b", "a"])

        assert once.supermarkets == twice.supermarkets
        assert once.total_cost_cents == twice.total_cost_cents
        assert once.savings_cents == twice.savings_cents


class TestOptimizeForAvailability:
    """Tests for optimize_for_availability()."""

    def test_picks_store_with_most_items(self, tmp_path):
        """Test that the best-stocked store wins even if it is pricier."""
        catalog = build_catalog(tmp_path, {
            "a": {"leche": 50},
            "b": {"leche": 200, "arroz": 200},
        })
        optimizer = build_optimizer(catalog)

        result = optimizer.optimize_for_availability(
            [item("leche"), item("arroz"), item("huevos")], ["a", "b"]
        )

        assert result.supermarkets == ["b"]
        assert result.total_cost_cents == 400
        assert result.savings_cents == 0
        assert result.unavailable_items == ["huevos"]
        assert result.suggestions == [
            "1 items not available at b. Consider checking another store for these items."
        ]
        assert result.items[0].selected_match is result.items[0].matches[0]

    def test_tie_goes_to_first_store(self, tmp_path):
        """Test that equal availability keeps input order."""
        catalog = build_catalog(tmp_path, {"a": {"leche": 500}, "b": {"leche": 100}})
        optimizer = build_optimizer(catalog)

        result = optimizer.optimize_for_availability([item("leche")], ["b", "a"])

        assert result.supermarkets == ["b"]
        assert result.suggestions == []

    def test_no_stores(self, tmp_path):
        """Test the degenerate result for an empty store list."""
        optimizer = build_optimizer(build_catalog(tmp_path, SPLIT_PRICES))
        result = optimizer.optimize_for_availability([item("leche")], [])
        assert result.suggestions == [NO_STORES_SUGGESTION]


class TestFindBestSupermarket:
    """Tests for find_best_supermarket()."""

    def test_sorted_by_basket_cost(self, tmp_path):
        """Test that the cheaper basket comes first."""
        catalog = build_catalog(tmp_path, {"a": {"leche": 1000}, "b": {"leche": 1200}})
        optimizer = build_optimizer(catalog, include_delivery_costs=False)

        comparisons = optimizer.find_best_supermarket([item("leche")], ["b", "a"])

        assert [c.supermarket_id for c in comparisons] == ["a", "b"]
        assert comparisons[0].total_cost_cents == 1000
        assert comparisons[0].items_available == 1
        assert comparisons[0].items_unavailable == 0

    def test_delivery_changes_order(self, tmp_path):
        """Test that delivery is added to the sort cost when enabled."""
        catalog = build_catalog(
            tmp_path, {"a": {"leche": 1000}, "b": {"leche": 1200}}, delivery={"a": 300}
        )
        optimizer = build_optimizer(catalog)

        comparisons = optimizer.find_best_supermarket([item("leche")], ["a", "b"])

        assert [c.supermarket_id for c in comparisons] == ["b", "a"]
        assert comparisons[1].delivery_available is True
        assert comparisons[1].delivery_cost_cents == 300
        assert comparisons[0].delivery_available is False

    def test_ties_prefer_more_items_then_input_order(self, tmp_path):
        """Test tie-breaking on equal cost."""
        catalog = build_catalog(tmp_path, {
            "a": {"leche": 100},
            "b": {"leche": 50, "arroz": 50},
            "c": {"leche": 100},
        })
        optimizer = build_optimizer(catalog)

        comparisons = optimizer.find_best_supermarket(
            [item("leche"), item("arroz")], ["c", "a", "b"]
        )

        assert [c.supermarket_id for c in comparisons] == ["b", "c", "a"]

    def test_delivery_lookup_failure(self, tmp_path):
        """Test that a failing delivery lookup reports no delivery."""
        catalog = build_catalog(tmp_path, {"a": {"leche": 100}}, delivery={"a": 300})
        optimizer = build_optimizer(catalog)

        with patch.object(
            catalog, "get_delivery_info",
            side_effect=CatalogUnavailableError("a", "get_delivery_info", status_code=503),
        ):
            comparisons = optimizer.find_best_supermarket([item("leche")], ["a"])

        assert comparisons[0].delivery_available is False
        assert comparisons[0].delivery_cost_cents is None
        assert comparisons[0].total_cost_cents == 100

    def test_no_stores(self, tmp_path):
        """Test that no stores gives no comparisons."""
        optimizer = build_optimizer(build_catalog(tmp_path, SPLIT_PRICES))
        assert optimizer.find_best_supermarket([item("leche")], []) == []


class TestConcurrency:
    """Tests for concurrent lookups and cancellation."""

    def test_one_lookup_per_ingredient_and_store(self, tmp_path):
        """Test that items with the same cleaned name share a lookup."""
        catalog = build_catalog(tmp_path, SPLIT_PRICES)
        optimizer = build_optimizer(catalog)
        items = [
            GroceryItem(id="1", ingredient_name="Leche", total_quantity=1, unit=Unit.L),
            GroceryItem(id="2", ingredient_name="leche ", total_quantity=2, unit=Unit.L),
        ]

        with patch.object(
            optimizer.matcher, "collect_candidates",
            wraps=optimizer.matcher.collect_candidates,
        ) as spy:
            optimizer.find_best_supermarket(items, ["a", "b"])

        assert spy.call_count == 2

    def test_result_independent_of_completion_order(self, tmp_path):
        """Test that a slow store does not change the outcome."""
        catalog = build_catalog(tmp_path, THREE_STORE_PRICES)
        optimizer = build_optimizer(catalog, include_delivery_costs=False)
        items = [item("leche"), item("arroz"), item("huevos")]
        expected = optimizer.optimize_for_price(items, ["a", "b", "c"])

        real_search = catalog.search

        def slow_search(terms, supermarket_id):
            if supermarket_id == "a":
                time.sleep(0.05)
            return real_search(terms, supermarket_id)

        with patch.object(catalog, "search", side_effect=slow_search):
            result = optimizer.optimize_for_price(items, ["a", "b", "c"])

        assert result.supermarkets == expected.supermarkets
        assert result.total_cost_cents == expected.total_cost_cents
        assert [i.selected_match.product.id for i in result.items] == [
            i.selected_match.product.id for i in expected.items
        ]

    def test_cancelled_before_start(self, tmp_path):
        """Test that a pre-set cancel event raises without any lookup."""
        catalog = Mock(spec=CatalogLookup)
        catalog.search_category.return_value = []
        optimizer = build_optimizer(catalog)
        event = threading.Event()
        event.set()

        with pytest.raises(OptimizationCancelledError) as exc_info:
            optimizer.optimize_for_price([item("leche")], ["a", "b"], cancel_event=event)

        assert exc_info.value.operation == "optimize_for_price"
        catalog.search.assert_not_called()

    def test_cancelled_during_lookups(self):
        """Test that cancelling while lookups run raises and returns no result."""
        event = threading.Event()
        catalog = Mock(spec=CatalogLookup)
        catalog.search_category.return_value = []

        def search(terms, supermarket_id):
            event.set()
            return []

        catalog.search.side_effect = search
        optimizer = build_optimizer(catalog)

        with pytest.raises(OptimizationCancelledError):
            optimizer.find_best_supermarket([item("leche")], ["a", "b"], cancel_event=event)

        catalog.get_delivery_info.assert_not_called()

    def test_not_cancelled_when_event_unset(self, tmp_path):
        """Test that an unset event lets the run complete."""
        catalog = build_catalog(tmp_path, SPLIT_PRICES)
        optimizer = build_optimizer(catalog)
        result = optimizer.optimize_for_availability(
            [item("leche")], ["a"], cancel_event=threading.Event()
        )
        assert result.items[0].selected_match.match_type == MatchType.EXACT


class TestMatchCache:
    """Tests for the request-scoped lookup cache."""

    def test_put_and_get(self, tmp_path):
        """Test that entries are keyed by cleaned name and store."""
        optimizer = build_optimizer(build_catalog(tmp_path, SPLIT_PRICES))
        normalized = optimizer.matcher.normalizer.normalize("2 Diced Chicken Breasts")
        cache = MatchCache()
        key = MatchCache.key(normalized, "a")

        assert key == ("chicken breasts", "a")
        assert key not in cache
        cache.put(key, CachedLookup())
        assert key in cache
        assert len(cache) == 1
        assert list(cache) == [key]
        assert cache.get(key).failed is False

    def test_failed_lookup(self):
        """Test that a lookup holding an error reports failure."""
        lookup = CachedLookup(error=CatalogUnavailableError("a", "search"))
        assert lookup.failed
        assert lookup.products == ()
