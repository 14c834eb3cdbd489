"""Tests for grocery list aggregation across recipes."""

import pytest

from src.data_layer.models import Unit
from src.grocery.aggregator import GroceryListAggregator, IngredientLine


@pytest.fixture
def aggregator():
    return GroceryListAggregator()


class TestAggregate:
    """Tests for GroceryListAggregator.aggregate()."""

    def test_merges_same_ingredient_across_units(self, aggregator):
        """Test that 200 g and 0.5 kg of chicken breast become 700 g."""
        items = aggregator.aggregate([
            IngredientLine("chicken breast", 200, Unit.G, "Pollo al ajillo"),
            IngredientLine("Chicken Breasts, diced", 0.5, Unit.KG, "Curry"),
        ])

        assert len(items) == 1
        item = items[0]
        assert item.ingredient_name == "chicken breast"
        assert item.unit == Unit.G
        assert item.total_quantity == pytest.approx(700)
        assert item.id == "chicken-breast-weight"
        assert item.category == "meat"
        assert item.matches == ()

    def test_incompatible_units_stay_separate(self, aggregator):
        """Test that pieces and grams of the same ingredient are two items."""
        items = aggregator.aggregate([
            IngredientLine("huevos", 2, Unit.PIECE),
            IngredientLine("huevos", 100, Unit.G),
            IngredientLine("huevos", 3, Unit.PIECE),
        ])

        assert [(i.unit, i.total_quantity) for i in items] == [
            (Unit.PIECE, 5),
            (Unit.G, 100),
        ]

    def test_first_seen_order(self, aggregator):
        """Test that items keep the order they first appear in."""
        items = aggregator.aggregate([
            IngredientLine("arroz", 200, Unit.G),
            IngredientLine("leche", 1, Unit.L),
            IngredientLine("arroz", 100, Unit.G),
        ])
        assert [i.ingredient_name for i in items] == ["arroz", "leche"]
        assert items[0].total_quantity == 300

    def test_explicit_category_wins(self, aggregator):
        """Test that a line's category overrides inference."""
        items = aggregator.aggregate([IngredientLine("leche", 1, Unit.L, category="beverages")])
        assert items[0].category == "beverages"

    def test_unknown_category_is_other(self, aggregator):
        """Test that uncategorisable items fall back to 'other'."""
        items = aggregator.aggregate([IngredientLine("xyzzy", 1, Unit.PIECE)])
        assert items[0].category == "other"

    def test_empty(self, aggregator):
        """Test that no lines give no items."""
        assert aggregator.aggregate([]) == []


class TestScale:
    """Tests for GroceryListAggregator.scale()."""

    def test_scales_quantities(self):
        """Test that doubling servings doubles quantities."""
        lines = [IngredientLine("arroz", 150, Unit.G), IngredientLine("leche", 0.5, Unit.L)]
        scaled = GroceryListAggregator.scale(lines, servings=4, recipe_servings=2)
        assert [line.quantity for line in scaled] == [300, 1.0]
        assert lines[0].quantity == 150

    def test_invalid_recipe_servings(self):
        """Test that non-positive recipe servings are rejected."""
        with pytest.raises(ValueError):
            GroceryListAggregator.scale([], servings=2, recipe_servings=0)


class TestItemKey:
    """Tests for aggregation keys."""

    def test_plural_and_noise_share_key(self, aggregator):
        """Test that plural and prepared forms share a key."""
        assert aggregator.item_key("onions", Unit.PIECE) == aggregator.item_key("Onion, chopped", Unit.PIECE)

    def test_family_less_units_key_on_unit(self, aggregator):
        """Test that units without a family key on the unit itself."""
        assert aggregator.item_key("perejil", Unit.BUNCH) == "perejil:bunch"
