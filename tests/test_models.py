"""Tests for data model invariants."""

import pytest

from src.data_layer.models import (
    GroceryItem,
    MatchType,
    Product,
    ProductMatch,
    SupermarketComparison,
    Unit,
)


@pytest.fixture
def product():
    return Product(
        id="m-001",
        name="Pechuga de pollo",
        price_cents=450,
        unit=Unit.G,
        package_quantity=500,
        category="meat",
        supermarket_id="mercadona",
    )


def make_match(product=None, match_type=MatchType.EXACT, confidence=1.0, cost=450):
    return ProductMatch(
        ingredient_name="chicken breast",
        quantity_needed=200,
        unit_needed=Unit.G,
        supermarket_id="mercadona",
        product=product,
        confidence=confidence,
        quantity_to_buy=1 if product else 0,
        total_cost_cents=cost,
        match_type=match_type,
    )


class TestUnit:
    """Tests for the Unit enum."""

    def test_string_values(self):
        """Test that units compare equal to their string value."""
        assert Unit.G == "g"
        assert Unit("to_taste") == Unit.TO_TASTE


class TestProductMatch:
    """Tests for ProductMatch invariants."""

    def test_valid_match(self, product):
        """Test that a regular match is available."""
        match = make_match(product)
        assert match.is_available
        assert match.alternatives == ()

    def test_not_found_match(self):
        """Test that a not_found match has no product and zero confidence."""
        match = make_match(None, MatchType.NOT_FOUND, 0.0, 0)
        assert not match.is_available

    def test_not_found_with_product_is_rejected(self, product):
        """Test that not_found matches cannot carry a product."""
        with pytest.raises(ValueError):
            make_match(product, MatchType.NOT_FOUND, 0.0, 0)

    def test_found_without_product_is_rejected(self):
        """Test that non-not_found matches need a product."""
        with pytest.raises(ValueError):
            make_match(None, MatchType.PARTIAL, 0.5, 0)

    def test_not_found_with_confidence_is_rejected(self):
        """Test that not_found matches must have zero confidence."""
        with pytest.raises(ValueError):
            make_match(None, MatchType.NOT_FOUND, 0.3, 0)

    @pytest.mark.parametrize("confidence", [-0.1, 1.01])
    def test_confidence_range(self, product, confidence):
        """Test that confidence must lie in [0, 1]."""
        with pytest.raises(ValueError):
            make_match(product, MatchType.SIMILAR, confidence)

    def test_negative_cost_is_rejected(self, product):
        """Test that total cost cannot be negative."""
        with pytest.raises(ValueError):
            make_match(product, cost=-1)


class TestGroceryItem:
    """Tests for GroceryItem invariants."""

    def test_defaults(self):
        """Test that a new item has no matches and category 'other'."""
        item = GroceryItem(id="1", ingredient_name="leche", total_quantity=1, unit=Unit.L)
        assert item.matches == ()
        assert item.selected_match is None
        assert item.category == "other"

    def test_selected_match_must_be_a_match(self, product):
        """Test that selected_match has to come from matches."""
        match = make_match(product)
        GroceryItem(id="1", ingredient_name="chicken breast", total_quantity=200,
                    unit=Unit.G, matches=(match,), selected_match=match)
        with pytest.raises(ValueError):
            GroceryItem(id="1", ingredient_name="chicken breast", total_quantity=200,
                        unit=Unit.G, matches=(), selected_match=match)


class TestSupermarketComparison:
    """Tests for SupermarketComparison."""

    def test_effective_cost(self):
        """Test that delivery is only added when requested and known."""
        with_delivery = SupermarketComparison("dia", 1000, 3, 0, True, 499)
        unknown_delivery = SupermarketComparison("lidl", 1000, 3, 0, False)

        assert with_delivery.effective_cost_cents(True) == 1499
        assert with_delivery.effective_cost_cents(False) == 1000
        assert unknown_delivery.effective_cost_cents(True) == 1000
