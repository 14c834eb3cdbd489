"""Tests for unit conversion and price-per-unit normalization."""

import pytest

from src.data_layer.models import PricePerUnit, Unit
from src.units.unit_converter import (
    are_compatible,
    calculate_price_per_unit,
    convert,
    parse_unit,
    round_half_up,
    unit_family,
)


class TestConvert:
    """Tests for convert()."""

    def test_same_unit_is_identity(self):
        """Test that converting to the same unit returns the input."""
        assert convert(250, Unit.G, Unit.G) == 250
        assert convert(3, Unit.BUNCH, Unit.BUNCH) == 3

    def test_weight_conversion(self):
        """Test grams <-> kilograms."""
        assert convert(1500, Unit.G, Unit.KG) == pytest.approx(1.5)
        assert convert(0.25, Unit.KG, Unit.G) == pytest.approx(250)

    def test_imperial_weight_conversion(self):
        """Test ounces and pounds convert through grams."""
        assert convert(1, Unit.LB, Unit.G) == pytest.approx(453.592)
        assert convert(2, Unit.OZ, Unit.G) == pytest.approx(56.7)

    def test_volume_conversion(self):
        """Test spoon and cup measures convert through milliliters."""
        assert convert(1, Unit.CUP, Unit.ML) == pytest.approx(240)
        assert convert(3, Unit.TSP, Unit.TBSP) == pytest.approx(1)
        assert convert(500, Unit.ML, Unit.L) == pytest.approx(0.5)

    def test_cross_family_is_incompatible(self):
        """Test that weight/volume/count never convert into each other."""
        assert convert(100, Unit.G, Unit.ML) is None
        assert convert(1, Unit.L, Unit.KG) is None
        assert convert(2, Unit.PIECE, Unit.G) is None

    def test_family_less_units_only_convert_to_themselves(self):
        """Test slice/pinch/to_taste are incompatible with everything else."""
        assert convert(1, Unit.PINCH, Unit.G) is None
        assert convert(2, Unit.SLICE, Unit.PIECE) is None

    @pytest.mark.parametrize("a,b", [
        (Unit.G, Unit.KG),
        (Unit.OZ, Unit.LB),
        (Unit.TSP, Unit.CUP),
        (Unit.ML, Unit.TBSP),
    ])
    def test_round_trip_within_tolerance(self, a, b):
        """Test convert(convert(x, a, b), b, a) ~= x for compatible pairs."""
        x = 123.4
        assert convert(convert(x, a, b), b, a) == pytest.approx(x)


class TestUnitFamilies:
    """Tests for unit family helpers."""

    def test_unit_family(self):
        """Test family lookup for each group."""
        assert unit_family(Unit.KG) == "weight"
        assert unit_family(Unit.CUP) == "volume"
        assert unit_family(Unit.PIECE) == "count"
        assert unit_family(Unit.TO_TASTE) is None

    def test_are_compatible(self):
        """Test compatibility matches convert()."""
        assert are_compatible(Unit.G, Unit.LB)
        assert are_compatible(Unit.SLICE, Unit.SLICE)
        assert not are_compatible(Unit.G, Unit.L)
        assert not are_compatible(Unit.SLICE, Unit.PIECE)


class TestParseUnit:
    """Tests for tolerant unit parsing."""

    @pytest.mark.parametrize("raw,expected", [
        ("g", Unit.G),
        ("Gramos", Unit.G),
        ("kilo", Unit.KG),
        ("litro", Unit.L),
        ("ud.", Unit.PIECE),
        ("unidades", Unit.PIECE),
        ("cucharada", Unit.TBSP),
        ("tablespoons", Unit.TBSP),
        ("al gusto", Unit.TO_TASTE),
        (Unit.CUP, Unit.CUP),
    ])
    def test_known_spellings(self, raw, expected):
        """Test English and Spanish spellings resolve to units."""
        assert parse_unit(raw) == expected

    def test_unknown_unit_returns_none(self):
        """Test unrecognised strings are not guessed."""
        assert parse_unit("scoop") is None
        assert parse_unit(None) is None


class TestPricePerUnit:
    """Tests for calculate_price_per_unit()."""

    def test_weight_is_priced_per_kg(self):
        """Test 450 cents for 500 g is 900 cents per kg."""
        assert calculate_price_per_unit(450, 500, Unit.G) == PricePerUnit(900, Unit.KG)

    def test_volume_is_priced_per_liter(self):
        """Test 150 cents for 330 ml rounds to 455 cents per liter."""
        assert calculate_price_per_unit(150, 330, Unit.ML) == PricePerUnit(455, Unit.L)

    def test_pieces_are_priced_per_piece(self):
        """Test 245 cents for 12 eggs rounds to 20 cents per piece."""
        assert calculate_price_per_unit(245, 12, Unit.PIECE) == PricePerUnit(20, Unit.PIECE)

    def test_half_cent_rounds_up(self):
        """Test 5 cents for 2 pieces rounds 2.5 up to 3."""
        assert calculate_price_per_unit(5, 2, Unit.PIECE).price_cents == 3

    def test_non_positive_size_returns_none(self):
        """Test zero or negative package sizes cannot be normalized."""
        assert calculate_price_per_unit(100, 0, Unit.G) is None
        assert calculate_price_per_unit(100, -1, Unit.L) is None

    def test_family_less_unit_returns_none(self):
        """Test units outside every family cannot be normalized."""
        assert calculate_price_per_unit(100, 1, Unit.BUNCH) is None

    def test_round_half_up(self):
        """Test halves round away from zero."""
        assert round_half_up(2.5) == 3
        assert round_half_up(2.4999) == 2
        assert round_half_up(1100.5) == 1101
