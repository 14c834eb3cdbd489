"""Unit conversion and price-per-unit normalization.

Units belong to families that never convert into each other:

- weight: g, kg, oz, lb (base unit: gram)
- volume: ml, l, tsp, tbsp, cup (base unit: milliliter)
- count: piece

Cross-family conversion is not an error. ``convert`` returns ``None`` and
callers treat that as "cannot compare". Units outside every family (slice,
bunch, pinch, to_taste) only convert to themselves.
"""

import math
import re
from typing import Dict, Optional

from src.data_layer.models import PricePerUnit, Unit


# ============================================================================
# CONVERSION TABLES
# ============================================================================

WEIGHT_TO_GRAMS: Dict[Unit, float] = {
    Unit.G: 1.0,
    Unit.KG: 1000.0,
    Unit.OZ: 28.35,
    Unit.LB: 453.592,
}

VOLUME_TO_ML: Dict[Unit, float] = {
    Unit.ML: 1.0,
    Unit.L: 1000.0,
    Unit.TSP: 5.0,
    Unit.TBSP: 15.0,
    Unit.CUP: 240.0,
}

COUNT_UNITS = frozenset({Unit.PIECE})

# Raw unit spellings seen in recipes and Spanish/English catalogs
UNIT_ALIASES: Dict[str, Unit] = {
    "g": Unit.G, "gr": Unit.G, "grs": Unit.G, "gram": Unit.G, "grams": Unit.G,
    "gramo": Unit.G, "gramos": Unit.G,
    "kg": Unit.KG, "kgs": Unit.KG, "kilo": Unit.KG, "kilos": Unit.KG,
    "kilogram": Unit.KG, "kilograms": Unit.KG, "kilogramo": Unit.KG, "kilogramos": Unit.KG,
    "oz": Unit.OZ, "ounce": Unit.OZ, "ounces": Unit.OZ,
    "lb": Unit.LB, "lbs": Unit.LB, "pound": Unit.LB, "pounds": Unit.LB,
    "ml": Unit.ML, "milliliter": Unit.ML, "milliliters": Unit.ML,
    "mililitro": Unit.ML, "mililitros": Unit.ML,
    "l": Unit.L, "lt": Unit.L, "liter": Unit.L, "liters": Unit.L, "litre": Unit.L,
    "litres": Unit.L, "litro": Unit.L, "litros": Unit.L,
    "tsp": Unit.TSP, "teaspoon": Unit.TSP, "teaspoons": Unit.TSP, "cucharadita": Unit.TSP,
    "cucharaditas": Unit.TSP,
    "tbsp": Unit.TBSP, "tablespoon": Unit.TBSP, "tablespoons": Unit.TBSP,
    "cucharada": Unit.TBSP, "cucharadas": Unit.TBSP,
    "cup": Unit.CUP, "cups": Unit.CUP, "taza": Unit.CUP, "tazas": Unit.CUP,
    "piece": Unit.PIECE, "pieces": Unit.PIECE, "pc": Unit.PIECE, "pcs": Unit.PIECE,
    "unit": Unit.PIECE, "units": Unit.PIECE, "ud": Unit.PIECE, "uds": Unit.PIECE,
    "unidad": Unit.PIECE, "unidades": Unit.PIECE, "pieza": Unit.PIECE, "piezas": Unit.PIECE,
    "slice": Unit.SLICE, "slices": Unit.SLICE, "loncha": Unit.SLICE, "lonchas": Unit.SLICE,
    "bunch": Unit.BUNCH, "manojo": Unit.BUNCH,
    "pinch": Unit.PINCH, "pizca": Unit.PINCH,
    "to taste": Unit.TO_TASTE, "to_taste": Unit.TO_TASTE, "al gusto": Unit.TO_TASTE,
}


def parse_unit(raw: str) -> Optional[Unit]:
    """Parse a raw unit string ("Gramos", "litro", "ud.") into a Unit.

    Returns:
        Unit, or None if the string is not recognised
    """
    if raw is None:
        return None
    if isinstance(raw, Unit):
        return raw
    key = re.sub(r"\s+", " ", str(raw).strip().lower().rstrip("."))
    return UNIT_ALIASES.get(key)


def unit_family(unit: Unit) -> Optional[str]:
    """Return "weight", "volume", "count" or None for family-less units."""
    if unit in WEIGHT_TO_GRAMS:
        return "weight"
    if unit in VOLUME_TO_ML:
        return "volume"
    if unit in COUNT_UNITS:
        return "count"
    return None


def are_compatible(from_unit: Unit, to_unit: Unit) -> bool:
    """True if a quantity in from_unit can be expressed in to_unit."""
    if from_unit == to_unit:
        return True
    family = unit_family(from_unit)
    return family is not None and family == unit_family(to_unit)


def convert(quantity: float, from_unit: Unit, to_unit: Unit) -> Optional[float]:
    """Convert a quantity between units of the same family.

    Args:
        quantity: Amount expressed in from_unit
        from_unit: Source unit
        to_unit: Target unit

    Returns:
        Converted quantity, or None if the units are incompatible
    """
    if from_unit == to_unit:
        return quantity

    if from_unit in WEIGHT_TO_GRAMS and to_unit in WEIGHT_TO_GRAMS:
        return quantity * WEIGHT_TO_GRAMS[from_unit] / WEIGHT_TO_GRAMS[to_unit]

    if from_unit in VOLUME_TO_ML and to_unit in VOLUME_TO_ML:
        return quantity * VOLUME_TO_ML[from_unit] / VOLUME_TO_ML[to_unit]

    return None


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def calculate_price_per_unit(
    price_cents: int,
    package_size: float,
    package_unit: Unit
) -> Optional[PricePerUnit]:
    """Normalize a package price for comparison shopping.

    Weight packages are priced per kg, volume packages per liter and piece
    packages per piece, rounded to whole cents.

    Returns:
        PricePerUnit, or None for non-positive sizes or family-less units
    """
    if package_size <= 0:
        return None

    if package_unit in WEIGHT_TO_GRAMS:
        grams = convert(package_size, package_unit, Unit.G)
        return PricePerUnit(price_cents=round_half_up(price_cents / grams * 1000), unit=Unit.KG)

    if package_unit in VOLUME_TO_ML:
        ml = convert(package_size, package_unit, Unit.ML)
        return PricePerUnit(price_cents=round_half_up(price_cents / ml * 1000), unit=Unit.L)

    if package_unit in COUNT_UNITS:
        return PricePerUnit(price_cents=round_half_up(price_cents / package_size), unit=Unit.PIECE)

    return None
