"""Grocery list aggregation across recipes.

Ingredient lines from several recipes are merged into one GroceryItem per
(normalized ingredient name, unit family): "200 g chicken breast" and
"0.5 kg Chicken Breasts, diced" become one item of 700 g. Lines whose units
cannot be converted (e.g. grams vs pieces) stay separate items.
"""
import re
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional

from src.data_layer.models import GroceryItem, Unit
from src.ingestion.ingredient_normalizer import IngredientNormalizer, infer_category
from src.matching.similarity import fold_text
from src.units.unit_converter import convert, unit_family


@dataclass(frozen=True)
class IngredientLine:
    """One ingredient as written in a recipe."""

    name: str
    quantity: float
    unit: Unit
    recipe_name: str = ""
    category: Optional[str] = None


class GroceryListAggregator:
    """Aggregator for combining recipe ingredients into a grocery list."""

    def __init__(self, normalizer: Optional[IngredientNormalizer] = None):
        self.normalizer = normalizer or IngredientNormalizer()

    @staticmethod
    def scale(lines: Iterable[IngredientLine], servings: float, recipe_servings: float) -> List[IngredientLine]:
        """Scale a recipe's lines from recipe_servings to servings.

        Raises:
            ValueError: If recipe_servings is not positive
        """
        if recipe_servings <= 0:
            raise ValueError("recipe_servings must be positive")
        factor = servings / recipe_servings
        return [replace(line, quantity=line.quantity * factor) for line in lines]

    def item_key(self, name: str, unit: Unit) -> str:
        """Aggregation key: cleaned name plus unit family (or the unit itself)."""
        cleaned = self.normalizer.normalize(name).cleaned_name or fold_text(name)
        # Singular words so "onion" and "onions" share an item
        cleaned = " ".join(w[:-1] if len(w) > 3 and w.endswith("s") else w for w in cleaned.split())
        group = unit_family(unit) or unit.value
        return f"{cleaned}:{group}"

    def aggregate(self, lines: Iterable[IngredientLine]) -> List[GroceryItem]:
        """Merge ingredient lines into grocery items, in first-seen order.

        Quantities are expressed in the unit of the first line seen for each
        item. The item keeps the first line's name as written.

        Args:
            lines: Ingredient lines from any number of recipes

        Returns:
            List of GroceryItem with no matches yet
        """
        items: Dict[str, GroceryItem] = {}

        for line in lines:
            key = self.item_key(line.name, line.unit)
            existing = items.get(key)

            if existing is None:
                items[key] = GroceryItem(
                    id=self._item_id(key),
                    ingredient_name=line.name.strip(),
                    total_quantity=line.quantity,
                    unit=line.unit,
                    category=line.category or infer_category(line.name) or "other",
                )
                continue

            converted = convert(line.quantity, line.unit, existing.unit)
            if converted is None:
                converted = line.quantity
            items[key] = replace(existing, total_quantity=existing.total_quantity + converted)

        return list(items.values())

    @staticmethod
    def _item_id(key: str) -> str:
        """Deterministic id, e.g. "chicken breast:weight" -> "chicken-breast-weight"."""
        return re.sub(r"[^a-z0-9]+", "-", key.lower()).strip("-")
