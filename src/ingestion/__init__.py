"""Ingestion layer: ingredient name normalization and bilingual tables."""

from src.ingestion.ingredient_normalizer import (
    IngredientNormalizer,
    NOISE_TERMS,
    infer_category,
)

from src.ingestion.spanish_ingredients import (
    INGREDIENT_MAP,
    SPANISH_TO_ENGLISH,
    CATEGORY_TRANSLATIONS,
    PREPARATION_TERMS,
    QUANTITY_TERMS,
    STOP_WORDS,
)

__all__ = [
    # Ingredient name normalization
    "IngredientNormalizer",
    "NOISE_TERMS",
    "infer_category",
    # Static bilingual tables
    "INGREDIENT_MAP",
    "SPANISH_TO_ENGLISH",
    "CATEGORY_TRANSLATIONS",
    "PREPARATION_TERMS",
    "QUANTITY_TERMS",
    "STOP_WORDS",
]
