"""Bilingual ingredient name normalization for catalog search.

This module turns a free-text recipe ingredient into search terms by:
- Lowercasing, trimming and folding accents
- Removing numeric quantities ("200g", "2 cups") and preparation/quantity words
  ("diced", "picado", "cloves") in English and Spanish
- Extracting key terms (words longer than two letters, no stop words)
- Expanding the cleaned phrase through the English -> Spanish synonym table

DESIGN DECISIONS:
- Words are removed as whole words only (not substrings)
- Multi-word terms (e.g., "sin piel") are handled before single-word ones
- Table lookup order: direct key, Spanish variant, singular/plural toggle,
  then substring containment against every key in either direction
- Normalization never fails; unknown ingredients just expand to themselves
"""

import re
from typing import Iterable, List, Optional, Set, Tuple

from src.data_layer.models import NormalizedIngredient
from src.ingestion.spanish_ingredients import (
    CATEGORY_KEYWORDS,
    INGREDIENT_MAP,
    PREPARATION_TERMS,
    QUANTITY_TERMS,
    SPANISH_TO_ENGLISH,
    STOP_WORDS,
)
from src.matching.similarity import fold_text


# Combined set of all words stripped before searching
NOISE_TERMS: Set[str] = set(PREPARATION_TERMS | QUANTITY_TERMS)

_QUANTITY_WITH_UNIT = re.compile(
    r"\d+(?:[.,/]\d+)?\s*"
    r"(?:kg|g|ml|l|oz|lb|cups?|tbsp|tsp|tablespoons?|teaspoons?)s?\b"
)
_BARE_NUMBER = re.compile(r"\b\d+(?:[.,/]\d+)?\b")
_PUNCTUATION = re.compile(r"[,;:()\[\]\"'!?*+]")


def _unique(terms: Iterable[str]) -> Tuple[str, ...]:
    """Drop blanks and duplicates, keeping first-seen order."""
    seen = []
    for term in terms:
        if term and term not in seen:
            seen.append(term)
    return tuple(seen)


def infer_category(ingredient_name: str) -> Optional[str]:
    """Guess a shopping category ("meat", "dairy", ...) from keywords."""
    name = fold_text(ingredient_name)
    for category, keywords in CATEGORY_KEYWORDS.items():
        if any(keyword in name for keyword in keywords):
            return category
    return None


class IngredientNormalizer:
    """Normalizes ingredient names into bilingual catalog search terms.

    Usage:
        normalizer = IngredientNormalizer()
        result = normalizer.normalize("2 Diced Chicken Breasts")
        print(result.cleaned_name)     # "chicken breasts"
        print(result.canonical_terms)  # ("chicken breasts", "chicken breast",
                                       #  "pechuga de pollo", ...)
    """

    def __init__(self, additional_terms: Set[str] = None):
        """Initialize normalizer with optional additional noise words.

        Args:
            additional_terms: Extra words to remove (optional)
        """
        self.noise_terms = NOISE_TERMS.copy()
        if additional_terms:
            self.noise_terms.update(fold_text(t) for t in additional_terms)

        # Longest first so "en rodajas" goes before "en"
        self._patterns = [
            (term, re.compile(r"\b" + re.escape(term) + r"\b"))
            for term in sorted(self.noise_terms, key=lambda x: (-len(x), x))
        ]

    def normalize(self, ingredient_name: str) -> NormalizedIngredient:
        """Normalize an ingredient name.

        Args:
            ingredient_name: Raw ingredient name from a recipe

        Returns:
            NormalizedIngredient with canonical and key terms
        """
        cleaned, removed = self.clean(ingredient_name)
        return NormalizedIngredient(
            raw_name=ingredient_name,
            cleaned_name=cleaned,
            canonical_terms=self.expand(cleaned),
            key_terms=tuple(self.extract_key_terms(cleaned)),
            removed_terms=tuple(removed),
        )

    def clean(self, ingredient_name: str) -> Tuple[str, List[str]]:
        """Strip quantities and noise words.

        Returns:
            (cleaned name, removed words)
        """
        if not ingredient_name or not ingredient_name.strip():
            return "", []

        name = fold_text(ingredient_name)
        name = _PUNCTUATION.sub(" ", name)
        name = _QUANTITY_WITH_UNIT.sub(" ", name)
        name = _BARE_NUMBER.sub(" ", name)

        removed = []
        for term, pattern in self._patterns:
            if pattern.search(name):
                name = pattern.sub(" ", name)
                removed.append(term)

        tokens = [token.strip("-.") for token in name.split()]
        return " ".join(t for t in tokens if t), removed

    @staticmethod
    def extract_key_terms(cleaned_name: str) -> List[str]:
        """Significant words of an already-cleaned name."""
        return [
            word for word in cleaned_name.split(" ")
            if len(word) > 2 and word not in STOP_WORDS
        ]

    @staticmethod
    def lookup_table_key(cleaned_name: str) -> Optional[str]:
        """Find the synonym-table key for a cleaned name, or None."""
        if not cleaned_name:
            return None

        if cleaned_name in INGREDIENT_MAP:
            return cleaned_name

        if cleaned_name in SPANISH_TO_ENGLISH:
            return SPANISH_TO_ENGLISH[cleaned_name]

        if cleaned_name.endswith("s") and cleaned_name[:-1] in INGREDIENT_MAP:
            return cleaned_name[:-1]
        if cleaned_name + "s" in INGREDIENT_MAP:
            return cleaned_name + "s"

        # Unbounded containment: short keys like "ham" can over-match
        for key in INGREDIENT_MAP:
            if key in cleaned_name or cleaned_name in key:
                return key

        return None

    def expand(self, cleaned_name: str) -> Tuple[str, ...]:
        """All canonical search terms for a cleaned name, cleaned name first."""
        if not cleaned_name:
            return ()
        key = self.lookup_table_key(cleaned_name)
        if key is None:
            return (cleaned_name,)
        return _unique([cleaned_name, key, *INGREDIENT_MAP[key]])
