"""Matching module: string similarity and ingredient -> product matching.

Only the similarity helpers are re-exported here; the data layer depends on
them. Import ProductMatcher from src.matching.product_matcher.
"""

from .similarity import similarity, are_similar, edit_distance, fold_text

__all__ = [
    "similarity",
    "are_similar",
    "edit_distance",
    "fold_text",
]
