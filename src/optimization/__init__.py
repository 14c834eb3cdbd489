"""Optimization module for multi-store grocery shopping."""

from .grocery_optimizer import GroceryOptimizer, NO_STORES_SUGGESTION
from .match_cache import MatchCache, CachedLookup

__all__ = [
    "GroceryOptimizer",
    "NO_STORES_SUGGESTION",
    "MatchCache",
    "CachedLookup"
]
