"""Edit-distance string similarity.

similarity(a, b) = 1 - edit_distance(a, b) / max(len(a), len(b)) over
lowercased input. Blank input never scores: two empty strings give 0, not 1.
"""

import re
import unicodedata

from rapidfuzz.distance import Levenshtein


def fold_text(text: str) -> str:
    """Lowercase, strip accents and collapse whitespace ("Jamón  York" -> "jamon york")."""
    text = (text or "").strip().lower()
    text = unicodedata.normalize("NFD", text)
    text = "".join(ch for ch in text if unicodedata.category(ch) != "Mn")
    return re.sub(r"\s+", " ", text)


def edit_distance(a: str, b: str) -> int:
    """Levenshtein distance; insertion, deletion and substitution cost 1."""
    return Levenshtein.distance(a or "", b or "")


def similarity(a: str, b: str) -> float:
    """Similarity score in [0, 1]."""
    s1 = (a or "").lower()
    s2 = (b or "").lower()
    if not s1 or not s2:
        return 0.0
    if s1 == s2:
        return 1.0
    return 1.0 - edit_distance(s1, s2) / max(len(s1), len(s2))


def are_similar(a: str, b: str, threshold: float = 0.7) -> bool:
    """Boolean gate used by the matcher's fuzzy tier."""
    return similarity(a, b) >= threshold
