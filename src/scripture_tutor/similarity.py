"""Edit-distance text similarity for free-typed answers."""
from rapidfuzz.distance import Levenshtein


def normalize(text: str) -> str:
    return text.lower().strip()


def edit_distance(a: str, b: str) -> int:
    """Unit-cost Levenshtein distance (insert, delete, substitute; no transpositions)."""
    return Levenshtein.distance(a, b)


def similarity(a: str, b: str) -> float:
    """Normalized similarity in [0, 1]; 1.0 means identical after lowercasing and trimming."""
    a, b = normalize(a), normalize(b)
    if a == b:
        return 1.0
    if not a or not b:
        return 0.0
    return 1.0 - edit_distance(a, b) / max(len(a), len(b))
