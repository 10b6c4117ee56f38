"""
Set-overlap similarity used by every higher-level component.
"""

import math
from typing import AbstractSet, List, Optional

MIN_CONCEPT_LENGTH = 4
MAX_SHARED_CONCEPTS = 5


def jaccard(a: Optional[AbstractSet[str]], b: Optional[AbstractSet[str]]) -> float:
    """Intersection over union of two token sets, in [0, 1].

    Returns 0.0 when either set is empty or absent. Iterates the smaller set so
    the cost is bounded by ``min(|a|, |b|)``.
    """
    if not a or not b:
        return 0.0
    smaller, larger = (a, b) if len(a) < len(b) else (b, a)
    intersection = sum(1 for token in smaller if token in larger)
    union = len(a) + len(b) - intersection
    return intersection / union if union else 0.0


def shared_concepts(a: AbstractSet[str], b: AbstractSet[str], limit: int = MAX_SHARED_CONCEPTS) -> List[str]:
    """Tokens of at least four characters present in both sets, alphabetically, capped at ``limit``."""
    if not a or not b:
        return []
    shared = sorted(t for t in a if t in b and len(t) >= MIN_CONCEPT_LENGTH)
    return shared[:limit]


def as_percent(similarity: float) -> int:
    """Round a similarity to a whole percentage, halves rounding up."""
    return int(math.floor(similarity * 100 + 0.5))
