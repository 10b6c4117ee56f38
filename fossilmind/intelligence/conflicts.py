"""
Conflict detection between a new statement and existing fossils.

A heuristic, not a classifier: two texts conflict when they are related
(similarity inside the conflict band) and either one negates while the other
does not, or they use opposite words from a fixed antonym list.
"""

import logging
import re
from typing import FrozenSet, List, Optional, Sequence, Tuple

from fossilmind.configuration.models import ConflictConfig
from fossilmind.models.fossil import Fossil
from fossilmind.models.results import ConflictMatch
from fossilmind.observability import log_operation
from fossilmind.similarity.metrics import as_percent, jaccard
from fossilmind.similarity.tokenizer import TokenIndex, ensure_index

logger = logging.getLogger(__name__)

REASON_NEGATION = "negation"
REASON_SEMANTIC = "semantic"

ANTONYM_PAIRS: Tuple[Tuple[str, str], ...] = (
    ("increase", "decrease"), ("grow", "shrink"), ("always", "never"),
    ("more", "less"), ("better", "worse"), ("success", "failure"),
    ("enable", "prevent"), ("require", "optional"), ("must", "should"),
    ("accelerate", "decelerate"), ("expand", "contract"), ("simple", "complex"),
    ("fast", "slow"), ("high", "low"), ("start", "stop"), ("open", "close"),
)

NEGATION_PATTERNS = tuple(re.compile(p, re.IGNORECASE) for p in (
    r"\bnot\b", r"\bnever\b", r"\bcan't\b", r"\bcannot\b",
    r"\bwon't\b", r"\bisn't\b", r"\baren't\b", r"\bwithout\b",
    r"\bcontrary\b", r"\bopposite\b", r"\bfails\b", r"\bdoesn't\b",
))

_WORD_PATTERN = re.compile(r"[a-z0-9']+")


def has_negation(text: Optional[str]) -> bool:
    return bool(text) and any(p.search(text) for p in NEGATION_PATTERNS)


def _words(text: Optional[str]) -> FrozenSet[str]:
    return frozenset(_WORD_PATTERN.findall((text or "").lower()))


def detect_semantic_opposition(text_a: Optional[str], text_b: Optional[str]) -> List[Tuple[str, str]]:
    """Antonym pairs split across the two texts (one word in each), by whole-word membership."""
    words_a = _words(text_a)
    words_b = _words(text_b)
    oppositions = []
    for word_a, word_b in ANTONYM_PAIRS:
        if (word_a in words_a and word_b in words_b) or (word_b in words_a and word_a in words_b):
            oppositions.append((word_a, word_b))
    return oppositions


@log_operation("detect_conflicts", component="intelligence")
def detect_conflicts(new_text: Optional[str], existing: Sequence[Fossil],
                     token_index: Optional[TokenIndex] = None,
                     config: Optional[ConflictConfig] = None) -> List[ConflictMatch]:
    """Existing fossils that are related to ``new_text`` but disagree with it, most similar first."""
    cfg = config or ConflictConfig()
    index = ensure_index(token_index, existing)
    new_tokens = index.tokenizer(new_text)
    if not new_tokens:
        return []
    new_negates = has_negation(new_text)

    conflicts: List[ConflictMatch] = []
    for fossil in existing:
        if not fossil.is_visible:
            continue
        similarity = jaccard(new_tokens, index.tokens_for(fossil))
        if not cfg.min_similarity <= similarity < cfg.max_similarity:
            continue

        negation_conflict = new_negates != has_negation(fossil.invariant)
        oppositions = detect_semantic_opposition(new_text, fossil.invariant)
        if not negation_conflict and not oppositions:
            continue

        conflicts.append(ConflictMatch(
            fossil=fossil,
            similarity=similarity,
            similarity_percent=as_percent(similarity),
            reason=REASON_NEGATION if negation_conflict else REASON_SEMANTIC,
            oppositions=oppositions,
        ))

    conflicts.sort(key=lambda c: c.similarity, reverse=True)
    if conflicts:
        logger.debug(f"Found {len(conflicts)} potential conflicts")
    return conflicts
