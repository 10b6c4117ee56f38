"""
Re-entry detection and chain traversal.

A re-entry links a fossil to an earlier one it revisits (``reentry_of``).
Imported data can contain dangling or cyclic links, so every walk keeps a
visited set and stops at the first repeat.
"""

import logging
from collections import deque
from typing import Dict, List, Optional, Sequence, Set

from fossilmind.models.fossil import Fossil
from fossilmind.observability import log_operation
from fossilmind.similarity.metrics import jaccard
from fossilmind.similarity.tokenizer import TokenIndex, ensure_index

logger = logging.getLogger(__name__)

REENTRY_THRESHOLD = 0.35
MIN_QUERY_LENGTH = 5
SUBSTRING_MIN_LENGTH = 12
SUBSTRING_SCORE = 0.9


def get_trail(fossil: Fossil, fossils: Sequence[Fossil]) -> List[Fossil]:
    """Ancestors of ``fossil`` along ``reentry_of``, nearest first.

    Stops at a dangling or deleted parent and when a fossil repeats.
    """
    by_id = {f.id: f for f in fossils if not f.deleted}
    trail: List[Fossil] = []
    seen: Set[str] = {fossil.id}
    current = fossil
    while current.reentry_of and current.reentry_of in by_id:
        if current.reentry_of in seen:
            logger.warning(f"Re-entry cycle detected at fossil {current.reentry_of}; truncating trail")
            break
        seen.add(current.reentry_of)
        current = by_id[current.reentry_of]
        trail.append(current)
    return trail


def chain_root(fossil: Fossil, fossils: Sequence[Fossil]) -> Fossil:
    trail = get_trail(fossil, fossils)
    return trail[-1] if trail else fossil


def children_map(fossils: Sequence[Fossil]) -> Dict[str, List[str]]:
    """Parent id -> ids of non-deleted fossils that re-enter it."""
    children: Dict[str, List[str]] = {}
    for f in fossils:
        if f.reentry_of and not f.deleted and f.reentry_of != f.id:
            children.setdefault(f.reentry_of, []).append(f.id)
    return children


def chain_members(fossil: Fossil, fossils: Sequence[Fossil]) -> Set[str]:
    """Ids of every fossil in ``fossil``'s re-entry chain: the root and all its descendants."""
    root = chain_root(fossil, fossils)
    children = children_map(fossils)
    members: Set[str] = set()
    queue = deque([root.id])
    while queue:
        current = queue.popleft()
        if current in members:
            continue
        members.add(current)
        queue.extend(c for c in children.get(current, ()) if c not in members)
    # The walk may not reach a fossil whose own parent link is cyclic
    members.add(fossil.id)
    return members


@log_operation("detect_reentry", component="intelligence")
def detect_reentry(query_text: Optional[str], fossils: Sequence[Fossil],
                   token_index: Optional[TokenIndex] = None,
                   threshold: float = REENTRY_THRESHOLD) -> Optional[Fossil]:
    """The existing fossil a new probe most likely revisits, or None.

    Scores by token similarity against the index, and treats a probe intent
    that contains (or is contained in) the query as a near match.
    """
    query = (query_text or "").strip()
    if len(query) < MIN_QUERY_LENGTH:
        return None

    index = ensure_index(token_index, fossils)
    query_lower = query.lower()
    query_tokens = index.tokenizer(query)

    best: Optional[Fossil] = None
    best_score = 0.0
    for fossil in fossils:
        if not fossil.is_visible:
            continue
        similarity = jaccard(query_tokens, index.get(fossil.id, frozenset()))
        intent = fossil.probe_intent.lower()
        substring = 0.0
        if len(query_lower) >= SUBSTRING_MIN_LENGTH and len(intent) >= SUBSTRING_MIN_LENGTH:
            if intent in query_lower or query_lower in intent:
                substring = SUBSTRING_SCORE
        score = max(similarity, substring)
        if score > best_score:
            best_score = score
            best = fossil
        if score > SUBSTRING_SCORE:
            break

    return best if best_score >= threshold else None
