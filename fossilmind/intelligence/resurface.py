"""
Contextual resurface selection.

Eligible fossils are scored by decay + engagement (+ similarity to the current
focus text), the top candidates are kept, and one is drawn at random with
weight ``exp(score)`` so the most urgent fossil is likely but not certain.
"""

import logging
import math
import random
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Protocol, Sequence

from fossilmind.configuration import EngineConfig
from fossilmind.models.compat.dataclass_model import coerce_datetime
from fossilmind.models.fossil import Fossil
from fossilmind.observability import log_operation
from fossilmind.similarity.metrics import jaccard
from fossilmind.similarity.tokenizer import TokenIndex, ensure_index
from .decay import decay_score, is_sentinel
from .engagement import engagement_score

logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    def random(self) -> float: ...


@dataclass
class ScoredCandidate:
    fossil: Fossil
    decay_score: float
    engagement_score: float
    context_score: float = 0.0

    @property
    def total_score(self) -> float:
        return self.decay_score + self.engagement_score + self.context_score


def is_eligible(fossil: Fossil, today_key: str, now: datetime) -> bool:
    """Not deleted, not superseded, not captured today and not snoozed."""
    if fossil.deleted or fossil.superseded_by is not None:
        return False
    if fossil.day_key == today_key:
        return False
    return fossil.dismissed_until is None or fossil.dismissed_until <= now


def score_candidates(fossils: Sequence[Fossil], token_index: TokenIndex, context_text: Optional[str],
                     today_key: str, now: datetime, config: EngineConfig) -> List[ScoredCandidate]:
    """Score every eligible fossil, best first. Fossils with the decay sentinel are dropped."""
    context_tokens = token_index.tokenizer(context_text) if context_text else None
    scored: List[ScoredCandidate] = []
    for fossil in fossils:
        if not is_eligible(fossil, today_key, now):
            continue
        decay = decay_score(fossil, fossils, now, config.decay)
        if is_sentinel(decay, config.decay):
            continue
        candidate = ScoredCandidate(fossil, decay, engagement_score(fossil, now, config.engagement))
        if context_tokens is not None:
            candidate.context_score = config.resurface.context_weight * jaccard(
                context_tokens, token_index.tokens_for(fossil))
        scored.append(candidate)
    # Stable sort keeps input order among equal scores
    scored.sort(key=lambda c: c.total_score, reverse=True)
    return scored


def weighted_pick(candidates: Sequence[ScoredCandidate], rng: RandomSource) -> Optional[Fossil]:
    """Draw one candidate with probability proportional to exp(total_score)."""
    if not candidates:
        return None
    # Shifting by the max leaves the proportions unchanged and avoids overflow
    peak = max(c.total_score for c in candidates)
    weights = [math.exp(c.total_score - peak) for c in candidates]
    remaining = rng.random() * sum(weights)
    for candidate, weight in zip(candidates, weights):
        remaining -= weight
        if remaining <= 0:
            return candidate.fossil
    return candidates[0].fossil


@log_operation("select_resurface", component="intelligence")
def select_resurface(fossils: Sequence[Fossil], token_index: Optional[TokenIndex] = None,
                     context_text: Optional[str] = None, today_key: Optional[str] = None,
                     rng: Optional[RandomSource] = None, now: Optional[datetime] = None,
                     config: Optional[EngineConfig] = None) -> Optional[Fossil]:
    """Pick a fossil to present for review, or None when nothing is eligible."""
    cfg = config or EngineConfig()
    now = coerce_datetime(now) or datetime.now(timezone.utc)
    today_key = today_key or now.date().isoformat()
    index = ensure_index(token_index, fossils)

    scored = score_candidates(fossils, index, context_text, today_key, now, cfg)
    if not scored:
        logger.debug("No eligible fossils to resurface")
        return None

    top = scored[:cfg.resurface.top_k]
    return weighted_pick(top, rng or random.Random())


@log_operation("resurface_batch", component="intelligence")
def resurface_batch(fossils: Sequence[Fossil], token_index: Optional[TokenIndex] = None,
                    today_key: Optional[str] = None, batch_size: Optional[int] = None,
                    rng: Optional[RandomSource] = None, now: Optional[datetime] = None,
                    config: Optional[EngineConfig] = None) -> List[Fossil]:
    """A resurfaced fossil followed by related-but-distinct fossils to review with it."""
    cfg = config or EngineConfig()
    now = coerce_datetime(now) or datetime.now(timezone.utc)
    today_key = today_key or now.date().isoformat()
    size = batch_size if batch_size is not None else cfg.resurface.batch_size
    index = ensure_index(token_index, fossils)

    first = select_resurface(fossils, index, None, today_key, rng, now, cfg)
    if first is None or size <= 0:
        return []

    batch = [first]
    first_tokens = index.tokens_for(first)
    related = []
    for fossil in fossils:
        if fossil.id == first.id or not is_eligible(fossil, today_key, now):
            continue
        similarity = jaccard(first_tokens, index.tokens_for(fossil))
        if cfg.resurface.batch_min_similarity < similarity < cfg.resurface.batch_max_similarity:
            related.append((similarity, fossil))
    related.sort(key=lambda pair: pair[0], reverse=True)

    for _, fossil in related:
        if len(batch) >= size:
            break
        batch.append(fossil)
    return batch
