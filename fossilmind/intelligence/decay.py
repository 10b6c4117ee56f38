"""
Decay scoring: how urgently a fossil should be resurfaced for review.

Score grows with age, isolation and time since last revisit, and shrinks with
quality, reuse and explicit reinforcement. Fossils younger than the minimum age
get a sentinel score and are never resurfaced.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Iterable, Optional

from fossilmind.configuration.models import DecayConfig
from fossilmind.models.compat.dataclass_model import coerce_datetime
from fossilmind.models.fossil import DEFAULT_QUALITY, Fossil

logger = logging.getLogger(__name__)

DECAY_SENTINEL = -999.0
SECONDS_PER_DAY = 86400.0


def days_between(earlier: datetime, later: datetime) -> float:
    return (later - earlier).total_seconds() / SECONDS_PER_DAY


def has_children(fossil: Fossil, all_fossils: Iterable[Fossil]) -> bool:
    """True when another non-deleted fossil re-enters this one."""
    return any(f.reentry_of == fossil.id and f.id != fossil.id and not f.deleted for f in all_fossils)


def is_sentinel(score: float, config: Optional[DecayConfig] = None) -> bool:
    sentinel = config.sentinel if config else DECAY_SENTINEL
    return score <= sentinel


def decay_score(fossil: Fossil, all_fossils: Iterable[Fossil], now: Optional[datetime] = None,
                config: Optional[DecayConfig] = None) -> float:
    """Urgency-to-review score; higher means more urgent.

    Returns the sentinel (-999 by default) for fossils younger than
    ``min_age_days``.
    """
    cfg = config or DecayConfig()
    now = coerce_datetime(now) or datetime.now(timezone.utc)

    days_since_creation = days_between(fossil.created_at, now)
    if days_since_creation < cfg.min_age_days:
        return cfg.sentinel

    age_factor = math.log(days_since_creation + 1) / cfg.age_divisor
    isolation_factor = 0.0 if has_children(fossil, all_fossils) else cfg.isolation_bonus

    last_revisit = fossil.last_revisited_at or fossil.created_at
    # A revisit stamped in the future counts as "just now"
    days_since_revisit = max(days_between(last_revisit, now), 0.0)
    revisit_factor = math.log(days_since_revisit + 1) / cfg.revisit_divisor

    quality_bonus = ((fossil.quality or DEFAULT_QUALITY) - 2) * cfg.quality_weight
    reuse_bonus = min(fossil.reuse_count * cfg.reuse_weight, cfg.reuse_cap)
    reinforce_bonus = fossil.reinforce_count * cfg.reinforce_weight

    return age_factor + isolation_factor + revisit_factor - quality_bonus - reuse_bonus - reinforce_bonus
