"""
Engagement scoring and recording of resurface interactions.
"""

import logging
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Optional, Sequence

from fossilmind.configuration.models import DEFAULT_DISMISS_INTERVALS, EngagementConfig
from fossilmind.models.compat.dataclass_model import coerce_datetime
from fossilmind.models.fossil import Fossil

logger = logging.getLogger(__name__)


class EngagementAction(Enum):
    REINFORCE = "reinforce"
    REENTRY = "reentry"
    DISMISS = "dismiss"
    SKIP = "skip"


def _hour_distance(a: int, b: int) -> int:
    diff = abs(a - b) % 24
    return min(diff, 24 - diff)


def engagement_score(fossil: Fossil, now: Optional[datetime] = None,
                     config: Optional[EngagementConfig] = None) -> float:
    """Score from explicit user interactions; 0.0 for a fossil nobody has touched.

    Adds a small bonus when the current hour is close to the hour of the last
    revisit, on the idea that people are receptive at similar times of day.
    """
    cfg = config or EngagementConfig()
    now = coerce_datetime(now) or datetime.now(timezone.utc)
    score = 0.0

    if fossil.reinforce_count > 0:
        score += fossil.reinforce_count * cfg.reinforce_weight
    if fossil.reuse_count > 0:
        score += fossil.reuse_count * cfg.reuse_weight
    if fossil.quality >= cfg.high_quality:
        score += cfg.high_quality_bonus

    if fossil.dismiss_count > cfg.dismiss_limit:
        score -= cfg.dismiss_penalty
    if fossil.skip_count > cfg.skip_limit:
        score -= cfg.skip_penalty

    if fossil.last_revisited_at is not None:
        last = fossil.last_revisited_at
        if now.tzinfo is not None:
            last = last.astimezone(now.tzinfo)
        if _hour_distance(now.hour, last.hour) <= cfg.hour_window:
            score += cfg.hour_bonus

    return score


def next_dismiss_date(dismiss_count: int, now: Optional[datetime] = None,
                      intervals: Sequence[int] = DEFAULT_DISMISS_INTERVALS) -> date:
    """Date until which a dismissed fossil stays hidden.

    Intervals grow Fibonacci-style with each dismissal and stop at the last one.
    """
    now = coerce_datetime(now) or datetime.now(timezone.utc)
    index = min(max(int(dismiss_count), 0), len(intervals) - 1)
    return (now + timedelta(days=intervals[index])).date()


def record_engagement(fossil: Fossil, action, now: Optional[datetime] = None,
                      intervals: Sequence[int] = DEFAULT_DISMISS_INTERVALS) -> Dict[str, Any]:
    """Field updates the caller should persist after a resurface interaction.

    The engine does not own fossils, so nothing is mutated here.
    """
    action = EngagementAction(action)
    now = coerce_datetime(now) or datetime.now(timezone.utc)
    updates: Dict[str, Any] = {"last_revisited_at": now}

    if action is EngagementAction.REINFORCE:
        updates["reinforce_count"] = fossil.reinforce_count + 1
    elif action is EngagementAction.REENTRY:
        updates["reuse_count"] = fossil.reuse_count + 1
    elif action is EngagementAction.DISMISS:
        updates["dismiss_count"] = fossil.dismiss_count + 1
        until = next_dismiss_date(fossil.dismiss_count, now, intervals)
        updates["dismissed_until"] = datetime(until.year, until.month, until.day, tzinfo=timezone.utc)
    elif action is EngagementAction.SKIP:
        updates["skip_count"] = fossil.skip_count + 1

    logger.debug(f"Recorded {action.value} for fossil {fossil.id}")
    return updates
