"""
Capture-streak statistics over fossils' calendar-day buckets.
"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional, Sequence

from fossilmind.models.fossil import Fossil
from fossilmind.models.results import StreakGap, StreakStats

logger = logging.getLogger(__name__)

MAX_GAPS = 5


def _parse_day(day_key: str) -> Optional[date]:
    try:
        return date.fromisoformat(day_key)
    except (TypeError, ValueError):
        logger.debug(f"Ignoring malformed day key {day_key!r}")
        return None


def calculate_streak(fossils: Sequence[Fossil], today: Optional[date] = None) -> StreakStats:
    """Current and longest run of consecutive capture days, plus the first gaps.

    The current streak counts back from today, or from yesterday when nothing
    was captured today yet.
    """
    valid = [f for f in fossils if not f.deleted]
    if not valid:
        return StreakStats()

    today = today or datetime.now(timezone.utc).date()
    days = sorted({d for d in (_parse_day(f.day_key) for f in valid) if d is not None})

    day_set = set(days)
    current = 0
    yesterday = today - timedelta(days=1)
    if today in day_set or yesterday in day_set:
        check = today if today in day_set else yesterday
        while check in day_set:
            current += 1
            check -= timedelta(days=1)

    longest = 0
    run = 0
    gaps: List[StreakGap] = []
    previous: Optional[date] = None
    for day in days:
        if previous is not None and (day - previous).days == 1:
            run += 1
        else:
            if previous is not None:
                gaps.append(StreakGap(from_day=previous.isoformat(), to_day=day.isoformat(),
                                      days=(day - previous).days - 1))
            longest = max(longest, run)
            run = 1
        previous = day
    longest = max(longest, run)

    return StreakStats(current=current, longest=longest, total=len(valid), gaps=gaps[:MAX_GAPS])
