from .decay import DECAY_SENTINEL, decay_score, is_sentinel
from .engagement import EngagementAction, engagement_score, next_dismiss_date, record_engagement
from .resurface import is_eligible, select_resurface, resurface_batch
from .conflicts import detect_conflicts, detect_semantic_opposition, has_negation
from .reentry import detect_reentry, get_trail, chain_members
from .streak import calculate_streak

__all__ = [
    "DECAY_SENTINEL",
    "decay_score",
    "is_sentinel",
    "EngagementAction",
    "engagement_score",
    "next_dismiss_date",
    "record_engagement",
    "is_eligible",
    "select_resurface",
    "resurface_batch",
    "detect_conflicts",
    "detect_semantic_opposition",
    "has_negation",
    "detect_reentry",
    "get_trail",
    "chain_members",
    "calculate_streak",
]
