"""
Result value objects returned by the intelligence and linking operations.
"""
from dataclasses import dataclass, field
from typing import List, Tuple

from fossilmind.models.compat.dataclass_model import DataclassModelMixin
from fossilmind.models.fossil import Fossil


@dataclass
class ConflictMatch(DataclassModelMixin):
    """An existing fossil that looks related to a new statement but disagrees with it."""
    fossil: Fossil
    similarity: float
    similarity_percent: int
    reason: str  # 'negation' or 'semantic'
    oppositions: List[Tuple[str, str]] = field(default_factory=list)


@dataclass
class RelatedFossil(DataclassModelMixin):
    fossil: Fossil
    similarity: float
    similarity_percent: int
    shared_concepts: List[str] = field(default_factory=list)


@dataclass
class ConnectionSuggestion(DataclassModelMixin):
    source_id: str
    target_id: str
    similarity: float
    similarity_percent: int
    reason: str
    shared_concepts: List[str] = field(default_factory=list)


@dataclass
class KnowledgeCluster(DataclassModelMixin):
    """A thematic group of fossils found by similarity, annotated with theme keywords."""
    cluster_id: int
    fossil_ids: List[str]
    theme: List[str]
    fossils: List[Fossil] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.fossil_ids)


@dataclass
class ClusterConnection(DataclassModelMixin):
    cluster_id: int
    theme: List[str]
    similarity: float


@dataclass
class BridgeFossil(DataclassModelMixin):
    """A fossil similar to members of two or more distinct thematic clusters."""
    fossil: Fossil
    connections: List[ClusterConnection]
    bridge_strength: float


@dataclass
class StreakGap(DataclassModelMixin):
    from_day: str
    to_day: str
    days: int


@dataclass
class StreakStats(DataclassModelMixin):
    current: int = 0
    longest: int = 0
    total: int = 0
    gaps: List[StreakGap] = field(default_factory=list)
