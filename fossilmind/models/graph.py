from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from fossilmind.models.compat.dataclass_model import DataclassModelMixin


class EdgeType(Enum):
    REENTRY = "reentry"
    SEMANTIC = "semantic"
    MANUAL = "manual"

    @classmethod
    def list(cls):
        return [et.value for et in cls]


@dataclass
class GraphNode(DataclassModelMixin):
    """One node per visible fossil. ``size`` is a rendering hint only."""
    id: str
    x: float = 0.0
    y: float = 0.0
    cluster_id: int = 0
    size: float = 0.0
    label: str = ""


@dataclass
class GraphEdge(DataclassModelMixin):
    source: str
    target: str
    type: EdgeType = EdgeType.SEMANTIC
    weight: float = 1.0
    label: Optional[str] = None


@dataclass
class ManualEdge(DataclassModelMixin):
    """User-created connection supplied by the surrounding application."""
    source: str
    target: str
    label: Optional[str] = None


@dataclass
class GraphData(DataclassModelMixin):
    nodes: List[GraphNode] = field(default_factory=list)
    edges: List[GraphEdge] = field(default_factory=list)
    cluster_count: int = 0

    def node_map(self):
        return {n.id: n for n in self.nodes}

    def clusters(self):
        """Group node ids by cluster id."""
        groups = {}
        for node in self.nodes:
            groups.setdefault(node.cluster_id, []).append(node.id)
        return groups
