"""
fossilmind: local knowledge-intelligence engine for a personal vault of fossils.
"""

from fossilmind.configuration import EngineConfig, get_config
from fossilmind.engine import FossilEngine
from fossilmind.models.fossil import Fossil, normalize_fossils
from fossilmind.models.graph import EdgeType, GraphData, GraphEdge, GraphNode, ManualEdge

__version__ = "0.1.0"

__all__ = [
    "FossilEngine",
    "EngineConfig",
    "get_config",
    "Fossil",
    "normalize_fossils",
    "EdgeType",
    "GraphData",
    "GraphEdge",
    "GraphNode",
    "ManualEdge",
    "__version__",
]
