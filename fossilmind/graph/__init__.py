from .builder import build_graph, assign_clusters, SEMANTIC_EDGE_THRESHOLD
from .layout import layout_graph, fit_to_viewport

__all__ = ["build_graph", "assign_clusters", "SEMANTIC_EDGE_THRESHOLD", "layout_graph", "fit_to_viewport"]
