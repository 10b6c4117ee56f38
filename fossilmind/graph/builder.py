"""
Graph construction from fossils.

Nodes are visible fossils. Edges are explicit re-entry links, implicit
semantic links between sufficiently similar fossils, and manual links supplied
by the caller. Clusters are connected components of the resulting graph.

Semantic edges compare every pair of visible fossils, which is quadratic in the
vault size. That is fine for personal vaults of up to a few thousand fossils;
larger corpora would need an inverted token index to prune candidate pairs.
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence

import networkx as nx

from fossilmind.models.fossil import Fossil, visible_fossils
from fossilmind.models.graph import EdgeType, GraphData, GraphEdge, GraphNode, ManualEdge
from fossilmind.observability import log_operation
from fossilmind.similarity.metrics import jaccard
from fossilmind.similarity.tokenizer import TokenIndex, ensure_index

logger = logging.getLogger(__name__)

SEMANTIC_EDGE_THRESHOLD = 0.30
MANUAL_EDGE_WEIGHT = 0.8
LABEL_LENGTH = 35


def node_size(fossil: Fossil) -> float:
    return 8 + fossil.quality * 4 + fossil.reuse_count * 2


def node_label(fossil: Fossil) -> str:
    text = fossil.invariant
    return text[:LABEL_LENGTH] + ("..." if len(text) > LABEL_LENGTH else "")


def _manual_edges(manual_edges: Iterable, node_ids: set, weight: float) -> List[GraphEdge]:
    edges: List[GraphEdge] = []
    for raw in manual_edges or []:
        edge = raw if isinstance(raw, ManualEdge) else ManualEdge(
            source=raw["source"], target=raw["target"], label=raw.get("label"))
        if edge.source in node_ids and edge.target in node_ids and edge.source != edge.target:
            edges.append(GraphEdge(edge.source, edge.target, EdgeType.MANUAL, weight, edge.label))
        else:
            logger.debug(f"Skipping manual edge {edge.source} -> {edge.target}: endpoint not in graph")
    return edges


def assign_clusters(nodes: Sequence[GraphNode], edges: Sequence[GraphEdge]) -> int:
    """Label each node with a zero-based connected-component id; returns the component count.

    Components are numbered in order of their first node, and isolated nodes
    form singleton components.
    """
    graph = nx.Graph()
    graph.add_nodes_from(n.id for n in nodes)
    graph.add_edges_from((e.source, e.target) for e in edges
                         if e.source in graph and e.target in graph)

    by_id: Dict[str, GraphNode] = {n.id: n for n in nodes}
    count = 0
    for cluster_id, component in enumerate(nx.connected_components(graph)):
        for node_id in component:
            by_id[node_id].cluster_id = cluster_id
        count = cluster_id + 1
    return count


@log_operation("build_graph", component="graph")
def build_graph(fossils: Sequence[Fossil], token_index: Optional[TokenIndex] = None,
                manual_edges: Optional[Iterable] = None,
                semantic_threshold: float = SEMANTIC_EDGE_THRESHOLD,
                manual_edge_weight: float = MANUAL_EDGE_WEIGHT) -> GraphData:
    """Nodes, edges and connected-component clusters for the visible fossils."""
    visible = visible_fossils(fossils)
    index = ensure_index(token_index, visible)

    nodes = [GraphNode(id=f.id, size=node_size(f), label=node_label(f)) for f in visible]
    node_ids = {n.id for n in nodes}
    edges: List[GraphEdge] = []

    for i, fossil_a in enumerate(visible):
        if fossil_a.reentry_of and fossil_a.reentry_of in node_ids and fossil_a.reentry_of != fossil_a.id:
            edges.append(GraphEdge(fossil_a.id, fossil_a.reentry_of, EdgeType.REENTRY, 1.0))

        tokens_a = index.tokens_for(fossil_a)
        for fossil_b in visible[i + 1:]:
            if fossil_a.reentry_of == fossil_b.id or fossil_b.reentry_of == fossil_a.id:
                continue
            similarity = jaccard(tokens_a, index.tokens_for(fossil_b))
            if similarity >= semantic_threshold and similarity > 0:
                edges.append(GraphEdge(fossil_a.id, fossil_b.id, EdgeType.SEMANTIC, similarity))

    edges.extend(_manual_edges(manual_edges, node_ids, manual_edge_weight))
    cluster_count = assign_clusters(nodes, edges)

    logger.debug(f"Built graph: {len(nodes)} nodes, {len(edges)} edges, {cluster_count} clusters")
    return GraphData(nodes=nodes, edges=edges, cluster_count=cluster_count)
