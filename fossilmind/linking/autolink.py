"""
Auto-linking: related fossils, thematic clusters, connection suggestions and
bridge fossils.

Thematic clusters here are independent of the structural clusters produced by
``fossilmind.graph.build_graph``: they come from a similarity-threshold graph
only, ignoring re-entry and manual links.
"""

import logging
from collections import Counter
from typing import Iterable, List, Optional, Sequence, Set, Tuple

import networkx as nx

from fossilmind.configuration.models import LinkingConfig
from fossilmind.models.fossil import Fossil, visible_fossils
from fossilmind.models.results import (
    BridgeFossil,
    ClusterConnection,
    ConnectionSuggestion,
    KnowledgeCluster,
    RelatedFossil,
)
from fossilmind.observability import log_operation
from fossilmind.intelligence.reentry import chain_members
from fossilmind.similarity.metrics import MIN_CONCEPT_LENGTH, as_percent, jaccard, shared_concepts
from fossilmind.similarity.tokenizer import TokenIndex, ensure_index

logger = logging.getLogger(__name__)


def _edge_pairs(existing_edges: Optional[Iterable]) -> Set[Tuple[str, str]]:
    pairs: Set[Tuple[str, str]] = set()
    for edge in existing_edges or []:
        if isinstance(edge, dict):
            source, target = edge.get("source"), edge.get("target")
        else:
            source, target = edge.source, edge.target
        pairs.add((source, target))
        pairs.add((target, source))
    return pairs


def cluster_theme(members: Sequence[Fossil], index: TokenIndex, size: int = 3) -> List[str]:
    """Most frequent tokens of at least four characters across the members; ties alphabetical."""
    freq: Counter = Counter()
    for fossil in members:
        freq.update(t for t in index.tokens_for(fossil) if len(t) >= MIN_CONCEPT_LENGTH)
    ranked = sorted(freq.items(), key=lambda item: (-item[1], item[0]))
    return [token for token, _ in ranked[:size]]


@log_operation("find_related", component="linking")
def find_related(target: Fossil, fossils: Sequence[Fossil], token_index: Optional[TokenIndex] = None,
                 min_similarity: Optional[float] = None, max_results: Optional[int] = None,
                 exclude_chain: bool = True, config: Optional[LinkingConfig] = None) -> List[RelatedFossil]:
    """Visible fossils most similar to ``target``, best first.

    With ``exclude_chain`` every member of the target's re-entry chain (root
    and all descendants) is left out, since those are already linked.
    """
    cfg = config or LinkingConfig()
    min_similarity = cfg.related_min_similarity if min_similarity is None else min_similarity
    max_results = cfg.related_max_results if max_results is None else max_results

    index = ensure_index(token_index, fossils)
    excluded = chain_members(target, fossils) if exclude_chain else {target.id}
    target_tokens = index.tokens_for(target)

    related: List[RelatedFossil] = []
    for fossil in visible_fossils(fossils):
        if fossil.id == target.id or fossil.id in excluded:
            continue
        tokens = index.tokens_for(fossil)
        similarity = jaccard(target_tokens, tokens)
        if similarity >= min_similarity and similarity > 0:
            related.append(RelatedFossil(fossil, similarity, as_percent(similarity),
                                         shared_concepts(target_tokens, tokens)))

    related.sort(key=lambda r: r.similarity, reverse=True)
    return related[:max_results]


@log_operation("detect_clusters", component="linking")
def detect_clusters(fossils: Sequence[Fossil], token_index: Optional[TokenIndex] = None,
                    min_cluster_size: Optional[int] = None, min_similarity: Optional[float] = None,
                    config: Optional[LinkingConfig] = None) -> List[KnowledgeCluster]:
    """Thematic clusters of at least ``min_cluster_size`` fossils, largest first.

    Members keep input order; cluster ids follow the returned order.
    """
    cfg = config or LinkingConfig()
    min_cluster_size = cfg.cluster_min_size if min_cluster_size is None else min_cluster_size
    min_similarity = cfg.cluster_min_similarity if min_similarity is None else min_similarity

    visible = visible_fossils(fossils)
    if len(visible) < min_cluster_size:
        return []
    index = ensure_index(token_index, visible)

    graph = nx.Graph()
    graph.add_nodes_from(f.id for f in visible)
    for i, fossil_a in enumerate(visible):
        tokens_a = index.tokens_for(fossil_a)
        for fossil_b in visible[i + 1:]:
            similarity = jaccard(tokens_a, index.tokens_for(fossil_b))
            if similarity >= min_similarity and similarity > 0:
                graph.add_edge(fossil_a.id, fossil_b.id, weight=similarity)

    components = []
    for component in nx.connected_components(graph):
        if len(component) >= min_cluster_size:
            components.append([f for f in visible if f.id in component])
    # Stable: equal sizes keep first-member order
    components.sort(key=len, reverse=True)

    clusters = [
        KnowledgeCluster(
            cluster_id=cluster_id,
            fossil_ids=[f.id for f in members],
            theme=cluster_theme(members, index, cfg.theme_size),
            fossils=members,
        )
        for cluster_id, members in enumerate(components)
    ]
    logger.debug(f"Detected {len(clusters)} thematic clusters among {len(visible)} fossils")
    return clusters


@log_operation("suggest_connections", component="linking")
def suggest_connections(fossils: Sequence[Fossil], token_index: Optional[TokenIndex] = None,
                        existing_edges: Optional[Iterable] = None,
                        config: Optional[LinkingConfig] = None) -> List[ConnectionSuggestion]:
    """Unlinked pairs that are related but not near-duplicates, best first.

    Pairs joined by a re-entry link or by any edge in ``existing_edges`` (either
    direction) are skipped.
    """
    cfg = config or LinkingConfig()
    visible = visible_fossils(fossils)
    index = ensure_index(token_index, visible)
    linked = _edge_pairs(existing_edges)

    suggestions: List[ConnectionSuggestion] = []
    for i, fossil_a in enumerate(visible):
        tokens_a = index.tokens_for(fossil_a)
        for fossil_b in visible[i + 1:]:
            if fossil_a.reentry_of == fossil_b.id or fossil_b.reentry_of == fossil_a.id:
                continue
            if (fossil_a.id, fossil_b.id) in linked:
                continue
            tokens_b = index.tokens_for(fossil_b)
            similarity = jaccard(tokens_a, tokens_b)
            if not cfg.suggestion_min_similarity <= similarity < cfg.suggestion_max_similarity:
                continue
            shared = shared_concepts(tokens_a, tokens_b)
            if len(shared) < cfg.suggestion_min_shared:
                continue
            suggestions.append(ConnectionSuggestion(
                source_id=fossil_a.id,
                target_id=fossil_b.id,
                similarity=similarity,
                similarity_percent=as_percent(similarity),
                reason=f"Share concepts: {', '.join(shared)}",
                shared_concepts=shared,
            ))

    suggestions.sort(key=lambda s: s.similarity, reverse=True)
    return suggestions[:cfg.suggestion_limit]


@log_operation("find_bridge_fossils", component="linking")
def find_bridge_fossils(fossils: Sequence[Fossil], token_index: Optional[TokenIndex] = None,
                        config: Optional[LinkingConfig] = None) -> List[BridgeFossil]:
    """Fossils similar to members of two or more thematic clusters, strongest bridge first.

    Bridge strength is the mean of the best similarity to each connected cluster.
    """
    cfg = config or LinkingConfig()
    visible = visible_fossils(fossils)
    index = ensure_index(token_index, visible)
    clusters = detect_clusters(visible, index, min_cluster_size=cfg.bridge_cluster_min_size,
                               min_similarity=cfg.bridge_cluster_min_similarity, config=cfg)
    if len(clusters) < 2:
        return []

    bridges: List[BridgeFossil] = []
    for fossil in visible:
        tokens = index.tokens_for(fossil)
        connections: List[ClusterConnection] = []
        for cluster in clusters:
            best = max((jaccard(tokens, index.tokens_for(member))
                        for member in cluster.fossils if member.id != fossil.id), default=0.0)
            if best >= cfg.bridge_min_similarity and best > 0:
                connections.append(ClusterConnection(cluster.cluster_id, cluster.theme, best))
        if len(connections) >= 2:
            strength = sum(c.similarity for c in connections) / len(connections)
            bridges.append(BridgeFossil(fossil, connections, strength))

    bridges.sort(key=lambda b: b.bridge_strength, reverse=True)
    return bridges[:cfg.bridge_limit]
