"""
FossilEngine: one entry point for every engine operation.

The engine holds no fossils. Each call receives the caller's full collection
(Fossil instances or exported dict records), normalizes it at the boundary and
builds a fresh token index snapshot. The only state kept across calls is the
configuration and the tokenizer cache.
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Union

from fossilmind.configuration import EngineConfig
from fossilmind.graph import build_graph, layout_graph
from fossilmind.intelligence import (
    calculate_streak,
    chain_members,
    decay_score,
    detect_conflicts,
    detect_reentry,
    engagement_score,
    get_trail,
    next_dismiss_date,
    record_engagement,
    resurface_batch,
    select_resurface,
)
from fossilmind.intelligence.resurface import RandomSource
from fossilmind.linking import detect_clusters, find_bridge_fossils, find_related, suggest_connections
from fossilmind.models.fossil import Fossil, FossilLike, normalize_fossils
from fossilmind.models.graph import GraphData, GraphEdge, GraphNode
from fossilmind.models.results import (
    BridgeFossil,
    ConflictMatch,
    ConnectionSuggestion,
    KnowledgeCluster,
    RelatedFossil,
    StreakStats,
)
from fossilmind.observability import with_obs_context
from fossilmind.similarity import Tokenizer, TokenIndex, jaccard

logger = logging.getLogger(__name__)

Target = Union[Fossil, Dict[str, Any], str]

# Log records emitted inside an engine call carry the engine's vault id
_scoped = with_obs_context(lambda engine, *args, **kwargs: engine.context)


class FossilEngine:
    """
    Facade over the similarity, intelligence, graph and linking operations.

    Construct with an ``EngineConfig`` (or a path to a JSON config file); with
    neither, the built-in defaults are used. One engine may be shared between
    threads: its only mutable state is the lock-protected tokenizer cache.
    """

    def __init__(self, config: Optional[EngineConfig] = None, config_path: Optional[str] = None,
                 vault_id: Optional[str] = None):
        if config is None:
            config = EngineConfig.load(config_path) if config_path else EngineConfig()
        self.config = config.validate()
        self.tokenizer = Tokenizer(self.config.similarity.token_cache_size)
        self.vault_id = vault_id

    @property
    def context(self) -> Dict[str, Any]:
        return {"vault_id": self.vault_id} if self.vault_id else {}

    # ---- similarity ------------------------------------------------------

    def tokenize(self, text: Optional[str]):
        return self.tokenizer(text)

    def similarity(self, text_a: Optional[str], text_b: Optional[str]) -> float:
        return jaccard(self.tokenizer(text_a), self.tokenizer(text_b))

    @_scoped
    def build_index(self, fossils: Iterable[FossilLike]) -> TokenIndex:
        return TokenIndex.build(normalize_fossils(fossils), self.tokenizer)

    def _prepare(self, fossils: Iterable[FossilLike]):
        records = normalize_fossils(fossils)
        return records, TokenIndex.build(records, self.tokenizer)

    def _resolve(self, target: Target, records: Sequence[Fossil]) -> Optional[Fossil]:
        if isinstance(target, Fossil):
            return target
        if isinstance(target, str):
            found = next((f for f in records if f.id == target), None)
            if found is None:
                logger.warning(f"Fossil {target} not found in collection")
            return found
        return Fossil.from_dict(dict(target))

    # ---- scoring and resurfacing ----------------------------------------

    @_scoped
    def decay_score(self, fossil: Target, fossils: Iterable[FossilLike],
                    now: Optional[datetime] = None) -> float:
        records = normalize_fossils(fossils)
        target = self._resolve(fossil, records)
        if target is None:
            return self.config.decay.sentinel
        return decay_score(target, records, now, self.config.decay)

    @_scoped
    def engagement_score(self, fossil: Target, now: Optional[datetime] = None,
                         fossils: Iterable[FossilLike] = ()) -> float:
        target = self._resolve(fossil, normalize_fossils(fossils))
        return engagement_score(target, now, self.config.engagement) if target else 0.0

    @_scoped
    def select_resurface(self, fossils: Iterable[FossilLike], context_text: Optional[str] = None,
                         today_key: Optional[str] = None, rng: Optional[RandomSource] = None,
                         now: Optional[datetime] = None) -> Optional[Fossil]:
        records, index = self._prepare(fossils)
        return select_resurface(records, index, context_text, today_key, rng, now, self.config)

    @_scoped
    def resurface_batch(self, fossils: Iterable[FossilLike], today_key: Optional[str] = None,
                        batch_size: Optional[int] = None, rng: Optional[RandomSource] = None,
                        now: Optional[datetime] = None) -> List[Fossil]:
        records, index = self._prepare(fossils)
        return resurface_batch(records, index, today_key, batch_size, rng, now, self.config)

    @_scoped
    def record_engagement(self, fossil: Target, action, now: Optional[datetime] = None,
                          fossils: Iterable[FossilLike] = ()) -> Dict[str, Any]:
        """Field updates for ``action``; a string id is looked up in ``fossils``."""
        target = self._resolve(fossil, normalize_fossils(fossils))
        if target is None:
            return {}
        return record_engagement(target, action, now, self.config.resurface.dismiss_intervals)

    @_scoped
    def next_dismiss_date(self, dismiss_count: int, now: Optional[datetime] = None) -> date:
        return next_dismiss_date(dismiss_count, now, self.config.resurface.dismiss_intervals)

    # ---- conflicts and re-entry ------------------------------------------

    @_scoped
    def detect_conflicts(self, new_text: Optional[str], fossils: Iterable[FossilLike]) -> List[ConflictMatch]:
        records, index = self._prepare(fossils)
        return detect_conflicts(new_text, records, index, self.config.conflicts)

    @_scoped
    def detect_reentry(self, query_text: Optional[str], fossils: Iterable[FossilLike]) -> Optional[Fossil]:
        records, index = self._prepare(fossils)
        return detect_reentry(query_text, records, index, self.config.similarity.reentry_threshold)

    @_scoped
    def get_trail(self, fossil: Target, fossils: Iterable[FossilLike]) -> List[Fossil]:
        records = normalize_fossils(fossils)
        target = self._resolve(fossil, records)
        return get_trail(target, records) if target else []

    @_scoped
    def chain_members(self, fossil: Target, fossils: Iterable[FossilLike]) -> Set[str]:
        records = normalize_fossils(fossils)
        target = self._resolve(fossil, records)
        return chain_members(target, records) if target else set()

    @_scoped
    def calculate_streak(self, fossils: Iterable[FossilLike], today: Optional[date] = None) -> StreakStats:
        return calculate_streak(normalize_fossils(fossils), today)

    # ---- graph -----------------------------------------------------------

    @_scoped
    def build_graph(self, fossils: Iterable[FossilLike], manual_edges: Optional[Iterable] = None,
                    layout: bool = True) -> GraphData:
        """Graph of the visible fossils; positions are filled in unless ``layout`` is False."""
        records, index = self._prepare(fossils)
        graph = build_graph(records, index, manual_edges,
                            semantic_threshold=self.config.similarity.semantic_threshold,
                            manual_edge_weight=self.config.layout.manual_edge_weight)
        if layout:
            self.layout_graph(graph.nodes, graph.edges)
        return graph

    @_scoped
    def layout_graph(self, nodes: Sequence[GraphNode], edges: Sequence[GraphEdge],
                     width: Optional[float] = None, height: Optional[float] = None,
                     iterations: Optional[int] = None) -> List[GraphNode]:
        return layout_graph(nodes, edges, width, height, iterations, self.config.layout)

    # ---- linking ---------------------------------------------------------

    @_scoped
    def find_related(self, fossil: Target, fossils: Iterable[FossilLike],
                     min_similarity: Optional[float] = None, max_results: Optional[int] = None,
                     exclude_chain: bool = True) -> List[RelatedFossil]:
        records, index = self._prepare(fossils)
        target = self._resolve(fossil, records)
        if target is None:
            return []
        return find_related(target, records, index, min_similarity, max_results, exclude_chain,
                            self.config.linking)

    @_scoped
    def detect_clusters(self, fossils: Iterable[FossilLike], min_cluster_size: Optional[int] = None,
                        min_similarity: Optional[float] = None) -> List[KnowledgeCluster]:
        records, index = self._prepare(fossils)
        return detect_clusters(records, index, min_cluster_size, min_similarity, self.config.linking)

    @_scoped
    def suggest_connections(self, fossils: Iterable[FossilLike],
                            existing_edges: Optional[Iterable] = None) -> List[ConnectionSuggestion]:
        records, index = self._prepare(fossils)
        return suggest_connections(records, index, existing_edges, self.config.linking)

    @_scoped
    def find_bridge_fossils(self, fossils: Iterable[FossilLike]) -> List[BridgeFossil]:
        records, index = self._prepare(fossils)
        return find_bridge_fossils(records, index, self.config.linking)
