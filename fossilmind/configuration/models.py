"""
Typed configuration sections for the engine.

Defaults mirror the constants the engine has always shipped with; any of them
can be overridden from the JSON config file or the environment.
"""

from dataclasses import dataclass, field
from typing import List

from fossilmind.models.base import EngineBaseModel
from .validator import ConfigValidator

DEFAULT_DISMISS_INTERVALS = [1, 2, 3, 5, 8, 13, 21, 34]


@dataclass
class SimilarityConfig(EngineBaseModel):
    token_cache_size: int = 1000
    semantic_threshold: float = 0.30
    reentry_threshold: float = 0.35

    def validate(self) -> None:
        ConfigValidator.validate_positive(self.token_cache_size, "similarity.token_cache_size", allow_zero=True)
        ConfigValidator.validate_range(self.semantic_threshold, 0.0, 1.0, "similarity.semantic_threshold")
        ConfigValidator.validate_range(self.reentry_threshold, 0.0, 1.0, "similarity.reentry_threshold")


@dataclass
class DecayConfig(EngineBaseModel):
    min_age_days: float = 7.0
    sentinel: float = -999.0
    isolation_bonus: float = 0.3
    age_divisor: float = 10.0
    revisit_divisor: float = 8.0
    quality_weight: float = 0.2
    reuse_weight: float = 0.1
    reuse_cap: float = 0.5
    reinforce_weight: float = 0.15

    def validate(self) -> None:
        ConfigValidator.validate_positive(self.min_age_days, "decay.min_age_days", allow_zero=True)
        ConfigValidator.validate_positive(self.age_divisor, "decay.age_divisor")
        ConfigValidator.validate_positive(self.revisit_divisor, "decay.revisit_divisor")


@dataclass
class EngagementConfig(EngineBaseModel):
    reinforce_weight: float = 0.3
    reuse_weight: float = 0.2
    high_quality: int = 4
    high_quality_bonus: float = 0.2
    dismiss_limit: int = 2
    dismiss_penalty: float = 0.3
    skip_limit: int = 3
    skip_penalty: float = 0.2
    hour_window: int = 2
    hour_bonus: float = 0.1

    def validate(self) -> None:
        ConfigValidator.validate_range(self.high_quality, 1, 5, "engagement.high_quality")
        ConfigValidator.validate_range(self.hour_window, 0, 12, "engagement.hour_window")


@dataclass
class ResurfaceConfig(EngineBaseModel):
    top_k: int = 5
    context_weight: float = 2.0
    batch_size: int = 3
    batch_min_similarity: float = 0.15
    batch_max_similarity: float = 0.7
    dismiss_intervals: List[int] = field(default_factory=lambda: list(DEFAULT_DISMISS_INTERVALS))

    def validate(self) -> None:
        ConfigValidator.validate_positive(self.top_k, "resurface.top_k")
        ConfigValidator.validate_positive(self.batch_size, "resurface.batch_size")
        ConfigValidator.validate_band(self.batch_min_similarity, self.batch_max_similarity, "resurface.batch")
        ConfigValidator.validate_intervals(self.dismiss_intervals, "resurface.dismiss_intervals")


@dataclass
class ConflictConfig(EngineBaseModel):
    min_similarity: float = 0.25
    max_similarity: float = 0.85

    def validate(self) -> None:
        ConfigValidator.validate_band(self.min_similarity, self.max_similarity, "conflicts")


@dataclass
class LayoutConfig(EngineBaseModel):
    width: float = 600.0
    height: float = 400.0
    iterations: int = 80
    repulsion: float = 800.0
    spring: float = 0.02
    damping: float = 0.8
    step: float = 0.1
    padding: float = 40.0
    manual_edge_weight: float = 0.8

    def validate(self) -> None:
        ConfigValidator.validate_positive(self.width, "layout.width")
        ConfigValidator.validate_positive(self.height, "layout.height")
        ConfigValidator.validate_positive(self.iterations, "layout.iterations", allow_zero=True)
        ConfigValidator.validate_range(self.damping, 0.0, 1.0, "layout.damping")
        ConfigValidator.validate_positive(self.padding, "layout.padding", allow_zero=True)
        ConfigValidator.validate_range(self.manual_edge_weight, 0.0, 1.0, "layout.manual_edge_weight")


@dataclass
class LinkingConfig(EngineBaseModel):
    related_min_similarity: float = 0.15
    related_max_results: int = 5
    cluster_min_size: int = 3
    cluster_min_similarity: float = 0.2
    theme_size: int = 3
    suggestion_min_similarity: float = 0.25
    suggestion_max_similarity: float = 0.70
    suggestion_min_shared: int = 2
    suggestion_limit: int = 10
    bridge_cluster_min_size: int = 2
    bridge_cluster_min_similarity: float = 0.25
    bridge_min_similarity: float = 0.15
    bridge_limit: int = 5

    def validate(self) -> None:
        ConfigValidator.validate_range(self.related_min_similarity, 0.0, 1.0, "linking.related_min_similarity")
        ConfigValidator.validate_positive(self.cluster_min_size, "linking.cluster_min_size")
        ConfigValidator.validate_band(self.suggestion_min_similarity, self.suggestion_max_similarity,
                                      "linking.suggestion")
        ConfigValidator.validate_range(self.bridge_min_similarity, 0.0, 1.0, "linking.bridge_min_similarity")
