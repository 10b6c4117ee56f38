"""
Engine configuration

Typed sections (similarity, decay, engagement, resurface, conflicts, layout,
linking) loaded from ``$FOSSILMIND_CONFIG`` (default ``config.json``) with
``${VAR}`` expansion and ``FOSSILMIND_<SECTION>_<KEY>`` overrides.
"""

import logging
import threading
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional

from fossilmind.models.base import EngineBaseModel
from .environment import EnvironmentHandler
from .manager import ConfigManager
from .models import (
    SimilarityConfig,
    DecayConfig,
    EngagementConfig,
    ResurfaceConfig,
    ConflictConfig,
    LayoutConfig,
    LinkingConfig,
)
from .validator import ConfigValidator

logger = logging.getLogger(__name__)


@dataclass
class EngineConfig(EngineBaseModel):
    """Complete engine configuration; every section has working defaults."""
    similarity: SimilarityConfig = field(default_factory=SimilarityConfig)
    decay: DecayConfig = field(default_factory=DecayConfig)
    engagement: EngagementConfig = field(default_factory=EngagementConfig)
    resurface: ResurfaceConfig = field(default_factory=ResurfaceConfig)
    conflicts: ConflictConfig = field(default_factory=ConflictConfig)
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    linking: LinkingConfig = field(default_factory=LinkingConfig)

    def validate(self) -> "EngineConfig":
        """Validate every section, raising ValueError on the first invalid key."""
        for f in fields(self):
            getattr(self, f.name).validate()
        return self

    @classmethod
    def from_mapping(cls, data: Optional[Dict[str, Any]]) -> "EngineConfig":
        return cls.from_section(data or {}).validate()

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "EngineConfig":
        """Load configuration from a JSON file (see ConfigManager)."""
        manager = ConfigManager(config_path, defaults=cls().to_dict())
        return cls.from_mapping(manager.get_config())


_config_lock = threading.Lock()
_global_config: Optional[EngineConfig] = None


def get_config(reload: bool = False) -> EngineConfig:
    """Process-wide configuration, loaded on first use."""
    global _global_config
    with _config_lock:
        if _global_config is None or reload:
            _global_config = EngineConfig.load()
        return _global_config


def reset_config() -> None:
    """Forget the cached process-wide configuration."""
    global _global_config
    with _config_lock:
        _global_config = None


__all__ = [
    "EngineConfig",
    "SimilarityConfig",
    "DecayConfig",
    "EngagementConfig",
    "ResurfaceConfig",
    "ConflictConfig",
    "LayoutConfig",
    "LinkingConfig",
    "ConfigManager",
    "ConfigValidator",
    "EnvironmentHandler",
    "get_config",
    "reset_config",
]
