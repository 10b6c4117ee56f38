"""
Configuration Manager

Loads the JSON config file, applies environment expansion and overrides, and
reloads when the file changes on disk.
"""

import json
import logging
import os
import threading
from typing import Any, Dict, Optional

from .environment import EnvironmentHandler

logger = logging.getLogger(__name__)


def _deep_merge_dicts(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively deep-merge override into base and return a new dict."""
    out: Dict[str, Any] = dict(base)
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge_dicts(out[k], v)
        else:
            out[k] = v
    return out


class ConfigManager:
    """Configuration file loader with env expansion and mtime-based reload"""

    def __init__(self, config_path: Optional[str] = None, defaults: Optional[Dict[str, Any]] = None):
        EnvironmentHandler.load_dotenv()
        self._defaults: Dict[str, Any] = defaults or {}
        self._config_path = EnvironmentHandler.resolve_config_path(config_path)

        # Thread safety for config reloading
        self._lock = threading.RLock()
        self._last_mtime = 0.0
        self._config: Dict[str, Any] = {}

        self._load_config()

    def _current_mtime(self) -> float:
        try:
            return os.path.getmtime(self._config_path) if os.path.exists(self._config_path) else 0.0
        except OSError:
            return 0.0

    def _load_config(self) -> None:
        """Load and process the configuration file"""
        with self._lock:
            config_dict: Dict[str, Any] = {}
            current_mtime = self._current_mtime()

            if current_mtime and self._last_mtime and current_mtime == self._last_mtime and self._config:
                logger.debug("Config unchanged; skipping reload")
                return

            if os.path.exists(self._config_path):
                try:
                    with open(self._config_path, 'r', encoding='utf-8') as f:
                        config_dict = json.load(f)
                    logger.debug(f"Loaded config from: {self._config_path}")
                except (OSError, json.JSONDecodeError) as e:
                    logger.error(f"Error loading config from {self._config_path}: {e}")
                    config_dict = {}
                self._last_mtime = current_mtime
            else:
                self._last_mtime = 0.0

            if not isinstance(config_dict, dict):
                logger.error(f"Config root in {self._config_path} must be an object; ignoring it")
                config_dict = {}

            merged = _deep_merge_dicts(self._defaults, config_dict)
            self._config = EnvironmentHandler.process_config_dict(merged)
            logger.debug(f"Configuration loaded with {len(self._config)} top-level keys")

    def reload_if_stale(self, force: bool = False) -> bool:
        """Reload the config if the source file's mtime has changed or if forced.

        Returns True when a reload happened.
        """
        mtime = self._current_mtime()
        if force or (mtime and mtime > self._last_mtime):
            logger.debug("Config file changed; reloading configuration")
            if force:
                self._last_mtime = 0.0
            self._load_config()
            return True
        return False

    def get_config(self) -> Dict[str, Any]:
        return self._config.copy()

    def get_section(self, section_name: str, default: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        section = self._config.get(section_name)
        return section if isinstance(section, dict) else (default or {})

    @property
    def config_path(self) -> str:
        return self._config_path
