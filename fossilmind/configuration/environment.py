"""
Environment variable handling for engine configuration.

Supports ``.env`` files, ``${VAR}`` / ``${VAR:-default}`` expansion inside
string values and ``FOSSILMIND_<SECTION>_<KEY>`` leaf overrides.
"""

import json
import logging
import os
import re
from typing import Any, Dict, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "FOSSILMIND_CONFIG"
ENV_PREFIX = "FOSSILMIND"

# Environment variable pattern for ${VAR} and ${VAR:-default}
_ENV_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-(.*?))?\}")


class EnvironmentHandler:
    """Environment variable handling and expansion"""

    @staticmethod
    def load_dotenv() -> None:
        """Load a .env file from the working directory, never overriding existing env."""
        try:
            load_dotenv()
            logger.debug("Loaded .env file")
        except OSError as e:
            logger.warning(f"Failed to load .env file: {e}")

    @staticmethod
    def expand_env_string(s: str) -> Any:
        """Expand ${VAR} and ${VAR:-default} in a string.

        If the entire string is a single placeholder, attempt to auto-cast
        to int/float/bool/null or JSON (for objects/arrays).
        """
        if not isinstance(s, str):
            return s

        whole_match = re.fullmatch(_ENV_PATTERN, s)

        def repl(m: re.Match) -> str:
            return os.environ.get(m.group(1), m.group(2) or "")

        expanded = _ENV_PATTERN.sub(repl, s)

        if whole_match:
            v = expanded.strip()
            if v.lower() in {"true", "false"}:
                return v.lower() == "true"
            if v.lower() in {"null", "none"}:
                return None
            try:
                if v.isdigit() or (v.startswith("-") and v[1:].isdigit()):
                    return int(v)
                return float(v)
            except ValueError:
                pass
            if (v.startswith("{") and v.endswith("}")) or (v.startswith("[") and v.endswith("]")):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    pass
        return expanded

    @classmethod
    def expand_env_in_obj(cls, obj: Any) -> Any:
        """Recursively expand environment variables in strings within dict/list structures."""
        if isinstance(obj, dict):
            return {k: cls.expand_env_in_obj(v) for k, v in obj.items()}
        if isinstance(obj, list):
            return [cls.expand_env_in_obj(v) for v in obj]
        if isinstance(obj, str):
            return cls.expand_env_string(obj)
        return obj

    @staticmethod
    def override_leaf_keys(d: Dict[str, Any], prefix: str = ENV_PREFIX) -> Dict[str, Any]:
        """Recursively override leaf keys with env vars named PREFIX_SECTION_KEY."""
        out = {}
        for k, v in d.items():
            env_key = f"{prefix}_{k}".upper()
            if isinstance(v, dict):
                out[k] = EnvironmentHandler.override_leaf_keys(v, env_key)
            else:
                env_val = os.environ.get(env_key)
                out[k] = env_val if env_val is not None else v
        return out

    @classmethod
    def process_config_dict(cls, config_dict: Dict[str, Any]) -> Dict[str, Any]:
        """Expand placeholders, then apply leaf-key environment overrides."""
        return cls.override_leaf_keys(cls.expand_env_in_obj(config_dict))

    @staticmethod
    def resolve_config_path(path_candidate: Optional[str] = None) -> str:
        """Find an existing config file from the candidate, the cwd, or the parent directory.

        Returns an absolute path even when no file exists.
        """
        candidate = path_candidate or os.environ.get(CONFIG_ENV_VAR, "config.json")
        primary = os.path.expanduser(os.path.expandvars(candidate))

        if os.path.exists(primary):
            return os.path.abspath(primary)

        basename = os.path.basename(primary)
        current_path = os.path.join(os.getcwd(), basename)
        if os.path.exists(current_path):
            return os.path.abspath(current_path)

        parent_path = os.path.join(os.path.dirname(os.getcwd()), basename)
        if os.path.exists(parent_path):
            return os.path.abspath(parent_path)

        logger.debug(f"No config file at {primary}, {current_path}, or {parent_path}; using defaults")
        return os.path.abspath(primary)
