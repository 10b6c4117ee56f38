"""
Log record enrichment and handler setup for the ``fossilmind`` logger tree.

Only identifier keys from the operation context reach log records; fossil text
and other payloads placed in the context are never copied.
"""

import logging
from typing import Any, Dict, Optional

from fossilmind.observability.instrumentation import get_obs_context
from fossilmind.observability.json_formatter import JsonFormatter

PACKAGE_LOGGER = "fossilmind"
CONTEXT_KEYS = ("vault_id", "run_id", "component", "stage")
MAX_VALUE_LENGTH = 128
TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s %(context_text)s%(message)s"


def context_for_log() -> Dict[str, str]:
    """Current context restricted to identifier keys with short scalar values."""
    ctx = get_obs_context()
    out: Dict[str, str] = {}
    for key in CONTEXT_KEYS:
        value: Any = ctx.get(key)
        if value is None or isinstance(value, (dict, list, tuple, set)):
            continue
        out[key] = str(value)[:MAX_VALUE_LENGTH]
    return out


class LogContextFilter(logging.Filter):
    """Sets ``record.context`` (dict) and ``record.context_text`` (``key=value`` prefix)."""

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = context_for_log()
        record.context = ctx
        record.context_text = "".join(f"[{k}={v}] " for k, v in ctx.items())
        return True


def install_log_context_filter(level: Optional[int] = None, json_output: bool = False) -> logging.Handler:
    """Attach one stream handler with the context filter to the package logger.

    Calling again reuses the existing handler and only updates level and format.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if level is not None:
        package_logger.setLevel(level)

    handler = next((h for h in package_logger.handlers
                    if any(isinstance(f, LogContextFilter) for f in h.filters)), None)
    if handler is None:
        handler = logging.StreamHandler()
        handler.addFilter(LogContextFilter())
        package_logger.addHandler(handler)
    handler.setFormatter(JsonFormatter() if json_output else logging.Formatter(TEXT_FORMAT))
    return handler
