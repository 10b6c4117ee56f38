from .instrumentation import (
    observability_enabled,
    set_obs_context,
    update_obs_context,
    get_obs_context,
    clear_obs_context,
    with_obs_context,
    log_operation,
)
from .logging_filter import LogContextFilter, install_log_context_filter
from .json_formatter import JsonFormatter

__all__ = [
    "observability_enabled",
    "set_obs_context",
    "update_obs_context",
    "get_obs_context",
    "clear_obs_context",
    "with_obs_context",
    "log_operation",
    "LogContextFilter",
    "install_log_context_filter",
    "JsonFormatter",
]
