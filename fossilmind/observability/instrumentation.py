"""
Operation context and timing for engine calls.

The context is a contextvar dict (``vault_id``, ``run_id``, ``component``,
``stage``) that log filters copy onto records, so every line emitted while an
operation runs can be traced back to the vault and operation that produced it.
Timing is opt-in through ``FOSSILMIND_OBSERVABILITY``.
"""

import contextvars
import functools
import logging
import os
import time
from typing import Any, Callable, Dict, Optional, Union

logger = logging.getLogger(__name__)

ContextSource = Union[Dict[str, Any], Callable[..., Optional[Dict[str, Any]]]]

_obs_context: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar("fossilmind_obs_context", default={})


def observability_enabled() -> bool:
    return os.getenv("FOSSILMIND_OBSERVABILITY", "false").lower() in ("true", "1", "yes", "on")


def set_obs_context(ctx: Dict[str, Any]) -> None:
    """Replace the current context."""
    if isinstance(ctx, dict):
        _obs_context.set(dict(ctx))


def update_obs_context(values: Dict[str, Any]) -> None:
    """Merge values into the current context."""
    if isinstance(values, dict):
        _obs_context.set({**_obs_context.get(), **values})


def get_obs_context() -> Dict[str, Any]:
    return dict(_obs_context.get())


def clear_obs_context() -> None:
    _obs_context.set({})


def with_obs_context(source: Optional[ContextSource] = None) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Run the decorated function with extra context, restored afterwards.

    ``source`` is either a dict or a callable receiving the call's arguments
    (including ``self`` for methods) and returning a dict.
    """

    def _decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(fn)
        def _wrap(*args: Any, **kwargs: Any) -> Any:
            extra = source(*args, **kwargs) if callable(source) else source
            token = _obs_context.set({**_obs_context.get(), **(extra or {})})
            try:
                return fn(*args, **kwargs)
            finally:
                _obs_context.reset(token)

        return _wrap

    return _decorator


def result_size(result: Any) -> Optional[int]:
    """Item count of an operation result: nodes for a graph, length for collections."""
    if result is None:
        return 0
    nodes = getattr(result, "nodes", None)
    if isinstance(nodes, list):
        return len(nodes)
    if isinstance(result, (list, tuple, set, frozenset, dict)):
        return len(result)
    return None


def log_operation(name: str, *, component: str = "engine") -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Tag an engine operation with ``component``/``stage`` and time it.

    When observability is enabled, one DEBUG record per call carries
    ``operation``, ``duration_ms`` and ``result_size`` as record attributes.
    """

    def _decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(fn)
        def _wrap(*args: Any, **kwargs: Any) -> Any:
            if not observability_enabled():
                return fn(*args, **kwargs)
            token = _obs_context.set({**_obs_context.get(), "component": component, "stage": name})
            start = time.perf_counter()
            try:
                result = fn(*args, **kwargs)
                elapsed = (time.perf_counter() - start) * 1000.0
                size = result_size(result)
                logger.debug(
                    f"{component}.{name} finished in {elapsed:.2f}ms (size={size})",
                    extra={"operation": f"{component}.{name}", "duration_ms": round(elapsed, 3),
                           "result_size": size},
                )
                return result
            finally:
                _obs_context.reset(token)

        return _wrap

    return _decorator
