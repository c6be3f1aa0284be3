"""
Instrumentation helpers to make observability emissions concise and consistent.

Features:
- Global observability context via contextvars (request_id, user_id, etc.)
- emit_ctx / make_emitter for one-line event emission from the Store
- with_obs_context decorator to scope extra context to a call

Notes:
- Emission is best-effort: a failing event sink never affects a persistence call.
- Disabled unless DOCMAPPER_OBSERVABILITY is truthy.
"""

import contextvars
import functools
import logging
import os
from typing import Any, Callable, Dict, Optional, Union

logger = logging.getLogger(__name__)


def observability_enabled() -> bool:
    return os.getenv("DOCMAPPER_OBSERVABILITY", "false").lower() in ("true", "1", "yes", "on")


# ---- Global context -------------------------------------------------------

_obs_context: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar(
    "obs_context", default={}
)


def set_obs_context(ctx: Dict[str, Any]) -> None:
    """Replace the current observability context with ctx."""
    if not isinstance(ctx, dict):
        return
    _obs_context.set(dict(ctx))


def update_obs_context(values: Dict[str, Any]) -> None:
    """Merge values into the current observability context."""
    if not isinstance(values, dict):
        return
    current = dict(_obs_context.get() or {})
    current.update(values)
    _obs_context.set(current)


def get_obs_context() -> Dict[str, Any]:
    """Get a shallow copy of the current observability context."""
    return dict(_obs_context.get() or {})


def clear_obs_context() -> None:
    """Clear the current observability context."""
    _obs_context.set({})


def with_obs_context(
        ctx_or_fn: Optional[Union[Dict[str, Any], Callable[..., Optional[Dict[str, Any]]]]] = None,
        *,
        merge: bool = True,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorator to run a function with an updated observability context.

    Parameters:
    - ctx_or_fn: a dict to merge into the current context, or a callable
      that receives (*args, **kwargs) and returns a dict of values to add.
    - merge: if True (default), merge with existing context; if False, replace
      the context for the duration of the function call.

    Always restores the previous context state.
    """

    def _resolve(args: tuple, kwargs: dict) -> Dict[str, Any]:
        if callable(ctx_or_fn):
            return dict(ctx_or_fn(*args, **kwargs) or {})
        if isinstance(ctx_or_fn, dict):
            return dict(ctx_or_fn)
        return {}

    def _decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(fn)
        def _wrap(*args: Any, **kwargs: Any) -> Any:
            base = get_obs_context()
            new = _resolve(args, kwargs)
            effective = {**base, **new} if merge else new
            token = _obs_context.set(effective)
            try:
                return fn(*args, **kwargs)
            finally:
                _obs_context.reset(token)

        return _wrap

    return _decorator


# ---- Concise emit helpers -------------------------------------------------

def emit_ctx(
        event_type: str,
        *,
        component: str,
        operation: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
        include_context: bool = True,
) -> None:
    """Emit an event with the current observability context merged in.

    Usage:
        emit_ctx("store_operation", component="store", operation="insert", data={"collection": "widgets"})
    """
    if not observability_enabled():
        return
    payload: Dict[str, Any] = dict(data or {})
    if include_context:
        ctx = get_obs_context()
        if ctx:
            payload["context"] = ctx
    try:
        from docmapper.observability.events import emit_event
        emit_event(event_type=event_type, component=component, operation=operation, data=payload)
    except Exception as e:
        # best-effort; never raise into the persistence path
        logger.debug(f"Event emission failed for {component}.{operation}: {e}")


def make_emitter(
        *,
        component: str,
        default_type: Optional[str] = None,
        default_operation: Optional[str] = None,
        include_context: bool = True,
) -> Callable[[Optional[str], Optional[str], Optional[Dict[str, Any]]], None]:
    """Create a pre-configured emitter to reduce repetition at call sites.

    Example:
        store_emit = make_emitter(component="store", default_type="store_operation")
        store_emit(None, "insert", {"collection": "widgets"})
    """

    def _emit(et: Optional[str] = None, op: Optional[str] = None, data: Optional[Dict[str, Any]] = None) -> None:
        et_final = et or default_type or "custom_event"
        op_final = op or default_operation
        emit_ctx(et_final, component=component, operation=op_final, data=data, include_context=include_context)

    return _emit
