from .instrumentation import (
    clear_obs_context,
    emit_ctx,
    get_obs_context,
    make_emitter,
    set_obs_context,
    update_obs_context,
    with_obs_context,
)
from .json_formatter import JsonFormatter
from .logging_filter import LogContextFilter, install_log_context_filter, mask_credentials

__all__ = [
    "JsonFormatter",
    "LogContextFilter",
    "clear_obs_context",
    "emit_ctx",
    "get_obs_context",
    "install_log_context_filter",
    "make_emitter",
    "mask_credentials",
    "set_obs_context",
    "update_obs_context",
    "with_obs_context",
]
