"""
Configuration access for docmapper.

    cfg = get_config("mongodb")
    cfg.require("uri", "database")
    Store.init(cfg.uri, cfg.database)
"""

import logging
import threading
from typing import Any, Dict, Optional

from .environment import EnvironmentHandler
from .manager import ConfigManager
from .validator import ConfigValidator, ValidatedConfigDict

logger = logging.getLogger(__name__)

_config_cache: Optional[ConfigManager] = None
_config_lock = threading.RLock()


def get_config_manager(config_path: Optional[str] = None) -> ConfigManager:
    """Return the cached ConfigManager, creating it on first use.
    Reloads transparently if the source file changed.
    """
    global _config_cache
    with _config_lock:
        if _config_cache is None or (config_path and _config_cache.config_path != EnvironmentHandler.resolve_config_path(config_path)):
            _config_cache = ConfigManager(config_path)
        _config_cache.reload_if_stale()
        return _config_cache


def get_config(section: Optional[str] = None, config_path: Optional[str] = None) -> ValidatedConfigDict:
    """Return the full configuration, or one section, as a ValidatedConfigDict.

    Args:
        section: Optional section name (e.g. 'mongodb', 'observability')
        config_path: Optional path to the config file
    """
    manager = get_config_manager(config_path)
    if section is None:
        full_config: Dict[str, Any] = manager.get_config()
        if manager.active_namespace is not None:
            full_config['active_namespace'] = manager.active_namespace
        return ValidatedConfigDict(full_config, "config")

    section_data = manager.get_section(section) or {}
    return ValidatedConfigDict(section_data, f"config.{section}")


def clear_config_cache() -> None:
    """Clear the config cache. Useful for testing or when config changes."""
    global _config_cache
    with _config_lock:
        _config_cache = None


__all__ = [
    "ConfigManager",
    "ConfigValidator",
    "EnvironmentHandler",
    "ValidatedConfigDict",
    "clear_config_cache",
    "get_config",
    "get_config_manager",
]
