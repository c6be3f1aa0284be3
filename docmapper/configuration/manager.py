# Copyright (C) 2025 SmartMemory
# 
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
# 
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
# 
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.
#
# For commercial licensing options, please contact: help@smartmemory.ai
# Commercial licenses are available for organizations that wish to use
# this software in proprietary applications without the AGPL restrictions.

"""
Configuration Manager

Loads the JSON configuration file, applies environment expansion and the
active namespace overlay, and reloads when the file changes on disk.
"""

import json
import logging
import os
import threading
from typing import Any, Dict, Optional

from .environment import CONFIG_PATH_ENV, EnvironmentHandler
from .validator import ConfigValidator, ValidatedConfigDict

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
    """Configuration manager with file loading, validation, and namespace support"""

    def __init__(self, config_path: Optional[str] = None):
        """
        Args:
            config_path: Path to configuration file (param > DOCMAPPER_CONFIG > config.json)
        """
        EnvironmentHandler.load_dotenv()

        candidate_path = config_path or os.environ.get(CONFIG_PATH_ENV, 'config.json')
        self._config_path = EnvironmentHandler.resolve_config_path(candidate_path)

        self._lock = threading.RLock()
        self._last_mtime = 0.0
        self._config: Dict[str, Any] = {}
        self.active_namespace: Optional[str] = None

        self._load_config()

    @property
    def config_path(self) -> str:
        return self._config_path

    def _load_config(self) -> None:
        """Load and process the configuration file with env expansion and namespace handling"""
        with self._lock:
            config_dict: Dict[str, Any] = {}

            if os.path.exists(self._config_path):
                current_mtime = os.path.getmtime(self._config_path)
                with open(self._config_path, 'r') as f:
                    config_dict = json.load(f)
                logger.debug(f"Loaded config from: {self._config_path}")
                self._last_mtime = current_mtime
            else:
                logger.debug(f"Config file not found: {self._config_path}. Using empty config.")
                self._last_mtime = 0.0

            processed = EnvironmentHandler.process_config_dict(config_dict)
            self._config = self._handle_namespaces(processed)
            logger.debug(f"Configuration loaded with {len(self._config)} top-level keys")

    def _handle_namespaces(self, processed: Dict[str, Any]) -> Dict[str, Any]:
        """Overlay the active namespace section onto the base configuration.

        The active namespace is DOCMAPPER_NAMESPACE, then namespaces.active,
        then 'default' when such an overlay exists.
        """
        namespaces = processed.get("namespaces") if isinstance(processed.get("namespaces"), dict) else None
        self.active_namespace = None
        if not namespaces:
            return processed

        active_ns = EnvironmentHandler.get_namespace() or namespaces.get("active")
        if not active_ns and "default" in namespaces:
            active_ns = "default"

        base_no_ns = {k: v for k, v in processed.items() if k != "namespaces"}
        if active_ns and isinstance(namespaces.get(active_ns), dict):
            self.active_namespace = active_ns
            logger.debug(f"Applied namespace overlay: {active_ns}")
            return _deep_merge_dicts(base_no_ns, namespaces[active_ns])
        return base_no_ns

    def reload_if_stale(self, force: bool = False) -> None:
        """Reload the config if the source file's mtime has changed or if forced."""
        mtime = os.path.getmtime(self._config_path) if os.path.exists(self._config_path) else 0.0
        if force or (mtime and mtime > self._last_mtime):
            logger.debug("Config file changed; reloading configuration")
            self._load_config()

    def get_config(self) -> Dict[str, Any]:
        return self._config.copy()

    def get_validated_config(self) -> ValidatedConfigDict:
        return ValidatedConfigDict(self._config, "config")

    def get_section(self, section_name: str, default: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self._config.get(section_name, default or {})

    def validate_config(self) -> None:
        """Validate the sections docmapper reads.

        Raises:
            KeyError: If required keys are missing
            ValueError: If configuration values are invalid
        """
        if "mongodb" in self._config:
            ConfigValidator.validate_mongodb_config(self._config["mongodb"])
        redis_cfg = (self._config.get("cache") or {}).get("redis")
        if isinstance(redis_cfg, dict):
            ConfigValidator.validate_connection_config(redis_cfg, "cache.redis")
