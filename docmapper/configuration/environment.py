"""
Environment Variable Handler

.env loading, ${VAR} expansion inside config values, and UPPER_CASE leaf-key
overrides for the docmapper configuration file.
"""

import json
import logging
import os
import re
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# Environment variable pattern for ${VAR} and ${VAR:-default}
_ENV_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-(.*?))?\}")

CONFIG_PATH_ENV = "DOCMAPPER_CONFIG"
NAMESPACE_ENV = "DOCMAPPER_NAMESPACE"


class EnvironmentHandler:
    """Environment variable handling and expansion"""

    @staticmethod
    def load_dotenv():
        """Load a .env file from the working directory (does not override existing env)"""
        from dotenv import load_dotenv
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

        Args:
            s: String to expand

        Returns:
            Expanded value with appropriate type casting
        """
        if not isinstance(s, str):
            return s

        whole_match = re.fullmatch(_ENV_PATTERN, s)

        def repl(m: re.Match) -> str:
            name = m.group(1)
            default = m.group(2)
            return os.environ.get(name, default or "")

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
    def override_leaf_keys(d: Dict[str, Any], prefix: Optional[str] = None) -> Dict[str, Any]:
        """Recursively override leaf keys in d with env vars of form PREFIX_KEY.

        {"mongodb": {"uri": ...}} is overridden by MONGODB_URI.
        """
        out = {}
        for k, v in d.items():
            env_key = f"{prefix}_{k}" if prefix else k
            if isinstance(v, dict):
                out[k] = EnvironmentHandler.override_leaf_keys(v, env_key.upper())
            else:
                env_val = os.environ.get(env_key.upper())
                out[k] = env_val if env_val is not None else v
        return out

    @classmethod
    def process_config_dict(cls, config_dict: Dict[str, Any]) -> Dict[str, Any]:
        """Expand ${VAR} placeholders, then apply leaf-key env overrides."""
        config_expanded = cls.expand_env_in_obj(config_dict)
        return cls.override_leaf_keys(config_expanded)

    @staticmethod
    def resolve_config_path(path_candidate: str) -> str:
        """Find an existing config file based on candidate and fallbacks.

        Args:
            path_candidate: Primary config file path

        Returns:
            Absolute path to config file (may not exist)
        """
        primary = os.path.expanduser(os.path.expandvars(path_candidate))

        if os.path.exists(primary):
            return os.path.abspath(primary)

        basename = os.path.basename(primary)
        current_path = os.path.join(os.getcwd(), basename)
        if os.path.exists(current_path):
            return os.path.abspath(current_path)

        logger.debug(f"Could not find config file at {primary} or {current_path}. Using empty config.")
        return os.path.abspath(primary)

    @staticmethod
    def get_namespace() -> Optional[str]:
        """Active namespace from the environment, if any."""
        return os.environ.get(NAMESPACE_ENV)
