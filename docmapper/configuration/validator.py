"""
Configuration Validator

Fail-fast validation for the docmapper configuration sections and a dict
wrapper that reports the full key path when something is missing.
"""

import logging
from typing import Any, Dict, List, Set, Union
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

MONGODB_SCHEMES = {"mongodb", "mongodb+srv"}


class ConfigValidator:
    """Configuration validation with clear error messages"""

    @staticmethod
    def validate_required_keys(config: Dict[str, Any], required_keys: List[str], path: str = "config") -> None:
        """Validate that required keys exist, failing fast with clear errors.

        Args:
            config: Configuration dictionary to validate
            required_keys: List of required keys
            path: Path context for error messages

        Raises:
            KeyError: If any required key is missing
        """
        missing_keys = [f"{path}.{key}" for key in required_keys if key not in config]
        if missing_keys:
            raise KeyError(
                f"Required configuration keys are missing: {', '.join(missing_keys)}. "
                f"Please add these keys to your config.json file."
            )

    @staticmethod
    def validate_range(value: Union[int, float], min_val: Union[int, float], max_val: Union[int, float],
                       key_path: str) -> None:
        """Validate that a numeric value is within the inclusive range [min_val, max_val].

        Raises:
            ValueError: If value is outside the valid range
        """
        if not min_val <= value <= max_val:
            raise ValueError(
                f"Configuration key '{key_path}' must be between {min_val} and {max_val}, "
                f"got {value}"
            )

    @staticmethod
    def validate_choice(value: Any, valid_choices: Set[Any], key_path: str, allow_custom: bool = False) -> None:
        """Validate that a value is one of the allowed choices.

        Args:
            value: Value to validate
            valid_choices: Set of valid choices
            key_path: Configuration key path for error messages
            allow_custom: Whether to allow custom values not in valid_choices

        Raises:
            ValueError: If value is not in valid choices and allow_custom is False
        """
        if value not in valid_choices:
            if not allow_custom:
                raise ValueError(
                    f"Configuration key '{key_path}' must be one of {valid_choices}, "
                    f"got '{value}'"
                )
            logger.warning(
                f"Configuration key '{key_path}' has custom value '{value}'. "
                f"Valid choices are: {valid_choices}"
            )

    @staticmethod
    def validate_mongodb_config(config: Dict[str, Any], path: str = "config.mongodb") -> None:
        """Validate the mongodb connection section.

        Raises:
            KeyError: If uri or database is missing
            ValueError: If the uri scheme is not a MongoDB scheme or the database name is empty
        """
        ConfigValidator.validate_required_keys(config, ["uri", "database"], path)

        scheme = urlparse(str(config["uri"])).scheme
        ConfigValidator.validate_choice(scheme, MONGODB_SCHEMES, f"{path}.uri")

        if not config["database"]:
            raise ValueError(f"Configuration key '{path}.database' cannot be empty")

        if "server_selection_timeout_ms" in config:
            ConfigValidator.validate_range(
                int(config["server_selection_timeout_ms"]),
                1, 600_000,
                f"{path}.server_selection_timeout_ms"
            )

    @staticmethod
    def validate_connection_config(config: Dict[str, Any], service_name: str,
                                   required_keys: List[str] = None) -> None:
        """Validate a host/port service connection section (e.g. cache.redis).

        Raises:
            KeyError: If required keys are missing
            ValueError: If host is empty or port is not a valid port number
        """
        if required_keys:
            ConfigValidator.validate_required_keys(config, required_keys, f"config.{service_name}")

        if "host" in config and not config["host"]:
            raise ValueError(f"Configuration key 'config.{service_name}.host' cannot be empty")

        if "port" in config:
            try:
                port = int(config["port"])
            except (ValueError, TypeError):
                raise ValueError(
                    f"Configuration key 'config.{service_name}.port' must be a valid integer, "
                    f"got {config['port']}"
                )
            ConfigValidator.validate_range(port, 1, 65535, f"config.{service_name}.port")


class ValidatedConfigDict(dict):
    """
    A dictionary subclass that gives clear error messages for missing keys
    and supports both bracket notation and property syntax:

        uri = config["mongodb"]["uri"]
        uri = config.mongodb.uri
        timeout = config.mongodb.get("server_selection_timeout_ms", 5000)
    """

    def __init__(self, data: Dict[str, Any], path: str = "config"):
        super().__init__(data)
        self._path = path

    def __getitem__(self, key: str) -> Any:
        if key not in self:
            raise KeyError(
                f"Required configuration key '{self._path}.{key}' is missing. "
                f"Please add this key to your config.json file."
            )

        value = super().__getitem__(key)
        if isinstance(value, dict):
            return ValidatedConfigDict(value, f"{self._path}.{key}")
        return value

    def __getattr__(self, key: str) -> Any:
        if key.startswith('_'):
            # Don't interfere with internal attributes
            raise AttributeError(f"'{self.__class__.__name__}' object has no attribute '{key}'")

        try:
            return self[key]
        except KeyError:
            raise AttributeError(
                f"Required configuration key '{self._path}.{key}' is missing. "
                f"Please add this key to your config.json file."
            )

    def get(self, key: str, default: Any = None) -> Any:
        """Optional configuration value with explicit default."""
        value = super().get(key, default)
        if isinstance(value, dict):
            return ValidatedConfigDict(value, f"{self._path}.{key}")
        return value

    def require(self, *keys: str) -> None:
        """Validate that required keys exist.

        Raises:
            KeyError: If any required key is missing
        """
        ConfigValidator.validate_required_keys(dict(self), list(keys), self._path)

    @property
    def path(self) -> str:
        return self._path

    def __repr__(self) -> str:
        return f"ValidatedConfigDict({self._path}): {dict(self)}"
