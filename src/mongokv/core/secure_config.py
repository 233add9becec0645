"""
Secure configuration for mongokv.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, cast

from mongokv.core.exceptions import ConfigurationError
from mongokv.core.logging import logger, LOG_LEVELS

# Names that reach 16 characters are rejected, so 15 is the largest accepted length
MAX_COLLECTION_NAME_LENGTH = 15

# Longest name the validator will let a configuration ask for
MAX_CONFIGURABLE_NAME_LENGTH = 120

ALLOWED_URI_SCHEMES = ("mongodb://", "mongodb+srv://")


class ConfigValidator:
    """
    Configuration validator with rules.

    Validations:
    1. Connection URI scheme
    2. Timeout is a positive integer
    3. Collection name bound in range
    4. Known log level
    """

    def validate_config(self, config: Dict[str, Any]) -> None:
        connection = config.get("connection", {})

        uri = connection.get("uri")
        if uri is not None:
            if not isinstance(uri, str) or not uri.startswith(ALLOWED_URI_SCHEMES):
                logger.error("Invalid connection uri scheme")
                raise ConfigurationError(
                    f"connection.uri must start with one of {', '.join(ALLOWED_URI_SCHEMES)}"
                )

        timeout = connection.get("server_selection_timeout_ms")
        if not isinstance(timeout, int) or isinstance(timeout, bool) or timeout <= 0:
            logger.error("Invalid server selection timeout", value=timeout)
            raise ConfigurationError(
                f"connection.server_selection_timeout_ms must be a positive integer: {timeout}"
            )

        max_length = config.get("collections", {}).get("max_name_length")
        if (
            not isinstance(max_length, int)
            or isinstance(max_length, bool)
            or not 1 <= max_length <= MAX_CONFIGURABLE_NAME_LENGTH
        ):
            logger.error("Invalid collection name bound", value=max_length)
            raise ConfigurationError(
                f"collections.max_name_length must be in [1, {MAX_CONFIGURABLE_NAME_LENGTH}]: "
                f"{max_length}"
            )

        level = config.get("logging", {}).get("level")
        if str(level).upper() not in LOG_LEVELS:
            logger.error("Invalid log level", value=level)
            raise ConfigurationError(
                f"logging.level must be one of {', '.join(LOG_LEVELS)}: {level}"
            )


class Settings:
    """
    Main configuration.

    Resolution order:
    1. Default values
    2. .mongokv file (or the file named by MONGOKV_CONFIG)
    3. Environment variables
    """

    def __init__(self, config_path: Optional[Path] = None) -> None:
        self._explicit_path = Path(config_path) if config_path is not None else None
        self.config = self._load_config()
        self.validator = ConfigValidator()
        self.validator.validate_config(self.config)
        logger.debug(
            "Settings initialized",
            config_source=str(self._find_config_file() or "defaults"),
        )

    def _get_default_config(self) -> Dict[str, Any]:
        return {
            "connection": {
                "uri": None,
                "server_selection_timeout_ms": 5000,
            },
            "collections": {
                "max_name_length": MAX_COLLECTION_NAME_LENGTH,
            },
            "logging": {"level": "INFO", "debug_mode": False},
        }

    def _find_config_file(self) -> Optional[Path]:
        """Find the configuration file.

        Search order:
        1. Path given to the constructor
        2. MONGOKV_CONFIG
        3. .mongokv in the current directory
        """
        if self._explicit_path is not None:
            return self._explicit_path

        env_path = os.getenv("MONGOKV_CONFIG")
        if env_path:
            return Path(env_path)

        local_config = Path.cwd() / ".mongokv"
        if local_config.is_file():
            return local_config

        return None

    def _load_config(self) -> Dict[str, Any]:
        defaults = self._get_default_config()

        config_path = self._find_config_file()
        if config_path is not None:
            if not config_path.is_file():
                raise ConfigurationError(f"Configuration file not found: {config_path}")
            try:
                with open(config_path, encoding='utf-8') as f:
                    file_config = yaml.safe_load(f)
            except (OSError, yaml.YAMLError) as e:
                logger.error(
                    "Error reading configuration file", file=str(config_path), error=str(e)
                )
                raise ConfigurationError(f"Error reading configuration file: {e}", cause=e)
            if file_config:
                if not isinstance(file_config, dict):
                    raise ConfigurationError(
                        f"Configuration file must contain a mapping: {config_path}"
                    )
                self._deep_merge(defaults, file_config)

        env_overrides = {
            "MONGOKV_URI": ("connection", "uri"),
            "MONGOKV_SERVER_SELECTION_TIMEOUT_MS": ("connection", "server_selection_timeout_ms"),
            "MONGOKV_MAX_NAME_LENGTH": ("collections", "max_name_length"),
            "MONGOKV_LOG_LEVEL": ("logging", "level"),
        }
        int_keys = {"MONGOKV_SERVER_SELECTION_TIMEOUT_MS", "MONGOKV_MAX_NAME_LENGTH"}

        for env_key, path_tuple in env_overrides.items():
            env_value = os.getenv(env_key)
            if env_value:
                value_to_set: Any = env_value
                if env_key in int_keys:
                    try:
                        value_to_set = int(env_value)
                    except ValueError:
                        raise ConfigurationError(f"{env_key} must be an integer: {env_value}")
                self._set_nested(defaults, path_tuple, value_to_set)

        return defaults

    def _deep_merge(self, base: Dict[str, Any], update: Dict[str, Any]) -> None:
        for key, value in update.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(cast(Dict[str, Any], base[key]), cast(Dict[str, Any], value))
            else:
                base[key] = value

    def _set_nested(self, data: Dict[str, Any], path: tuple[str, ...], value: Any) -> None:
        current = data
        for key in path[:-1]:
            if key not in current:
                current[key] = {}
            current = current[key]
        current[path[-1]] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value, with dotted paths: "connection.uri"."""
        if "." in key:
            current: Any = self.config
            for part in key.split("."):
                if isinstance(current, dict) and part in current:
                    current = current[part]
                else:
                    return default
            return current
        return self.config.get(key, default)

    def require(self, key: str) -> Any:
        """
        Get a required value or raise.

        A key that resolves to None counts as missing.
        """
        value = self.get(key)
        if value is None:
            logger.error("Required config missing", key=key)
            raise ConfigurationError(f"Missing required config: {key}")
        return value
