"""
Configuration manager for CityTZ.

This module implements the ConfigManager class that provides a centralized
configuration system with support for hierarchical keys, deep merging, and
loading from YAML or JSON files.
"""

import copy
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from CityTZ.config.defaults import DEFAULT_CONFIG
from CityTZ.config.schema import validate_config
from CityTZ.config.utils import deep_merge
from CityTZ.utils.logging import get_logger

CONFIG_FILE_NAME = 'citytz.yml'

class ConfigManager:
    """
    Configuration manager for CityTZ.

    Implements a singleton pattern to ensure only one configuration
    instance exists across the application.

    Features:
    - Hierarchical key access (e.g., "limits.rate_limit.window")
    - Deep merging of configuration dictionaries
    - Loading from YAML or JSON files
    - Configuration validation

    Attributes:
        _instance (ConfigManager): The singleton instance
        _config (Dict[str, Any]): The configuration dictionary
        logger: The logger instance
    """
    _instance = None

    def __new__(cls) -> 'ConfigManager':
        if cls._instance is None:
            cls._instance = super(ConfigManager, cls).__new__(cls)
            cls._instance._initialize()
        return cls._instance

    def _initialize(self) -> None:
        """Reset the configuration to DEFAULT_CONFIG."""
        self._config = copy.deepcopy(DEFAULT_CONFIG)
        self.logger = get_logger(__name__)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key (str): Hierarchical key using dot notation (e.g., "search.limits.max")
            default (Any, optional): Value returned if the key is not found

        Returns:
            Any: The configuration value if found, otherwise the default value.

        Examples:
            >>> config = get_config()
            >>> window = config.get("limits.rate_limit.window", 60)
        """
        if not key:
            return default

        value = self._config
        for part in key.split('.'):
            if isinstance(value, dict) and part in value:
                value = value[part]
            else:
                return default

        return value

    def set(self, key: str, value: Any) -> None:
        """
        Set a configuration value using dot notation.

        Intermediate dictionaries are created when they don't exist.

        Args:
            key (str): Hierarchical key using dot notation (e.g., "api.port")
            value (Any): Value to set

        Examples:
            >>> config = get_config()
            >>> config.set("limits.rate_limit.enabled", False)
        """
        if not key:
            return

        parts = key.split('.')
        config = self._config

        for part in parts[:-1]:
            if part not in config or not isinstance(config[part], dict):
                config[part] = {}
            config = config[part]

        config[parts[-1]] = value

    def get_data_location(self) -> Optional[str]:
        """
        Get the configured dataset path.

        Returns:
            Optional[str]: The configured cityMap.json path or None
        """
        return self.get("data.location")

    def get_validation_limits(self) -> Dict[str, int]:
        """
        Get the maximum input sizes (in bytes) for the search entry points.

        Returns:
            Dict[str, int]: Dictionary with max_city_length and max_query_length
        """
        return {
            "max_city_length": self.get("search.max_city_length", 100),
            "max_query_length": self.get("search.max_query_length", 200)
        }

    def get_search_limits(self) -> Dict[str, int]:
        """
        Get search result limit settings.

        Returns:
            Dict[str, int]: Dictionary with search limits (default, max)
        """
        return {
            "default": self.get("search.limits.default", 10),
            "max": self.get("search.limits.max", 1000)
        }

    def get_rate_limit_settings(self) -> Dict[str, Any]:
        """
        Get sliding-window rate limiter settings.

        Returns:
            Dict[str, Any]: Dictionary with enabled, limit and window (seconds)
        """
        return {
            "enabled": self.get("limits.rate_limit.enabled", True),
            "limit": self.get("limits.rate_limit.limit", 100),
            "window": self.get("limits.rate_limit.window", 60)
        }

    def get_resource_settings(self) -> Dict[str, Any]:
        """
        Get search resource budget settings.

        Returns:
            Dict[str, Any]: Dictionary with enabled, max_memory_mb,
            max_concurrent_searches and search_memory_mb
        """
        return {
            "enabled": self.get("limits.resources.enabled", True),
            "max_memory_mb": self.get("limits.resources.max_memory_mb", 500),
            "max_concurrent_searches": self.get("limits.resources.max_concurrent_searches", 50),
            "search_memory_mb": self.get("limits.resources.search_memory_mb", 1)
        }

    def find_config_file(self) -> Optional[Path]:
        """
        Find the configuration file in standard locations.

        Searches, in order:
        1. Current working directory: ./citytz.yml
        2. User's home directory: ~/.citytz/citytz.yml

        Returns:
            Optional[Path]: Path to the configuration file if found, None otherwise
        """
        search_locations = [
            Path.cwd() / CONFIG_FILE_NAME,
            Path.home() / '.citytz' / CONFIG_FILE_NAME,
        ]

        for path in search_locations:
            if path.is_file():
                self.logger.debug(f"Found configuration file at: {path}")
                return path

        self.logger.debug("No configuration file found in standard locations")
        return None

    def load_config(self) -> bool:
        """
        Load configuration from the first available standard location.

        If no file is found, or the file is invalid, the current configuration
        is left untouched.

        Returns:
            bool: True if a configuration file was found and loaded, False otherwise
        """
        config_path = self.find_config_file()

        if not config_path:
            self.logger.debug("No configuration file found, using defaults")
            return False

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            self.logger.error(f"Failed to load configuration file {config_path}: {e}")
            return False

        errors = validate_config(config)
        if errors:
            self.logger.warning(f"Configuration validation errors in {config_path}: {errors}")
            return False

        self._config = deep_merge(DEFAULT_CONFIG, config)
        self.logger.info(f"Loaded configuration from {config_path}")
        return True

    def load_from_file(self, path: Union[str, Path]) -> Dict[str, List[str]]:
        """
        Load configuration from a specific YAML or JSON file.

        The file is merged over the current configuration only if it validates.

        Args:
            path (Union[str, Path]): Path to the configuration file

        Returns:
            Dict[str, List[str]]: Dictionary of validation errors, if any

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file extension is not .yml, .yaml or .json
        """
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, 'r', encoding='utf-8') as f:
            if path.suffix.lower() in ('.yaml', '.yml'):
                config = yaml.safe_load(f) or {}
            elif path.suffix.lower() == '.json':
                config = json.load(f)
            else:
                raise ValueError(f"Unsupported configuration file format: {path.suffix}")

        errors = validate_config(config)

        if not errors:
            self._config = deep_merge(self._config, config)

        return errors

    def get_all(self) -> Dict[str, Any]:
        """Get a copy of the entire configuration dictionary."""
        return copy.deepcopy(self._config)


def get_config() -> ConfigManager:
    """
    Get the singleton ConfigManager instance.

    Examples:
        >>> from CityTZ.config import get_config
        >>> window = get_config().get("limits.rate_limit.window")
    """
    return ConfigManager()
