"""
CityTZ Configuration System.

This package provides a centralized configuration system for CityTZ with
support for hierarchical keys, deep merging, and validation.

Usage:
    from CityTZ.config import get_config

    # Get a configuration value
    limit = get_config().get("limits.rate_limit.limit")

    # Set a configuration value
    get_config().set("logging.level", "debug")

    # Load configuration from standard locations
    get_config().load_config()
"""

from CityTZ.config.manager import ConfigManager, get_config
from CityTZ.config.schema import validate_config
from CityTZ.config.utils import deep_merge

__all__ = ["ConfigManager", "get_config", "validate_config", "deep_merge"]
