"""
Default configuration values for CityTZ.

This module defines the default configuration settings used when no custom
configuration is provided. These values serve as fallbacks and define the
base configuration structure.

Default configuration values can be overridden by:
1. Configuration files (citytz.yml)
2. Programmatic configuration via the ConfigManager
"""

from typing import Dict, Any

# Default data configuration
DATA_DEFAULTS: Dict[str, Any] = {
    # Path to the cityMap.json dataset (null = CITYTZ_DATA_FILE or the bundled file)
    "location": None,
}

# Default search configuration
SEARCH_DEFAULTS: Dict[str, Any] = {
    # Maximum size in bytes of an exact city-name lookup
    "max_city_length": 100,
    # Maximum size in bytes of a free-text partial search
    "max_query_length": 200,
    # Result limits applied by the service layer
    "limits": {
        # Number of results returned when the caller gives no limit
        "default": 10,
        # Largest limit a caller may request
        "max": 1000
    }
}

# Default admission-control configuration
LIMITS_DEFAULTS: Dict[str, Any] = {
    # Sliding-window rate limiting per client key
    "rate_limit": {
        "enabled": True,
        # Requests admitted per window
        "limit": 100,
        # Window length in seconds
        "window": 60
    },
    # Memory / concurrency budget for search execution
    "resources": {
        "enabled": True,
        "max_memory_mb": 500,
        "max_concurrent_searches": 50,
        # Budget charged to each search while it runs
        "search_memory_mb": 1
    }
}

# Default logging configuration
LOGGING_DEFAULTS: Dict[str, Any] = {
    # Logging level: 'debug', 'info', 'warning', 'error', 'critical'
    "level": "info",
    # Logging format: 'json', 'text'
    "format": "text",
    # Log file path (null = log to stderr only)
    "file": None
}

# Default API configuration
API_DEFAULTS: Dict[str, Any] = {
    # Host to bind the API server to
    "host": "0.0.0.0",
    # Port to run the API server on
    "port": 5000,
    # Enable debug mode for development
    "debug": False
}

# Complete default configuration structure
DEFAULT_CONFIG: Dict[str, Dict[str, Any]] = {
    "data": DATA_DEFAULTS,
    "search": SEARCH_DEFAULTS,
    "limits": LIMITS_DEFAULTS,
    "logging": LOGGING_DEFAULTS,
    "api": API_DEFAULTS
}
