"""
CityTZ - A Python module for looking up cities and their timezones.

This module answers lookup and match queries against an in-memory dataset of
cities (city, province, country, timezone, coordinates), with input
validation, result caching, per-client rate limiting and a search resource
budget.

Key Components:
- CityData: Core class owning the dataset, cache, search engine and limits
- CityService: Admission-controlled query surface used by the CLI and API
- API Server: REST API for querying cities over HTTP
- CLI: Command-line interface (``citytz``)

Usage Examples:
    # Basic usage with CityData
    from CityTZ import CityData
    cities = CityData()
    results = cities.lookup_exact("Chicago")
    print(results[0].timezone)  # America/Chicago

    # Multi-term search across city, state, province and country
    cities.find_partial("springfield mo")

    # Starting the API server
    from CityTZ import start_server
    start_server(host='localhost', port=8080)

    # Setting the log level
    from CityTZ import set_log_level
    set_log_level('debug')  # Show more detailed logs
"""

__version__ = '1.0.0'

# Import configuration system first
from CityTZ.config import get_config

# Import and configure logging early
from CityTZ.utils.logging import get_logger, set_log_level, configure_logging

# Get a logger for the main package
logger = get_logger(__name__)

def initialize_config() -> bool:
    """
    Initialize the CityTZ configuration system.

    This function searches for a configuration file in standard locations
    and loads it if found. If not found, defaults are used.

    Returns:
        bool: True if a config file was found and loaded, False if using defaults
    """
    logger.debug("Initializing configuration system")
    return get_config().load_config()

# Import key components to expose in the package namespace
# These imports are done after logging configuration to ensure they use the configured logging
from CityTZ.data import CityData, CityRecord, SearchOptions
from CityTZ.services import CityService
from CityTZ.api.server import start_server

# Export key functions for public API
__all__ = [
    'CityData', 'CityRecord', 'SearchOptions', 'CityService', 'start_server',
    'initialize_config', 'set_log_level', 'configure_logging', 'get_config',
]
