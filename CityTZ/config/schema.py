"""
Configuration schema and validation for CityTZ.

The TypedDicts document the expected shape of each section; the validate_*
functions check a (possibly partial) configuration dictionary and return
human-readable error messages rather than raising.
"""

from typing import TypedDict, Literal, Optional, Dict, Any, List

LoggingLevel = Literal["debug", "info", "warning", "error", "critical"]
LoggingFormat = Literal["json", "text"]

class DataConfig(TypedDict):
    """TypedDict for data configuration validation"""
    location: Optional[str]

class SearchLimitsConfig(TypedDict):
    """TypedDict for search limits configuration validation"""
    default: int
    max: int

class SearchConfig(TypedDict):
    """TypedDict for search configuration validation"""
    max_city_length: int
    max_query_length: int
    limits: SearchLimitsConfig

class RateLimitConfig(TypedDict):
    """TypedDict for rate limiting configuration validation"""
    enabled: bool
    limit: int
    window: int

class ResourcesConfig(TypedDict):
    """TypedDict for resource budget configuration validation"""
    enabled: bool
    max_memory_mb: int
    max_concurrent_searches: int
    search_memory_mb: int

class LimitsConfig(TypedDict):
    """TypedDict for admission-control configuration validation"""
    rate_limit: RateLimitConfig
    resources: ResourcesConfig

class LoggingConfig(TypedDict):
    """TypedDict for logging configuration validation"""
    level: LoggingLevel
    format: LoggingFormat
    file: Optional[str]

class ApiConfig(TypedDict):
    """TypedDict for API configuration validation"""
    host: str
    port: int
    debug: bool

class ConfigSchema(TypedDict):
    """Root configuration schema that includes all config sections"""
    data: DataConfig
    search: SearchConfig
    limits: LimitsConfig
    logging: LoggingConfig
    api: ApiConfig

KNOWN_SECTIONS = ("data", "search", "limits", "logging", "api")

def is_valid_logging_level(level: str) -> bool:
    """Validate the logging level against allowed values"""
    return level in ("debug", "info", "warning", "error", "critical")

def is_valid_logging_format(fmt: str) -> bool:
    """Validate the logging format against allowed values"""
    return fmt in ("json", "text")

def is_valid_port(port: int) -> bool:
    """Validate that a port number is within the allowed range."""
    return isinstance(port, int) and not isinstance(port, bool) and 1 <= port <= 65535

def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0

def validate_data_config(data_config: Dict[str, Any]) -> List[str]:
    """Validate the data configuration section."""
    errors = []

    if "location" in data_config and data_config["location"] is not None:
        if not isinstance(data_config["location"], str):
            errors.append(f"Data location must be a string or null, got {type(data_config['location']).__name__}")
        elif not data_config["location"].lower().endswith(".json"):
            errors.append(f"Data location must point to a .json file, got {data_config['location']}")

    return errors

def validate_search_config(search_config: Dict[str, Any]) -> List[str]:
    """
    Validate the search configuration section.

    Args:
        search_config: Search configuration dictionary

    Returns:
        List of validation error messages
    """
    errors = []

    for setting in ("max_city_length", "max_query_length"):
        if setting in search_config and not _is_positive_int(search_config[setting]):
            errors.append(f"Search {setting} must be a positive integer, got {search_config[setting]!r}")

    if "limits" in search_config and isinstance(search_config["limits"], dict):
        limits_config = search_config["limits"]

        if "default" in limits_config and not _is_positive_int(limits_config["default"]):
            errors.append(f"Default limit must be a positive integer, got {limits_config['default']!r}")

        if "max" in limits_config and not _is_positive_int(limits_config["max"]):
            errors.append(f"Maximum limit must be a positive integer, got {limits_config['max']!r}")

        if not errors and "default" in limits_config and "max" in limits_config:
            if limits_config["default"] > limits_config["max"]:
                errors.append(f"Default limit ({limits_config['default']}) cannot exceed maximum limit ({limits_config['max']})")

    return errors

def validate_limits_config(limits_config: Dict[str, Any]) -> List[str]:
    """
    Validate the admission-control configuration section.

    Args:
        limits_config: Limits configuration dictionary

    Returns:
        List of validation error messages
    """
    errors = []

    rate_limit = limits_config.get("rate_limit")
    if isinstance(rate_limit, dict):
        if "enabled" in rate_limit and not isinstance(rate_limit["enabled"], bool):
            errors.append("Rate limit enabled setting must be a boolean")
        if "limit" in rate_limit and not _is_positive_int(rate_limit["limit"]):
            errors.append("Rate limit must be a positive integer")
        if "window" in rate_limit:
            window = rate_limit["window"]
            if isinstance(window, bool) or not isinstance(window, (int, float)) or window <= 0:
                errors.append("Rate limit window must be a positive number of seconds")

    resources = limits_config.get("resources")
    if isinstance(resources, dict):
        if "enabled" in resources and not isinstance(resources["enabled"], bool):
            errors.append("Resources enabled setting must be a boolean")
        for setting in ("max_memory_mb", "max_concurrent_searches"):
            if setting in resources and not _is_positive_int(resources[setting]):
                errors.append(f"Resources {setting} must be a positive integer")
        if "search_memory_mb" in resources:
            amount = resources["search_memory_mb"]
            if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
                errors.append("Resources search_memory_mb must be a non-negative integer")
            elif _is_positive_int(resources.get("max_memory_mb")) and amount > resources["max_memory_mb"]:
                errors.append(
                    f"Resources search_memory_mb ({amount}) cannot exceed max_memory_mb ({resources['max_memory_mb']})"
                )

    return errors

def validate_logging_config(logging_config: Dict[str, Any]) -> List[str]:
    """Validate the logging configuration section."""
    errors = []

    if "level" in logging_config and not is_valid_logging_level(logging_config["level"]):
        errors.append(f"Invalid logging level: {logging_config['level']}. Must be one of: debug, info, warning, error, critical")

    if "format" in logging_config and not is_valid_logging_format(logging_config["format"]):
        errors.append(f"Invalid logging format: {logging_config['format']}. Must be one of: json, text")

    if "file" in logging_config and logging_config["file"] is not None:
        if not isinstance(logging_config["file"], str):
            errors.append("Logging file must be a string or null")

    return errors

def validate_api_config(api_config: Dict[str, Any]) -> List[str]:
    """Validate the API configuration section."""
    errors = []

    if "host" in api_config and not isinstance(api_config["host"], str):
        errors.append("API host must be a string")

    if "port" in api_config and not is_valid_port(api_config["port"]):
        errors.append("API port must be an integer between 1 and 65535")

    if "debug" in api_config and not isinstance(api_config["debug"], bool):
        errors.append("API debug setting must be a boolean")

    return errors

_SECTION_VALIDATORS = {
    "data": validate_data_config,
    "search": validate_search_config,
    "limits": validate_limits_config,
    "logging": validate_logging_config,
    "api": validate_api_config,
}

def validate_config(config: Any) -> Dict[str, List[str]]:
    """
    Validate a configuration dictionary.

    Sections may be omitted (defaults fill them in); sections that are present
    must be mappings with valid values, and unknown sections are reported.

    Args:
        config: The configuration dictionary to validate

    Returns:
        Dictionary mapping sections to lists of error messages (empty if valid)
    """
    if config is None:
        return {}

    if not isinstance(config, dict):
        return {"config": [f"Configuration must be a mapping, got {type(config).__name__}"]}

    errors: Dict[str, List[str]] = {}

    for section, value in config.items():
        if section not in _SECTION_VALIDATORS:
            errors[section] = [f"Unknown configuration section: {section}. Must be one of: {', '.join(KNOWN_SECTIONS)}"]
            continue

        if not isinstance(value, dict):
            errors[section] = [f"Section '{section}' must be a mapping, got {type(value).__name__}"]
            continue

        section_errors = _SECTION_VALIDATORS[section](value)
        if section_errors:
            errors[section] = section_errors

    return errors
