"""
Utility functions for the CityTZ package.

This module provides helpers used across the package for JSON output.
"""

import json
from typing import Any

from CityTZ.utils.logging import get_logger

# Get a logger for this module
logger = get_logger(__name__)

def format_json(data: Any, indent: int = 2, sort_keys: bool = False) -> str:
    """
    Format data as a JSON string.

    Non-ASCII city names are written as-is rather than escaped, and objects
    exposing ``to_dict()`` (such as CityRecord) are serialized through it.

    Args:
        data: The data to format as JSON
        indent: Number of spaces for indentation (default: 2)
        sort_keys: Whether to sort dictionary keys (default: False)

    Returns:
        A formatted JSON string

    Example:
        >>> print(format_json({'city': 'Zürich', 'lat': 47.38}))
        {
          "city": "Zürich",
          "lat": 47.38
        }
    """
    def _default(value: Any) -> Any:
        if hasattr(value, 'to_dict'):
            return value.to_dict()
        return str(value)

    return json.dumps(
        data,
        indent=indent,
        ensure_ascii=False,
        sort_keys=sort_keys,
        default=_default
    )
