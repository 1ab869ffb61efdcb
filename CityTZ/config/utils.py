"""
Utility functions for the CityTZ configuration system.
"""

import copy
from typing import Any, Dict


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge two dictionaries, with override values taking precedence.

    Nested dictionaries are merged key by key; lists and scalars in
    ``override`` replace the base value outright. Neither input is modified.

    Args:
        base: Base dictionary
        override: Dictionary with values to override

    Returns:
        New dictionary with merged values
    """
    result = copy.deepcopy(base)

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)

    return result
