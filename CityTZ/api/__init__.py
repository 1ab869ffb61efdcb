"""
API module for the CityTZ package.

This module provides a REST API for querying city and timezone data through
HTTP endpoints: exact city lookup, multi-term search, country-code lookup and
the generic matcher.

Key Components:
- create_app: Application factory
- start_server: Function to start the API server
"""

from CityTZ.api.server import create_app, start_server

__all__ = ['create_app', 'start_server']
