"""
Service layer for the CityTZ package.

This module provides service functions that can be used by both the CLI and API layers,
avoiding code duplication and centralizing admission control.
"""

from CityTZ.services.city_service import CityService, filter_records

__all__ = ['CityService', 'filter_records']
