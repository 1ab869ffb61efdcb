"""
Data layer for the CityTZ package.

This package contains the dataset loader, validation, caching, admission
controls and the search engine, tied together by CityData.
"""

from CityTZ.data.city_manager import CityData
from CityTZ.data.models import CityRecord, SearchOptions, default_search_options

__all__ = ['CityData', 'CityRecord', 'SearchOptions', 'default_search_options']
