"""
City data management module for the CityTZ package.

This module provides the main CityData class that owns the dataset loader,
result cache, search engine and admission controls, and exposes the public
query surface.
"""

from typing import Any, Callable, Dict, List, Optional, Type, TypeVar, Union

from CityTZ.config.manager import get_config
from CityTZ.data.cache import SearchCache
from CityTZ.data.limits import RateLimiter, ResourceManager
from CityTZ.data.loader import DatasetLoader
from CityTZ.data.models import CityRecord, SearchOptions
from CityTZ.data.search import CitySearchEngine
from CityTZ.exceptions import ConfigError, DataLoadError
from CityTZ.utils.logging import get_logger

# Get a logger for this module
logger = get_logger(__name__)

T = TypeVar('T', bound='CityData')

class CityData:
    """
    A facade for querying city data.

    Each instance is an independent context: it builds its own loader, cache,
    search engine, rate limiter and resource manager from configuration, so
    several instances (e.g. in tests) never share state.
    """

    def __init__(self, data_file: Optional[str] = None, config=None,
                 loader: Optional[DatasetLoader] = None,
                 clock: Optional[Callable[[], float]] = None) -> None:
        """
        Initialize the CityData manager.

        Args:
            data_file: Path to cityMap.json. If None, uses config, environment or
                the packaged dataset.
            config: Configuration manager instance. If None, gets global instance.
            loader: Pre-built DatasetLoader, overriding ``data_file``
            clock: Time source for the rate limiter (defaults to time.monotonic)
        """
        if config is None:
            config = get_config()

        self.config = config

        self.loader = loader or DatasetLoader(data_file, config=config)
        self.cache = SearchCache()

        validation_limits = config.get_validation_limits()
        self.engine = CitySearchEngine(
            self.loader,
            self.cache,
            max_city_length=validation_limits['max_city_length'],
            max_query_length=validation_limits['max_query_length'],
        )

        rate_settings = config.get_rate_limit_settings()
        try:
            self.rate_limiter = RateLimiter(rate_settings['limit'], rate_settings['window'], clock=clock)
        except (TypeError, ValueError) as e:
            raise ConfigError(
                message=f"invalid rate limit settings: {e}",
                context={'rate_limit': rate_settings},
                cause=e
            ) from e

        resource_settings = config.get_resource_settings()
        self.resource_manager = ResourceManager(
            resource_settings['max_memory_mb'],
            resource_settings['max_concurrent_searches'],
        )

        logger.debug(f"Initialized CityData with data source: {self.loader.path or 'custom reader'}")

    def lookup_exact(self, city_name: Union[str, bytes]) -> List[CityRecord]:
        """
        Get cities whose name matches exactly (ignoring case).

        Args:
            city_name: The city name

        Returns:
            List of matching cities
        """
        return self.engine.lookup_exact(city_name)

    def find_partial(self, search_text: Union[str, bytes]) -> List[CityRecord]:
        """
        Find cities whose city, state, province and country contain every term
        of ``search_text``.
        """
        return self.engine.find_partial(search_text)

    def find_by_country_code(self, code: str) -> List[CityRecord]:
        """Find cities by ISO2 or ISO3 country code."""
        return self.engine.find_by_country_code(code)

    def search(self, query: str, options: Optional[SearchOptions] = None) -> List[CityRecord]:
        """
        Generic search with options. The query is not validated.
        """
        return self.engine.search(query, options)

    def all_records(self) -> List[CityRecord]:
        return self.engine.all_records()

    def clear_cache(self) -> None:
        """Drop every cached lookup result."""
        self.cache.clear()

    def cache_size(self) -> int:
        return self.cache.size()

    def get_dataset_info(self) -> Dict[str, Any]:
        """
        Get information about the dataset and runtime state.

        The dataset is loaded if it hasn't been yet; a failed load is reported
        rather than raised.

        Returns:
            Dictionary with source, loaded flag, record count, cache size,
            active searches and the load error message if any
        """
        info: Dict[str, Any] = {
            'source': self.loader.path,
            'loaded': False,
            'record_count': 0,
            'cache_size': self.cache.size(),
            'active_searches': self.resource_manager.active_searches,
            'memory_mb': self.resource_manager.current_mb,
        }

        try:
            info['record_count'] = len(self.loader.load())
            info['loaded'] = True
        except DataLoadError as e:
            info['error'] = str(e)

        return info

    def __enter__(self: T) -> T:
        return self

    def __exit__(self, exc_type: Optional[Type[BaseException]],
                 exc_value: Optional[BaseException],
                 traceback: Optional[Any]) -> None:
        self.clear_cache()
