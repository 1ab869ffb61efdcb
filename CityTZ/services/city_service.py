"""
City service module for the CityTZ package.

This module provides service methods for city data operations that can be used
by both the CLI and API layers. Every call passes two admission checks before
reaching the search engine: the per-client rate limiter, then the search
resource budget.
"""

from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional, Union

from CityTZ.data import CityData, SearchOptions
from CityTZ.data.models import CityRecord
from CityTZ.exceptions import RateLimitError
from CityTZ.utils.logging import get_logger

# Get a logger for this module
logger = get_logger(__name__)

def filter_records(records: List[CityRecord], timezone: Optional[str] = None,
                   country: Optional[str] = None) -> List[CityRecord]:
    """
    Keep records whose timezone and country contain the given fragments
    (case-insensitive). A None or empty fragment doesn't filter.
    """
    if timezone:
        wanted = timezone.lower()
        records = [r for r in records if wanted in r.timezone.lower()]
    if country:
        wanted = country.lower()
        records = [r for r in records if wanted in r.country.lower()]
    return records

class CityService:
    """
    Service class for city data operations.

    This class wraps the CityData class to provide standardized service methods
    that can be used by both the CLI and API layers, adding admission control,
    post-filters and result limits.
    """

    def __init__(self, city_data: Optional[CityData] = None, data_file: Optional[str] = None,
                 config=None):
        """
        Initialize the CityService.

        Args:
            city_data: Existing CityData to wrap. If None, one is created.
            data_file: Dataset path used when creating CityData
            config: Configuration manager instance. If None, gets global instance.
        """
        self.city_data = city_data or CityData(data_file=data_file, config=config)
        self.config = self.city_data.config

    @contextmanager
    def _admit(self, client_key: str, operation: str) -> Iterator[None]:
        rate_settings = self.config.get_rate_limit_settings()
        if rate_settings['enabled'] and not self.city_data.rate_limiter.allow(client_key):
            logger.warning(f"Rate limit exceeded for client '{client_key}' during {operation}")
            raise RateLimitError(
                message=f"rate limit exceeded for client '{client_key}'",
                context={
                    'client_key': client_key,
                    'operation': operation,
                    'limit': self.city_data.rate_limiter.limit,
                    'window': self.city_data.rate_limiter.window,
                }
            )

        resource_settings = self.config.get_resource_settings()
        if not resource_settings['enabled']:
            yield
            return

        with self.city_data.resource_manager.allocation(resource_settings['search_memory_mb']):
            yield

    def _apply_limit(self, records: List[CityRecord], limit: Optional[int]) -> List[CityRecord]:
        search_limits = self.config.get_search_limits()
        if limit is None:
            limit = search_limits['default']
        if limit <= 0:
            limit = search_limits['max']
        return records[:min(limit, search_limits['max'])]

    def _run(self, operation: str, client_key: str, call: Callable[[], List[CityRecord]],
             timezone: Optional[str], country: Optional[str],
             limit: Optional[int]) -> List[CityRecord]:
        with self._admit(client_key, operation):
            records = call()
        records = filter_records(records, timezone=timezone, country=country)
        return self._apply_limit(records, limit)

    def lookup_city(self, city_name: Union[str, bytes], client_key: str = "local",
                    timezone: Optional[str] = None, country: Optional[str] = None,
                    limit: Optional[int] = None) -> List[CityRecord]:
        """
        Look up cities by exact name.

        Args:
            city_name: The city name
            client_key: Caller identity used for rate limiting
            timezone: Optional timezone fragment filter
            country: Optional country name fragment filter
            limit: Maximum number of results (None for the configured default,
                0 or less for no limit other than the configured maximum)

        Returns:
            List of matching cities

        Raises:
            RateLimitError: If ``client_key`` exceeded its request rate
            ResourceError: If the search budget is exhausted
            SearchError: If validation or dataset loading failed
        """
        logger.debug(f"Looking up city: {city_name!r} for client {client_key}")
        return self._run("lookup_city", client_key,
                         lambda: self.city_data.lookup_exact(city_name),
                         timezone, country, limit)

    def find_cities(self, search_text: Union[str, bytes], client_key: str = "local",
                    timezone: Optional[str] = None, country: Optional[str] = None,
                    limit: Optional[int] = None) -> List[CityRecord]:
        """
        Find cities matching every term of ``search_text`` across city, state,
        province and country.
        """
        logger.debug(f"Finding cities: {search_text!r} for client {client_key}")
        return self._run("find_cities", client_key,
                         lambda: self.city_data.find_partial(search_text),
                         timezone, country, limit)

    def find_by_iso(self, code: str, client_key: str = "local",
                    timezone: Optional[str] = None, country: Optional[str] = None,
                    limit: Optional[int] = None) -> List[CityRecord]:
        """Find cities by ISO2 or ISO3 country code."""
        logger.debug(f"Finding cities by ISO code: {code!r} for client {client_key}")
        return self._run("find_by_iso", client_key,
                         lambda: self.city_data.find_by_country_code(code),
                         timezone, country, limit)

    def search_cities(self, query: str, case_sensitive: bool = False, exact_match: bool = False,
                      client_key: str = "local", timezone: Optional[str] = None,
                      country: Optional[str] = None,
                      limit: Optional[int] = None) -> List[CityRecord]:
        """
        Run the generic matcher.

        The query reaches the engine unvalidated; callers handling untrusted
        input should validate it first (the API and CLI do).
        """
        options = SearchOptions(case_sensitive=case_sensitive, exact_match=exact_match)
        logger.debug(f"Searching cities: {query!r} ({options}) for client {client_key}")
        return self._run("search_cities", client_key,
                         lambda: self.city_data.search(query, options),
                         timezone, country, limit)

    def all_cities(self, client_key: str = "local", timezone: Optional[str] = None,
                   country: Optional[str] = None,
                   limit: Optional[int] = None) -> List[CityRecord]:
        """Every city in dataset order, filtered and limited."""
        return self._run("all_cities", client_key,
                         self.city_data.all_records,
                         timezone, country, limit)

    def get_status(self) -> Dict[str, Any]:
        """
        Get dataset and runtime information.

        Returns:
            Dictionary with dataset info plus the active admission settings
        """
        status = self.city_data.get_dataset_info()
        status['rate_limit'] = self.config.get_rate_limit_settings()
        status['resources'] = self.config.get_resource_settings()
        return status
