"""
Search engine for the CityTZ package.

Four entry points answer queries against the loaded dataset:

* ``lookup_exact``: case-insensitive equality on the city name (cached)
* ``find_partial``: every whitespace-separated term must appear somewhere in
  the record's city, state abbreviation, province and country
* ``find_by_country_code``: ISO2 or ISO3 equality
* ``search``: the generic matcher driven by SearchOptions, with no input
  validation (expert use only)

All results preserve dataset order. No entry point applies rate limiting or
resource budgeting; see CityTZ.services.city_service for that composition.
"""

from typing import List, Optional, Union

from CityTZ.data.cache import SearchCache
from CityTZ.data.loader import DatasetLoader
from CityTZ.data.models import CityRecord, SearchOptions, default_search_options
from CityTZ.data.validation import validate_country_code, validate_query
from CityTZ.exceptions import DataLoadError, SearchError, ValidationError
from CityTZ.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_CITY_LENGTH = 100
DEFAULT_MAX_QUERY_LENGTH = 200

CITY_CACHE_PREFIX = "city:"

def _display(raw: Union[str, bytes]) -> str:
    if isinstance(raw, bytes):
        return raw.decode('utf-8', 'replace')
    return raw

def _partial_text(record: CityRecord) -> str:
    return " ".join((record.city, record.state_ansi, record.province, record.country)).lower()

def _matchable_fields(record: CityRecord):
    return (
        record.city,
        record.city_ascii,
        record.state_ansi,
        record.province,
        record.country,
        record.iso2,
        record.iso3,
    )

class CitySearchEngine:
    """
    Query the city dataset.

    Args:
        loader: DatasetLoader providing the records (loaded on first query)
        cache: SearchCache used by ``lookup_exact``
        max_city_length: Maximum ``lookup_exact`` input size in bytes
        max_query_length: Maximum ``find_partial`` input size in bytes
    """

    def __init__(self, loader: DatasetLoader, cache: Optional[SearchCache] = None,
                 max_city_length: int = DEFAULT_MAX_CITY_LENGTH,
                 max_query_length: int = DEFAULT_MAX_QUERY_LENGTH) -> None:
        self.loader = loader
        self.cache = cache if cache is not None else SearchCache()
        self.max_city_length = max_city_length
        self.max_query_length = max_query_length

    def _records(self, query: str, operation: str):
        try:
            return self.loader.load()
        except DataLoadError as e:
            raise SearchError(query, operation, e) from e

    def lookup_exact(self, city_name: Union[str, bytes]) -> List[CityRecord]:
        """
        Find cities whose name equals ``city_name``, ignoring case.

        Results, including empty ones, are cached under the lowercased
        normalized name, so repeated lookups skip the scan.

        Args:
            city_name: City name (at most ``max_city_length`` bytes)

        Returns:
            Matching records in dataset order; [] for empty input

        Raises:
            SearchError: Wrapping a ValidationError or a DataLoadError

        Example:
            >>> engine.lookup_exact("chicago")[0].city
            'Chicago'
        """
        try:
            normalized = validate_query(city_name, self.max_city_length)
        except ValidationError as e:
            raise SearchError(_display(city_name), "lookup_exact", e) from e

        if not normalized:
            return []

        term = normalized.lower()
        cache_key = CITY_CACHE_PREFIX + term

        cached, found = self.cache.get(cache_key)
        if found:
            logger.debug(f"Cache hit for '{cache_key}'")
            return list(cached)

        records = self._records(normalized, "lookup_exact")
        results = tuple(record for record in records if record.city.lower() == term)

        self.cache.set(cache_key, results)
        logger.debug(f"Cached {len(results)} results for '{cache_key}'")
        return list(results)

    def find_partial(self, search_text: Union[str, bytes]) -> List[CityRecord]:
        """
        Find cities matching every term of ``search_text``.

        Terms are compared as lowercase substrings of
        "city state_ansi province country"; a record matches only if all terms
        are found, in any order. Not cached.

        Raises:
            SearchError: Wrapping a ValidationError or a DataLoadError

        Example:
            >>> [c.province for c in engine.find_partial("springfield il")]
            ['Illinois']
        """
        try:
            normalized = validate_query(search_text, self.max_query_length)
        except ValidationError as e:
            raise SearchError(_display(search_text), "find_partial", e) from e

        terms = normalized.lower().split()
        if not terms:
            return []

        records = self._records(normalized, "find_partial")
        results = []
        for record in records:
            text = _partial_text(record)
            if all(term in text for term in terms):
                results.append(record)
        return results

    def find_by_country_code(self, code: str) -> List[CityRecord]:
        """
        Find cities whose ISO2 or ISO3 code equals ``code`` (case-insensitive).

        Raises:
            SearchError: Wrapping a ValidationError or a DataLoadError
        """
        try:
            normalized = validate_country_code(code)
        except ValidationError as e:
            raise SearchError(code, "find_by_country_code", e) from e

        if not normalized:
            return []

        wanted = normalized.lower()
        records = self._records(normalized, "find_by_country_code")
        return [
            record for record in records
            if record.iso2.lower() == wanted or record.iso3.lower() == wanted
        ]

    def search(self, query: str, options: Optional[SearchOptions] = None) -> List[CityRecord]:
        """
        Generic matcher over city, city_ascii, state_ansi, province, country,
        iso2 and iso3.

        A record matches if at least one field equals (``exact_match``) or
        contains the query. The query is used as given: it is neither trimmed
        nor validated, so callers must validate untrusted input themselves.

        Raises:
            SearchError: Wrapping a DataLoadError
        """
        if not query:
            return []

        options = options or default_search_options()
        needle = query if options.case_sensitive else query.lower()

        records = self._records(query, "search")
        results = []
        for record in records:
            for field in _matchable_fields(record):
                value = field if options.case_sensitive else field.lower()
                if (value == needle) if options.exact_match else (needle in value):
                    results.append(record)
                    break
        return results

    def all_records(self) -> List[CityRecord]:
        """
        Every record in dataset order.

        Raises:
            SearchError: Wrapping a DataLoadError
        """
        return list(self._records("", "all_records"))
