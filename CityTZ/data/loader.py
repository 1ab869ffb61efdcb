"""
Dataset ingestion for the CityTZ package.

This module turns a ``cityMap.json`` document into an ordered tuple of
CityRecord objects and provides DatasetLoader, which performs that work exactly
once per instance.

A few source fields (``pop``, ``iso2``, ``iso3``) are written as a JSON number
in some records and as a JSON string in others. They are decoded into a small
tagged variant first and then converted with a total coercion function per
target type, so no caller ever inspects raw JSON types.
"""

import json
import os
import sys
import threading
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from CityTZ.data.models import CityRecord
from CityTZ.exceptions import DataLoadError
from CityTZ.utils.logging import get_logger

logger = get_logger(__name__)

DATA_FILE_NAME = 'cityMap.json'
DATA_FILE_ENV = 'CITYTZ_DATA_FILE'

# JSON key -> CityRecord attribute for plain string fields
STRING_FIELDS: Dict[str, str] = {
    'city': 'city',
    'country': 'country',
    'timezone': 'timezone',
    'province': 'province',
    'exactCity': 'exact_city',
    'city_ascii': 'city_ascii',
    'state_ansi': 'state_ansi',
    'exactProvince': 'exact_province',
}

COORDINATE_FIELDS = ('lat', 'lng')

@dataclass(frozen=True)
class NumberValue:
    """A union field that was written as a JSON number."""
    value: Union[int, float]

@dataclass(frozen=True)
class TextValue:
    """A union field that was written as a JSON string."""
    value: str

@dataclass(frozen=True)
class OtherValue:
    """A union field holding any other JSON value (bool, array, object)."""
    value: Any

RawValue = Union[NumberValue, TextValue, OtherValue, None]

def decode_raw(value: Any) -> RawValue:
    """
    Tag a decoded JSON value for a number-or-string field.

    ``None`` (JSON null or an absent key) stays ``None``.
    """
    if value is None:
        return None
    # bool is an int subclass and must not be treated as a number
    if isinstance(value, bool):
        return OtherValue(value)
    if isinstance(value, (int, float)):
        return NumberValue(value)
    if isinstance(value, str):
        return TextValue(value)
    return OtherValue(value)

def to_float(raw: RawValue) -> float:
    """
    Coerce a tagged value to float.

    Numbers are widened, numeric text is parsed, and everything else
    (including unparseable text) becomes 0.0.
    """
    if isinstance(raw, NumberValue):
        return float(raw.value)
    if isinstance(raw, TextValue):
        try:
            return float(raw.value)
        except ValueError:
            return 0.0
    return 0.0

def format_number(value: Union[int, float]) -> str:
    """
    Format a number as its shortest round-trip decimal string.

    No exponent and no trailing zeros: ``12.0`` gives ``"12"``, ``0.5`` gives
    ``"0.5"`` and ``1e21`` gives ``"1000000000000000000000"``.
    """
    if isinstance(value, int):
        return str(value)

    # repr() is the shortest string that round-trips; Decimal drops the exponent
    text = format(Decimal(repr(value)), 'f')
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    return text

def to_text(raw: RawValue) -> str:
    """
    Coerce a tagged value to text.

    Text passes through unchanged, numbers are formatted with
    format_number(), null becomes "" and any other value is rendered as
    compact JSON (``true``, ``[1,2]``).
    """
    if raw is None:
        return ""
    if isinstance(raw, TextValue):
        return raw.value
    if isinstance(raw, NumberValue):
        return format_number(raw.value)
    return json.dumps(raw.value, separators=(',', ':'), ensure_ascii=False)

def _reject_constant(name: str) -> None:
    raise ValueError(f"invalid JSON constant: {name}")

def _coordinate(item: Dict[str, Any], key: str, index: int) -> float:
    value = item.get(key)
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"record {index}: field '{key}' must be a number, got {type(value).__name__}")
    return float(value)

def _string(item: Dict[str, Any], key: str, index: int) -> str:
    value = item.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise TypeError(f"record {index}: field '{key}' must be a string, got {type(value).__name__}")
    return value

def record_from_dict(item: Dict[str, Any], index: int = 0) -> CityRecord:
    """
    Build a CityRecord from one decoded JSON object.

    Raises:
        TypeError: If a coordinate is not a number or a string field is not a string
    """
    fields: Dict[str, Any] = {
        key: _coordinate(item, key, index) for key in COORDINATE_FIELDS
    }
    for key, attr in STRING_FIELDS.items():
        fields[attr] = _string(item, key, index)

    fields['pop'] = to_float(decode_raw(item.get('pop')))
    fields['iso2'] = to_text(decode_raw(item.get('iso2')))
    fields['iso3'] = to_text(decode_raw(item.get('iso3')))

    return CityRecord(**fields)

def parse_city_data(text: Union[str, bytes]) -> Tuple[CityRecord, ...]:
    """
    Parse a cityMap.json document.

    Args:
        text: The document contents

    Returns:
        The records in document order

    Raises:
        DataLoadError: With operation ``parse`` if the document is not a
            valid array of objects or a record has a field of the wrong type
    """
    try:
        document = json.loads(text, parse_constant=_reject_constant)
        if not isinstance(document, list):
            raise TypeError(f"expected a JSON array of objects, got {type(document).__name__}")

        records: List[CityRecord] = []
        for index, item in enumerate(document):
            if not isinstance(item, dict):
                raise TypeError(f"record {index}: expected a JSON object, got {type(item).__name__}")
            records.append(record_from_dict(item, index))
    except (ValueError, TypeError, RecursionError) as e:
        raise DataLoadError("parse", e) from e

    return tuple(records)

def get_package_data_file() -> str:
    """Path of the dataset shipped inside the package."""
    try:
        base_dir = os.path.dirname(os.path.abspath(sys.modules['CityTZ'].__file__))
    except (KeyError, AttributeError):
        base_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    return os.path.join(base_dir, 'data', DATA_FILE_NAME)

def get_data_file(path: Optional[str] = None, config=None) -> str:
    """
    Resolve the dataset location.

    This function checks the following locations in order:
    1. The explicit ``path`` argument
    2. The ``data.location`` configuration value
    3. The CITYTZ_DATA_FILE environment variable
    4. The cityMap.json shipped with the package

    The file is not checked for existence here.
    """
    if path:
        return os.path.expanduser(path)

    if config is not None:
        location = config.get("data.location")
        if location:
            return os.path.expanduser(location)

    if os.environ.get(DATA_FILE_ENV):
        return os.path.expanduser(os.environ[DATA_FILE_ENV])

    return get_package_data_file()

def read_city_data(path: str) -> Tuple[CityRecord, ...]:
    """
    Read and parse a dataset file.

    Raises:
        DataLoadError: ``locate`` if the file is missing, ``read`` if it
            cannot be read, ``parse`` if its contents are invalid
    """
    if not os.path.isfile(path):
        raise DataLoadError("locate", FileNotFoundError(f"city data file not found at {path}"))

    try:
        with open(path, 'rb') as f:
            contents = f.read()
    except OSError as e:
        raise DataLoadError("read", e) from e

    return parse_city_data(contents)

class DatasetLoader:
    """
    Load the city dataset exactly once.

    The first call to ``load()`` does the work; concurrent callers block until
    it finishes, and every later caller gets the same outcome: the same tuple
    of records, or the same DataLoadError instance re-raised. A failed load is
    never retried.

    Args:
        path: Dataset file; resolved with get_data_file() when None
        config: Configuration manager consulted for ``data.location``
        reader: Callable returning the records, replacing file access
            (used to plug in other sources)
    """

    def __init__(self, path: Optional[str] = None, config=None,
                 reader: Optional[Callable[[], Sequence[CityRecord]]] = None) -> None:
        self.path = None if reader is not None else get_data_file(path, config)
        self._reader = reader or (lambda: read_city_data(self.path))
        self._lock = threading.Lock()
        self._done = False
        self._records: Tuple[CityRecord, ...] = ()
        self._error: Optional[DataLoadError] = None

    @property
    def loaded(self) -> bool:
        """True once a load has been attempted, whether or not it succeeded."""
        return self._done

    def load(self) -> Tuple[CityRecord, ...]:
        """
        Return the dataset, loading it on first use.

        Raises:
            DataLoadError: If the (single) load attempt failed
        """
        if not self._done:
            with self._lock:
                if not self._done:
                    self._load_once()

        if self._error is not None:
            # Drop frames left over from earlier raises of the same instance
            raise self._error.with_traceback(None)
        return self._records

    def _load_once(self) -> None:
        source = self.path or 'custom reader'
        start_time = time.time()
        try:
            records = self._reader()
            self._records = tuple(records)
            elapsed = time.time() - start_time
            logger.info(f"Loaded {len(self._records)} cities from {source} in {elapsed:.3f}s")
        except DataLoadError as e:
            self._error = e
            logger.error(f"Failed to load city data from {source}: {e}")
        except Exception as e:
            self._error = DataLoadError("read", e)
            logger.error(f"Failed to load city data from {source}: {e}")
        finally:
            self._done = True
