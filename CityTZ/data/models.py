"""
Value types for the CityTZ data layer.
"""

from dataclasses import dataclass
from typing import Any, Dict

@dataclass(frozen=True)
class CityRecord:
    """
    A city with its timezone and geographical information.

    Records are immutable once loaded and safe to share between threads.
    No field is unique: city names repeat across countries, and
    ``exact_city``/``exact_province`` exist to tell duplicates apart.
    """
    lat: float = 0.0
    lng: float = 0.0
    pop: float = 0.0
    city: str = ""
    iso2: str = ""
    iso3: str = ""
    country: str = ""
    timezone: str = ""
    province: str = ""
    exact_city: str = ""
    city_ascii: str = ""
    state_ansi: str = ""
    exact_province: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Render the record with the key names used by cityMap.json."""
        return {
            "lat": self.lat,
            "lng": self.lng,
            "pop": self.pop,
            "city": self.city,
            "iso2": self.iso2,
            "iso3": self.iso3,
            "country": self.country,
            "timezone": self.timezone,
            "province": self.province,
            "exactCity": self.exact_city,
            "city_ascii": self.city_ascii,
            "state_ansi": self.state_ansi,
            "exactProvince": self.exact_province,
        }

@dataclass(frozen=True)
class SearchOptions:
    """
    Toggles for the generic matcher.

    Attributes:
        case_sensitive: Compare without folding case (default: fold)
        exact_match: Require full-field equality instead of substring containment
    """
    case_sensitive: bool = False
    exact_match: bool = False

def default_search_options() -> SearchOptions:
    """Return the default search configuration (case-insensitive substring)."""
    return SearchOptions()
