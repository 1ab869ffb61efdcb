"""
Input validation for CityTZ search queries.

Query strings and country codes pass through here before they reach the search
engine. The suspicious-pattern check is a denylist heuristic that rejects
obvious path traversal, markup, protocol and code-execution probes; it is not a
parser and must not be treated as a security boundary.
"""

from typing import List, Tuple, Union

from CityTZ.exceptions import ValidationError

# (pattern, category) pairs matched against the lowercased, trimmed input
SUSPICIOUS_PATTERNS: List[Tuple[str, str]] = [
    ("../", "path traversal"),
    ("..\\", "path traversal"),
    ("..%2f", "path traversal"),
    ("..%5c", "path traversal"),
    ("<script", "markup injection"),
    ("</script>", "markup injection"),
    ("javascript:", "protocol injection"),
    ("data:", "protocol injection"),
    ("eval(", "code execution"),
    ("exec(", "code execution"),
    ("system(", "code execution"),
]

_ASCII_UPPERCASE = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZ")

def _byte_length(raw: Union[str, bytes]) -> int:
    if isinstance(raw, bytes):
        return len(raw)
    # surrogatepass so that malformed strings are still measured, not rejected,
    # at this step
    return len(raw.encode('utf-8', 'surrogatepass'))

def _decode(raw: Union[str, bytes]) -> str:
    """Return ``raw`` as well-formed text or raise ValidationError."""
    try:
        if isinstance(raw, bytes):
            return raw.decode('utf-8')
        raw.encode('utf-8')
        return raw
    except UnicodeError:
        raise ValidationError(
            "input", "invalid encoding",
            detail="input contains invalid UTF-8 characters"
        ) from None

def find_suspicious_pattern(text: str) -> Union[Tuple[str, str], None]:
    """Return the first (pattern, category) found in ``text``, or None."""
    lowered = text.lower()
    for pattern, category in SUSPICIOUS_PATTERNS:
        if pattern in lowered:
            return pattern, category
    return None

def validate_query(raw: Union[str, bytes], max_length: int) -> str:
    """
    Validate and normalize a free-text query.

    Args:
        raw: The query as received (str, or UTF-8 bytes)
        max_length: Maximum size of ``raw`` in bytes

    Returns:
        The query with leading/trailing whitespace removed. An empty input
        returns an empty string, which callers treat as "no query".

    Raises:
        ValidationError: ``too long``, ``invalid encoding`` or
            ``suspicious pattern`` (field ``input``)

    Example:
        >>> validate_query("  Chicago  ", 100)
        'Chicago'
    """
    if not raw:
        return ""

    size = _byte_length(raw)
    if size > max_length:
        raise ValidationError(
            "input", "too long",
            detail=f"input too long: {size} bytes (max: {max_length})"
        )

    normalized = _decode(raw).strip()

    match = find_suspicious_pattern(normalized)
    if match:
        raise ValidationError(
            "input", "suspicious pattern",
            detail=f"input contains potentially suspicious patterns ({match[1]})"
        )

    return normalized

def validate_country_code(raw: str) -> str:
    """
    Validate an ISO2 or ISO3 country code.

    The code is trimmed and upper-cased; two characters are checked as ISO2,
    three as ISO3, both requiring ASCII letters A-Z only.

    Args:
        raw: The code as received

    Returns:
        The normalized upper-case code, or "" for empty input

    Raises:
        ValidationError: ``invalid ISO2 format``, ``invalid ISO3 format`` or
            ``must be 2 or 3 characters`` (field ``iso_code``)

    Example:
        >>> validate_country_code("usa")
        'USA'
    """
    if not raw:
        return ""

    normalized = raw.strip().upper()
    length = len(normalized)

    if length in (2, 3):
        if not all(char in _ASCII_UPPERCASE for char in normalized):
            raise ValidationError(
                "iso_code", f"invalid ISO{length} format",
                value=raw,
                detail=f"invalid ISO{length} country code format"
            )
        return normalized

    raise ValidationError(
        "iso_code", "must be 2 or 3 characters",
        value=raw,
        detail="ISO code must be 2 or 3 characters"
    )
