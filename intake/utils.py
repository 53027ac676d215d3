"""
Utility functions for value picking, date normalization and name handling.
"""

from datetime import date, datetime, timezone
from typing import Any, Dict, Optional


OTHER_SENTINEL = 'other'

# Formats accepted after the ISO parsers have failed
FALLBACK_DATE_FORMATS = [
    '%Y/%m/%d',
    '%m/%d/%Y',
    '%B %d, %Y',
    '%b %d, %Y',
    '%d %B %Y',
    '%d %b %Y',
]


def is_blank(value: Any) -> bool:
    """True for None, empty/whitespace strings and empty containers."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ''
    if isinstance(value, (dict, list, tuple, set)):
        return len(value) == 0
    return False


def pick(record: Optional[Dict[str, Any]], *keys: str) -> Any:
    """
    Return the first non-empty value found under any of the given keys.

    Args:
        record: Source mapping (may be None)
        keys: Candidate keys, tried in order

    Returns:
        The first value that is not None or a blank string, else None
    """
    if not isinstance(record, dict):
        return None
    for key in keys:
        value = record.get(key)
        if value is None or (isinstance(value, str) and not value.strip()):
            continue
        return value
    return None


def resolve_other(selected: Any, override: Any) -> Any:
    """
    Apply the "Other, please specify" substitution.

    When the select holds the sentinel, the free text wins, falling back to
    the sentinel itself if the free text is blank.
    """
    if selected == OTHER_SENTINEL:
        if isinstance(override, str) and override.strip():
            return override.strip()
        return OTHER_SENTINEL
    return selected


def _to_utc_date(value: datetime) -> date:
    # Naive datetimes are taken to be UTC already
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.date()


def _parse_date_string(text: str) -> Optional[date]:
    text = text.strip()
    if not text:
        return None

    try:
        return date.fromisoformat(text)
    except ValueError:
        pass

    try:
        return _to_utc_date(datetime.fromisoformat(text.replace('Z', '+00:00')))
    except ValueError:
        pass

    for fmt in FALLBACK_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    return None


def normalize_date(value: Any) -> Optional[str]:
    """
    Normalize a date-like value to a YYYY-MM-DD string.

    Accepts date and datetime objects, ISO date/timestamp strings, a few
    common textual formats and epoch milliseconds. The calendar date is taken
    in UTC, so a timestamp carrying a negative offset late in the evening
    lands on the following day.

    Args:
        value: The value to normalize

    Returns:
        The YYYY-MM-DD string, or None when the value is empty or unparseable
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        return _to_utc_date(value).isoformat()

    if isinstance(value, date):
        return value.isoformat()

    if isinstance(value, (int, float)):
        if not value:
            return None
        try:
            stamp = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
        return stamp.date().isoformat()

    if isinstance(value, str):
        parsed = _parse_date_string(value)
        return parsed.isoformat() if parsed else None

    return None


def compute_age(birth_date: Any, as_of: Optional[date] = None) -> Optional[int]:
    """
    Compute completed years between a birth date and a reference date.

    Args:
        birth_date: Anything normalize_date accepts
        as_of: Reference date; without one no age can be derived

    Returns:
        Age in whole years, or None
    """
    normalized = normalize_date(birth_date)
    if normalized is None or as_of is None:
        return None

    born = date.fromisoformat(normalized)
    age = as_of.year - born.year
    if (as_of.month, as_of.day) < (born.month, born.day):
        age -= 1
    return age


def parse_name(full_name: Any) -> Dict[str, Optional[str]]:
    """
    Split a full name into first/last names (best effort).

    The last whitespace-separated token is the last name; everything before
    it is the first name.
    """
    empty = {'first_name': None, 'last_name': None, 'full_name': None}
    if not isinstance(full_name, str):
        return empty

    trimmed = full_name.strip()
    if not trimmed:
        return empty

    parts = trimmed.split()
    if len(parts) == 1:
        return {'first_name': parts[0], 'last_name': None, 'full_name': trimmed}

    return {
        'first_name': ' '.join(parts[:-1]),
        'last_name': parts[-1],
        'full_name': trimmed,
    }


def coerce_int(value: Any) -> Optional[int]:
    """Coerce a form value to an integer, None when it is not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str) and value.strip():
        try:
            return int(float(value.strip()))
        except ValueError:
            return None
    return None


def coerce_float(value: Any) -> Optional[float]:
    """Coerce a form value to a float (money amounts), None when it is not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str) and value.strip():
        try:
            return float(value.strip().replace(',', ''))
        except ValueError:
            return None
    return None
