"""Parsing of age thresholds such as ``30d`` or ``P2W``."""

import re
from datetime import timedelta

from grove.exceptions import InvalidDurationError

# Calendar approximations used for months and years
DAYS_PER_MONTH = 30
DAYS_PER_YEAR = 365

_SHORT_RE = re.compile(r"^(\d+(?:\.\d+)?)\s*([dDwWMmyYhHsS])$")
_DATE_PART_RE = re.compile(r"(\d+(?:\.\d+)?)([YMWD])")
_TIME_PART_RE = re.compile(r"(\d+(?:\.\d+)?)([HMS])")
_ISO_RE = re.compile(r"^P(?!$)(\d+(?:\.\d+)?[YMWD])*(T(\d+(?:\.\d+)?[HMS])+)?$")


def normalize_duration(duration_str: str) -> str:
    """Convert human-friendly durations to ISO 8601.

    ``30d`` -> ``P30D``, ``2w`` -> ``P2W``, ``6M`` -> ``P6M`` (months),
    ``30m`` -> ``PT30M`` (minutes), ``12h`` -> ``PT12H``. Strings that already
    start with ``P`` and strings that do not match are returned unchanged.
    """
    normalized = duration_str.strip()
    if not normalized or normalized.upper().startswith("P"):
        return normalized

    match = _SHORT_RE.match(normalized)
    if not match:
        return normalized

    value, unit = match.groups()
    # Uppercase M means months, lowercase m means minutes
    if unit == "M":
        return f"P{value}M"
    if unit == "m":
        return f"PT{value}M"
    if unit.upper() in ("H", "S"):
        return f"PT{value}{unit.upper()}"
    return f"P{value}{unit.upper()}"


def _parse_iso8601(iso: str) -> timedelta:
    upper = iso.upper()
    if not _ISO_RE.match(upper):
        return timedelta(0)

    date_part, _, time_part = upper[1:].partition("T")
    total = timedelta(0)
    for value, unit in _DATE_PART_RE.findall(date_part):
        amount = float(value)
        if unit == "Y":
            total += timedelta(days=amount * DAYS_PER_YEAR)
        elif unit == "M":
            total += timedelta(days=amount * DAYS_PER_MONTH)
        elif unit == "W":
            total += timedelta(weeks=amount)
        else:
            total += timedelta(days=amount)
    for value, unit in _TIME_PART_RE.findall(time_part):
        amount = float(value)
        if unit == "H":
            total += timedelta(hours=amount)
        elif unit == "M":
            total += timedelta(minutes=amount)
        else:
            total += timedelta(seconds=amount)
    return total


def parse_duration(duration_str: str) -> timedelta:
    """Parse a duration string into a positive timedelta.

    Args:
        duration_str: ``30d``, ``2w``, ``6M``, ``1y``, ``12h``, ``30m``, ``45s``
            or an ISO 8601 duration like ``P30D`` or ``PT1H30M``

    Raises:
        InvalidDurationError: if the string is empty, malformed or zero
    """
    if not duration_str or not duration_str.strip():
        raise InvalidDurationError(duration_str or "")

    duration = _parse_iso8601(normalize_duration(duration_str))
    if duration <= timedelta(0):
        raise InvalidDurationError(duration_str)
    return duration
