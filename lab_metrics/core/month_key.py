# lab_metrics/core/month_key.py
import re
from datetime import date, datetime
from typing import Optional, Tuple

# "YYYY-MM", optionally followed by a day or a timestamp
MONTH_KEY_PATTERN = re.compile(r'^(\d{4})-(\d{1,2})(?:-\d{1,2}(?:[T ].*)?)?$')

def parse_month_key(value) -> Optional[Tuple[int, int]]:
    """Parse a month key into (year, month).

    Args:
        value: "YYYY-MM" string, date or datetime

    Returns:
        Tuple with year and month number, or None when the value is malformed
    """
    if isinstance(value, (date, datetime)):
        return (value.year, value.month)

    if not isinstance(value, str):
        return None

    match = MONTH_KEY_PATTERN.match(value.strip())
    if not match:
        return None

    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        return None

    return (year, month)

def format_month_key(year: int, month: int) -> str:
    """Canonical "YYYY-MM" key."""
    return f"{year:04d}-{month:02d}"

def month_sort_key(value) -> Tuple[int, int]:
    """Ordering key for month keys; malformed keys sort first."""
    parsed = parse_month_key(value)
    return parsed if parsed else (0, 0)
