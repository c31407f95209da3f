# lab_metrics/utils/date_utils.py
from datetime import date, datetime
from typing import List, Optional, Tuple, Union

def today() -> date:
    """The clock reading threaded into the engine by its callers."""
    return date.today()

def get_current_period(now: Optional[Union[date, datetime]] = None) -> Tuple[int, int]:
    """Get the current month number and year.

    Args:
        now: Reference date; defaults to today

    Returns:
        Tuple with month number (1..12) and year
    """
    if now is None:
        now = today()
    return (now.month, now.year)

def get_previous_year(year: int) -> int:
    return year - 1

def months_up_to(month: int) -> List[int]:
    """Month numbers from January through the given month, inclusive."""
    return list(range(1, month + 1))

def get_query_window(year: int) -> Tuple[date, date]:
    """First and last day covered by a two-year metrics request.

    Args:
        year: Current calendar year

    Returns:
        Tuple with January 1st of the prior year and December 31st of the year
    """
    return (date(year - 1, 1, 1), date(year, 12, 31))

def convert_to_date(value: Union[str, date, datetime, None]) -> Optional[date]:
    """Convert an ISO string, date or datetime to a date.

    Args:
        value: Value to convert

    Returns:
        Date object, or None for empty input

    Raises:
        ValueError: If the string is not an ISO date
    """
    if value is None or value == '':
        return None

    if isinstance(value, datetime):
        return value.date()

    if isinstance(value, date):
        return value

    return datetime.strptime(str(value).strip(), '%Y-%m-%d').date()
