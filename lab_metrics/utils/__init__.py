from .date_utils import get_current_period, get_query_window, convert_to_date
from .math_utils import to_number, safe_divide, round_half_away
from .validation import validate_filters, validate_month_number, clamp_percentage

__all__ = [
    'get_current_period',
    'get_query_window',
    'convert_to_date',
    'to_number',
    'safe_divide',
    'round_half_away',
    'validate_filters',
    'validate_month_number',
    'clamp_percentage'
]
