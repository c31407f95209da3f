from typing import Dict

from lab_metrics.models import FilterSelection
from lab_metrics.exceptions import ValidationError
from lab_metrics.utils.math_utils import clamp, to_number

def validate_filters(filters: FilterSelection) -> Dict[str, str]:
    """Validate a filter selection.

    Args:
        filters: Filter selection to validate

    Returns:
        Dictionary with validation errors
    """
    errors = {}

    if filters is None:
        errors['filters'] = 'Filter selection is required'
        return errors

    if filters.is_empty():
        errors['filters'] = 'At least one product filter must be selected'

    for ean in filters.ean13_products:
        if not ean.isdigit():
            errors['ean13_products'] = f'Invalid EAN13 code: {ean}'
            break

    return errors

def validate_month_number(month: int) -> int:
    """Check a month number is within 1..12.

    Raises:
        ValidationError: If the month is out of range
    """
    if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
        raise ValidationError(f"Month number must be within 1..12, got {month!r}", code='INVALID_MONTH')
    return month

def clamp_percentage(value, lower: float = -100.0, upper: float = 100.0) -> float:
    """Coerce the forecast percentage input and clamp it to its bounds.

    Args:
        value: Raw percentage input
        lower: Minimum percentage
        upper: Maximum percentage

    Returns:
        Percentage within [lower, upper]; non-numeric input becomes 0
    """
    return clamp(to_number(value), lower, upper)
