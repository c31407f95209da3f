# lab_metrics/core/evolution.py
import math
from typing import Optional

from ..models import Evolution
from ..utils.math_utils import is_finite_number, round_half_away

UNAVAILABLE_LABEL = 'N/A'

def unavailable() -> Evolution:
    return Evolution(value=None, label=UNAVAILABLE_LABEL)

def format_evolution(value: float) -> str:
    """Badge label with an explicit sign and one decimal."""
    return f"{value:+.1f}%"

def calculate_evolution(previous: Optional[float], current: Optional[float]) -> Evolution:
    """Percentage change from a comparison value to a current value.

    Args:
        previous: Comparison value; None when there is nothing to compare to
        current: Current value

    Returns:
        Evolution with:
        - "N/A" when previous is missing or either value is not finite
        - "+100%" when previous is 0 and current is positive, "0%" otherwise
        - the change relative to |previous|, rounded to 1 decimal
    """
    if previous is None:
        return unavailable()

    if not is_finite_number(previous) or not is_finite_number(current):
        return unavailable()

    if previous == 0:
        if current > 0:
            return Evolution(value=100.0, label='+100%')
        return Evolution(value=0.0, label='0%')

    change = ((current - previous) / abs(previous)) * 100.0
    if not math.isfinite(change):
        return unavailable()

    value = round_half_away(change, 1)
    return Evolution(value=value, label=format_evolution(value))
