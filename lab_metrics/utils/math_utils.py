# lab_metrics/utils/math_utils.py
import math
from decimal import Decimal
from typing import Iterable, Optional
import numpy as np

def to_number(value) -> float:
    """Coerce a raw field value to a float.

    Numbers may arrive as strings from the JSON layer or as Decimal from the
    database driver. Empty, non-numeric and non-finite values become 0.

    Args:
        value: Raw value

    Returns:
        Finite float
    """
    if value is None or isinstance(value, bool):
        return 0.0

    if isinstance(value, (int, float, Decimal, np.number)):
        number = float(value)
    else:
        text = str(value).strip().replace(',', '.')
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0

    if not math.isfinite(number):
        return 0.0

    return number

def safe_divide(numerator: float, denominator: float, factor: float = 1.0) -> float:
    """Divide and scale, returning 0 when the result would not be finite.

    Args:
        numerator: Numerator
        denominator: Denominator
        factor: Multiplier applied to the quotient

    Returns:
        numerator / denominator * factor, or 0.0 for a zero denominator
    """
    if denominator == 0:
        return 0.0

    result = (numerator / denominator) * factor

    if not math.isfinite(result):
        return 0.0

    return result

def sum_values(values: Iterable[float]) -> float:
    """Sum a sequence of floats with float64 accumulation."""
    array = np.fromiter(values, dtype=np.float64)
    if array.size == 0:
        return 0.0
    return float(np.sum(array))

def mean_values(values: Iterable[float]) -> float:
    """Arithmetic mean; 0 for an empty sequence."""
    array = np.fromiter(values, dtype=np.float64)
    if array.size == 0:
        return 0.0
    return float(np.mean(array))

def clamp(value: float, lower: float, upper: float) -> float:
    """Limit a value to [lower, upper]."""
    return max(lower, min(upper, value))

def round_half_away(value: float, decimals: int = 1) -> float:
    """Round to a number of decimals, halves away from zero.

    Args:
        value: Value to round
        decimals: Number of decimals

    Returns:
        Rounded value; negative zero is normalised to 0.0
    """
    factor = 10 ** decimals
    rounded = math.floor(abs(value) * factor + 0.5) / factor
    rounded = math.copysign(rounded, value)
    return rounded + 0.0 if rounded != 0 else 0.0

def is_finite_number(value: Optional[float]) -> bool:
    return value is not None and isinstance(value, (int, float, np.number)) and math.isfinite(value)
