# lab_metrics/core/forecast.py
from typing import Dict, Sequence, Tuple

from ..models import FieldKind, ForecastEntry, ForecastState, MetricSet
from ..domains import get_domain_spec
from ..exceptions import CalculationError
from ..utils.math_utils import mean_values, sum_values
from ..utils.validation import clamp_percentage
from .ratios import derive_ratios

def growth_factor(percentage: float) -> float:
    """Multiplier applied to the base totals for a growth percentage."""
    return 1.0 + (percentage / 100.0)

def series_totals(series: Sequence[ForecastEntry], domain) -> Dict[str, float]:
    """Aggregate the 12-month series before projection.

    SUM fields are summed and MEAN fields averaged over all 12 entries;
    Empty months count as zeros in both.

    Args:
        series: Gap-filled forecast series
        domain: Domain of the series

    Returns:
        Dictionary with one value per domain field

    Raises:
        CalculationError: If the series does not hold 12 entries
    """
    if len(series) != 12:
        raise CalculationError(
            f"Forecast series must hold 12 months, got {len(series)}",
            code='INVALID_SERIES'
        )

    spec = get_domain_spec(domain)
    totals = {}
    for field in spec.fields:
        if field.kind == FieldKind.MEAN:
            totals[field.name] = mean_values(entry.record.get(field.name) for entry in series)
        else:
            totals[field.name] = sum_values(entry.record.get(field.name) for entry in series)

    return totals

def project_forecast(series: Sequence[ForecastEntry], percentage, domain) -> ForecastState:
    """Scale the full-year series totals by a growth percentage.

    The percentage is clamped to [-100, 100]; non-numeric input counts as 0.
    The function is pure: the same series and percentage always give the
    same totals, and a 0 percentage returns the series totals unchanged.

    Args:
        series: Gap-filled forecast series (12 entries)
        percentage: Growth percentage
        domain: Domain of the series

    Returns:
        ForecastState with the clamped percentage and projected totals
    """
    percentage = clamp_percentage(percentage)
    base = series_totals(series, domain)

    if percentage == 0:
        return ForecastState(percentage=0.0, projected_totals=dict(base))

    factor = growth_factor(percentage)
    projected = {name: value * factor for name, value in base.items()}

    return ForecastState(percentage=percentage, projected_totals=projected)

def forecast_metric_set(state: ForecastState, domain) -> MetricSet:
    """Projected totals with ratios recomputed from the projected values."""
    totals = dict(state.projected_totals)
    return MetricSet(totals=totals, ratios=derive_ratios(totals, domain))

def project_metric_set(series: Sequence[ForecastEntry], percentage, domain) -> Tuple[ForecastState, MetricSet]:
    """Project the series and derive the forecast ratios in one step."""
    state = project_forecast(series, percentage, domain)
    return state, forecast_metric_set(state, domain)
