# lab_metrics/core/engine.py
"""
Monthly metrics pipeline for one domain.

records -> bucketize -> fill_gaps -> project_forecast
                     -> aggregate_periods -> derive_ratios
and calculate_evolution for current vs comparison and forecast vs global.

The reference date is always passed in by the caller; nothing here reads
the clock.
"""
from dataclasses import replace
from datetime import date, datetime
from typing import Dict, Iterable, Optional, Union

from ..models import DomainMetrics, MetricSet, Provenance
from ..domains import get_domain_spec
from ..config import config
from ..logging_setup import get_logger
from .bucketizer import bucketize
from .gap_filler import count_by_provenance, fill_gaps
from .aggregation import aggregate_periods
from .ratios import derive_ratios
from .forecast import project_metric_set
from .evolution import calculate_evolution

logger = get_logger(__name__)

def _metric_set(totals: Dict[str, float], domain) -> MetricSet:
    return MetricSet(totals=dict(totals), ratios=derive_ratios(totals, domain))

def compute_evolutions(
    current: MetricSet,
    adjusted: MetricSet,
    global_: MetricSet,
    forecast: MetricSet,
    domain
) -> Dict[str, Dict]:
    """Delta badges for every field and ratio of a domain.

    ``yoy`` compares the current year to date with the comparable window of
    the prior year; ``forecast`` compares the full-year forecast with the
    full prior year.
    """
    spec = get_domain_spec(domain)
    evolutions = {}
    for name in spec.field_names + spec.ratios:
        evolutions[name] = {
            'yoy': calculate_evolution(adjusted.value(name), current.value(name)),
            'forecast': calculate_evolution(global_.value(name), forecast.value(name)),
        }
    return evolutions

def compute_domain_metrics(
    records: Iterable,
    domain,
    now: Union[date, datetime],
    percentage=0.0,
    warn_on_dropped: Optional[bool] = None
) -> DomainMetrics:
    """Run the whole aggregation and forecast pipeline for one domain.

    Args:
        records: Raw monthly records (dicts with a ``month`` key)
        domain: Domain of the records
        now: Reference date; its year is the current year and its month the
             elapsed-months window of the comparison
        percentage: Forecast growth percentage
        warn_on_dropped: Log a warning for malformed records; defaults to the
                         METRICS configuration

    Returns:
        DomainMetrics
    """
    spec = get_domain_spec(domain)
    current_year, current_month = now.year, now.month

    buckets = bucketize(records, current_year, spec.domain)

    if warn_on_dropped is None:
        warn_on_dropped = config.metrics_config['warn_on_dropped_records']

    if buckets.dropped and warn_on_dropped:
        logger.warning(
            f"Dropped {buckets.dropped} {spec.domain.value} record(s) with malformed month: "
            f"{list(buckets.malformed)[:5]}"
        )
    if buckets.duplicates:
        logger.warning(
            f"Duplicate {spec.domain.value} records for {sorted(set(buckets.duplicates))}; kept the last one"
        )

    totals = aggregate_periods(buckets.current, buckets.prior, current_month, spec.domain)
    series = fill_gaps(buckets.current, buckets.prior, current_year, spec.domain)
    state, forecast = project_metric_set(series, percentage, spec.domain)

    current = _metric_set(totals.current, spec.domain)
    adjusted = _metric_set(totals.adjusted, spec.domain)
    global_ = _metric_set(totals.global_, spec.domain)

    counts = count_by_provenance(series)
    logger.debug(
        f"{spec.domain.value} {current_year}-{current_month:02d}: "
        f"{counts[Provenance.ACTUAL]} actual, {counts[Provenance.PRIOR_YEAR_FALLBACK]} fallback, "
        f"{counts[Provenance.EMPTY]} empty months"
    )

    return DomainMetrics(
        domain=spec.domain,
        current=current,
        adjusted=adjusted,
        global_=global_,
        forecast=forecast,
        forecast_percentage=state.percentage,
        series=series,
        evolutions=compute_evolutions(current, adjusted, global_, forecast, spec.domain),
        dropped_records=buckets.dropped
    )

def reproject(metrics: DomainMetrics, percentage) -> DomainMetrics:
    """Recompute only the forecast of existing metrics for a new percentage."""
    state, forecast = project_metric_set(metrics.series, percentage, metrics.domain)
    return replace(
        metrics,
        forecast=forecast,
        forecast_percentage=state.percentage,
        evolutions=compute_evolutions(
            metrics.current, metrics.adjusted, metrics.global_, forecast, metrics.domain
        )
    )

def empty_domain_metrics(domain, now: Union[date, datetime], percentage=0.0) -> DomainMetrics:
    """All-zero metrics, shown while no filter is selected."""
    return compute_domain_metrics([], domain, now, percentage, warn_on_dropped=False)
