# lab_metrics/core/gap_filler.py
from typing import Dict, Tuple

from ..models import ForecastEntry, MonthlyRecord, Provenance
from ..domains import get_domain_spec
from .month_key import format_month_key

def empty_record(year: int, month: int, domain) -> MonthlyRecord:
    """Zero-valued record for a month with no data."""
    spec = get_domain_spec(domain)
    return MonthlyRecord(
        month=format_month_key(year, month),
        values={name: 0.0 for name in spec.field_names}
    )

def fill_gaps(
    current_bucket: Dict[int, MonthlyRecord],
    prior_bucket: Dict[int, MonthlyRecord],
    current_year: int,
    domain
) -> Tuple[ForecastEntry, ...]:
    """Build the 12-month forecast series for the current year.

    Each month takes the current-year record when present, otherwise the
    prior-year record relabelled to the current year with its values kept
    verbatim, otherwise a zero record.

    Args:
        current_bucket: Current-year records by month number
        prior_bucket: Prior-year records by month number
        current_year: Year the series is labelled with
        domain: Domain of the records

    Returns:
        Tuple of exactly 12 ForecastEntry, January to December
    """
    series = []

    for month in range(1, 13):
        if month in current_bucket:
            series.append(ForecastEntry(current_bucket[month], Provenance.ACTUAL))
        elif month in prior_bucket:
            relabelled = prior_bucket[month].with_month(format_month_key(current_year, month))
            series.append(ForecastEntry(relabelled, Provenance.PRIOR_YEAR_FALLBACK))
        else:
            series.append(ForecastEntry(empty_record(current_year, month, domain), Provenance.EMPTY))

    return tuple(series)

def count_by_provenance(series) -> Dict[Provenance, int]:
    """Number of series entries per provenance."""
    counts = {provenance: 0 for provenance in Provenance}
    for entry in series:
        counts[entry.provenance] += 1
    return counts
