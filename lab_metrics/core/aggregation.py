# lab_metrics/core/aggregation.py
from typing import Dict, Iterable, List

from ..models import FieldKind, MonthlyRecord, PeriodTotals
from ..domains import get_domain_spec
from ..utils.math_utils import mean_values, sum_values
from ..utils.validation import validate_month_number
from ..utils.date_utils import months_up_to

def aggregate_records(records: Iterable[MonthlyRecord], domain) -> Dict[str, float]:
    """Aggregate monthly records into one total per field.

    SUM fields are summed; MEAN fields are averaged over the records given.
    Ratios are never aggregated here.

    Args:
        records: Monthly records of one domain
        domain: Domain of the records

    Returns:
        Dictionary with one value per domain field
    """
    spec = get_domain_spec(domain)
    records = list(records)

    totals = {}
    for field in spec.fields:
        values = [record.get(field.name) for record in records]
        if field.kind == FieldKind.MEAN:
            totals[field.name] = mean_values(values)
        else:
            totals[field.name] = sum_values(values)

    return totals

def aggregate_periods(
    current_bucket: Dict[int, MonthlyRecord],
    prior_bucket: Dict[int, MonthlyRecord],
    current_month: int,
    domain
) -> PeriodTotals:
    """Aggregate the current year to date and the two prior-year baselines.

    Args:
        current_bucket: Current-year records by month number
        prior_bucket: Prior-year records by month number
        current_month: Elapsed month of the current year (1..12)
        domain: Domain of the records

    Returns:
        PeriodTotals with current (all current-year months present),
        comparison (prior-year months 1..current_month) and global (all
        prior-year months)

    Raises:
        ValidationError: If current_month is outside 1..12
    """
    validate_month_number(current_month)

    comparable: List[MonthlyRecord] = [
        prior_bucket[month] for month in months_up_to(current_month)
        if month in prior_bucket
    ]

    return PeriodTotals(
        current=aggregate_records(_ordered(current_bucket), domain),
        comparison=aggregate_records(comparable, domain),
        global_=aggregate_records(_ordered(prior_bucket), domain)
    )

def _ordered(bucket: Dict[int, MonthlyRecord]) -> List[MonthlyRecord]:
    return [record for _, record in sorted(bucket.items())]
