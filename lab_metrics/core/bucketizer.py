# lab_metrics/core/bucketizer.py
from typing import Dict, Iterable, List, Mapping

from ..models import MonthlyRecord, YearBuckets
from ..domains import DomainSpec, get_domain_spec
from ..utils.math_utils import to_number
from ..utils.date_utils import get_previous_year
from .month_key import parse_month_key, format_month_key

def _as_mapping(raw) -> Mapping:
    """Accept dicts, MonthlyRecord instances and SQLAlchemy result rows."""
    if isinstance(raw, MonthlyRecord):
        return raw.to_dict()
    if isinstance(raw, Mapping):
        return raw
    mapping = getattr(raw, '_mapping', None)
    if mapping is not None:
        return mapping
    return {}

def normalize_record(raw: Mapping, spec: DomainSpec, month_key: str) -> MonthlyRecord:
    """Build a MonthlyRecord holding exactly the domain's numeric fields.

    The first alias present in the raw mapping wins for each field; missing
    or non-numeric values become 0.

    Args:
        raw: Raw record mapping
        spec: Domain the record belongs to
        month_key: Canonical "YYYY-MM" key

    Returns:
        Normalized record
    """
    values = {}
    for field in spec.fields:
        value = None
        for alias in field.aliases:
            if alias in raw:
                value = raw[alias]
                break
        values[field.name] = to_number(value)
    return MonthlyRecord(month=month_key, values=values)

def bucketize(records: Iterable, current_year: int, domain) -> YearBuckets:
    """Split flat monthly records into current-year and prior-year buckets.

    Records dated outside the two years are discarded. Records whose month
    cannot be parsed are dropped and reported in ``malformed``.

    Args:
        records: Raw records, each with a ``month`` key
        current_year: Current calendar year
        domain: Domain of the records

    Returns:
        YearBuckets for current_year and current_year - 1
    """
    spec = get_domain_spec(domain)
    prior_year = get_previous_year(current_year)

    buckets: Dict[int, Dict[int, MonthlyRecord]] = {current_year: {}, prior_year: {}}
    malformed: List = []
    duplicates: List[str] = []

    for raw in records or []:
        mapping = _as_mapping(raw)
        month_value = mapping.get('month')
        parsed = parse_month_key(month_value)

        if parsed is None:
            malformed.append(month_value)
            continue

        year, month = parsed
        if year not in buckets:
            continue

        key = format_month_key(year, month)
        if month in buckets[year]:
            duplicates.append(key)

        buckets[year][month] = normalize_record(mapping, spec, key)

    return YearBuckets(
        current=buckets[current_year],
        prior=buckets[prior_year],
        malformed=tuple(malformed),
        duplicates=tuple(duplicates)
    )
