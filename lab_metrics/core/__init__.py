from .month_key import parse_month_key, format_month_key, month_sort_key
from .bucketizer import bucketize, normalize_record
from .gap_filler import fill_gaps, empty_record, count_by_provenance
from .aggregation import aggregate_records, aggregate_periods
from .ratios import (
    margin_percentage, stock_break_rate, months_of_stock,
    stock_value_percentage, break_cost_per_unit, purchase_ratio,
    avg_stock_unit_value, avg_margin_percentage, derive_ratios
)
from .forecast import series_totals, project_forecast, forecast_metric_set
from .evolution import calculate_evolution
from .engine import compute_domain_metrics, reproject, empty_domain_metrics

__all__ = [
    'parse_month_key',
    'format_month_key',
    'month_sort_key',
    'bucketize',
    'normalize_record',
    'fill_gaps',
    'empty_record',
    'count_by_provenance',
    'aggregate_records',
    'aggregate_periods',
    'margin_percentage',
    'stock_break_rate',
    'months_of_stock',
    'stock_value_percentage',
    'break_cost_per_unit',
    'purchase_ratio',
    'avg_stock_unit_value',
    'avg_margin_percentage',
    'derive_ratios',
    'series_totals',
    'project_forecast',
    'forecast_metric_set',
    'calculate_evolution',
    'compute_domain_metrics',
    'reproject',
    'empty_domain_metrics'
]
