# lab_metrics/core/ratios.py
"""
Ratio metrics derived from aggregated totals.

Every ratio is computed from summed (or averaged) numerators and
denominators, never by averaging per-month ratios. A zero denominator
yields 0.
"""
from typing import Callable, Dict, Mapping

from ..domains import get_domain_spec
from ..utils.math_utils import safe_divide

def margin_percentage(totals: Mapping[str, float]) -> float:
    """margin / revenue x 100."""
    return safe_divide(totals.get('margin', 0.0), totals.get('revenue', 0.0), 100.0)

def stock_break_rate(totals: Mapping[str, float]) -> float:
    """break_quantity / products_ordered x 100."""
    return safe_divide(totals.get('break_quantity', 0.0), totals.get('products_ordered', 0.0), 100.0)

def months_of_stock(totals: Mapping[str, float]) -> float:
    """Stock value expressed in months of revenue: stock_value / (revenue / 12)."""
    return safe_divide(totals.get('stock_value', 0.0), totals.get('revenue', 0.0), 12.0)

def stock_value_percentage(totals: Mapping[str, float]) -> float:
    """stock_value / revenue x 100."""
    return safe_divide(totals.get('stock_value', 0.0), totals.get('revenue', 0.0), 100.0)

def break_cost_per_unit(totals: Mapping[str, float]) -> float:
    """break_amount / break_quantity."""
    return safe_divide(totals.get('break_amount', 0.0), totals.get('break_quantity', 0.0))

def purchase_ratio(totals: Mapping[str, float]) -> float:
    """Purchase cost per 100 of revenue: purchase_amount / revenue x 100."""
    return safe_divide(totals.get('purchase_amount', 0.0), totals.get('revenue', 0.0), 100.0)

def avg_stock_unit_value(totals: Mapping[str, float]) -> float:
    """Value of one unit in stock: stock_value / avg_stock."""
    return safe_divide(totals.get('stock_value', 0.0), totals.get('avg_stock', 0.0))

def avg_margin_percentage(totals: Mapping[str, float]) -> float:
    """avg_margin / avg_sale_price x 100."""
    return safe_divide(totals.get('avg_margin', 0.0), totals.get('avg_sale_price', 0.0), 100.0)

RATIO_FUNCTIONS: Dict[str, Callable[[Mapping[str, float]], float]] = {
    'margin_percentage': margin_percentage,
    'stock_break_rate': stock_break_rate,
    'months_of_stock': months_of_stock,
    'stock_value_percentage': stock_value_percentage,
    'break_cost_per_unit': break_cost_per_unit,
    'purchase_ratio': purchase_ratio,
    'avg_stock_unit_value': avg_stock_unit_value,
    'avg_margin_percentage': avg_margin_percentage,
}

def derive_ratios(totals: Mapping[str, float], domain) -> Dict[str, float]:
    """Compute the ratio set of a domain from one aggregate.

    Args:
        totals: Aggregated field totals
        domain: Domain the totals belong to

    Returns:
        Dictionary of ratio name to value
    """
    spec = get_domain_spec(domain)
    return {name: RATIO_FUNCTIONS[name](totals) for name in spec.ratios}
