# lab_metrics/domains.py
"""
Field catalogue for each metric domain.

Each domain declares its numeric fields, how they aggregate across months,
the raw column names accepted for them, and the ratios derived from the
aggregated totals. Ratio columns delivered by the source (stock_break_rate,
avg_margin_percentage) are not fields; ratios are always recomputed
from aggregated numerators and denominators.
"""
from typing import Dict, Tuple

from lab_metrics.models import Domain, FieldKind
from lab_metrics.exceptions import ValidationError

class FieldSpec:
    """A numeric field of a domain record."""

    def __init__(self, name: str, kind: FieldKind, aliases: Tuple[str, ...] = ()):
        self.name = name
        self.kind = kind
        self.aliases = (name,) + tuple(aliases)

    def __repr__(self):
        return f"FieldSpec({self.name!r}, {self.kind.value})"

class DomainSpec:
    """Fields and ratios of one metric domain."""

    def __init__(self, domain: Domain, fields: Tuple[FieldSpec, ...], ratios: Tuple[str, ...]):
        self.domain = domain
        self.fields = fields
        self.ratios = ratios

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def __repr__(self):
        return f"DomainSpec({self.domain.value!r})"

DOMAIN_SPECS: Dict[Domain, DomainSpec] = {
    Domain.SALES: DomainSpec(
        Domain.SALES,
        fields=(
            FieldSpec('quantity', FieldKind.SUM, ('total_quantity', 'sellOut', 'sell_out')),
            FieldSpec('revenue', FieldKind.SUM, ('total_revenue',)),
            FieldSpec('margin', FieldKind.SUM, ('total_margin',)),
            FieldSpec('purchase_quantity', FieldKind.SUM, ('purchaseQuantity', 'sellIn', 'sell_in')),
            FieldSpec('purchase_amount', FieldKind.SUM, ('purchaseAmount',)),
        ),
        ratios=('margin_percentage', 'purchase_ratio'),
    ),
    Domain.STOCK: DomainSpec(
        Domain.STOCK,
        fields=(
            FieldSpec('avg_stock', FieldKind.MEAN, ('total_avg_stock', 'avgStock')),
            FieldSpec('stock_value', FieldKind.MEAN, ('total_stock_value', 'stockValue')),
            FieldSpec('quantity', FieldKind.SUM, ('total_quantity',)),
            FieldSpec('revenue', FieldKind.SUM, ('total_revenue',)),
        ),
        ratios=('months_of_stock', 'stock_value_percentage', 'avg_stock_unit_value'),
    ),
    Domain.STOCK_BREAK: DomainSpec(
        Domain.STOCK_BREAK,
        fields=(
            FieldSpec('products_ordered', FieldKind.SUM, ('total_products_ordered', 'productsOrdered', 'productOrder')),
            FieldSpec('break_quantity', FieldKind.SUM, ('stock_break_products', 'breakQuantity', 'breakProduct')),
            FieldSpec('break_amount', FieldKind.SUM, ('stock_break_amount', 'breakAmount')),
        ),
        ratios=('stock_break_rate', 'break_cost_per_unit'),
    ),
    Domain.PRICING: DomainSpec(
        Domain.PRICING,
        fields=(
            FieldSpec('avg_sale_price', FieldKind.MEAN, ('avgSalePrice',)),
            FieldSpec('avg_purchase_price', FieldKind.MEAN, ('avgPurchasePrice',)),
            FieldSpec('avg_margin', FieldKind.MEAN, ('avgMargin',)),
            FieldSpec('unique_products_sold', FieldKind.MEAN, ('uniqueProductsSold',)),
            FieldSpec('unique_pharmacies', FieldKind.MEAN, ('unique_selling_pharmacies', 'uniquePharmacies', 'uniqueSellingPharmacies')),
        ),
        ratios=('avg_margin_percentage',),
    ),
}

def get_domain_spec(domain) -> DomainSpec:
    """Look up the spec of a domain given as a Domain or its string value.

    Raises:
        ValidationError: If the domain is unknown
    """
    try:
        return DOMAIN_SPECS[Domain.from_string(domain)]
    except ValueError as e:
        raise ValidationError(str(e), code='UNKNOWN_DOMAIN')
