# lab_metrics/services/record_service.py
from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lab_metrics.models import Domain, FilterSelection
from lab_metrics.domains import get_domain_spec
from lab_metrics.exceptions import DatabaseError, ValidationError
from lab_metrics.utils.date_utils import get_query_window, today
from lab_metrics.utils.validation import validate_filters
from lab_metrics.logging_setup import get_logger

logger = get_logger(__name__)

# Products matching the catalogue filters; a NULL array disables a filter
FILTERED_PRODUCTS_CTE = """
filtered_products AS (
    SELECT dgp.code_13_ref, dgp.tva_percentage
    FROM data_globalproduct dgp
    WHERE
        (CAST(:distributors AS text[]) IS NULL OR dgp.lab_distributor = ANY(CAST(:distributors AS text[])))
        AND (CAST(:ranges AS text[]) IS NULL OR dgp.range_name = ANY(CAST(:ranges AS text[])))
        AND (CAST(:universes AS text[]) IS NULL OR dgp.universe = ANY(CAST(:universes AS text[])))
        AND (CAST(:categories AS text[]) IS NULL OR dgp.category = ANY(CAST(:categories AS text[])))
        AND (CAST(:sub_categories AS text[]) IS NULL OR dgp.sub_category = ANY(CAST(:sub_categories AS text[])))
        AND (CAST(:brands AS text[]) IS NULL OR dgp.brand_lab = ANY(CAST(:brands AS text[])))
        AND (CAST(:families AS text[]) IS NULL OR dgp.family = ANY(CAST(:families AS text[])))
        AND (CAST(:sub_families AS text[]) IS NULL OR dgp.sub_family = ANY(CAST(:sub_families AS text[])))
        AND (CAST(:specificities AS text[]) IS NULL OR dgp.specificity = ANY(CAST(:specificities AS text[])))
        AND (CAST(:ean13_products AS text[]) IS NULL OR dgp.code_13_ref = ANY(CAST(:ean13_products AS text[])))
)
"""

PHARMACY_FILTER = "(CAST(:pharmacies AS uuid[]) IS NULL OR dip.pharmacy_id = ANY(CAST(:pharmacies AS uuid[])))"

SALES_QUERY = f"""
WITH {FILTERED_PRODUCTS_CTE}
SELECT
    month,
    COALESCE(SUM(total_quantity), 0) AS total_quantity,
    COALESCE(SUM(revenue), 0) AS revenue,
    COALESCE(SUM(margin), 0) AS margin,
    COALESCE(SUM(purchase_quantity), 0) AS purchase_quantity,
    COALESCE(SUM(purchase_amount), 0) AS purchase_amount
FROM (
    SELECT
        TO_CHAR(ds.date, 'YYYY-MM') AS month,
        SUM(ds.quantity) AS total_quantity,
        SUM(ds.quantity * dis.price_with_tax) AS revenue,
        SUM((dis.price_with_tax - dis.weighted_average_price * (1 + COALESCE(fp.tva_percentage, 0) / 100)) * ds.quantity) AS margin,
        0 AS purchase_quantity,
        0 AS purchase_amount
    FROM data_sales ds
    JOIN data_inventorysnapshot dis ON ds.product_id = dis.id
    JOIN data_internalproduct dip ON dis.product_id = dip.id
    JOIN filtered_products fp ON dip.code_13_ref_id = fp.code_13_ref
    WHERE ds.date BETWEEN :start_date AND :end_date
        AND {PHARMACY_FILTER}
    GROUP BY 1

    UNION ALL

    SELECT
        ordered.month,
        0, 0, 0,
        SUM(ordered.qte) AS purchase_quantity,
        SUM(ordered.purchase_amount) AS purchase_amount
    FROM (
        SELECT DISTINCT ON (dor.id, dip.id)
            TO_CHAR(dor.sent_date, 'YYYY-MM') AS month,
            dpo.qte,
            dpo.qte * dis.weighted_average_price AS purchase_amount
        FROM data_productorder dpo
        JOIN data_order dor ON dpo.order_id = dor.id
        JOIN data_internalproduct dip ON dpo.product_id = dip.id
        JOIN filtered_products fp ON dip.code_13_ref_id = fp.code_13_ref
        JOIN data_inventorysnapshot dis ON dip.id = dis.product_id
        WHERE dor.sent_date BETWEEN :start_date AND :end_date
            AND {PHARMACY_FILTER}
        ORDER BY dor.id, dip.id, dis.date DESC
    ) ordered
    GROUP BY ordered.month
) combined
GROUP BY month
ORDER BY month
"""

STOCK_QUERY = f"""
WITH {FILTERED_PRODUCTS_CTE},
latest_price AS (
    SELECT DISTINCT ON (dis.product_id) dis.product_id, dis.weighted_average_price
    FROM data_inventorysnapshot dis
    ORDER BY dis.product_id, dis.date DESC
),
product_monthly_stock AS (
    SELECT
        TO_CHAR(dis.date, 'YYYY-MM') AS month,
        dip.id AS product_id,
        AVG(dis.stock) AS avg_stock,
        MAX(lp.weighted_average_price) AS weighted_average_price
    FROM data_inventorysnapshot dis
    JOIN data_internalproduct dip ON dis.product_id = dip.id
    JOIN filtered_products fp ON dip.code_13_ref_id = fp.code_13_ref
    LEFT JOIN latest_price lp ON lp.product_id = dis.product_id
    WHERE dis.date BETWEEN :start_date AND :end_date
        AND {PHARMACY_FILTER}
    GROUP BY 1, 2
),
monthly_stock AS (
    SELECT
        month,
        SUM(avg_stock) AS total_avg_stock,
        SUM(avg_stock * COALESCE(weighted_average_price, 0)) AS total_stock_value
    FROM product_monthly_stock
    GROUP BY month
),
monthly_sales AS (
    SELECT
        TO_CHAR(ds.date, 'YYYY-MM') AS month,
        SUM(ds.quantity) AS total_quantity,
        SUM(ds.quantity * dis.price_with_tax) AS total_revenue
    FROM data_sales ds
    JOIN data_inventorysnapshot dis ON ds.product_id = dis.id
    JOIN data_internalproduct dip ON dis.product_id = dip.id
    JOIN filtered_products fp ON dip.code_13_ref_id = fp.code_13_ref
    WHERE ds.date BETWEEN :start_date AND :end_date
        AND {PHARMACY_FILTER}
    GROUP BY 1
),
all_months AS (
    SELECT month FROM monthly_stock
    UNION
    SELECT month FROM monthly_sales
)
SELECT
    am.month,
    ROUND(COALESCE(ms.total_avg_stock, 0), 2) AS total_avg_stock,
    ROUND(COALESCE(ms.total_stock_value, 0), 2) AS total_stock_value,
    COALESCE(sd.total_quantity, 0) AS total_quantity,
    ROUND(COALESCE(sd.total_revenue, 0), 2) AS total_revenue
FROM all_months am
LEFT JOIN monthly_stock ms ON am.month = ms.month
LEFT JOIN monthly_sales sd ON am.month = sd.month
ORDER BY am.month
"""

STOCK_BREAK_QUERY = f"""
WITH {FILTERED_PRODUCTS_CTE},
latest_price AS (
    SELECT DISTINCT ON (dis.product_id) dis.product_id, dis.weighted_average_price
    FROM data_inventorysnapshot dis
    ORDER BY dis.product_id, dis.date DESC
)
SELECT
    TO_CHAR(dor.sent_date, 'YYYY-MM') AS month,
    SUM(dpo.qte + dpo.qte_ug) AS total_products_ordered,
    SUM(GREATEST((dpo.qte + dpo.qte_ug) - dpo.qte_r, 0)) AS stock_break_products,
    SUM(GREATEST((dpo.qte + dpo.qte_ug) - dpo.qte_r, 0) * COALESCE(lp.weighted_average_price, 0)) AS stock_break_amount
FROM data_productorder dpo
JOIN data_order dor ON dpo.order_id = dor.id
JOIN data_internalproduct dip ON dpo.product_id = dip.id
JOIN filtered_products fp ON dip.code_13_ref_id = fp.code_13_ref
LEFT JOIN latest_price lp ON lp.product_id = dip.id
WHERE dor.sent_date BETWEEN :start_date AND :end_date
    AND {PHARMACY_FILTER}
    -- only orders with at least one received line
    AND EXISTS (
        SELECT 1 FROM data_productorder received
        WHERE received.order_id = dpo.order_id AND received.qte_r > 0
    )
GROUP BY 1
ORDER BY 1
"""

PRICING_QUERY = f"""
WITH {FILTERED_PRODUCTS_CTE},
latest_price AS (
    SELECT DISTINCT ON (dis.product_id) dis.product_id, dis.weighted_average_price
    FROM data_inventorysnapshot dis
    ORDER BY dis.product_id, dis.date DESC
)
SELECT
    TO_CHAR(ds.date, 'YYYY-MM') AS month,
    ROUND(AVG(dis.price_with_tax), 2) AS avg_sale_price,
    ROUND(AVG(lp.weighted_average_price), 2) AS avg_purchase_price,
    ROUND(AVG(dis.price_with_tax - lp.weighted_average_price * (1 + COALESCE(fp.tva_percentage, 0) / 100)), 2) AS avg_margin,
    COUNT(DISTINCT ds.product_id) AS unique_products_sold,
    COUNT(DISTINCT dip.pharmacy_id) AS unique_selling_pharmacies
FROM data_sales ds
JOIN data_inventorysnapshot dis ON ds.product_id = dis.id
JOIN data_internalproduct dip ON dis.product_id = dip.id
JOIN filtered_products fp ON dip.code_13_ref_id = fp.code_13_ref
LEFT JOIN latest_price lp ON lp.product_id = dis.product_id
WHERE ds.date BETWEEN :start_date AND :end_date
    AND {PHARMACY_FILTER}
GROUP BY 1
ORDER BY 1
"""

DOMAIN_QUERIES = {
    Domain.SALES: SALES_QUERY,
    Domain.STOCK: STOCK_QUERY,
    Domain.STOCK_BREAK: STOCK_BREAK_QUERY,
    Domain.PRICING: PRICING_QUERY,
}

class RecordService:
    """Service fetching monthly records for the metric domains."""

    def __init__(self, session: Session):
        """Initialize the record service.

        Args:
            session: Database session
        """
        self.session = session

    @staticmethod
    def build_params(filters: FilterSelection, year: int) -> Dict[str, Any]:
        """Bind parameters for a domain query.

        Empty filter sets are bound as NULL so the query ignores them.

        Args:
            filters: Active filter selection
            year: Current calendar year

        Returns:
            Dictionary of bind parameters
        """
        params: Dict[str, Any] = {}
        for name, values in filters.to_dict().items():
            params[name] = values if values else None

        start_date, end_date = get_query_window(year)
        params['start_date'] = start_date
        params['end_date'] = end_date
        return params

    def fetch_monthly_records(
        self,
        domain,
        filters: FilterSelection,
        year: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """Fetch one row per month for a domain and filter selection.

        Args:
            domain: Metric domain
            filters: Active filter selection
            year: Current calendar year; defaults to this year

        Returns:
            List of row dictionaries with a ``month`` key ("YYYY-MM")

        Raises:
            ValidationError: If the filter selection is invalid
            DatabaseError: If the query fails
        """
        spec = get_domain_spec(domain)

        errors = validate_filters(filters)
        if errors:
            raise ValidationError("Invalid filter selection", code='INVALID_FILTERS', details=errors)

        if year is None:
            year = today().year

        params = self.build_params(filters, year)

        try:
            result = self.session.execute(text(DOMAIN_QUERIES[spec.domain]), params)
            rows = [dict(row) for row in result.mappings()]
        except SQLAlchemyError as e:
            logger.error(f"Error fetching {spec.domain.value} records: {str(e)}")
            raise DatabaseError(
                f"Could not fetch {spec.domain.value} records",
                code='QUERY_FAILED',
                details={'domain': spec.domain.value}
            ) from e

        logger.debug(f"Fetched {len(rows)} {spec.domain.value} rows for {year - 1}-{year}")
        return rows
