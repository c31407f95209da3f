"""
Tests for period aggregation.
"""
import unittest

from lab_metrics.models import Domain, MonthlyRecord
from lab_metrics.core.aggregation import aggregate_records, aggregate_periods
from lab_metrics.exceptions import ValidationError

def sales_bucket(year, revenues):
    return {
        month: MonthlyRecord(f'{year}-{month:02d}', {'revenue': float(revenue)})
        for month, revenue in revenues.items()
    }

class TestAggregation(unittest.TestCase):
    """Test cases for the period aggregator."""

    def setUp(self):
        self.prior = sales_bucket(2023, {m: 10 * m for m in range(1, 13)})

    def test_comparable_window(self):
        """current_month = 3 restricts the comparison to January..March."""
        totals = aggregate_periods({}, self.prior, 3, Domain.SALES)

        self.assertEqual(totals.comparison['revenue'], 60.0)
        self.assertEqual(totals.global_['revenue'], 780.0)
        self.assertEqual(totals.adjusted, totals.comparison)
        self.assertEqual(totals.current['revenue'], 0.0)

    def test_current_takes_all_present_months(self):
        current = sales_bucket(2024, {1: 5, 2: 5, 6: 5})
        totals = aggregate_periods(current, self.prior, 2, Domain.SALES)
        self.assertEqual(totals.current['revenue'], 15.0)

    def test_december_comparison_equals_global(self):
        totals = aggregate_periods({}, self.prior, 12, Domain.SALES)
        self.assertEqual(totals.comparison, totals.global_)

    def test_invalid_month_raises(self):
        for month in [0, 13, '3', None]:
            with self.assertRaises(ValidationError):
                aggregate_periods({}, self.prior, month, Domain.SALES)

    def test_mean_fields_averaged(self):
        records = [
            MonthlyRecord('2024-01', {'avg_stock': 100.0, 'stock_value': 1000.0, 'quantity': 10.0, 'revenue': 50.0}),
            MonthlyRecord('2024-02', {'avg_stock': 200.0, 'stock_value': 3000.0, 'quantity': 20.0, 'revenue': 70.0}),
        ]

        totals = aggregate_records(records, Domain.STOCK)

        self.assertEqual(totals['avg_stock'], 150.0)
        self.assertEqual(totals['stock_value'], 2000.0)
        self.assertEqual(totals['quantity'], 30.0)
        self.assertEqual(totals['revenue'], 120.0)

    def test_empty_input_is_zero(self):
        totals = aggregate_records([], Domain.PRICING)
        self.assertTrue(all(value == 0.0 for value in totals.values()))

if __name__ == '__main__':
    unittest.main()
