"""
Tests for ratio metrics.
"""
import unittest

from lab_metrics.models import Domain
from lab_metrics.core.ratios import (
    margin_percentage, stock_break_rate, months_of_stock, stock_value_percentage,
    break_cost_per_unit, purchase_ratio, avg_stock_unit_value, avg_margin_percentage,
    derive_ratios
)

class TestRatios(unittest.TestCase):
    """Test cases for the ratio calculator."""

    def test_margin_percentage(self):
        self.assertAlmostEqual(margin_percentage({'margin': 25.0, 'revenue': 200.0}), 12.5)

    def test_stock_break_rate(self):
        self.assertAlmostEqual(stock_break_rate({'break_quantity': 15.0, 'products_ordered': 300.0}), 5.0)

    def test_months_of_stock(self):
        """Stock value over one month of average revenue."""
        self.assertAlmostEqual(months_of_stock({'stock_value': 500.0, 'revenue': 1200.0}), 5.0)

    def test_stock_value_percentage(self):
        self.assertAlmostEqual(stock_value_percentage({'stock_value': 50.0, 'revenue': 200.0}), 25.0)

    def test_per_unit_ratios(self):
        self.assertAlmostEqual(break_cost_per_unit({'break_amount': 90.0, 'break_quantity': 30.0}), 3.0)
        self.assertAlmostEqual(avg_stock_unit_value({'stock_value': 1000.0, 'avg_stock': 250.0}), 4.0)

    def test_purchase_and_pricing_ratios(self):
        self.assertAlmostEqual(purchase_ratio({'purchase_amount': 60.0, 'revenue': 100.0}), 60.0)
        self.assertAlmostEqual(avg_margin_percentage({'avg_margin': 2.0, 'avg_sale_price': 8.0}), 25.0)

    def test_zero_denominators(self):
        """Every ratio is 0 when its denominator is 0."""
        totals = {}
        for domain in Domain:
            for name, value in derive_ratios(totals, domain).items():
                self.assertEqual(value, 0.0, name)

        self.assertEqual(stock_break_rate({'break_quantity': 5.0, 'products_ordered': 0.0}), 0.0)
        self.assertEqual(margin_percentage({'margin': -5.0, 'revenue': 0.0}), 0.0)

    def test_derive_ratios_per_domain(self):
        ratios = derive_ratios({'break_quantity': 10.0, 'products_ordered': 200.0, 'break_amount': 50.0}, Domain.STOCK_BREAK)
        self.assertEqual(set(ratios), {'stock_break_rate', 'break_cost_per_unit'})
        self.assertAlmostEqual(ratios['stock_break_rate'], 5.0)
        self.assertAlmostEqual(ratios['break_cost_per_unit'], 5.0)

if __name__ == '__main__':
    unittest.main()
