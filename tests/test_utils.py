"""
Tests for numeric coercion, dates and validation helpers.
"""
import unittest
from datetime import date, datetime
from decimal import Decimal

from lab_metrics.models import FilterSelection
from lab_metrics.exceptions import ValidationError
from lab_metrics.utils.math_utils import (
    to_number, safe_divide, sum_values, mean_values, clamp, round_half_away
)
from lab_metrics.utils.date_utils import get_current_period, get_query_window, convert_to_date
from lab_metrics.utils.validation import validate_filters, validate_month_number, clamp_percentage

class TestMathUtils(unittest.TestCase):
    """Test cases for math utility functions."""

    def test_to_number(self):
        self.assertEqual(to_number(5), 5.0)
        self.assertEqual(to_number(Decimal('12.50')), 12.5)
        self.assertEqual(to_number(' 3.25 '), 3.25)
        self.assertEqual(to_number('3,5'), 3.5)

    def test_to_number_invalid(self):
        for value in [None, '', 'abc', float('nan'), float('inf'), True]:
            self.assertEqual(to_number(value), 0.0, value)

    def test_safe_divide(self):
        self.assertEqual(safe_divide(1, 4), 0.25)
        self.assertEqual(safe_divide(1, 4, 100), 25.0)
        self.assertEqual(safe_divide(1, 0), 0.0)
        self.assertEqual(safe_divide(1e308, 1e-308), 0.0)

    def test_sum_and_mean(self):
        self.assertEqual(sum_values([1.0, 2.0, 3.5]), 6.5)
        self.assertEqual(mean_values([1.0, 2.0, 3.0]), 2.0)
        self.assertEqual(sum_values([]), 0.0)
        self.assertEqual(mean_values(iter([])), 0.0)

    def test_clamp(self):
        self.assertEqual(clamp(150, -100, 100), 100)
        self.assertEqual(clamp(-150, -100, 100), -100)
        self.assertEqual(clamp(5, -100, 100), 5)

    def test_round_half_away(self):
        self.assertEqual(round_half_away(0.25, 1), 0.3)
        self.assertEqual(round_half_away(-0.25, 1), -0.3)
        self.assertEqual(round_half_away(-0.04, 1), 0.0)
        self.assertEqual(str(round_half_away(-0.04, 1)), '0.0')

class TestDateUtils(unittest.TestCase):
    """Test cases for date utility functions."""

    def test_get_current_period(self):
        self.assertEqual(get_current_period(date(2024, 3, 15)), (3, 2024))

    def test_get_query_window(self):
        self.assertEqual(get_query_window(2024), (date(2023, 1, 1), date(2024, 12, 31)))

    def test_convert_to_date(self):
        self.assertEqual(convert_to_date('2024-06-30'), date(2024, 6, 30))
        self.assertEqual(convert_to_date(datetime(2024, 6, 30, 12)), date(2024, 6, 30))
        self.assertIsNone(convert_to_date(''))
        with self.assertRaises(ValueError):
            convert_to_date('30/06/2024')

class TestValidation(unittest.TestCase):
    """Test cases for validation helpers."""

    def test_empty_selection_invalid(self):
        self.assertIn('filters', validate_filters(FilterSelection()))
        self.assertIn('filters', validate_filters(None))

    def test_pharmacies_alone_invalid(self):
        errors = validate_filters(FilterSelection(pharmacies=('a1b2',)))
        self.assertIn('filters', errors)

    def test_valid_selection(self):
        filters = FilterSelection.from_dict({'brands': ['Avene'], 'ean13_products': ['3282770100525']})
        self.assertEqual(validate_filters(filters), {})

    def test_invalid_ean(self):
        errors = validate_filters(FilterSelection(ean13_products=('32827X',)))
        self.assertIn('ean13_products', errors)

    def test_validate_month_number(self):
        self.assertEqual(validate_month_number(12), 12)
        for month in [0, 13, True, 2.0]:
            with self.assertRaises(ValidationError):
                validate_month_number(month)

    def test_clamp_percentage(self):
        self.assertEqual(clamp_percentage('15'), 15.0)
        self.assertEqual(clamp_percentage(120), 100.0)
        self.assertEqual(clamp_percentage(None), 0.0)
        self.assertEqual(clamp_percentage(30, -20, 20), 20.0)

if __name__ == '__main__':
    unittest.main()
