"""
Tests for month key parsing.
"""
import unittest
from datetime import date, datetime

from lab_metrics.core.month_key import parse_month_key, format_month_key, month_sort_key

class TestMonthKey(unittest.TestCase):
    """Test cases for month key parsing and formatting."""

    def test_parse_year_month(self):
        self.assertEqual(parse_month_key('2024-03'), (2024, 3))
        self.assertEqual(parse_month_key('2024-3'), (2024, 3))

    def test_parse_full_date_and_timestamp(self):
        self.assertEqual(parse_month_key('2024-11-05'), (2024, 11))
        self.assertEqual(parse_month_key('2024-11-05T10:15:00Z'), (2024, 11))
        self.assertEqual(parse_month_key(' 2023-12 '), (2023, 12))

    def test_parse_date_objects(self):
        self.assertEqual(parse_month_key(date(2024, 7, 31)), (2024, 7))
        self.assertEqual(parse_month_key(datetime(2023, 1, 1, 8, 0)), (2023, 1))

    def test_parse_malformed(self):
        """Malformed keys return None instead of raising."""
        for value in [None, '', 'March 2024', '2024', '2024-13', '2024-00', '24-01', 202401]:
            self.assertIsNone(parse_month_key(value), value)

    def test_format_month_key(self):
        self.assertEqual(format_month_key(2024, 1), '2024-01')
        self.assertEqual(format_month_key(2024, 12), '2024-12')

    def test_month_sort_key(self):
        keys = ['2024-02', 'bad', '2023-12', '2024-10']
        self.assertEqual(sorted(keys, key=month_sort_key), ['bad', '2023-12', '2024-02', '2024-10'])

if __name__ == '__main__':
    unittest.main()
