"""
Tests for the database record service.
"""
import unittest
from datetime import date
from unittest.mock import MagicMock

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lab_metrics.models import Domain, FilterSelection
from lab_metrics.services.record_service import RecordService, DOMAIN_QUERIES
from lab_metrics.exceptions import DatabaseError, ValidationError

class TestRecordService(unittest.TestCase):
    """Test cases for RecordService."""

    def setUp(self):
        """Set up test fixtures."""
        self.session_mock = MagicMock(spec=Session)
        self.session_mock.execute.return_value.mappings.return_value = [
            {'month': '2023-12', 'total_quantity': 4},
            {'month': '2024-01', 'total_quantity': 7},
        ]
        self.service = RecordService(self.session_mock)
        self.filters = FilterSelection(distributors=('LAB A',), pharmacies=('11111111-2222-3333-4444-555555555555',))

    def test_fetch_returns_dict_rows(self):
        rows = self.service.fetch_monthly_records(Domain.SALES, self.filters, 2024)

        self.assertEqual(rows, [
            {'month': '2023-12', 'total_quantity': 4},
            {'month': '2024-01', 'total_quantity': 7},
        ])
        self.session_mock.execute.assert_called_once()

    def test_query_parameters(self):
        self.service.fetch_monthly_records('stock_break', self.filters, 2024)

        statement, params = self.session_mock.execute.call_args[0]
        self.assertIn('data_productorder', str(statement))
        self.assertEqual(params['start_date'], date(2023, 1, 1))
        self.assertEqual(params['end_date'], date(2024, 12, 31))
        self.assertEqual(params['distributors'], ['LAB A'])
        self.assertEqual(params['pharmacies'], ['11111111-2222-3333-4444-555555555555'])
        # Unused filters are bound as NULL
        self.assertIsNone(params['brands'])
        self.assertIsNone(params['ean13_products'])

    def test_each_domain_has_a_query(self):
        self.assertEqual(set(DOMAIN_QUERIES), set(Domain))
        for query in DOMAIN_QUERIES.values():
            self.assertIn('AS month', query)
            self.assertIn(':start_date', query)

    def test_empty_selection_raises(self):
        with self.assertRaises(ValidationError) as context:
            self.service.fetch_monthly_records(Domain.SALES, FilterSelection(), 2024)

        self.assertEqual(context.exception.code, 'INVALID_FILTERS')
        self.session_mock.execute.assert_not_called()

    def test_unknown_domain_raises(self):
        with self.assertRaises(ValidationError):
            self.service.fetch_monthly_records('returns', self.filters, 2024)

    def test_driver_error_wrapped(self):
        self.session_mock.execute.side_effect = SQLAlchemyError('connection lost')

        with self.assertRaises(DatabaseError) as context:
            self.service.fetch_monthly_records(Domain.PRICING, self.filters, 2024)

        self.assertEqual(context.exception.to_dict()['details'], {'domain': 'pricing'})

if __name__ == '__main__':
    unittest.main()
