"""
Tests for building the 12-month forecast series.
"""
import unittest

from lab_metrics.models import Domain, MonthlyRecord, Provenance
from lab_metrics.core.gap_filler import fill_gaps, empty_record, count_by_provenance

def sales(month, revenue, quantity=0.0):
    return MonthlyRecord(month, {
        'quantity': float(quantity), 'revenue': float(revenue), 'margin': 0.0,
        'purchase_quantity': 0.0, 'purchase_amount': 0.0
    })

class TestFillGaps(unittest.TestCase):
    """Test cases for gap filling."""

    def test_always_twelve_months(self):
        for current, prior in [({}, {}), ({1: sales('2024-01', 1)}, {}), ({}, {12: sales('2023-12', 1)})]:
            series = fill_gaps(current, prior, 2024, Domain.SALES)
            self.assertEqual(len(series), 12)
            self.assertEqual(
                [entry.record.month for entry in series],
                [f'2024-{m:02d}' for m in range(1, 13)]
            )

    def test_provenance_precedence(self):
        current = {1: sales('2024-01', 100)}
        prior = {1: sales('2023-01', 80), 2: sales('2023-02', 90)}

        series = fill_gaps(current, prior, 2024, Domain.SALES)

        self.assertEqual(series[0].provenance, Provenance.ACTUAL)
        self.assertEqual(series[0].record.get('revenue'), 100.0)
        self.assertEqual(series[1].provenance, Provenance.PRIOR_YEAR_FALLBACK)
        self.assertEqual(series[2].provenance, Provenance.EMPTY)

    def test_fallback_keeps_prior_values(self):
        """Only the month label of a fallback entry changes."""
        prior_record = sales('2023-05', 123.45, quantity=7)

        entry = fill_gaps({}, {5: prior_record}, 2024, Domain.SALES)[4]

        self.assertEqual(entry.record.month, '2024-05')
        self.assertEqual(entry.record.values, prior_record.values)
        self.assertEqual(prior_record.month, '2023-05')

    def test_empty_record_is_zero(self):
        record = empty_record(2024, 7, Domain.STOCK)
        self.assertEqual(record.month, '2024-07')
        self.assertEqual(record.values, {'avg_stock': 0.0, 'stock_value': 0.0, 'quantity': 0.0, 'revenue': 0.0})

    def test_count_by_provenance(self):
        series = fill_gaps({1: sales('2024-01', 1)}, {2: sales('2023-02', 1)}, 2024, Domain.SALES)
        counts = count_by_provenance(series)
        self.assertEqual(counts[Provenance.ACTUAL], 1)
        self.assertEqual(counts[Provenance.PRIOR_YEAR_FALLBACK], 1)
        self.assertEqual(counts[Provenance.EMPTY], 10)

if __name__ == '__main__':
    unittest.main()
