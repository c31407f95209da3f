"""
Tests for the command-line interface.
"""
import io
import json
import os
import tempfile
import unittest
from unittest.mock import MagicMock, patch

from lab_metrics import main as cli
from lab_metrics.models import Domain

CSV_RECORDS = """month,total_products_ordered,stock_break_products,stock_break_amount
2023-01,50,4,20
2023-02,50,6,30
2024-01,100,10,40
bad-month,1,1,1
"""

class TestCompute(unittest.TestCase):
    """Test cases for the compute command."""

    def setUp(self):
        self.tmp_dir = tempfile.TemporaryDirectory()
        self.csv_path = os.path.join(self.tmp_dir.name, 'records.csv')
        with open(self.csv_path, 'w') as f:
            f.write(CSV_RECORDS)

    def tearDown(self):
        self.tmp_dir.cleanup()

    def run_cli(self, argv):
        with patch('sys.stdout', new_callable=io.StringIO) as stdout:
            code = cli.main(argv)
        return code, stdout.getvalue()

    def test_load_records_csv(self):
        records = cli.load_records(self.csv_path)
        self.assertEqual(len(records), 4)
        self.assertEqual(records[0]['month'], '2023-01')

    def test_load_records_json(self):
        json_path = os.path.join(self.tmp_dir.name, 'records.json')
        with open(json_path, 'w') as f:
            json.dump([{'month': '2024-02', 'revenue': '12.5'}], f)

        records = cli.load_records(json_path)
        self.assertEqual(records[0]['month'], '2024-02')

    def test_compute_json_output(self):
        code, output = self.run_cli([
            'compute', '--domain', 'stock-break', '--input', self.csv_path,
            '--as-of', '2024-01-31', '--percentage', '10', '--json'
        ])

        self.assertEqual(code, 0)
        data = json.loads(output)
        self.assertEqual(data['domain'], 'stock_break')
        self.assertEqual(data['current']['products_ordered'], 100.0)
        self.assertEqual(data['adjusted']['products_ordered'], 50.0)
        self.assertEqual(data['global']['break_quantity'], 10.0)
        self.assertEqual(data['evolutions']['products_ordered']['yoy'], '+100.0%')
        self.assertEqual(data['forecast_percentage'], 10.0)
        self.assertEqual(data['dropped_records'], 1)

    def test_compute_table_output(self):
        code, output = self.run_cli([
            'compute', '--domain', 'stock_break', '--input', self.csv_path, '--as-of', '2024-01-31'
        ])

        self.assertEqual(code, 0)
        self.assertIn('stock_break_rate', output)
        self.assertIn('Dropped records: 1', output)

    def test_compute_missing_file(self):
        with patch('sys.stderr', new_callable=io.StringIO):
            code, _ = self.run_cli([
                'compute', '--domain', 'sales', '--input', os.path.join(self.tmp_dir.name, 'missing.csv')
            ])
        self.assertEqual(code, 1)

class TestFetch(unittest.TestCase):
    """Test cases for the fetch command."""

    @patch('lab_metrics.main.init_application')
    @patch('lab_metrics.services.metrics_service.MetricsService')
    def test_fetch_failure_prints_error(self, service_class, init_mock):
        service = service_class.return_value.__enter__.return_value
        service.error = 'Unable to retrieve data'

        with patch('sys.stderr', new_callable=io.StringIO) as stderr:
            code = cli.main(['fetch', '--domain', 'sales', '--brand', 'Avene'])

        self.assertEqual(code, 1)
        self.assertIn('Unable to retrieve data', stderr.getvalue())
        refreshed_filters = service.refresh.call_args[0][0]
        self.assertEqual(refreshed_filters.brands, ('Avene',))
        service_class.assert_called_once_with(domains=[Domain.SALES])

if __name__ == '__main__':
    unittest.main()
