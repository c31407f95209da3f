import argparse
import json
import sys
from pathlib import Path

import pandas as pd
from tabulate import tabulate

from lab_metrics.config import config
from lab_metrics.db import db
from lab_metrics.logging_setup import logger, get_logger
from lab_metrics.models import Domain, DomainMetrics, FilterSelection
from lab_metrics.domains import get_domain_spec
from lab_metrics.core.engine import compute_domain_metrics
from lab_metrics.exceptions import MetricsError
from lab_metrics.utils.date_utils import today, convert_to_date
from lab_metrics.utils.validation import clamp_percentage

# CLI option -> FilterSelection field
FILTER_OPTIONS = {
    'distributor': 'distributors',
    'range': 'ranges',
    'universe': 'universes',
    'category': 'categories',
    'sub_category': 'sub_categories',
    'brand': 'brands',
    'family': 'families',
    'sub_family': 'sub_families',
    'specificity': 'specificities',
    'pharmacy': 'pharmacies',
    'ean13': 'ean13_products',
}

def init_application():
    """Initialize application components."""
    db.initialize()

    log = logger.app_logger
    log.info("Lab metrics engine initialized")
    log.info(f"Using database: {config.get('DATABASE', 'engine')} at {config.get('DATABASE', 'host')}:{config.get('DATABASE', 'port')}")

def load_records(path):
    """Load monthly records from a CSV or JSON file.

    Args:
        path: File path; ``.json`` files are read as a list of records,
              anything else as CSV

    Returns:
        List of record dictionaries
    """
    path = Path(path)
    if path.suffix.lower() == '.json':
        frame = pd.read_json(path, orient='records', dtype={'month': str}, convert_dates=False)
    else:
        frame = pd.read_csv(path, dtype={'month': str})
    return frame.to_dict(orient='records')

def format_summary(metrics: DomainMetrics) -> str:
    """Tabulate the periods of a domain with their evolution badges."""
    spec = get_domain_spec(metrics.domain)

    table_data = []
    for name in spec.field_names + spec.ratios:
        evolutions = metrics.evolutions[name]
        table_data.append([
            name,
            metrics.current.value(name),
            metrics.adjusted.value(name),
            evolutions['yoy'].label,
            metrics.global_.value(name),
            metrics.forecast.value(name),
            evolutions['forecast'].label
        ])

    table = tabulate(
        table_data,
        headers=['Metric', 'Current', 'Comparison', 'YoY', 'Prior year', 'Forecast', 'vs prior year'],
        floatfmt='.2f'
    )

    lines = [
        f"Domain: {metrics.domain.value}",
        f"Forecast percentage: {metrics.forecast_percentage:+.1f}%",
        '',
        table
    ]
    if metrics.dropped_records:
        lines.append(f"\nDropped records: {metrics.dropped_records}")
    return '\n'.join(lines)

def print_metrics(metrics: DomainMetrics, as_json=False):
    if as_json:
        print(json.dumps(metrics.to_dict(), indent=2))
    else:
        print(format_summary(metrics))

def compute_metrics(args):
    """Compute the metrics of one domain from a record file.

    Args:
        args: Command-line arguments

    Returns:
        Process exit code
    """
    log = get_logger('compute')
    log.info(f"Computing metrics with parameters: {args}")

    try:
        now = convert_to_date(args.as_of) if args.as_of else today()
        records = load_records(args.input)
        metrics = compute_domain_metrics(records, args.domain, now, args.percentage)
    except (MetricsError, ValueError, OSError) as e:
        log.error(f"Error computing metrics: {str(e)}")
        print(f"Error: {str(e)}", file=sys.stderr)
        return 1

    print_metrics(metrics, args.json)
    return 0

def fetch_metrics(args):
    """Fetch the records of one domain from the database and compute its metrics.

    Args:
        args: Command-line arguments

    Returns:
        Process exit code
    """
    from lab_metrics.services.metrics_service import MetricsService

    log = get_logger('fetch')
    log.info(f"Fetching metrics with parameters: {args}")

    filters = FilterSelection.from_dict({
        field: getattr(args, option) for option, field in FILTER_OPTIONS.items()
    })

    init_application()

    with MetricsService(domains=[args.domain]) as service:
        service.set_forecast_percentage(args.percentage)
        service.refresh(filters)

        if service.error:
            print(service.error, file=sys.stderr)
            return 1

        print_metrics(service.get_metrics(args.domain), args.json)
    return 0

def build_parser():
    parser = argparse.ArgumentParser(description='Pharmacy Lab Metrics Engine')
    subparsers = parser.add_subparsers(dest='command', help='Commands')

    forecast_defaults = config.forecast_config

    # Compute command
    compute_parser = subparsers.add_parser('compute', help='Compute metrics from a CSV or JSON record file')
    compute_parser.add_argument('--domain', type=Domain.from_string, required=True,
                                help='Metric domain (sales, stock, stock_break, pricing)')
    compute_parser.add_argument('--input', required=True, help='CSV or JSON file of monthly records')
    compute_parser.add_argument('--percentage', type=clamp_percentage,
                                default=forecast_defaults['default_percentage'],
                                help='Forecast growth percentage (-100 to 100)')
    compute_parser.add_argument('--as-of', dest='as_of', help='Reference date (YYYY-MM-DD), defaults to today')
    compute_parser.add_argument('--json', action='store_true', help='Print the metrics as JSON')

    # Fetch command
    fetch_parser = subparsers.add_parser('fetch', help='Fetch records from the database and compute metrics')
    fetch_parser.add_argument('--domain', type=Domain.from_string, required=True,
                              help='Metric domain (sales, stock, stock_break, pricing)')
    for option in FILTER_OPTIONS:
        fetch_parser.add_argument(f"--{option.replace('_', '-')}", dest=option, action='append', default=[],
                                  help=f'Filter on {option.replace("_", " ")} (repeatable)')
    fetch_parser.add_argument('--percentage', type=clamp_percentage,
                              default=forecast_defaults['default_percentage'],
                              help='Forecast growth percentage (-100 to 100)')
    fetch_parser.add_argument('--json', action='store_true', help='Print the metrics as JSON')

    return parser

def main(argv=None):
    """Main application entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == 'compute':
        return compute_metrics(args)

    if args.command == 'fetch':
        return fetch_metrics(args)

    parser.print_help()
    return 1

if __name__ == "__main__":
    sys.exit(main())
