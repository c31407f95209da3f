from .record_service import RecordService
from .metrics_service import MetricsService, fetch_from_database

__all__ = [
    'RecordService',
    'MetricsService',
    'fetch_from_database'
]
