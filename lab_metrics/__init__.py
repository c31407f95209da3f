from .config import config
from .db import db, session_scope
from .logging_setup import logger, get_logger
from .exceptions import (
    MetricsError, ConfigError, DatabaseError, ValidationError,
    FetchError, FetchTimeoutError, CalculationError
)
from .models import Domain, FilterSelection, DomainMetrics
from .core.engine import compute_domain_metrics, reproject, empty_domain_metrics

__all__ = [
    'config',
    'db',
    'session_scope',
    'logger',
    'get_logger',
    'MetricsError',
    'ConfigError',
    'DatabaseError',
    'ValidationError',
    'FetchError',
    'FetchTimeoutError',
    'CalculationError',
    'Domain',
    'FilterSelection',
    'DomainMetrics',
    'compute_domain_metrics',
    'reproject',
    'empty_domain_metrics'
]
