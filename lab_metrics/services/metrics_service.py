# lab_metrics/services/metrics_service.py
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError
from typing import Callable, Dict, Iterable, List, Optional
import threading
import time

from lab_metrics.config import config
from lab_metrics.db import session_scope
from lab_metrics.models import Domain, DomainMetrics, FilterSelection
from lab_metrics.core.engine import compute_domain_metrics, empty_domain_metrics, reproject
from lab_metrics.exceptions import ConfigError, FetchError, FetchTimeoutError, MetricsError
from lab_metrics.utils.date_utils import today
from lab_metrics.utils.validation import clamp_percentage
from lab_metrics.services.record_service import RecordService
from lab_metrics.logging_setup import logger as log_manager, get_logger, log_exception

logger = get_logger(__name__)

def fetch_from_database(domain: Domain, filters: FilterSelection, year: int) -> List[Dict]:
    """Default fetch function: one read-only session per domain query."""
    with session_scope() as session:
        return RecordService(session).fetch_monthly_records(domain, filters, year)

class MetricsService:
    """Keeps the latest metrics of every domain for the active filter selection.

    Every refresh takes a new generation token. A fetch that completes after
    a newer refresh started is discarded. A failed fetch leaves the metrics
    of the last successful refresh in place and sets a flat error string.
    """

    def __init__(
        self,
        fetch_fn: Optional[Callable] = None,
        now_fn: Optional[Callable] = None,
        domains: Optional[Iterable] = None,
        executor: Optional[ThreadPoolExecutor] = None,
        timeout: Optional[float] = None
    ):
        """Initialize the metrics service.

        Args:
            fetch_fn: Callable(domain, filters, year) returning monthly rows;
                      defaults to the database record service
            now_fn: Clock returning the reference date; defaults to today
            domains: Domains to refresh; defaults to all of them
            executor: Executor running the fetches
            timeout: Seconds to wait for a refresh; defaults to configuration
        """
        fetch_settings = config.fetch_config
        forecast_settings = config.forecast_config

        self.fetch_fn = fetch_fn or fetch_from_database
        self.now_fn = now_fn or today
        self.domains = [Domain.from_string(d) for d in (domains or list(Domain))]
        self.timeout = timeout if timeout is not None else fetch_settings['timeout_seconds']
        self.error_message = fetch_settings['error_message']
        self._max_workers = fetch_settings['max_workers']

        self._min_percentage = forecast_settings['min_percentage']
        self._max_percentage = forecast_settings['max_percentage']

        if not self.timeout or self.timeout <= 0:
            raise ConfigError(f"Fetch timeout must be positive, got {self.timeout!r}", code='INVALID_FETCH_TIMEOUT')
        if not self._max_workers or self._max_workers < 1:
            raise ConfigError(f"Fetch workers must be at least 1, got {self._max_workers!r}", code='INVALID_MAX_WORKERS')
        if self._min_percentage > self._max_percentage:
            raise ConfigError(
                "Forecast min_percentage is above max_percentage",
                code='INVALID_FORECAST_BOUNDS',
                details={'min_percentage': self._min_percentage, 'max_percentage': self._max_percentage}
            )

        self._owns_executor = executor is None
        self._executor = executor or self._new_executor()

        self._percentage = clamp_percentage(
            forecast_settings['default_percentage'], self._min_percentage, self._max_percentage
        )

        self._lock = threading.Lock()
        self._generation = 0
        self._metrics: Dict[Domain, DomainMetrics] = {}
        self._error: Optional[str] = None
        self._loading = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        """Shut down the executor if the service created it."""
        if self._owns_executor:
            self._executor.shutdown(wait=False)

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def forecast_percentage(self) -> float:
        return self._percentage

    @property
    def metrics(self) -> Dict[Domain, DomainMetrics]:
        with self._lock:
            return dict(self._metrics)

    def get_metrics(self, domain) -> Optional[DomainMetrics]:
        with self._lock:
            return self._metrics.get(Domain.from_string(domain))

    def _new_executor(self) -> ThreadPoolExecutor:
        return ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix='lab-metrics-fetch')

    def _replace_executor(self, generation: int):
        """Abandon a pool whose workers are stuck in timed-out fetches.

        Running fetches cannot be interrupted; they finish on the old pool and
        their results are ignored. Later refreshes use a fresh pool.
        """
        if not self._owns_executor:
            logger.warning(f"Fetch timed out (generation {generation}) on a shared executor; it is kept")
            return

        with self._lock:
            stuck, self._executor = self._executor, self._new_executor()
        stuck.shutdown(wait=False, cancel_futures=True)
        logger.warning(f"Fetch timed out (generation {generation}); replaced the fetch executor")

    def _next_generation(self) -> int:
        with self._lock:
            self._generation += 1
            self._loading = True
            return self._generation

    def _fetch_all(self, filters: FilterSelection, year: int, generation: int) -> Dict[Domain, List]:
        """Run the domain fetches concurrently within the refresh timeout.

        Raises:
            FetchTimeoutError: If the fetches do not complete in time
            FetchError: If a fetch fails
        """
        futures = {
            domain: self._executor.submit(self.fetch_fn, domain, filters, year)
            for domain in self.domains
        }
        deadline = time.monotonic() + self.timeout

        rows = {}
        for domain, future in futures.items():
            remaining = max(deadline - time.monotonic(), 0)
            try:
                rows[domain] = future.result(timeout=remaining)
            except FuturesTimeoutError as e:
                for pending in futures.values():
                    pending.cancel()
                self._replace_executor(generation)
                raise FetchTimeoutError(
                    f"Fetch did not complete within {self.timeout} seconds",
                    code='FETCH_TIMEOUT',
                    details={'domain': domain.value, 'generation': generation}
                ) from e
            except MetricsError:
                raise
            except Exception as e:
                raise FetchError(
                    f"Fetch failed for {domain.value}: {str(e)}",
                    code='FETCH_FAILED',
                    details={'domain': domain.value, 'generation': generation}
                ) from e

        return rows

    def refresh(self, filters: FilterSelection) -> bool:
        """Fetch and recompute the metrics of every domain for a selection.

        An empty selection sets zero metrics without fetching.

        Args:
            filters: Active filter selection

        Returns:
            True if the result was applied, False if a newer refresh
            superseded it or the fetch failed
        """
        generation = self._next_generation()
        now = self.now_fn()
        percentage = self._percentage

        if filters is None or filters.is_empty():
            result = {
                domain: empty_domain_metrics(domain, now, percentage)
                for domain in self.domains
            }
            return self._apply(generation, result)

        log_info = log_manager.request_start_log(
            ','.join(d.value for d in self.domains), generation, filters.to_dict()
        )

        try:
            rows = self._fetch_all(filters, now.year, generation)
            result = {
                domain: compute_domain_metrics(rows[domain], domain, now, percentage)
                for domain in self.domains
            }
        except Exception as e:
            if isinstance(e, MetricsError):
                error_info = e.to_dict()
            else:
                error_info = {'error': e.__class__.__name__, 'message': str(e)}
            log_manager.request_end_log(log_info, success=False, result_info=error_info)
            log_exception(__name__, e, f"Refresh generation {generation} failed")
            return self._fail(generation)

        log_manager.request_end_log(
            log_info,
            result_info={domain.value: len(domain_rows) for domain, domain_rows in rows.items()}
        )
        return self._apply(generation, result)

    def _apply(self, generation: int, result: Dict[Domain, DomainMetrics]) -> bool:
        with self._lock:
            if generation != self._generation:
                logger.debug(f"Discarding stale response (generation {generation}, latest {self._generation})")
                return False

            # The percentage may have changed while the fetch was running
            if any(m.forecast_percentage != self._percentage for m in result.values()):
                result = {d: reproject(m, self._percentage) for d, m in result.items()}

            self._metrics.update(result)
            self._error = None
            self._loading = False
            return True

    def _fail(self, generation: int) -> bool:
        with self._lock:
            if generation != self._generation:
                logger.debug(f"Discarding stale failure (generation {generation}, latest {self._generation})")
                return False

            self._error = self.error_message
            self._loading = False
            return False

    def set_forecast_percentage(self, percentage) -> float:
        """Change the growth percentage and reproject the cached metrics.

        No fetch is triggered.

        Args:
            percentage: Growth percentage input

        Returns:
            The clamped percentage
        """
        with self._lock:
            self._percentage = clamp_percentage(percentage, self._min_percentage, self._max_percentage)
            self._metrics = {
                domain: reproject(metrics, self._percentage)
                for domain, metrics in self._metrics.items()
            }
            return self._percentage
