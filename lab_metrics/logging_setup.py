import logging
import logging.handlers
import traceback
from datetime import datetime
from pathlib import Path

from lab_metrics.config import config

# Logger receiving the request_start_log / request_end_log lines
FETCH_LOGGER = 'fetch'

class Logger:
    """Hands out named loggers writing to ``<directory>/<name>.log``."""

    _instance = None
    _loggers = {}

    def __new__(cls):
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super(Logger, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._log_config = config.log_config
        self._log_dir = Path(self._log_config['directory'])
        self._log_dir.mkdir(parents=True, exist_ok=True)
        self._formatter = logging.Formatter(self._log_config['format'])
        self._level = getattr(logging, self._log_config['level'].upper(), logging.INFO)

        self._initialized = True
        self._app_logger = self.get_logger('app')

    def _handlers(self, name):
        file_handler = logging.handlers.RotatingFileHandler(
            self._log_dir / f"{name}.log",
            maxBytes=self._log_config['max_size_mb'] * 1024 * 1024,
            backupCount=self._log_config['backup_count']
        )
        handlers = [file_handler]

        if self._log_config['console_output']:
            handlers.append(logging.StreamHandler())

        for handler in handlers:
            handler.setFormatter(self._formatter)
        return handlers

    def get_logger(self, name):
        """Get a logger with the specified name.

        Args:
            name: Name of the logger, usually the module's ``__name__``

        Returns:
            Configured logger instance
        """
        if name in self._loggers:
            return self._loggers[name]

        logger = logging.getLogger(name)
        logger.setLevel(self._level)

        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        for handler in self._handlers(name):
            logger.addHandler(handler)

        self._loggers[name] = logger
        return logger

    def log_exception(self, logger_name, exception, message=None):
        """Log an exception with stack trace.

        Args:
            logger_name: Logger name
            exception: Exception object
            message: Optional message to include
        """
        logger = self.get_logger(logger_name)
        logger.error(f"{message}: {exception}" if message else str(exception))
        logger.error(traceback.format_exc())

    @property
    def app_logger(self):
        return self._app_logger

    def request_start_log(self, domain, generation, filters=None):
        """Log the start of a record fetch.

        Args:
            domain: Metric domain(s) being fetched
            generation: Request generation token
            filters: Optional filter summary

        Returns:
            Dictionary to hand back to request_end_log
        """
        fetch_logger = self.get_logger(FETCH_LOGGER)
        fetch_logger.info(f"Fetching {domain} records (generation {generation})")
        if filters:
            fetch_logger.debug(f"Filters: {filters}")

        return {
            'domain': domain,
            'generation': generation,
            'start_time': datetime.now()
        }

    def request_end_log(self, log_info, success=True, result_info=None):
        """Log the end of a record fetch with its duration.

        Args:
            log_info: Dictionary returned by request_start_log
            success: Whether the fetch succeeded
            result_info: Optional result information
        """
        fetch_logger = self.get_logger(FETCH_LOGGER)
        duration = datetime.now() - log_info.get('start_time', datetime.now())
        domain = log_info.get('domain', 'unknown')
        generation = log_info.get('generation')

        if success:
            fetch_logger.info(f"Fetched {domain} records (generation {generation}) in {duration}")
        else:
            fetch_logger.error(f"Failed {domain} fetch (generation {generation}) after {duration}")

        if result_info:
            fetch_logger.info(f"Fetch results: {result_info}")

# Global logger instance
logger = Logger()

def get_logger(name):
    """Get a logger with the specified name."""
    return logger.get_logger(name)

def log_exception(logger_name, exception, message=None):
    """Log an exception with stack trace."""
    logger.log_exception(logger_name, exception, message)
