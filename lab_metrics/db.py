from contextlib import contextmanager
import threading

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, scoped_session

from lab_metrics.config import config

class Database:
    """Read-only connection manager for the dashboard database."""

    _instance = None

    def __new__(cls):
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super(Database, cls).__new__(cls)
            cls._instance._engine = None
            cls._instance._session = None
            cls._instance._init_lock = threading.RLock()
        return cls._instance

    @staticmethod
    def statement_timeout_options(connection_string):
        """Server-side statement timeout matching the fetch timeout.

        Only PostgreSQL connections get one; other backends return no options.
        """
        if make_url(connection_string).get_backend_name() != 'postgresql':
            return {}
        timeout_ms = int(config.fetch_config['timeout_seconds'] * 1000)
        return {'connect_args': {'options': f"-c statement_timeout={timeout_ms}"}}

    def initialize(self, connection_string=None):
        """Create the engine and the session registry.

        Args:
            connection_string: Optional SQLAlchemy URL; the DATABASE
                               configuration section is used when omitted
        """
        options = {'echo': config.get_boolean('DATABASE', 'echo', False)}

        if connection_string is None:
            connection_string = config.database_url
            options.update(config.pool_options)
        options.update(self.statement_timeout_options(connection_string))

        with self._init_lock:
            self._engine = create_engine(connection_string, **options)
            self._session = scoped_session(sessionmaker(bind=self._engine))

    def _ensure_initialized(self):
        # Fetch workers may reach this concurrently
        with self._init_lock:
            if self._session is None:
                self.initialize()

    @property
    def session(self):
        """Session registry, created on first use."""
        self._ensure_initialized()
        return self._session

    @property
    def engine(self):
        self._ensure_initialized()
        return self._engine

    @contextmanager
    def session_scope(self):
        """Yield a session that is rolled back and closed afterwards.

        Metric queries only read, so nothing is ever committed.
        """
        session = self.session()
        try:
            yield session
        finally:
            session.rollback()
            session.close()

# Global database instance
db = Database()

def session_scope():
    """Read-only session scope on the global database."""
    return db.session_scope()
