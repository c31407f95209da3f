import os
import configparser
import urllib.parse
from pathlib import Path

CONFIG_DIR_ENV = 'LAB_METRICS_CONFIG_DIR'

DEFAULT_SETTINGS = {
    'DATABASE': {
        'engine': 'postgresql',
        'host': 'localhost',
        'port': '5432',
        'database': 'pharma_dashboard',
        'username': 'postgres',
        'password': 'postgres',
        'echo': 'False',
        'pool_size': '5',
        'max_overflow': '10',
        'pool_timeout': '30',
        'pool_recycle': '1800'
    },
    'LOGGING': {
        'level': 'INFO',
        'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        'directory': 'logs',
        'max_size_mb': '10',
        'backup_count': '5',
        'console_output': 'True'
    },
    'FETCH': {
        'timeout_seconds': '30',
        'max_workers': '4',
        'error_message': 'Unable to retrieve data'
    },
    'FORECAST': {
        'min_percentage': '-100',
        'max_percentage': '100',
        'default_percentage': '0'
    },
    'METRICS': {
        'warn_on_dropped_records': 'True'
    }
}

class Config:
    """Settings of the lab metrics engine, read from ``settings.ini``.

    Values missing from the file fall back to DEFAULT_SETTINGS. The file is
    written with the defaults the first time the engine runs.
    """

    _instance = None

    def __new__(cls):
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super(Config, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Load the settings file if not already loaded."""
        if self._initialized:
            return

        self._config_dir = Path(os.environ.get(CONFIG_DIR_ENV, 'config'))
        self._config_path = self._config_dir / 'settings.ini'
        self._config = configparser.ConfigParser(interpolation=None)
        self._config.read_dict(DEFAULT_SETTINGS)

        if self._config_path.exists():
            self._config.read(self._config_path)
        else:
            self._config_dir.mkdir(parents=True, exist_ok=True)
            self._save_config()

        self._initialized = True

    @property
    def path(self) -> Path:
        return self._config_path

    def _save_config(self):
        with open(self._config_path, 'w') as configfile:
            self._config.write(configfile)

    def _lookup(self, getter, section, key, default):
        try:
            return getter(section, key)
        except (configparser.NoSectionError, configparser.NoOptionError, ValueError):
            return default

    def get(self, section, key, default=None):
        """Get configuration value."""
        return self._lookup(self._config.get, section, key, default)

    def get_int(self, section, key, default=None):
        """Get configuration value as integer."""
        return self._lookup(self._config.getint, section, key, default)

    def get_float(self, section, key, default=None):
        """Get configuration value as float."""
        return self._lookup(self._config.getfloat, section, key, default)

    def get_boolean(self, section, key, default=None):
        """Get configuration value as boolean."""
        return self._lookup(self._config.getboolean, section, key, default)

    @property
    def database_url(self):
        """SQLAlchemy URL built from the DATABASE section."""
        password = urllib.parse.quote_plus(self.get('DATABASE', 'password', ''))
        return (
            f"{self.get('DATABASE', 'engine')}://{self.get('DATABASE', 'username')}:{password}"
            f"@{self.get('DATABASE', 'host')}:{self.get('DATABASE', 'port')}/{self.get('DATABASE', 'database')}"
        )

    @property
    def pool_options(self):
        """Connection pool settings for create_engine."""
        return {
            'pool_size': self.get_int('DATABASE', 'pool_size', 5),
            'max_overflow': self.get_int('DATABASE', 'max_overflow', 10),
            'pool_timeout': self.get_int('DATABASE', 'pool_timeout', 30),
            'pool_recycle': self.get_int('DATABASE', 'pool_recycle', 1800)
        }

    @property
    def log_config(self):
        """Get logging configuration."""
        return {
            'level': self.get('LOGGING', 'level', 'INFO'),
            'format': self.get('LOGGING', 'format'),
            'directory': self.get('LOGGING', 'directory', 'logs'),
            'max_size_mb': self.get_int('LOGGING', 'max_size_mb', 10),
            'backup_count': self.get_int('LOGGING', 'backup_count', 5),
            'console_output': self.get_boolean('LOGGING', 'console_output', True)
        }

    @property
    def fetch_config(self):
        """Timeout, worker count and user-facing message of record fetches."""
        return {
            'timeout_seconds': self.get_float('FETCH', 'timeout_seconds', 30.0),
            'max_workers': self.get_int('FETCH', 'max_workers', 4),
            'error_message': self.get('FETCH', 'error_message', 'Unable to retrieve data')
        }

    @property
    def forecast_config(self):
        """Bounds and default of the forecast growth percentage."""
        return {
            'min_percentage': self.get_float('FORECAST', 'min_percentage', -100.0),
            'max_percentage': self.get_float('FORECAST', 'max_percentage', 100.0),
            'default_percentage': self.get_float('FORECAST', 'default_percentage', 0.0)
        }

    @property
    def metrics_config(self):
        return {
            'warn_on_dropped_records': self.get_boolean('METRICS', 'warn_on_dropped_records', True)
        }

# Global config instance
config = Config()
