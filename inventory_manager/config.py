"""
Configuration for the Inventory Manager.

Settings live in ``settings.ini`` inside the directory named by the
INVENTORY_CONFIG_DIR environment variable (``config`` by default). Built-in
defaults are loaded first, so a settings file only needs the keys it changes.
"""
import os
import configparser
from pathlib import Path

from sqlalchemy.engine import URL

DEFAULTS = {
    'DATABASE': {
        'type': 'supabase',
        'engine': 'postgresql',
        'host': 'localhost',
        'port': '5432',
        'database': 'inventory',
        'username': 'postgres',
        'password': 'postgres',
        'sqlite_path': 'inventory.db',
        'echo': 'False',
    },
    'SUPABASE': {
        'url': '',
        'key': '',
    },
    'LOGGING': {
        'level': 'INFO',
        'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        'directory': 'logs',
        'max_size_mb': '10',
        'backup_count': '5',
        'console_output': 'True',
    },
    'BUSINESS_RULES': {
        'low_stock_threshold': '100',
        'dashboard_window_days': '30',
        'chart_days': '7',
        'recent_limit': '10',
    },
    'API': {
        'host': '127.0.0.1',
        'port': '5000',
        'debug': 'False',
    },
}

class Config:
    """Configuration manager for the Inventory Manager."""

    _instance = None

    def __new__(cls):
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super(Config, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self.config_dir = Path(os.getenv('INVENTORY_CONFIG_DIR', 'config'))
        self.config_path = self.config_dir / 'settings.ini'

        self._parser = configparser.ConfigParser(interpolation=None)
        self._parser.read_dict(DEFAULTS)

        if self.config_path.exists():
            self._parser.read(self.config_path)
        else:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, 'w') as settings_file:
                self._parser.write(settings_file)

        self._initialized = True

    def _typed(self, read, section, key, default):
        try:
            return read(section, key)
        except (configparser.NoSectionError, configparser.NoOptionError, ValueError):
            return default

    def get(self, section, key, default=None):
        """Get a configuration value as a string."""
        return self._typed(self._parser.get, section, key, default)

    def get_int(self, section, key, default=None):
        return self._typed(self._parser.getint, section, key, default)

    def get_boolean(self, section, key, default=None):
        return self._typed(self._parser.getboolean, section, key, default)

    def get_db_url(self):
        """Build the SQLAlchemy URL for the configured database.

        Returns:
            ``sqlite:///<path>`` when DATABASE.type is sqlite, otherwise a
            server URL built from the connection settings
        """
        if self.get('DATABASE', 'type', 'supabase').split('#')[0].strip().lower() == 'sqlite':
            return f"sqlite:///{self.get('DATABASE', 'sqlite_path', 'inventory.db')}"

        url = URL.create(
            drivername=self.get('DATABASE', 'engine', 'postgresql'),
            username=self.get('DATABASE', 'username'),
            password=self.get('DATABASE', 'password'),
            host=self.get('DATABASE', 'host'),
            port=self.get_int('DATABASE', 'port'),
            database=self.get('DATABASE', 'database')
        )
        return url.render_as_string(hide_password=False)

    @property
    def log_config(self):
        """Get logging configuration."""
        return {
            'level': self.get('LOGGING', 'level', 'INFO'),
            'format': self.get('LOGGING', 'format', DEFAULTS['LOGGING']['format']),
            'directory': self.get('LOGGING', 'directory', 'logs'),
            'max_size_mb': self.get_int('LOGGING', 'max_size_mb', 10),
            'backup_count': self.get_int('LOGGING', 'backup_count', 5),
            'console_output': self.get_boolean('LOGGING', 'console_output', True)
        }

    @property
    def business_rules(self):
        """Thresholds and windows used by the dashboard and recent lists."""
        return {
            name: self.get_int('BUSINESS_RULES', name, int(default))
            for name, default in DEFAULTS['BUSINESS_RULES'].items()
        }

    @property
    def api_config(self):
        """Get HTTP API configuration."""
        return {
            'host': self.get('API', 'host', '127.0.0.1'),
            'port': self.get_int('API', 'port', 5000),
            'debug': self.get_boolean('API', 'debug', False)
        }

# Global config instance
config = Config()
