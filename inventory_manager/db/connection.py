# inventory_manager/db/connection.py
import os
import logging
from typing import Dict, Any, Literal, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from supabase import create_client

from inventory_manager.config import config
from inventory_manager.exceptions import ConfigError, DatabaseError
from inventory_manager.models import Base
from inventory_manager.db.interface import DatabaseInterface, SupabaseInterface, SQLAlchemyInterface

logger = logging.getLogger(__name__)

DatabaseType = Literal["postgresql", "sqlite", "supabase"]

DATABASE_TYPES = ("supabase", "postgresql", "sqlite")

class DatabaseConfig:
    """Database settings read from configuration and the environment."""

    @staticmethod
    def get_db_type() -> DatabaseType:
        """Get database type from configuration."""
        db_type = config.get('DATABASE', 'type', default='supabase')
        # Allow "type = sqlite  # local" style values
        return db_type.split('#')[0].strip().lower()

    @staticmethod
    def get_engine_options(db_type: str) -> Dict[str, Any]:
        """Options passed to create_engine; pooling applies to PostgreSQL only."""
        options = {'echo': config.get_boolean('DATABASE', 'echo', default=False)}
        if db_type == "postgresql":
            options.update({
                'pool_size': config.get_int('DATABASE', 'pool_size', default=10),
                'max_overflow': config.get_int('DATABASE', 'max_overflow', default=20),
                'pool_timeout': config.get_int('DATABASE', 'pool_timeout', default=30),
                'pool_recycle': config.get_int('DATABASE', 'pool_recycle', default=1800)
            })
        return options

    @staticmethod
    def get_supabase_config() -> Dict[str, str]:
        """Supabase URL and key; SUPABASE_URL and SUPABASE_KEY override the file."""
        if os.getenv('SUPABASE_URL') and os.getenv('SUPABASE_KEY'):
            return {'url': os.getenv('SUPABASE_URL'), 'key': os.getenv('SUPABASE_KEY')}

        return {
            'url': config.get('SUPABASE', 'url', default=''),
            'key': config.get('SUPABASE', 'key', default='')
        }

class DatabaseConnection:
    """Holds the active database interface.

    Nothing connects until initialize() is called or the interface is first
    requested.
    """

    _instance = None

    def __new__(cls):
        """Ensure singleton pattern."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._db_type = None
            cls._instance._engine = None
            cls._instance._interface = None
        return cls._instance

    def initialize(self, db_type: Optional[str] = None, url: Optional[str] = None) -> DatabaseInterface:
        """Open the database connection.

        Args:
            db_type: Optional backend override; defaults to configuration
            url: Optional SQLAlchemy URL override

        Returns:
            Database interface for the selected backend

        Raises:
            ConfigError: If Supabase credentials are missing
            DatabaseError: If the backend is unknown or cannot be reached
        """
        db_type = (db_type or DatabaseConfig.get_db_type()).lower()
        if db_type not in DATABASE_TYPES:
            raise DatabaseError(f"Unknown database type: {db_type}")

        self.reset()
        if db_type == "supabase":
            self._interface = self._connect_supabase()
        else:
            self._interface = self._connect_sqlalchemy(db_type, url)

        self._db_type = db_type
        logger.info(f"Database initialized using {db_type}")
        return self._interface

    def _connect_sqlalchemy(self, db_type: str, url: Optional[str]) -> SQLAlchemyInterface:
        """Create the engine, check it answers and create missing tables."""
        try:
            self._engine = create_engine(url or config.get_db_url(), **DatabaseConfig.get_engine_options(db_type))
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            Base.metadata.create_all(bind=self._engine)
        except Exception as e:
            raise DatabaseError(f"Failed to initialize {db_type} connection: {str(e)}")

        return SQLAlchemyInterface(sessionmaker(autocommit=False, autoflush=False, bind=self._engine))

    def _connect_supabase(self) -> SupabaseInterface:
        settings = DatabaseConfig.get_supabase_config()
        if not settings['url'] or not settings['key']:
            raise ConfigError("Supabase URL and key must be set in the environment or config file",
                              code='missing_credentials')

        try:
            client = create_client(settings['url'], settings['key'])
        except Exception as e:
            raise DatabaseError(f"Failed to initialize Supabase connection: {str(e)}")

        return SupabaseInterface(client)

    @property
    def interface(self) -> DatabaseInterface:
        """Get the database interface, connecting on first use."""
        if self._interface is None:
            self.initialize()
        return self._interface

    @property
    def db_type(self) -> DatabaseType:
        """Get current database type."""
        return self._db_type or DatabaseConfig.get_db_type()

    def reset(self):
        """Drop the current connection so the next use reconnects."""
        if self._engine is not None:
            self._engine.dispose()
        self._db_type = None
        self._engine = None
        self._interface = None

# Singleton instance
db = DatabaseConnection()

def get_interface() -> DatabaseInterface:
    """Get the database interface for the configured backend."""
    return db.interface
