# inventory_manager/db/__init__.py
from .interface import DatabaseInterface, SupabaseInterface, SQLAlchemyInterface
from .connection import DatabaseConnection, DatabaseConfig, db, get_interface

def initialize(db_type=None, url=None):
    """Connect to the configured database, creating tables for SQL backends."""
    return db.initialize(db_type=db_type, url=url)

__all__ = [
    'db',
    'initialize',
    'get_interface',
    'DatabaseInterface',
    'SupabaseInterface',
    'SQLAlchemyInterface',
    'DatabaseConfig',
    'DatabaseConnection'
]
