"""
Shared fixtures for the service, API and CLI tests.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from inventory_manager.db.interface import SQLAlchemyInterface
from inventory_manager.models import Base

GIFT_SET_PRODUCT = 'Nikka Nikki Gift Set 4 Pcs'

# Opening stock for the catalog used across the tests
CATALOG = {
    'Soap (Wrapped)': 500,
    'Soap Boxes': 500,
    'Soap (Ready)': 200,
    'Shampoo (Unlabeled)': 300,
    'Shampoo (Ready)': 150,
    'Lotion (Unlabeled)': 300,
    'Lotion (Ready)': 50,
    'Powder': 120,
    'Gift Box Outer Cardboard': 80,
    'Empty Thermacol': 90,
    'Gift Set': 12,
    GIFT_SET_PRODUCT: 100,
}


def make_interface():
    """In-memory SQLite database shared across sessions."""
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(engine)
    return SQLAlchemyInterface(sessionmaker(bind=engine, autoflush=False))


def seed_catalog(database, catalog=None):
    """Insert the catalog and return a name -> id map."""
    ids = {}
    for name, quantity in (catalog or CATALOG).items():
        ids[name] = database.insert('products', {'name': name, 'quantity': quantity})['id']
    return ids


def stock_of(database, name):
    return database.query('products', {'name': name})[0]['quantity']
