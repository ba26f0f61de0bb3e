from .config import config
from .db import db, get_interface
from .logging_setup import logger, get_logger
from .exceptions import (
    InventoryError, ConfigError, ValidationError, NotFoundError, DatabaseError,
    ProductError, SaleError, PurchaseError, ProductionError, WastageError
)
from .core.pricing import find_price_rule
from .core.quantity import format_gift_set_quantity

__all__ = [
    'config',
    'db',
    'get_interface',
    'logger',
    'get_logger',
    'InventoryError',
    'ConfigError',
    'ValidationError',
    'NotFoundError',
    'DatabaseError',
    'ProductError',
    'SaleError',
    'PurchaseError',
    'ProductionError',
    'WastageError',
    'find_price_rule',
    'format_gift_set_quantity'
]
