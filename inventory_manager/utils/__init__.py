from .date_utils import convert_to_date, to_iso_date, days_ago, last_n_days
from .validation import (
    validate_movement, validate_quantity, validate_text, validate_optional_text,
    validate_trade_scheme, validate_discount, ensure_valid
)

__all__ = [
    'convert_to_date',
    'to_iso_date',
    'days_ago',
    'last_n_days',
    'validate_movement',
    'validate_quantity',
    'validate_text',
    'validate_optional_text',
    'validate_trade_scheme',
    'validate_discount',
    'ensure_valid'
]
