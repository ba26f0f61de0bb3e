import math
from typing import Any, Dict, Optional

from inventory_manager.core.billing import parse_trade_scheme
from inventory_manager.exceptions import ValidationError
from inventory_manager.utils.date_utils import convert_to_date

def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0

def validate_movement(
    product_id: Any,
    quantity: Any,
    price: Any = None,
    movement_date: Any = None,
    require_price: bool = False,
    require_date: bool = True,
    require_product: bool = True
) -> Dict[str, str]:
    """Validate a stock movement submitted from a form.

    Args:
        product_id: Product ID
        quantity: Number of pieces
        price: Optional price
        movement_date: Date of the movement
        require_price: Whether a price must be present
        require_date: Whether a date must be present
        require_product: Whether a product ID must be present

    Returns:
        Dictionary with validation errors
    """
    errors = {}

    if require_product and not _is_positive_int(product_id):
        errors['product_id'] = 'Product is required'

    if not _is_positive_int(quantity):
        errors['quantity'] = 'Quantity must be a positive whole number'

    if price is None:
        if require_price:
            errors['price'] = 'Price is required'
    elif isinstance(price, bool) or not isinstance(price, (int, float)) \
            or not math.isfinite(price) or price < 0:
        errors['price'] = 'Price must be a non-negative number'

    if movement_date is None:
        if require_date:
            errors['date'] = 'A date is required'
    else:
        try:
            convert_to_date(movement_date)
        except ValueError:
            errors['date'] = 'Date is not valid'

    return errors

def validate_quantity(quantity: Any) -> Dict[str, str]:
    """Validate a quantity passed to the display formatter."""
    errors = {}

    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
        errors['quantity'] = 'Quantity must be a non-negative whole number'

    return errors

def validate_text(value: Optional[str], field: str, label: str) -> Dict[str, str]:
    """Validate that a required text field is present."""
    if value is not None and not isinstance(value, str):
        return {field: f'{label} must be text'}
    if not value or not value.strip():
        return {field: f'{label} is required'}
    return {}

def validate_optional_text(value: Any, field: str, label: str) -> Dict[str, str]:
    """Validate an optional text field; None and strings pass."""
    if value is not None and not isinstance(value, str):
        return {field: f'{label} must be text'}
    return {}

def validate_trade_scheme(trade_scheme: Any) -> Dict[str, str]:
    """Validate an optional "buy+free" trade scheme such as "12+1"."""
    if trade_scheme is None or (isinstance(trade_scheme, str) and not trade_scheme.strip()):
        return {}

    if not isinstance(trade_scheme, str) or parse_trade_scheme(trade_scheme) is None:
        return {'trade_scheme': 'Trade scheme must be two positive whole numbers, e.g. 12+1'}

    return {}

def ensure_valid(errors: Dict[str, str], message: str = "Validation error") -> None:
    """Raise ValidationError when errors were collected.

    Raises:
        ValidationError with the errors as details
    """
    if errors:
        raise ValidationError(message, code='invalid_input', details=errors)

def validate_discount(discount_percentage: Any) -> Dict[str, str]:
    """Validate an optional percentage discount."""
    if discount_percentage is None:
        return {}

    if isinstance(discount_percentage, bool) or not isinstance(discount_percentage, (int, float)) \
            or not math.isfinite(discount_percentage) or not 0 <= discount_percentage <= 100:
        return {'discount_percentage': 'Discount must be between 0 and 100 percent'}

    return {}
