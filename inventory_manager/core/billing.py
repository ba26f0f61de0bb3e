# inventory_manager/core/billing.py
from dataclasses import dataclass, asdict
from typing import Dict, Optional, Tuple

from inventory_manager.core.quantity import is_gift_set
from inventory_manager.exceptions import ValidationError

GIFT_SET_PIECES_LABEL = " (4 Pcs)"


@dataclass(frozen=True)
class LineTotals:
    """Money amounts for one sale line."""
    total_price: float
    trade_scheme_amount: float
    percentage_discount_amount: float
    discount_amount: float
    final_price: float

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass(frozen=True)
class ReceiptLine:
    """Per-piece breakdown of a sale line as printed on an invoice."""
    product_name: str
    quantity: int
    quantity_display: str
    price_per_unit: float
    trade_scheme: Optional[str]
    trade_scheme_per_piece: float
    discount_percentage: Optional[float]
    discount_per_piece: float
    net_rate: float
    final_price: float

    def to_dict(self) -> Dict:
        return asdict(self)


def parse_trade_scheme(scheme: Optional[str]) -> Optional[Tuple[int, int]]:
    """Parse a "buy+free" trade scheme such as "12+1".

    Returns:
        Tuple (buy, free), or None when the scheme is empty or malformed
    """
    if not scheme or not isinstance(scheme, str):
        return None

    parts = scheme.split('+')
    if len(parts) != 2:
        return None

    try:
        buy, free = (int(part.strip()) for part in parts)
    except ValueError:
        return None

    if buy <= 0 or free <= 0:
        return None

    return buy, free


def trade_scheme_free_items(quantity: float, scheme: Optional[str]) -> float:
    """Number of pieces given free under a trade scheme, spread proportionally."""
    parsed = parse_trade_scheme(scheme)
    if parsed is None:
        return 0.0

    buy, free = parsed
    return (free * quantity) / (buy + free)


def calculate_line_totals(
    quantity: int,
    price_per_unit: float,
    discount_percentage: Optional[float] = None,
    trade_scheme: Optional[str] = None
) -> LineTotals:
    """Calculate totals for a sale line.

    The trade scheme is applied first; the percentage discount is taken on
    the amount remaining after the free pieces.

    Args:
        quantity: Pieces sold
        price_per_unit: Unit price charged
        discount_percentage: Optional percentage discount
        trade_scheme: Optional "buy+free" scheme

    Returns:
        LineTotals rounded to 2 decimal places
    """
    if discount_percentage is not None and discount_percentage < 0:
        raise ValidationError("Discount percentage cannot be negative",
                              details={'discount_percentage': discount_percentage})

    total_price = quantity * price_per_unit
    trade_scheme_amount = trade_scheme_free_items(quantity, trade_scheme) * price_per_unit
    after_trade_scheme = total_price - trade_scheme_amount
    percentage_amount = after_trade_scheme * (discount_percentage or 0) / 100.0
    discount_amount = trade_scheme_amount + percentage_amount

    return LineTotals(
        total_price=round(total_price, 2),
        trade_scheme_amount=round(trade_scheme_amount, 2),
        percentage_discount_amount=round(percentage_amount, 2),
        discount_amount=round(discount_amount, 2),
        final_price=round(total_price - discount_amount, 2)
    )


def apply_bill_discount(total_amount: float, discount_percentage: Optional[float]) -> Tuple[float, float]:
    """Apply a bill-level percentage discount.

    Returns:
        Tuple (discount_amount, final_amount)
    """
    if not discount_percentage:
        return 0.0, round(total_amount, 2)

    if discount_percentage < 0:
        raise ValidationError("Bill discount percentage cannot be negative",
                              details={'bill_discount_percentage': discount_percentage})

    discount = round(total_amount * discount_percentage / 100.0, 2)
    return discount, round(total_amount - discount, 2)


def build_receipt_line(
    product_name: str,
    quantity: int,
    price_per_unit: float,
    final_price: float,
    trade_scheme: Optional[str] = None,
    discount_percentage: Optional[float] = None
) -> ReceiptLine:
    """Build the invoice breakdown for a recorded sale line."""
    trade_scheme_per_piece = 0.0
    if trade_scheme and quantity:
        trade_scheme_per_piece = (
            trade_scheme_free_items(quantity, trade_scheme) * price_per_unit
        ) / quantity

    after_trade_scheme = price_per_unit - trade_scheme_per_piece
    discount_per_piece = after_trade_scheme * (discount_percentage / 100.0) if discount_percentage else 0.0
    net_rate = final_price / quantity if quantity else 0.0

    display_name = product_name
    if is_gift_set(product_name):
        display_name = f"{product_name}{GIFT_SET_PIECES_LABEL}"

    return ReceiptLine(
        product_name=display_name,
        quantity=quantity,
        quantity_display=f"{quantity} Pcs",
        price_per_unit=round(price_per_unit, 2),
        trade_scheme=trade_scheme,
        trade_scheme_per_piece=round(trade_scheme_per_piece, 2),
        discount_percentage=discount_percentage,
        discount_per_piece=round(discount_per_piece, 2),
        net_rate=round(net_rate, 2),
        final_price=round(final_price, 2)
    )
