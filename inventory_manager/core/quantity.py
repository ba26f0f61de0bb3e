# inventory_manager/core/quantity.py
from typing import NamedTuple, Optional, Union

UNITS_PER_CARTON = 24

GIFT_SET_MARKER = 'gift set'


class QuantityFormat(NamedTuple):
    """Display strings for a stock quantity."""
    display: str
    tooltip: str

    def to_dict(self):
        return {'display': self.display, 'tooltip': self.tooltip}


def is_gift_set(product_name: Optional[str]) -> bool:
    """Check whether a product is counted in cartons."""
    return bool(product_name) and GIFT_SET_MARKER in product_name.lower()


def format_gift_set_quantity(quantity: int, product_name: Optional[str] = None) -> QuantityFormat:
    """Format a quantity as cartons and pieces for gift sets.

    Products that are not gift sets (or have no name) are always shown in
    pieces. Gift sets are broken down into cartons of UNITS_PER_CARTON.

    Args:
        quantity: Non-negative number of pieces
        product_name: Optional product name

    Returns:
        QuantityFormat with the compact display and the tooltip text
    """
    if not is_gift_set(product_name):
        return QuantityFormat(display=f"{quantity} pcs", tooltip=f"{quantity} pcs")

    cartons, pieces = divmod(quantity, UNITS_PER_CARTON)

    if cartons > 0:
        display = f"{cartons} ctn + {pieces} pcs" if pieces > 0 else f"{cartons} ctn"
        extra = f" + {pieces} pcs" if pieces > 0 else ""
        tooltip = f"{quantity} pcs ({cartons} cartons{extra})"
    else:
        display = f"{quantity} pcs"
        tooltip = f"{quantity} pcs"

    return QuantityFormat(display=display, tooltip=tooltip)


def cartons_to_pieces(cartons: Union[int, float], units_per_carton: Union[int, float] = UNITS_PER_CARTON) -> float:
    """Convert a carton count to pieces."""
    return cartons * units_per_carton


def pieces_to_cartons(pieces: Union[int, float],
                      units_per_carton: Union[int, float] = UNITS_PER_CARTON) -> Optional[float]:
    """Convert a piece count to (possibly fractional) cartons.

    Returns:
        Carton count, or None when units_per_carton is zero
    """
    if units_per_carton == 0:
        return None
    return pieces / units_per_carton
