# inventory_manager/core/pricing.py
"""Preset price rules for catalog products.

A preset ties a product to its catalog base price and to the trade scheme and
discount a salesperson gives at specific unit prices. Rule keys are kept
exactly as they were authored ("270" next to "258.92"), so a lookup tries
both the plain and the two-decimal spelling of the entered price.
"""
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Union
from decimal import Decimal

logger = logging.getLogger(__name__)

Number = Union[int, float, Decimal]


@dataclass(frozen=True)
class PriceRule:
    """Trade scheme and discount offered at one price point."""
    trade_scheme: str
    discount_percentage: float


@dataclass(frozen=True)
class ProductPricePreset:
    """Base price and price-keyed rules for one product."""
    base_price: float
    price_rules: Mapping[str, PriceRule]


@dataclass(frozen=True)
class PriceRuleMatch:
    """A matched price rule merged with its product's base price."""
    trade_scheme: str
    discount_percentage: float
    base_price: float

    def to_dict(self) -> Dict:
        return {
            'trade_scheme': self.trade_scheme,
            'discount_percentage': self.discount_percentage,
            'base_price': self.base_price
        }


def _preset(base_price: float, rules: Dict[str, PriceRule]) -> ProductPricePreset:
    return ProductPricePreset(base_price=base_price, price_rules=MappingProxyType(dict(rules)))


PRODUCT_PRESETS: Mapping[str, ProductPricePreset] = MappingProxyType({
    "Nikka Nikki Gift Set 4 Pcs": _preset(330, {
        "258.92": PriceRule(trade_scheme="12+1", discount_percentage=15),
        "270": PriceRule(trade_scheme="10+1", discount_percentage=10),
        "265": PriceRule(trade_scheme="12+1", discount_percentage=13),
        "265.02": PriceRule(trade_scheme="12+1", discount_percentage=13),
    }),
})


def plain_price_key(price: Number) -> str:
    """Render a price the way a plain number prints: 265 -> '265', 258.92 -> '258.92'."""
    value = float(price)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def fixed_price_key(price: Number) -> str:
    """Render a price with exactly two decimal places: 265 -> '265.00'."""
    return f"{float(price):.2f}"


def candidate_price_keys(price: Number) -> List[str]:
    """Keys to try for a price, plain spelling first.

    Args:
        price: Entered unit price

    Returns:
        List with the plain and the two-decimal key
    """
    return [plain_price_key(price), fixed_price_key(price)]


def get_preset(product_name: str) -> Optional[ProductPricePreset]:
    """Get the preset for a product by exact, case-sensitive name."""
    return PRODUCT_PRESETS.get(product_name)


def find_price_rule(product_name: str, entered_price: Number) -> Optional[PriceRuleMatch]:
    """Find the preset rule matching an entered unit price.

    Args:
        product_name: Product name, matched exactly against the preset table
        entered_price: Unit price entered by the user

    Returns:
        PriceRuleMatch with the rule and the product's base price, or None when
        the product has no preset or no rule is keyed at that price
    """
    logger.debug(f"Finding price rule for product={product_name!r} price={entered_price!r}")

    preset = PRODUCT_PRESETS.get(product_name)
    if preset is None:
        logger.debug(f"No price preset for product {product_name!r}")
        return None

    try:
        price_keys = candidate_price_keys(entered_price)
    except (TypeError, ValueError, OverflowError):
        logger.debug(f"Price {entered_price!r} is not numeric")
        return None

    for key in price_keys:
        rule = preset.price_rules.get(key)
        if rule is not None:
            match = PriceRuleMatch(
                trade_scheme=rule.trade_scheme,
                discount_percentage=rule.discount_percentage,
                base_price=preset.base_price
            )
            logger.debug(f"Matched price key {key!r}: {match}")
            return match

    logger.debug(f"No price rule for keys {price_keys}")
    return None
