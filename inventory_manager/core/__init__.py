from .pricing import (
    PriceRule, ProductPricePreset, PriceRuleMatch, PRODUCT_PRESETS,
    find_price_rule, candidate_price_keys, get_preset
)
from .quantity import (
    UNITS_PER_CARTON, QuantityFormat, format_gift_set_quantity,
    is_gift_set, cartons_to_pieces, pieces_to_cartons
)
from .billing import (
    LineTotals, ReceiptLine, parse_trade_scheme, trade_scheme_free_items,
    calculate_line_totals, apply_bill_discount, build_receipt_line
)
from .production import (
    PROCESS_RECIPES, production_adjustments, potential_gift_sets, resolve_process
)

__all__ = [
    'PriceRule',
    'ProductPricePreset',
    'PriceRuleMatch',
    'PRODUCT_PRESETS',
    'find_price_rule',
    'candidate_price_keys',
    'get_preset',
    'UNITS_PER_CARTON',
    'QuantityFormat',
    'format_gift_set_quantity',
    'is_gift_set',
    'cartons_to_pieces',
    'pieces_to_cartons',
    'LineTotals',
    'ReceiptLine',
    'parse_trade_scheme',
    'trade_scheme_free_items',
    'calculate_line_totals',
    'apply_bill_discount',
    'build_receipt_line',
    'PROCESS_RECIPES',
    'production_adjustments',
    'potential_gift_sets',
    'resolve_process'
]
