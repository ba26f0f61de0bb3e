# inventory_manager/core/production.py
from typing import Dict, List, Mapping, Tuple
from types import MappingProxyType

from inventory_manager.exceptions import ProductionError
from inventory_manager.models import ProductionProcess

GIFT_SET = 'Gift Set'

# Components consumed one-for-one by each assembled gift set
GIFT_SET_COMPONENTS = (
    'Soap (Ready)',
    'Shampoo (Ready)',
    'Lotion (Ready)',
    'Powder',
    'Gift Box Outer Cardboard',
    'Empty Thermacol',
)

READY_PRODUCTS = (
    'Soap (Ready)',
    'Powder',
    'Lotion (Ready)',
    'Shampoo (Ready)',
)

# process -> ((product name, sign), ...); each unit produced moves one unit per entry
PROCESS_RECIPES: Mapping[ProductionProcess, Tuple[Tuple[str, int], ...]] = MappingProxyType({
    ProductionProcess.SOAP_BOXING: (
        ('Soap (Wrapped)', -1),
        ('Soap Boxes', -1),
        ('Soap (Ready)', 1),
    ),
    ProductionProcess.SHAMPOO_LABELING: (
        ('Shampoo (Unlabeled)', -1),
        ('Shampoo (Ready)', 1),
    ),
    ProductionProcess.LOTION_LABELING: (
        ('Lotion (Unlabeled)', -1),
        ('Lotion (Ready)', 1),
    ),
    ProductionProcess.GIFT_SET_ASSEMBLY: tuple(
        (name, -1) for name in GIFT_SET_COMPONENTS
    ) + ((GIFT_SET, 1),),
})


def resolve_process(process) -> ProductionProcess:
    """Resolve a process name or enum to a ProductionProcess.

    Raises:
        ProductionError: If the process is unknown
    """
    if isinstance(process, ProductionProcess):
        return process

    try:
        return ProductionProcess.from_string(process)
    except ValueError as e:
        raise ProductionError(str(e), code='unknown_process', details={'process': process})


def production_adjustments(process, quantity: int) -> List[Tuple[str, int]]:
    """Stock movements caused by producing `quantity` units.

    Args:
        process: Process name or ProductionProcess
        quantity: Units produced

    Returns:
        List of (product name, signed quantity change)
    """
    recipe = PROCESS_RECIPES[resolve_process(process)]
    return [(name, sign * quantity) for name, sign in recipe]


def potential_gift_sets(stock_by_name: Dict[str, int]) -> int:
    """How many gift sets could be assembled from current stock."""
    return min(stock_by_name.get(name, 0) or 0 for name in GIFT_SET_COMPONENTS)
