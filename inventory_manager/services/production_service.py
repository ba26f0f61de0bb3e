# inventory_manager/services/production_service.py
import logging
from typing import Dict, List, Optional

from inventory_manager.config import config
from inventory_manager.core.production import production_adjustments, resolve_process
from inventory_manager.db.interface import DatabaseInterface
from inventory_manager.exceptions import NotFoundError
from inventory_manager.utils.date_utils import to_iso_date
from inventory_manager.utils.validation import ensure_valid, validate_movement

logger = logging.getLogger(__name__)


class ProductionService:
    """Service for recording production runs."""

    def __init__(self, database: DatabaseInterface):
        self.db = database

    def record_production(self, process, quantity: int, production_date) -> Dict:
        """Record a production run and move its components through stock.

        Args:
            process: Process name (e.g. 'soapBoxing') or ProductionProcess
            quantity: Units produced
            production_date: Date of production

        Returns:
            Dictionary describing the run and the stock movements applied
        """
        ensure_valid(
            validate_movement(None, quantity, movement_date=production_date, require_product=False),
            "Invalid production"
        )

        production_process = resolve_process(process)
        adjustments = production_adjustments(production_process, quantity)
        iso_date = to_iso_date(production_date)

        self.db.rpc('record_production', {
            'p_process': production_process.value,
            'p_quantity': quantity,
            'p_production_date': iso_date
        })

        logger.info(f"Recorded {production_process.value} of {quantity} units on {iso_date}")
        return {
            'process': production_process.value,
            'quantity': quantity,
            'production_date': iso_date,
            'adjustments': [{'product': name, 'change': change} for name, change in adjustments]
        }

    def reverse_production(self, production_id: int) -> Dict:
        """Delete a production run and undo its stock movements.

        Components go back into stock and the produced units come out.

        Raises:
            NotFoundError: If the run does not exist
        """
        rows = self.db.query('production', {'id': production_id}, limit=1)
        if not rows or not self.db.rpc('reverse_production', {'p_production_id': production_id}):
            raise NotFoundError(f"Production run {production_id} not found",
                                details={'production_id': production_id})

        run = rows[0]
        adjustments = production_adjustments(run['process'], run['quantity'])
        logger.info(f"Reversed {run['process']} run {production_id} of {run['quantity']} units")
        return {
            **run,
            'adjustments': [{'product': name, 'change': -change} for name, change in adjustments]
        }

    def recent_production(self, limit: Optional[int] = None) -> List[Dict]:
        """Most recent production runs."""
        limit = limit or config.business_rules['recent_limit']
        return self.db.query('production', order_by='production_date', descending=True, limit=limit)
