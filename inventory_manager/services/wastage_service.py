# inventory_manager/services/wastage_service.py
import logging
from typing import Dict, List, Optional

from inventory_manager.config import config
from inventory_manager.db.interface import DatabaseInterface
from inventory_manager.exceptions import NotFoundError, ProductError, WastageError
from inventory_manager.services.product_service import ProductService
from inventory_manager.utils.date_utils import to_iso_date
from inventory_manager.utils.validation import ensure_valid, validate_movement, validate_text

logger = logging.getLogger(__name__)


class WastageService:
    """Service for recording damaged or lost stock."""

    def __init__(self, database: DatabaseInterface, product_service: Optional[ProductService] = None):
        self.db = database
        self.products = product_service or ProductService(database)

    def record_wastage(self, product_id: int, quantity: int, reason: str, wastage_date) -> Dict:
        """Record wastage and remove the quantity from stock.

        Args:
            product_id: Product wasted
            quantity: Pieces wasted
            reason: Why the stock was written off
            wastage_date: Date of wastage

        Returns:
            Stored wastage row
        """
        errors = validate_movement(product_id, quantity, movement_date=wastage_date)
        errors.update(validate_text(reason, 'reason', 'Reason'))
        ensure_valid(errors, "Invalid wastage")

        product = self.products.require_product(product_id)

        wastage = self.db.insert('wastage', {
            'product_id': product_id,
            'quantity': quantity,
            'reason': reason.strip(),
            'wastage_date': to_iso_date(wastage_date)
        })

        try:
            self.products.adjust_quantity(product_id, -quantity)
        except ProductError as e:
            logger.error(f"Wastage {wastage.get('id')} recorded but stock was not updated: {e}")
            raise WastageError("Wastage recorded but stock could not be updated",
                               details={'wastage_id': wastage.get('id'), 'product_id': product_id})

        logger.info(f"Recorded wastage of {quantity} x {product['name']}: {reason}")
        return wastage

    def reverse_wastage(self, wastage_id: int) -> Dict:
        """Delete a wastage record and return its quantity to stock."""
        rows = self.db.query('wastage', {'id': wastage_id}, limit=1)
        if not rows or not self.db.rpc('reverse_wastage', {'p_wastage_id': wastage_id}):
            raise NotFoundError(f"Wastage {wastage_id} not found", details={'wastage_id': wastage_id})

        logger.info(f"Reversed wastage {wastage_id}")
        return rows[0]

    def recent_wastage(self, limit: Optional[int] = None) -> List[Dict]:
        """Most recent wastage with product names."""
        limit = limit or config.business_rules['recent_limit']
        rows = self.db.query('wastage', order_by='wastage_date', descending=True, limit=limit)
        names = self.products.product_names()
        for row in rows:
            row['product_name'] = names.get(row['product_id'])
        return rows
