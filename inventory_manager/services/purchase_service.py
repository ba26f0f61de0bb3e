# inventory_manager/services/purchase_service.py
import logging
from typing import Dict, List, Optional

from inventory_manager.config import config
from inventory_manager.db.interface import DatabaseInterface
from inventory_manager.exceptions import NotFoundError, ProductError, PurchaseError
from inventory_manager.services.product_service import ProductService
from inventory_manager.utils.date_utils import to_iso_date
from inventory_manager.utils.validation import ensure_valid, validate_movement

logger = logging.getLogger(__name__)


class PurchaseService:
    """Service for recording stock purchases."""

    def __init__(self, database: DatabaseInterface, product_service: Optional[ProductService] = None):
        self.db = database
        self.products = product_service or ProductService(database)

    def record_purchase(self, product_id: int, quantity: int, price: float, purchase_date) -> Dict:
        """Record a purchase and add the quantity to stock.

        Args:
            product_id: Product purchased
            quantity: Pieces purchased
            price: Total price paid
            purchase_date: Date of purchase

        Returns:
            Stored purchase row
        """
        ensure_valid(
            validate_movement(product_id, quantity, price, purchase_date, require_price=True),
            "Invalid purchase"
        )
        self.products.require_product(product_id)

        purchase = self.db.insert('purchases', {
            'product_id': product_id,
            'quantity': quantity,
            'price': float(price),
            'purchase_date': to_iso_date(purchase_date)
        })

        try:
            self.products.adjust_quantity(product_id, quantity)
        except ProductError as e:
            logger.error(f"Purchase {purchase.get('id')} recorded but stock was not updated: {e}")
            raise PurchaseError("Purchase recorded but stock could not be updated",
                                details={'purchase_id': purchase.get('id'), 'product_id': product_id})

        logger.info(f"Recorded purchase of {quantity} x product {product_id} for {price}")
        return purchase

    def reverse_purchase(self, purchase_id: int) -> Dict:
        """Delete a purchase and take its quantity back out of stock.

        Raises:
            NotFoundError: If the purchase does not exist
            PurchaseError: If the purchase was deleted but stock was not updated
        """
        rows = self.db.query('purchases', {'id': purchase_id}, limit=1)
        if not rows or not self.db.delete('purchases', {'id': purchase_id}):
            raise NotFoundError(f"Purchase {purchase_id} not found", details={'purchase_id': purchase_id})

        purchase = rows[0]
        try:
            self.products.adjust_quantity(purchase['product_id'], -purchase['quantity'])
        except ProductError as e:
            logger.error(f"Purchase {purchase_id} deleted but stock was not updated: {e}")
            raise PurchaseError("Purchase deleted but stock could not be updated",
                                details={'purchase_id': purchase_id, 'product_id': purchase['product_id']})

        logger.info(f"Reversed purchase {purchase_id}")
        return purchase

    def recent_purchases(self, limit: Optional[int] = None) -> List[Dict]:
        """Most recent purchases with product names."""
        limit = limit or config.business_rules['recent_limit']
        purchases = self.db.query('purchases', order_by='purchase_date', descending=True, limit=limit)
        names = self.products.product_names()
        for purchase in purchases:
            purchase['product_name'] = names.get(purchase['product_id'])
        return purchases
