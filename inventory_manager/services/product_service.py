# inventory_manager/services/product_service.py
import logging
from typing import Dict, List, Optional

from inventory_manager.core.quantity import format_gift_set_quantity, is_gift_set
from inventory_manager.db.interface import DatabaseInterface
from inventory_manager.exceptions import NotFoundError, ProductError
from inventory_manager.utils.validation import ensure_valid, validate_text

logger = logging.getLogger(__name__)


class ProductService:
    """Service for the product catalog and stock levels."""

    def __init__(self, database: DatabaseInterface):
        """Initialize the product service.

        Args:
            database: Database interface
        """
        self.db = database

    def list_products(self) -> List[Dict]:
        """Get all products ordered by name."""
        return self.db.query('products', order_by='name')

    def get_product(self, product_id: int) -> Optional[Dict]:
        """Get a product by ID.

        Args:
            product_id: Product ID

        Returns:
            Product row or None if not found
        """
        rows = self.db.query('products', {'id': product_id}, limit=1)
        return rows[0] if rows else None

    def require_product(self, product_id: int) -> Dict:
        """Get a product by ID or raise NotFoundError."""
        product = self.get_product(product_id)
        if product is None:
            raise NotFoundError(f"Product {product_id} not found", details={'product_id': product_id})
        return product

    def get_product_by_name(self, name: str) -> Optional[Dict]:
        """Get a product by exact name."""
        rows = self.db.query('products', {'name': name}, limit=1)
        return rows[0] if rows else None

    def create_product(self, name: str, quantity: int = 0) -> Dict:
        """Create a catalog product.

        Args:
            name: Unique product name
            quantity: Opening stock

        Returns:
            Created product row
        """
        ensure_valid(validate_text(name, 'name', 'Product name'), "Invalid product")
        name = name.strip()

        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
            ensure_valid({'quantity': 'Opening stock must be a non-negative whole number'}, "Invalid product")

        if self.get_product_by_name(name) is not None:
            raise ProductError(f"Product {name} already exists", code='duplicate_product')

        product = self.db.insert('products', {'name': name, 'quantity': quantity})
        logger.info(f"Created product {name} with opening stock {quantity}")
        return product

    def adjust_quantity(self, product_id: int, qty: int) -> bool:
        """Add (or with a negative qty, remove) stock for a product.

        Raises:
            ProductError: If the database reports the update did not happen
        """
        updated = self.db.rpc('update_product_quantity', {'p_id': product_id, 'qty': qty})
        if not updated:
            raise ProductError(f"Failed to update quantity of product {product_id}",
                               details={'product_id': product_id, 'qty': qty})

        logger.debug(f"Adjusted product {product_id} by {qty}")
        return True

    def product_names(self) -> Dict[int, str]:
        """Map product IDs to names."""
        return {p['id']: p['name'] for p in self.list_products()}

    def stock_by_name(self) -> Dict[str, int]:
        """Map product names to stock on hand."""
        return {p['name']: p.get('quantity') or 0 for p in self.list_products()}

    def inventory_rows(self) -> List[Dict]:
        """Products with their quantity formatted for display."""
        rows = []
        for product in self.list_products():
            formatted = format_gift_set_quantity(product.get('quantity') or 0, product['name'])
            rows.append({
                'id': product['id'],
                'name': product['name'],
                'quantity': product.get('quantity') or 0,
                'display': formatted.display,
                'tooltip': formatted.tooltip,
                'is_gift_set': is_gift_set(product['name'])
            })
        return rows
