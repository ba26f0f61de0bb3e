# inventory_manager/services/sales_service.py
import logging
from typing import Dict, List, Optional

from inventory_manager.config import config
from inventory_manager.core.billing import build_receipt_line, calculate_line_totals
from inventory_manager.core.pricing import find_price_rule
from inventory_manager.db.interface import DatabaseInterface
from inventory_manager.exceptions import NotFoundError, ProductError, SaleError
from inventory_manager.services.product_service import ProductService
from inventory_manager.utils.date_utils import to_iso_date
from inventory_manager.utils.validation import (
    ensure_valid, validate_discount, validate_movement, validate_optional_text, validate_trade_scheme
)

logger = logging.getLogger(__name__)


class SalesService:
    """Service for recording sales and building invoices."""

    def __init__(self, database: DatabaseInterface, product_service: Optional[ProductService] = None):
        """Initialize the sales service.

        Args:
            database: Database interface
            product_service: Optional product service sharing the same database
        """
        self.db = database
        self.products = product_service or ProductService(database)

    def suggest_discount(self, product_name: str, price: float) -> Optional[Dict]:
        """Suggest the preset trade scheme and discount for an entered price.

        Returns:
            Dictionary with trade_scheme, discount_percentage and base_price,
            or None when there is no suggestion
        """
        match = find_price_rule(product_name, price)
        return match.to_dict() if match else None

    def record_sale(
        self,
        product_id: int,
        quantity: int,
        price_per_unit: float,
        sale_date,
        buyer_name: str = '',
        contact_no: Optional[str] = None,
        discount_percentage: Optional[float] = None,
        trade_scheme: Optional[str] = None,
        notes: Optional[str] = None,
        apply_preset: bool = True
    ) -> Dict:
        """Record a sale and take the quantity out of stock.

        When neither a discount nor a trade scheme is given, the preset price
        rules fill them in from the entered unit price.

        Args:
            product_id: Product sold
            quantity: Pieces sold
            price_per_unit: Unit price charged
            sale_date: Date of sale
            buyer_name: Buyer name
            contact_no: Optional buyer contact number
            discount_percentage: Optional percentage discount
            trade_scheme: Optional "buy+free" scheme
            notes: Optional notes
            apply_preset: Whether to look up preset price rules

        Returns:
            Stored sale row
        """
        errors = validate_movement(product_id, quantity, price_per_unit, sale_date, require_price=True)
        errors.update(validate_discount(discount_percentage))
        errors.update(validate_trade_scheme(trade_scheme))
        errors.update(validate_optional_text(buyer_name, 'buyer_name', 'Buyer name'))
        errors.update(validate_optional_text(contact_no, 'contact_no', 'Contact number'))
        errors.update(validate_optional_text(notes, 'notes', 'Notes'))
        ensure_valid(errors, "Invalid sale")
        trade_scheme = trade_scheme.strip() if trade_scheme else None
        product = self.products.require_product(product_id)

        # Read before the decrement, in a separate call: two concurrent sales
        # can both pass this check and oversell.
        on_hand = product.get('quantity') or 0
        if on_hand < quantity:
            raise SaleError(
                f"Insufficient stock for {product['name']}: {on_hand} on hand, {quantity} requested",
                code='insufficient_stock',
                details={'product_id': product_id, 'on_hand': on_hand, 'requested': quantity}
            )

        if apply_preset and discount_percentage is None and not trade_scheme:
            match = find_price_rule(product['name'], price_per_unit)
            if match:
                logger.info(f"Applying preset {match.trade_scheme} / {match.discount_percentage}% "
                            f"for {product['name']} at {price_per_unit}")
                trade_scheme = match.trade_scheme
                discount_percentage = match.discount_percentage

        totals = calculate_line_totals(quantity, price_per_unit, discount_percentage, trade_scheme)

        sale = self.db.insert('sales', {
            'product_id': product_id,
            'quantity': quantity,
            'price': totals.final_price,
            'sale_date': to_iso_date(sale_date),
            'buyer_name': (buyer_name or '').strip(),
            'contact_no': contact_no,
            'price_per_unit': float(price_per_unit),
            'total_price': totals.total_price,
            'trade_scheme': trade_scheme,
            'discount_percentage': discount_percentage,
            'discount_amount': totals.discount_amount,
            'final_price': totals.final_price,
            'notes': notes
        })

        try:
            self.products.adjust_quantity(product_id, -quantity)
        except ProductError as e:
            logger.error(f"Sale {sale.get('id')} recorded but stock was not updated: {e}")
            raise SaleError("Sale recorded but stock could not be updated",
                            details={'sale_id': sale.get('id'), 'product_id': product_id})

        logger.info(f"Recorded sale of {quantity} x {product['name']} for {totals.final_price}")
        return sale

    def reverse_sale(self, sale_id: int) -> Dict:
        """Delete a recorded sale and put its quantity back into stock.

        Returns:
            The removed sale row

        Raises:
            NotFoundError: If the sale does not exist
        """
        rows = self.db.query('sales', {'id': sale_id}, limit=1)
        if not rows or not self.db.rpc('reverse_sale', {'p_sale_id': sale_id}):
            raise NotFoundError(f"Sale {sale_id} not found", details={'sale_id': sale_id})

        sale = rows[0]
        logger.info(f"Reversed sale {sale_id}: {sale['quantity']} pcs of product {sale['product_id']} restocked")
        return sale

    def recent_sales(self, limit: Optional[int] = None) -> List[Dict]:
        """Most recent sales with product names."""
        limit = limit or config.business_rules['recent_limit']
        sales = self.db.query('sales', order_by='sale_date', descending=True, limit=limit)
        names = self.products.product_names()
        for sale in sales:
            sale['product_name'] = names.get(sale['product_id'])
        return sales

    def get_receipt(self, sale_id: int) -> Dict:
        """Build the invoice breakdown for a recorded sale.

        Raises:
            NotFoundError: If the sale does not exist
        """
        rows = self.db.query('sales', {'id': sale_id}, limit=1)
        if not rows:
            raise NotFoundError(f"Sale {sale_id} not found", details={'sale_id': sale_id})

        sale = rows[0]
        product = self.products.get_product(sale['product_id'])
        product_name = product['name'] if product else f"Product {sale['product_id']}"

        line = build_receipt_line(
            product_name=product_name,
            quantity=sale['quantity'],
            price_per_unit=sale['price_per_unit'],
            final_price=sale['final_price'],
            trade_scheme=sale.get('trade_scheme'),
            discount_percentage=sale.get('discount_percentage')
        )

        total_amount = sale.get('total_price') or 0.0
        final_amount = sale.get('final_price') or 0.0
        return {
            'sale_id': sale['id'],
            'sale_date': sale['sale_date'],
            'buyer_name': sale.get('buyer_name'),
            'contact_no': sale.get('contact_no'),
            'items': [line.to_dict()],
            'sub_total': round(total_amount, 2),
            'total_discount': round(total_amount - final_amount, 2),
            'final_amount': round(final_amount, 2),
            'notes': sale.get('notes')
        }
