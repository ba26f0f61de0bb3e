"""
Routes for the inventory API.

This module provides JSON endpoints for recording and reversing purchases,
sales, production and wastage against the product catalog, plus the
dashboard summary and the pricing and quantity display helpers used by the
forms.
"""
from flask import Blueprint, jsonify, request, current_app

from inventory_manager.core.pricing import find_price_rule
from inventory_manager.core.quantity import format_gift_set_quantity
from inventory_manager.db.connection import get_interface
from inventory_manager.exceptions import InventoryError, NotFoundError, ValidationError
from inventory_manager.services import (
    DashboardService, ProductService, ProductionService,
    PurchaseService, SalesService, WastageService
)
from inventory_manager.utils.validation import ensure_valid, validate_quantity

inventory_bp = Blueprint('inventory', __name__, url_prefix='/api')

DATABASE_EXTENSION = 'inventory_database'

ERROR_CODE_STATUS = {
    'unknown_process': 400,
    'insufficient_stock': 409,
    'duplicate_product': 409,
}


def _database():
    database = current_app.extensions.get(DATABASE_EXTENSION)
    return database if database is not None else get_interface()


def _int_value(value):
    """Parse form integers; invalid values are passed through for validation to reject."""
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return value
    return value


def _float_value(value):
    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            return float(value.strip())
        except ValueError:
            return value
    return value


TRUE_VALUES = ('true', '1', 'yes', 'on')
FALSE_VALUES = ('false', '0', 'no', 'off')


def _bool_value(value, field, default=True):
    """Parse a JSON boolean or its usual string spellings; anything else is rejected."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUE_VALUES:
            return True
        if lowered in FALSE_VALUES:
            return False
    raise ValidationError("Invalid request", code='invalid_input',
                          details={field: f'{field} must be true or false'})


def _payload():
    return request.get_json(silent=True) or {}


def _error_response(error: Exception, action: str):
    if isinstance(error, ValidationError):
        status = 400
    elif isinstance(error, NotFoundError):
        status = 404
    elif isinstance(error, InventoryError):
        status = ERROR_CODE_STATUS.get(error.code, 500)
    else:
        status = 500

    current_app.logger.error(f"Error {action}: {error}")

    body = {'success': False, 'error': str(error)}
    if isinstance(error, InventoryError) and error.details:
        body['details'] = error.details
    return jsonify(body), status


@inventory_bp.route('/products', methods=['GET'])
def list_products():
    """Get the product catalog."""
    try:
        products = ProductService(_database()).list_products()
        return jsonify({'success': True, 'products': products, 'count': len(products)})
    except Exception as e:
        return _error_response(e, 'listing products')


@inventory_bp.route('/products', methods=['POST'])
def create_product():
    """Add a product to the catalog."""
    try:
        data = _payload()
        product = ProductService(_database()).create_product(
            data.get('name'), _int_value(data.get('quantity', 0))
        )
        return jsonify({'success': True, 'product': product}), 201
    except Exception as e:
        return _error_response(e, 'creating product')


@inventory_bp.route('/inventory', methods=['GET'])
def inventory():
    """Get stock levels with display quantities."""
    try:
        rows = ProductService(_database()).inventory_rows()
        return jsonify({'success': True, 'inventory': rows, 'count': len(rows)})
    except Exception as e:
        return _error_response(e, 'getting inventory')


@inventory_bp.route('/sales', methods=['GET'])
def recent_sales():
    """Get the most recent sales."""
    try:
        limit = request.args.get('limit', type=int)
        sales = SalesService(_database()).recent_sales(limit)
        return jsonify({'success': True, 'sales': sales, 'count': len(sales)})
    except Exception as e:
        return _error_response(e, 'getting sales')


@inventory_bp.route('/sales', methods=['POST'])
def record_sale():
    """Record a sale."""
    try:
        data = _payload()
        sale = SalesService(_database()).record_sale(
            product_id=_int_value(data.get('product_id')),
            quantity=_int_value(data.get('quantity')),
            price_per_unit=_float_value(data.get('price_per_unit', data.get('price'))),
            sale_date=data.get('sale_date'),
            buyer_name=data.get('buyer_name', ''),
            contact_no=data.get('contact_no'),
            discount_percentage=_float_value(data.get('discount_percentage')),
            trade_scheme=data.get('trade_scheme'),
            notes=data.get('notes'),
            apply_preset=_bool_value(data.get('apply_preset'), 'apply_preset')
        )
        return jsonify({'success': True, 'sale': sale}), 201
    except Exception as e:
        return _error_response(e, 'recording sale')


@inventory_bp.route('/sales/<int:sale_id>', methods=['DELETE'])
def reverse_sale(sale_id):
    """Delete a sale and return its quantity to stock."""
    try:
        sale = SalesService(_database()).reverse_sale(sale_id)
        return jsonify({'success': True, 'sale': sale})
    except Exception as e:
        return _error_response(e, 'reversing sale')


@inventory_bp.route('/sales/<int:sale_id>/receipt', methods=['GET'])
def sale_receipt(sale_id):
    """Get the invoice breakdown for a sale."""
    try:
        receipt = SalesService(_database()).get_receipt(sale_id)
        return jsonify({'success': True, 'receipt': receipt})
    except Exception as e:
        return _error_response(e, 'building receipt')


@inventory_bp.route('/purchases', methods=['GET'])
def recent_purchases():
    """Get the most recent purchases."""
    try:
        limit = request.args.get('limit', type=int)
        purchases = PurchaseService(_database()).recent_purchases(limit)
        return jsonify({'success': True, 'purchases': purchases, 'count': len(purchases)})
    except Exception as e:
        return _error_response(e, 'getting purchases')


@inventory_bp.route('/purchases', methods=['POST'])
def record_purchase():
    """Record a purchase and add it to stock."""
    try:
        data = _payload()
        purchase = PurchaseService(_database()).record_purchase(
            product_id=_int_value(data.get('product_id')),
            quantity=_int_value(data.get('quantity')),
            price=_float_value(data.get('price')),
            purchase_date=data.get('purchase_date')
        )
        return jsonify({'success': True, 'purchase': purchase}), 201
    except Exception as e:
        return _error_response(e, 'recording purchase')


@inventory_bp.route('/purchases/<int:purchase_id>', methods=['DELETE'])
def reverse_purchase(purchase_id):
    """Delete a purchase and take its quantity out of stock."""
    try:
        purchase = PurchaseService(_database()).reverse_purchase(purchase_id)
        return jsonify({'success': True, 'purchase': purchase})
    except Exception as e:
        return _error_response(e, 'reversing purchase')


@inventory_bp.route('/production', methods=['GET'])
def recent_production():
    """Get the most recent production runs."""
    try:
        limit = request.args.get('limit', type=int)
        runs = ProductionService(_database()).recent_production(limit)
        return jsonify({'success': True, 'production': runs, 'count': len(runs)})
    except Exception as e:
        return _error_response(e, 'getting production')


@inventory_bp.route('/production', methods=['POST'])
def record_production():
    """Record a production run."""
    try:
        data = _payload()
        run = ProductionService(_database()).record_production(
            process=data.get('process'),
            quantity=_int_value(data.get('quantity')),
            production_date=data.get('production_date')
        )
        return jsonify({'success': True, 'production': run}), 201
    except Exception as e:
        return _error_response(e, 'recording production')


@inventory_bp.route('/production/<int:production_id>', methods=['DELETE'])
def reverse_production(production_id):
    """Delete a production run and undo its stock movements."""
    try:
        run = ProductionService(_database()).reverse_production(production_id)
        return jsonify({'success': True, 'production': run})
    except Exception as e:
        return _error_response(e, 'reversing production')


@inventory_bp.route('/wastage', methods=['GET'])
def recent_wastage():
    """Get the most recent wastage."""
    try:
        limit = request.args.get('limit', type=int)
        rows = WastageService(_database()).recent_wastage(limit)
        return jsonify({'success': True, 'wastage': rows, 'count': len(rows)})
    except Exception as e:
        return _error_response(e, 'getting wastage')


@inventory_bp.route('/wastage', methods=['POST'])
def record_wastage():
    """Record wastage and remove it from stock."""
    try:
        data = _payload()
        row = WastageService(_database()).record_wastage(
            product_id=_int_value(data.get('product_id')),
            quantity=_int_value(data.get('quantity')),
            reason=data.get('reason'),
            wastage_date=data.get('wastage_date')
        )
        return jsonify({'success': True, 'wastage': row}), 201
    except Exception as e:
        return _error_response(e, 'recording wastage')


@inventory_bp.route('/wastage/<int:wastage_id>', methods=['DELETE'])
def reverse_wastage(wastage_id):
    """Delete a wastage record and return its quantity to stock."""
    try:
        row = WastageService(_database()).reverse_wastage(wastage_id)
        return jsonify({'success': True, 'wastage': row})
    except Exception as e:
        return _error_response(e, 'reversing wastage')


@inventory_bp.route('/dashboard', methods=['GET'])
def dashboard():
    """Get the dashboard summary."""
    try:
        summary = DashboardService(_database()).summary()
        return jsonify({'success': True, 'summary': summary})
    except Exception as e:
        return _error_response(e, 'building dashboard')


@inventory_bp.route('/price-rule', methods=['GET'])
def price_rule():
    """Look up the preset trade scheme and discount for a price."""
    product = request.args.get('product', '')
    price = request.args.get('price', type=float)
    if price is None:
        return jsonify({'success': False, 'error': 'price must be a number'}), 400

    match = find_price_rule(product, price)
    return jsonify({'success': True, 'rule': match.to_dict() if match else None})


@inventory_bp.route('/quantity-format', methods=['GET'])
def quantity_format():
    """Format a quantity in cartons and pieces."""
    try:
        quantity = request.args.get('quantity', type=int)
        ensure_valid(validate_quantity(quantity), "Invalid quantity")
        formatted = format_gift_set_quantity(quantity, request.args.get('product'))
        return jsonify({'success': True, **formatted.to_dict()})
    except Exception as e:
        return _error_response(e, 'formatting quantity')
