"""
Command line interface for the Inventory Manager.

Records purchases, sales, production and wastage, prints the dashboard
summary and exposes the pricing and carton helpers used by the forms.
"""
import argparse
import json
import sys
from datetime import date

from tabulate import tabulate

from inventory_manager.config import config
from inventory_manager.core.pricing import find_price_rule
from inventory_manager.core.quantity import (
    UNITS_PER_CARTON, cartons_to_pieces, format_gift_set_quantity, pieces_to_cartons
)
from inventory_manager.db import db
from inventory_manager.exceptions import DatabaseError, InventoryError
from inventory_manager.logging_setup import get_logger, log_exception

log = get_logger('cli')

def init_application(db_type=None):
    """Initialize application components."""
    database = db.initialize(db_type=db_type)
    log.info(f"Inventory Manager initialized using {db.db_type}")
    return database

def show_price_rule(args):
    """Print the preset rule for a product and price."""
    match = find_price_rule(args.product, args.price)
    if match is None:
        print(f"No price rule for {args.product} at {args.price}")
        return 1

    print(tabulate(
        [[match.trade_scheme, match.discount_percentage, match.base_price]],
        headers=['Trade Scheme', 'Discount %', 'Base Price']
    ))
    return 0

def show_quantity(args):
    """Print the display and tooltip strings for a quantity."""
    if args.quantity < 0:
        print("Quantity must not be negative")
        return 1

    formatted = format_gift_set_quantity(args.quantity, args.product)
    print(f"Display: {formatted.display}")
    print(f"Tooltip: {formatted.tooltip}")
    return 0

def show_cartons(args):
    """Convert between cartons and pieces."""
    if args.cartons is not None:
        print(f"{args.cartons} cartons = {cartons_to_pieces(args.cartons, args.units_per_carton):g} pcs")
        return 0

    cartons = pieces_to_cartons(args.pieces, args.units_per_carton)
    if cartons is None:
        print("Units per carton must not be zero")
        return 1

    print(f"{args.pieces} pcs = {cartons:g} cartons")
    return 0

def show_dashboard(args):
    """Print the dashboard summary."""
    from inventory_manager.services.dashboard_service import DashboardService

    database = init_application(args.db_type)
    summary = DashboardService(database).summary()

    if args.json:
        print(json.dumps(summary, indent=2))
        return 0

    print(f"\nDashboard for {summary['date']}")
    print(tabulate([
        ['Sales (window)', summary['total_sales']],
        ['Purchases (window)', summary['total_purchases']],
        ['Sales today', summary['today_sales']],
        ['Production today', summary['today_production']],
        ['Wastage today', summary['today_wastage']],
        ['Gift sets ready', summary['ready_gift_sets']],
        ['Gift sets possible', summary['potential_gift_sets']],
    ], headers=['Metric', 'Value']))

    print("\nSales by day:")
    print(tabulate([[d['date'], d['sales']] for d in summary['sales_chart']], headers=['Date', 'Sales']))

    if summary['low_stock_alerts']:
        print("\nLow stock:")
        print(tabulate([[a['product'], a['quantity']] for a in summary['low_stock_alerts']],
                       headers=['Product', 'Quantity']))

    if summary['recent_wastage']:
        print("\nRecent wastage:")
        print(tabulate([[w['date'], w['product'], w['quantity'], w['reason']] for w in summary['recent_wastage']],
                       headers=['Date', 'Product', 'Quantity', 'Reason']))
    return 0

def record_sale(args):
    """Record a sale from the command line."""
    from inventory_manager.services.sales_service import SalesService

    sale = SalesService(init_application(args.db_type)).record_sale(
        product_id=args.product_id,
        quantity=args.quantity,
        price_per_unit=args.price,
        sale_date=args.date,
        buyer_name=args.buyer or '',
        contact_no=args.contact,
        discount_percentage=args.discount,
        trade_scheme=args.trade_scheme,
        notes=args.notes
    )
    print(f"Recorded sale {sale.get('id')}: final price {sale.get('final_price')}")
    return 0

def record_purchase(args):
    """Record a purchase from the command line."""
    from inventory_manager.services.purchase_service import PurchaseService

    purchase = PurchaseService(init_application(args.db_type)).record_purchase(
        product_id=args.product_id,
        quantity=args.quantity,
        price=args.price,
        purchase_date=args.date
    )
    print(f"Recorded purchase {purchase.get('id')}")
    return 0

def record_production(args):
    """Record a production run from the command line."""
    from inventory_manager.services.production_service import ProductionService

    run = ProductionService(init_application(args.db_type)).record_production(
        process=args.process,
        quantity=args.quantity,
        production_date=args.date
    )
    print(tabulate([[a['product'], a['change']] for a in run['adjustments']], headers=['Product', 'Change']))
    return 0

def record_wastage(args):
    """Record wastage from the command line."""
    from inventory_manager.services.wastage_service import WastageService

    row = WastageService(init_application(args.db_type)).record_wastage(
        product_id=args.product_id,
        quantity=args.quantity,
        reason=args.reason,
        wastage_date=args.date
    )
    print(f"Recorded wastage {row.get('id')}")
    return 0

def reverse_movement(args):
    """Delete a recorded movement and undo its stock change."""
    from inventory_manager.services import ProductionService, PurchaseService, SalesService, WastageService

    database = init_application(args.db_type)
    reversals = {
        'sale': SalesService(database).reverse_sale,
        'purchase': PurchaseService(database).reverse_purchase,
        'production': ProductionService(database).reverse_production,
        'wastage': WastageService(database).reverse_wastage,
    }
    row = reversals[args.kind](args.record_id)
    print(f"Reversed {args.kind} {args.record_id} ({row.get('quantity')} pcs)")
    return 0

def serve(args):
    """Run the HTTP API."""
    from inventory_manager.api import create_app

    api_config = config.api_config
    app = create_app(init_application(args.db_type))
    app.run(
        host=args.host or api_config['host'],
        port=args.port or api_config['port'],
        debug=api_config['debug']
    )
    return 0

def build_parser():
    """Build the command line parser."""
    parser = argparse.ArgumentParser(description='Inventory Manager')
    parser.add_argument('--db-type', choices=['supabase', 'postgresql', 'sqlite'],
                        help='Override the configured database backend')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    price_parser = subparsers.add_parser('price-rule', help='Look up a preset price rule')
    price_parser.add_argument('product', help='Product name')
    price_parser.add_argument('price', type=float, help='Unit price')
    price_parser.set_defaults(func=show_price_rule)

    quantity_parser = subparsers.add_parser('format-quantity', help='Format a quantity for display')
    quantity_parser.add_argument('quantity', type=int, help='Quantity in pieces')
    quantity_parser.add_argument('--product', help='Product name')
    quantity_parser.set_defaults(func=show_quantity)

    cartons_parser = subparsers.add_parser('cartons', help='Convert between cartons and pieces')
    group = cartons_parser.add_mutually_exclusive_group(required=True)
    group.add_argument('--cartons', type=float, help='Cartons to convert to pieces')
    group.add_argument('--pieces', type=float, help='Pieces to convert to cartons')
    cartons_parser.add_argument('--units-per-carton', type=float, default=UNITS_PER_CARTON,
                                help='Units per carton')
    cartons_parser.set_defaults(func=show_cartons)

    dashboard_parser = subparsers.add_parser('dashboard', help='Show the dashboard summary')
    dashboard_parser.add_argument('--json', action='store_true', help='Output in JSON format')
    dashboard_parser.set_defaults(func=show_dashboard)

    today = date.today().isoformat()

    sale_parser = subparsers.add_parser('record-sale', help='Record a sale')
    sale_parser.add_argument('product_id', type=int, help='Product ID')
    sale_parser.add_argument('quantity', type=int, help='Pieces sold')
    sale_parser.add_argument('price', type=float, help='Unit price')
    sale_parser.add_argument('--date', default=today, help='Sale date (YYYY-MM-DD)')
    sale_parser.add_argument('--buyer', help='Buyer name')
    sale_parser.add_argument('--contact', help='Buyer contact number')
    sale_parser.add_argument('--discount', type=float, help='Discount percentage')
    sale_parser.add_argument('--trade-scheme', help='Trade scheme, e.g. 12+1')
    sale_parser.add_argument('--notes', help='Notes')
    sale_parser.set_defaults(func=record_sale)

    purchase_parser = subparsers.add_parser('record-purchase', help='Record a purchase')
    purchase_parser.add_argument('product_id', type=int, help='Product ID')
    purchase_parser.add_argument('quantity', type=int, help='Pieces purchased')
    purchase_parser.add_argument('price', type=float, help='Price paid')
    purchase_parser.add_argument('--date', default=today, help='Purchase date (YYYY-MM-DD)')
    purchase_parser.set_defaults(func=record_purchase)

    production_parser = subparsers.add_parser('record-production', help='Record a production run')
    production_parser.add_argument('process', help='Process, e.g. soapBoxing or giftSetAssembly')
    production_parser.add_argument('quantity', type=int, help='Units produced')
    production_parser.add_argument('--date', default=today, help='Production date (YYYY-MM-DD)')
    production_parser.set_defaults(func=record_production)

    wastage_parser = subparsers.add_parser('record-wastage', help='Record wastage')
    wastage_parser.add_argument('product_id', type=int, help='Product ID')
    wastage_parser.add_argument('quantity', type=int, help='Pieces wasted')
    wastage_parser.add_argument('reason', help='Reason for the wastage')
    wastage_parser.add_argument('--date', default=today, help='Wastage date (YYYY-MM-DD)')
    wastage_parser.set_defaults(func=record_wastage)

    reverse_parser = subparsers.add_parser('reverse', help='Reverse a recorded movement')
    reverse_parser.add_argument('kind', choices=['sale', 'purchase', 'production', 'wastage'],
                                help='Kind of movement')
    reverse_parser.add_argument('record_id', type=int, help='ID of the record to reverse')
    reverse_parser.set_defaults(func=reverse_movement)

    serve_parser = subparsers.add_parser('serve', help='Run the HTTP API')
    serve_parser.add_argument('--host', help='Host to bind')
    serve_parser.add_argument('--port', type=int, help='Port to bind')
    serve_parser.set_defaults(func=serve)

    return parser

def main(argv=None):
    """Main application entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not getattr(args, 'func', None):
        parser.print_help()
        return 1

    try:
        return args.func(args)
    except DatabaseError as e:
        log_exception('cli', e, f"{args.command} failed")
        return 1
    except InventoryError as e:
        log.error(f"{args.command} failed: {e}")
        if e.details:
            print(json.dumps(e.details, indent=2))
        return 1

if __name__ == "__main__":
    sys.exit(main())
