"""
Tests for the inventory services against an in-memory SQLite database.
"""
import unittest
from datetime import date
from unittest.mock import MagicMock

from inventory_manager.exceptions import (
    DatabaseError, NotFoundError, ProductError, ProductionError, SaleError, ValidationError
)
from inventory_manager.services import (
    DashboardService, ProductService, ProductionService,
    PurchaseService, SalesService, WastageService
)
from inventory_manager.tests.support import GIFT_SET_PRODUCT, make_interface, seed_catalog, stock_of


class ServiceTestCase(unittest.TestCase):
    """Base class seeding the catalog into a fresh database."""

    def setUp(self):
        self.database = make_interface()
        self.ids = seed_catalog(self.database)


class TestProductService(ServiceTestCase):
    """Test cases for ProductService."""

    def setUp(self):
        super().setUp()
        self.service = ProductService(self.database)

    def test_list_products_ordered_by_name(self):
        names = [p['name'] for p in self.service.list_products()]
        self.assertEqual(names, sorted(names))

    def test_create_product(self):
        product = self.service.create_product('  Conditioner  ', 5)
        self.assertEqual(product['name'], 'Conditioner')
        self.assertEqual(self.service.get_product_by_name('Conditioner')['quantity'], 5)

    def test_create_duplicate_product(self):
        with self.assertRaises(ProductError) as context:
            self.service.create_product('Powder')
        self.assertEqual(context.exception.code, 'duplicate_product')

    def test_create_invalid_product(self):
        with self.assertRaises(ValidationError):
            self.service.create_product('')
        with self.assertRaises(ValidationError):
            self.service.create_product('Conditioner', -1)

    def test_product_name_must_be_text(self):
        with self.assertRaises(ValidationError) as context:
            self.service.create_product(123)
        self.assertEqual(context.exception.details, {'name': 'Product name must be text'})

    def test_require_missing_product(self):
        with self.assertRaises(NotFoundError):
            self.service.require_product(999)

    def test_adjust_quantity(self):
        self.service.adjust_quantity(self.ids['Powder'], -20)
        self.assertEqual(stock_of(self.database, 'Powder'), 100)

    def test_adjust_missing_product(self):
        with self.assertRaises(ProductError):
            self.service.adjust_quantity(999, 1)

    def test_inventory_rows(self):
        rows = {row['name']: row for row in self.service.inventory_rows()}
        self.assertEqual(rows[GIFT_SET_PRODUCT]['display'], '4 ctn + 4 pcs')
        self.assertTrue(rows[GIFT_SET_PRODUCT]['is_gift_set'])
        self.assertEqual(rows['Powder']['display'], '120 pcs')
        self.assertFalse(rows['Powder']['is_gift_set'])


class TestPurchaseService(ServiceTestCase):
    """Test cases for PurchaseService."""

    def setUp(self):
        super().setUp()
        self.service = PurchaseService(self.database)

    def test_record_purchase(self):
        purchase = self.service.record_purchase(self.ids['Powder'], 50, 1250.0, '2024-03-10')
        self.assertEqual(purchase['purchase_date'], '2024-03-10')
        self.assertEqual(stock_of(self.database, 'Powder'), 170)

        recent = self.service.recent_purchases()
        self.assertEqual(recent[0]['product_name'], 'Powder')

    def test_invalid_purchase_is_not_stored(self):
        with self.assertRaises(ValidationError) as context:
            self.service.record_purchase(self.ids['Powder'], 0, None, '2024-03-10')
        self.assertEqual(set(context.exception.details), {'quantity', 'price'})
        self.assertEqual(self.database.query('purchases'), [])

    def test_missing_product(self):
        with self.assertRaises(NotFoundError):
            self.service.record_purchase(999, 1, 10, '2024-03-10')

    def test_reverse_purchase(self):
        purchase = self.service.record_purchase(self.ids['Powder'], 50, 1250.0, '2024-03-10')
        removed = self.service.reverse_purchase(purchase['id'])

        self.assertEqual(removed['quantity'], 50)
        self.assertEqual(stock_of(self.database, 'Powder'), 120)
        self.assertEqual(self.database.query('purchases'), [])

    def test_reverse_missing_purchase(self):
        with self.assertRaises(NotFoundError):
            self.service.reverse_purchase(999)
        self.assertEqual(stock_of(self.database, 'Powder'), 120)


class TestSalesService(ServiceTestCase):
    """Test cases for SalesService."""

    def setUp(self):
        super().setUp()
        self.service = SalesService(self.database)
        self.gift_set_id = self.ids[GIFT_SET_PRODUCT]

    def test_preset_applied(self):
        sale = self.service.record_sale(self.gift_set_id, 13, 265, '2024-03-10', buyer_name='Ali Traders')
        self.assertEqual(sale['trade_scheme'], '12+1')
        self.assertEqual(sale['discount_percentage'], 13)
        self.assertEqual(sale['total_price'], 3445)
        self.assertAlmostEqual(sale['final_price'], 2766.6)
        self.assertEqual(sale['price'], sale['final_price'])
        self.assertEqual(stock_of(self.database, GIFT_SET_PRODUCT), 87)

    def test_explicit_discount_overrides_preset(self):
        sale = self.service.record_sale(self.gift_set_id, 10, 265, '2024-03-10', discount_percentage=5)
        self.assertIsNone(sale['trade_scheme'])
        self.assertAlmostEqual(sale['final_price'], 2517.5)

    def test_preset_can_be_skipped(self):
        sale = self.service.record_sale(self.gift_set_id, 10, 265, '2024-03-10', apply_preset=False)
        self.assertIsNone(sale['discount_percentage'])
        self.assertEqual(sale['final_price'], 2650)

    def test_insufficient_stock(self):
        with self.assertRaises(SaleError) as context:
            self.service.record_sale(self.ids['Lotion (Ready)'], 51, 10, '2024-03-10')
        self.assertEqual(context.exception.code, 'insufficient_stock')
        self.assertEqual(stock_of(self.database, 'Lotion (Ready)'), 50)
        self.assertEqual(self.database.query('sales'), [])

    def test_invalid_discount(self):
        with self.assertRaises(ValidationError):
            self.service.record_sale(self.gift_set_id, 1, 265, '2024-03-10', discount_percentage=150)

    def test_malformed_trade_scheme_rejected(self):
        for scheme in ('abc', '12-1', '0+1', '12+1+1'):
            with self.subTest(scheme=scheme):
                with self.assertRaises(ValidationError) as context:
                    self.service.record_sale(self.gift_set_id, 13, 265, '2024-03-10', trade_scheme=scheme)
                self.assertIn('trade_scheme', context.exception.details)

        self.assertEqual(self.database.query('sales'), [])
        self.assertEqual(stock_of(self.database, GIFT_SET_PRODUCT), 100)

    def test_blank_trade_scheme_falls_back_to_preset(self):
        sale = self.service.record_sale(self.gift_set_id, 13, 265, '2024-03-10', trade_scheme='  ')
        self.assertEqual(sale['trade_scheme'], '12+1')

    def test_trade_scheme_is_trimmed(self):
        sale = self.service.record_sale(self.gift_set_id, 11, 300, '2024-03-10', trade_scheme=' 10+1 ')
        self.assertEqual(sale['trade_scheme'], '10+1')
        self.assertEqual(sale['final_price'], 3000)

    def test_non_text_fields_rejected(self):
        with self.assertRaises(ValidationError) as context:
            self.service.record_sale(self.gift_set_id, 13, 265, '2024-03-10',
                                     buyer_name=5, contact_no=300, notes=['cash'], trade_scheme=12)
        self.assertEqual(set(context.exception.details), {'buyer_name', 'contact_no', 'notes', 'trade_scheme'})
        self.assertEqual(self.database.query('sales'), [])

    def test_sale_of_all_stock_on_hand(self):
        self.service.record_sale(self.ids['Lotion (Ready)'], 50, 10, '2024-03-10')
        self.assertEqual(stock_of(self.database, 'Lotion (Ready)'), 0)

    def test_reverse_sale(self):
        sale = self.service.record_sale(self.gift_set_id, 13, 265, '2024-03-10')
        self.assertEqual(stock_of(self.database, GIFT_SET_PRODUCT), 87)

        removed = self.service.reverse_sale(sale['id'])

        self.assertEqual(removed['id'], sale['id'])
        self.assertEqual(stock_of(self.database, GIFT_SET_PRODUCT), 100)
        self.assertEqual(self.database.query('sales'), [])
        with self.assertRaises(NotFoundError):
            self.service.get_receipt(sale['id'])

    def test_reverse_missing_sale(self):
        with self.assertRaises(NotFoundError):
            self.service.reverse_sale(999)

    def test_suggest_discount(self):
        self.assertEqual(self.service.suggest_discount(GIFT_SET_PRODUCT, 270)['trade_scheme'], '10+1')
        self.assertIsNone(self.service.suggest_discount('Powder', 270))

    def test_receipt(self):
        sale = self.service.record_sale(self.gift_set_id, 13, 265, '2024-03-10',
                                        buyer_name='Ali Traders', notes='Paid cash')
        receipt = self.service.get_receipt(sale['id'])

        self.assertEqual(receipt['buyer_name'], 'Ali Traders')
        self.assertEqual(receipt['sub_total'], 3445)
        self.assertAlmostEqual(receipt['total_discount'], 678.4)
        self.assertAlmostEqual(receipt['final_amount'], 2766.6)
        self.assertEqual(receipt['items'][0]['product_name'], f'{GIFT_SET_PRODUCT} (4 Pcs)')
        self.assertEqual(receipt['notes'], 'Paid cash')

    def test_missing_receipt(self):
        with self.assertRaises(NotFoundError):
            self.service.get_receipt(999)

    def test_recent_sales(self):
        self.service.record_sale(self.ids['Powder'], 1, 10, '2024-03-09')
        self.service.record_sale(self.ids['Powder'], 2, 10, '2024-03-10')
        recent = self.service.recent_sales(limit=1)
        self.assertEqual(len(recent), 1)
        self.assertEqual(recent[0]['quantity'], 2)
        self.assertEqual(recent[0]['product_name'], 'Powder')


class TestSalesServiceStockFailure(unittest.TestCase):
    """Test cases for a sale whose stock update is rejected."""

    def setUp(self):
        self.database = MagicMock()
        self.database.query.return_value = [{'id': 1, 'name': 'Powder', 'quantity': 10}]
        self.database.insert.return_value = {'id': 7}
        self.database.rpc.return_value = False

    def test_stock_update_failure(self):
        service = SalesService(self.database)
        with self.assertRaises(SaleError) as context:
            service.record_sale(1, 2, 10, '2024-03-10')

        self.assertEqual(context.exception.details, {'sale_id': 7, 'product_id': 1})
        self.database.rpc.assert_called_once_with('update_product_quantity', {'p_id': 1, 'qty': -2})


class TestReversalProcedureCalls(unittest.TestCase):
    """Reversals call the named database functions with their parameter names."""

    def setUp(self):
        self.database = MagicMock()
        self.database.query.return_value = [
            {'id': 7, 'product_id': 1, 'quantity': 4, 'process': 'soapBoxing'}
        ]

    def test_procedure_names(self):
        SalesService(self.database).reverse_sale(7)
        WastageService(self.database).reverse_wastage(7)
        ProductionService(self.database).reverse_production(7)

        self.assertEqual([c.args for c in self.database.rpc.call_args_list], [
            ('reverse_sale', {'p_sale_id': 7}),
            ('reverse_wastage', {'p_wastage_id': 7}),
            ('reverse_production', {'p_production_id': 7}),
        ])

    def test_procedure_reporting_failure(self):
        self.database.rpc.return_value = False
        with self.assertRaises(NotFoundError):
            SalesService(self.database).reverse_sale(7)


class TestProductionService(ServiceTestCase):
    """Test cases for ProductionService."""

    def setUp(self):
        super().setUp()
        self.service = ProductionService(self.database)

    def test_soap_boxing(self):
        run = self.service.record_production('soapBoxing', 40, '2024-03-10')
        self.assertEqual(run['adjustments'][-1], {'product': 'Soap (Ready)', 'change': 40})
        self.assertEqual(stock_of(self.database, 'Soap (Wrapped)'), 460)
        self.assertEqual(stock_of(self.database, 'Soap Boxes'), 460)
        self.assertEqual(stock_of(self.database, 'Soap (Ready)'), 240)

        recent = self.service.recent_production()
        self.assertEqual(recent[0]['process'], 'soapBoxing')
        self.assertEqual(recent[0]['production_date'], '2024-03-10')

    def test_gift_set_assembly(self):
        self.service.record_production('giftSetAssembly', 10, '2024-03-10')
        self.assertEqual(stock_of(self.database, 'Gift Set'), 22)
        self.assertEqual(stock_of(self.database, 'Lotion (Ready)'), 40)
        self.assertEqual(stock_of(self.database, 'Empty Thermacol'), 80)

    def test_unknown_process(self):
        with self.assertRaises(ProductionError):
            self.service.record_production('bottling', 10, '2024-03-10')
        self.assertEqual(self.database.query('production'), [])

    def test_invalid_quantity(self):
        with self.assertRaises(ValidationError):
            self.service.record_production('soapBoxing', 0, '2024-03-10')

    def test_reverse_gift_set_assembly(self):
        run = self.service.record_production('giftSetAssembly', 10, '2024-03-10')
        stored = self.service.recent_production()[0]

        reversed_run = self.service.reverse_production(stored['id'])

        self.assertEqual(reversed_run['adjustments'][0], {'product': 'Soap (Ready)', 'change': 10})
        self.assertEqual(reversed_run['adjustments'][-1], {'product': 'Gift Set', 'change': -10})
        self.assertEqual(len(reversed_run['adjustments']), len(run['adjustments']))
        self.assertEqual(stock_of(self.database, 'Gift Set'), 12)
        self.assertEqual(stock_of(self.database, 'Lotion (Ready)'), 50)
        self.assertEqual(stock_of(self.database, 'Empty Thermacol'), 90)
        self.assertEqual(self.database.query('production'), [])

    def test_reverse_soap_boxing(self):
        self.service.record_production('soapBoxing', 40, '2024-03-10')
        self.service.reverse_production(self.service.recent_production()[0]['id'])

        self.assertEqual(stock_of(self.database, 'Soap (Wrapped)'), 500)
        self.assertEqual(stock_of(self.database, 'Soap Boxes'), 500)
        self.assertEqual(stock_of(self.database, 'Soap (Ready)'), 200)

    def test_reverse_missing_run(self):
        with self.assertRaises(NotFoundError):
            self.service.reverse_production(999)


class TestWastageService(ServiceTestCase):
    """Test cases for WastageService."""

    def setUp(self):
        super().setUp()
        self.service = WastageService(self.database)

    def test_record_wastage(self):
        self.service.record_wastage(self.ids['Powder'], 5, ' Torn packs ', '2024-03-10')
        self.assertEqual(stock_of(self.database, 'Powder'), 115)

        recent = self.service.recent_wastage()
        self.assertEqual(recent[0]['reason'], 'Torn packs')
        self.assertEqual(recent[0]['product_name'], 'Powder')

    def test_reason_required(self):
        with self.assertRaises(ValidationError) as context:
            self.service.record_wastage(self.ids['Powder'], 5, '', '2024-03-10')
        self.assertIn('reason', context.exception.details)

    def test_reason_must_be_text(self):
        with self.assertRaises(ValidationError) as context:
            self.service.record_wastage(self.ids['Powder'], 5, 123, '2024-03-10')
        self.assertEqual(context.exception.details, {'reason': 'Reason must be text'})
        self.assertEqual(stock_of(self.database, 'Powder'), 120)

    def test_reverse_wastage(self):
        row = self.service.record_wastage(self.ids['Powder'], 5, 'Torn packs', '2024-03-10')
        self.service.reverse_wastage(row['id'])

        self.assertEqual(stock_of(self.database, 'Powder'), 120)
        self.assertEqual(self.database.query('wastage'), [])

    def test_reverse_missing_wastage(self):
        with self.assertRaises(NotFoundError):
            self.service.reverse_wastage(999)


class TestDashboardService(ServiceTestCase):
    """Test cases for DashboardService."""

    TODAY = date(2024, 3, 31)

    def setUp(self):
        super().setUp()
        soap = self.ids['Soap (Ready)']
        sales = SalesService(self.database)
        sales.record_sale(soap, 5, 10, '2024-03-31')
        sales.record_sale(soap, 2, 10, '2024-03-29')
        sales.record_sale(soap, 1, 10, '2024-01-01')
        PurchaseService(self.database).record_purchase(self.ids['Powder'], 10, 200, '2024-03-30')
        ProductionService(self.database).record_production('soapBoxing', 10, '2024-03-31')
        WastageService(self.database).record_wastage(soap, 3, 'Crushed', '2024-03-31')

    def test_summary(self):
        summary = DashboardService(self.database).summary(today=self.TODAY)

        self.assertEqual(summary['date'], '2024-03-31')
        self.assertEqual(summary['total_sales'], 70)
        self.assertEqual(summary['total_purchases'], 200)
        self.assertEqual(summary['today_sales'], 50)
        self.assertEqual(summary['today_production'], 10)
        self.assertEqual(summary['today_wastage'], 3)
        self.assertEqual(summary['recent_wastage'], [
            {'product': 'Soap (Ready)', 'quantity': 3, 'date': '2024-03-31', 'reason': 'Crushed'}
        ])
        self.assertEqual(summary['ready_gift_sets'], 12)
        self.assertEqual(summary['potential_gift_sets'], 50)
        self.assertEqual(summary['low_stock_alerts'], [{'product': 'Lotion (Ready)', 'quantity': 50}])

    def test_sales_chart(self):
        chart = DashboardService(self.database).summary(today=self.TODAY)['sales_chart']
        self.assertEqual([day['date'] for day in chart][0], '2024-03-25')
        self.assertEqual(chart[-1], {'date': '2024-03-31', 'sales': 50})
        self.assertEqual(chart[-3], {'date': '2024-03-29', 'sales': 20})
        self.assertEqual(chart[0]['sales'], 0)

    def test_stock_read_through_product_service(self):
        products = MagicMock(wraps=ProductService(self.database))
        summary = DashboardService(self.database, product_service=products).summary(today=self.TODAY)

        products.stock_by_name.assert_called_once_with()
        self.assertEqual(summary['ready_gift_sets'], 12)

    def test_threshold_override(self):
        service = DashboardService(self.database, business_rules={'low_stock_threshold': 160})
        alerts = service.summary(today=self.TODAY)['low_stock_alerts']
        self.assertEqual([a['product'] for a in alerts], ['Powder', 'Lotion (Ready)', 'Shampoo (Ready)'])


class TestSQLAlchemyInterface(unittest.TestCase):
    """Test cases for the SQLAlchemy backend."""

    def setUp(self):
        self.database = make_interface()

    def test_unknown_table(self):
        with self.assertRaises(DatabaseError):
            self.database.query('customers')

    def test_unknown_column(self):
        with self.assertRaises(DatabaseError):
            self.database.insert('products', {'name': 'Powder', 'colour': 'white'})

    def test_unknown_procedure(self):
        with self.assertRaises(DatabaseError):
            self.database.rpc('transfer_stock', {})

    def test_reverse_procedures_report_missing_rows(self):
        self.assertFalse(self.database.rpc('reverse_sale', {'p_sale_id': 1}))
        self.assertFalse(self.database.rpc('reverse_wastage', {'p_wastage_id': 1}))
        self.assertFalse(self.database.rpc('reverse_production', {'p_production_id': 1}))

    def test_duplicate_name_rolls_back(self):
        self.database.insert('products', {'name': 'Powder', 'quantity': 1})
        with self.assertRaises(DatabaseError):
            self.database.insert('products', {'name': 'Powder', 'quantity': 2})
        self.assertEqual(len(self.database.query('products')), 1)

    def test_update_and_delete(self):
        self.database.insert('products', {'name': 'Powder', 'quantity': 1})
        self.database.insert('products', {'name': 'Soap Boxes', 'quantity': 1})

        self.assertEqual(self.database.update('products', {'quantity': 9}, {'name': ['Powder', 'Soap Boxes']}), 2)
        self.assertEqual(self.database.delete('products', {'name': 'Powder'}), 1)
        rows = self.database.query('products')
        self.assertEqual([(row['name'], row['quantity']) for row in rows], [('Soap Boxes', 9)])


if __name__ == '__main__':
    unittest.main()
