# inventory_manager/services/dashboard_service.py
import logging
from datetime import date
from typing import Dict, List, Optional

from inventory_manager.config import config
from inventory_manager.core.production import GIFT_SET, READY_PRODUCTS, potential_gift_sets
from inventory_manager.db.interface import DatabaseInterface
from inventory_manager.services.product_service import ProductService
from inventory_manager.utils.date_utils import days_ago, last_n_days, to_iso_date

logger = logging.getLogger(__name__)

RECENT_WASTAGE_COUNT = 5


def _sum(rows: List[Dict], field: str) -> float:
    return sum(row.get(field) or 0 for row in rows)


def _on_date(rows: List[Dict], field: str, iso_date: str) -> List[Dict]:
    return [row for row in rows if row.get(field) and to_iso_date(row[field]) == iso_date]


class DashboardService:
    """Summaries of recent activity for the dashboard."""

    def __init__(self, database: DatabaseInterface, product_service: Optional[ProductService] = None,
                 business_rules: Optional[Dict] = None):
        """Initialize the dashboard service.

        Args:
            database: Database interface
            product_service: Optional product service sharing the same database
            business_rules: Optional overrides for the configured business rules
        """
        self.db = database
        self.products = product_service or ProductService(database)
        self.rules = dict(config.business_rules)
        if business_rules:
            self.rules.update(business_rules)

    def _window(self, table: str, date_column: str, window_start: date) -> List[Dict]:
        return self.db.query(
            table,
            order_by=date_column,
            descending=True,
            date_column=date_column,
            date_from=window_start.isoformat()
        )

    def sales_chart(self, sales: List[Dict], today: Optional[date] = None) -> List[Dict]:
        """Daily sales totals for the chart window, oldest first."""
        return [
            {'date': day, 'sales': round(_sum(_on_date(sales, 'sale_date', day), 'price'), 2)}
            for day in last_n_days(self.rules['chart_days'], today)
        ]

    def low_stock_alerts(self, stock: Dict[str, int]) -> List[Dict]:
        """Ready products whose stock is below the threshold."""
        threshold = self.rules['low_stock_threshold']
        return [
            {'product': name, 'quantity': stock.get(name, 0)}
            for name in READY_PRODUCTS
            if stock.get(name, 0) < threshold
        ]

    def summary(self, today: Optional[date] = None) -> Dict:
        """Build the dashboard summary.

        Args:
            today: Optional reference date, defaults to the current date

        Returns:
            Dictionary with totals, chart data and stock alerts
        """
        today = today or date.today()
        today_iso = today.isoformat()
        window_start = days_ago(self.rules['dashboard_window_days'], today)

        sales = self._window('sales', 'sale_date', window_start)
        purchases = self._window('purchases', 'purchase_date', window_start)
        production = self._window('production', 'production_date', window_start)
        wastage = self._window('wastage', 'wastage_date', window_start)

        stock = self.products.stock_by_name()
        names = self.products.product_names()

        recent_wastage = [
            {
                'product': names.get(row['product_id']),
                'quantity': row['quantity'],
                'date': row['wastage_date'],
                'reason': row['reason']
            }
            for row in wastage[:RECENT_WASTAGE_COUNT]
        ]

        summary = {
            'date': today_iso,
            'total_sales': round(_sum(sales, 'price'), 2),
            'total_purchases': round(_sum(purchases, 'price'), 2),
            'today_sales': round(_sum(_on_date(sales, 'sale_date', today_iso), 'price'), 2),
            'today_production': _sum(_on_date(production, 'production_date', today_iso), 'quantity'),
            'today_wastage': _sum(_on_date(wastage, 'wastage_date', today_iso), 'quantity'),
            'recent_wastage': recent_wastage,
            'sales_chart': self.sales_chart(sales, today),
            'ready_gift_sets': stock.get(GIFT_SET, 0),
            'potential_gift_sets': potential_gift_sets(stock),
            'low_stock_alerts': self.low_stock_alerts(stock)
        }

        logger.debug(f"Dashboard summary for {today_iso}: sales={summary['total_sales']} "
                     f"purchases={summary['total_purchases']}")
        return summary
