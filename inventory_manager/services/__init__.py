from .product_service import ProductService
from .purchase_service import PurchaseService
from .sales_service import SalesService
from .production_service import ProductionService
from .wastage_service import WastageService
from .dashboard_service import DashboardService

__all__ = [
    'ProductService',
    'PurchaseService',
    'SalesService',
    'ProductionService',
    'WastageService',
    'DashboardService'
]
