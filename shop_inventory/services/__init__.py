from .product_service import ProductService
from .inventory_service import InventoryService
from .reservation_service import ReservationService
from .plate_service import PlateService
from .fixed_cost_service import FixedCostService
from .reporting_service import ReportingService

__all__ = [
    'ProductService',
    'InventoryService',
    'ReservationService',
    'PlateService',
    'FixedCostService',
    'ReportingService'
]
