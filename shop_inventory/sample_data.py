# shop_inventory/sample_data.py - Seed and reset the shop database
from typing import Dict, List

from shop_inventory.core.pricing import totebag_cost_by_size
from shop_inventory.logging_setup import get_logger, logger as log_manager
from shop_inventory.services.fixed_cost_service import FixedCostService
from shop_inventory.services.product_service import ProductService
from shop_inventory.storage.catalog import CatalogStore

logger = get_logger('sample_data')

# Blank bag dimensions for each totebag size label
TOTEBAG_DIMENSIONS = {'chica': '30x40', 'grande': '40x40'}


def _shirt(size: str, price: float, cost: float) -> Dict:
    return {'name': f'Remera {size}', 'category': 'remeras', 'price': price, 'cost': cost, 'size': size}


def _totebag(size: str, price: float) -> Dict:
    return {
        'name': f'Totebag {size.capitalize()}',
        'category': 'totebags',
        'price': price,
        'cost': totebag_cost_by_size(TOTEBAG_DIMENSIONS[size]),
        'size': size
    }


SAMPLE_PRODUCTS: List[Dict] = (
    [_shirt(size, 3500.0, 1500.0) for size in ('XS', 'S', 'M', 'L', 'XL')] +
    [_shirt(size, 4000.0, 1700.0) for size in ('2XL', '3XL')] +
    [_totebag('chica', 4000.0), _totebag('grande', 4500.0)] +
    [
        # Sticker cost is set when a plate is printed
        {'name': 'Sticker Chico', 'category': 'stickers', 'price': 300.0, 'cost': 0.0, 'size': 'chico'},
        {'name': 'Sticker Grande', 'category': 'stickers', 'price': 500.0, 'cost': 0.0, 'size': 'grande'},
    ]
)


def reset_database(store: CatalogStore) -> Dict[str, int]:
    """Clear every table and reseed fixed costs and products.

    Returns:
        Dictionary with the number of fixed costs and products created
    """
    log_info = log_manager.operation_start_log('reset_database')

    store.clear_all_tables()
    logger.info("Database reset")

    fixed_costs = FixedCostService(store).initialize_fixed_costs()

    product_service = ProductService(store)
    for values in SAMPLE_PRODUCTS:
        product_service.add_product(**values)

    result = {'fixed_costs': fixed_costs, 'products': len(SAMPLE_PRODUCTS)}
    logger.info(f"Products added: {len(SAMPLE_PRODUCTS)}")
    log_manager.operation_end_log(log_info, success=True, result_info=result)
    return result


def initialize_sample_data(store: CatalogStore) -> bool:
    """Seed the database unless it already has products.

    Returns:
        True if the database was seeded
    """
    if store.load_catalog():
        logger.info("Database already contains products")
        return False

    reset_database(store)
    return True
