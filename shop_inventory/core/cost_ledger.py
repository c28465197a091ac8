# shop_inventory/core/cost_ledger.py
from shop_inventory.models import Product
from shop_inventory.utils.math_utils import weighted_average


def weighted_average_cost(
    stock: int,
    cost: float,
    added_qty: int,
    added_unit_cost: float
) -> float:
    """Calculate the unit cost after adding stock.

    Args:
        stock: Units on hand before the addition
        cost: Current weighted-average unit cost
        added_qty: Units being added
        added_unit_cost: Unit cost of the incoming units

    Returns:
        New weighted-average unit cost
    """
    if added_qty <= 0:
        # Decrements (sales) and zero additions leave the cost alone
        return cost

    if stock > 0:
        return weighted_average([cost, added_unit_cost], [stock, added_qty])

    # Empty or oversold line: the old cost no longer describes anything on hand
    return added_unit_cost


def apply_addition(product: Product, added_qty: int, added_unit_cost: float) -> Product:
    """Apply a stock movement to a product in place.

    Used by purchases, plate printing (positive quantities) and sales
    (negative quantities, cost unchanged).

    Args:
        product: Product to update
        added_qty: Units added (negative for removals)
        added_unit_cost: Unit cost of the added units

    Returns:
        The same product, updated
    """
    product.cost = weighted_average_cost(product.stock, product.cost, added_qty, added_unit_cost)
    product.stock += added_qty
    return product

