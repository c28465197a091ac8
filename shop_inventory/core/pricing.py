# shop_inventory/core/pricing.py
from typing import Dict, Optional

# Quantity tiers for printed shirts: multiplier applied to the base price
SHIRT_QUANTITY_DISCOUNTS: Dict[int, float] = {
    1: 1.0,
    3: 0.85,
    10: 0.75,
}

TOTEBAG_COST_BY_SIZE: Dict[str, float] = {
    '40x40': 2100.0,
    '30x40': 1800.0,
}
DEFAULT_TOTEBAG_COST = 2100.0


def shirt_cost_by_quantity(base_price: float, quantity: int) -> float:
    """Price per shirt for a quantity tier.

    Only the exact tier quantities (1, 3, 10) get a discount; any other
    quantity pays the base price.
    """
    return base_price * SHIRT_QUANTITY_DISCOUNTS.get(quantity, 1.0)


def totebag_cost_by_size(size: Optional[str]) -> float:
    """Unit cost of a blank totebag by its 'WxH' size label."""
    key = (size or '').strip().lower()
    return TOTEBAG_COST_BY_SIZE.get(key, DEFAULT_TOTEBAG_COST)


def reservation_advance(total: float, ratio: float = 0.5) -> float:
    """Default deposit asked for a reservation."""
    return round(total * ratio, 2)
