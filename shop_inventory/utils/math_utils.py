# shop_inventory/utils/math_utils.py
from typing import List

import numpy as np

from shop_inventory.exceptions import CalculationError


def weighted_average(values: List[float], weights: List[float]) -> float:
    """Calculate weighted average.

    Args:
        values: List of values
        weights: List of weights

    Returns:
        Weighted average
    """
    if len(values) != len(weights):
        raise CalculationError("Length of values and weights must be the same")

    if not values:
        return 0.0

    if sum(weights) == 0:
        return sum(values) / len(values)

    return float(np.average(values, weights=weights))


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide, returning ``default`` when the denominator is zero."""
    if denominator == 0:
        return default
    return numerator / denominator


def amounts_match(actual: float, expected: float, rel_tol: float = 1e-6) -> bool:
    """Whether two money amounts agree within a relative tolerance."""
    return bool(np.isclose(actual, expected, rtol=rel_tol, atol=1e-9))
