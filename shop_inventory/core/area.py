# shop_inventory/core/area.py
import re
from typing import Dict, Iterable, Optional, Tuple

from shop_inventory.models import Product, SMALL_SIZE_KEY, LARGE_SIZE_KEY

# Unit areas (mm²) for the canonical sticker sizes: 50x50 and 100x100
DEFAULT_SIZE_AREAS: Dict[str, float] = {
    SMALL_SIZE_KEY: 50.0 * 50.0,
    LARGE_SIZE_KEY: 100.0 * 100.0,
}

_DIMENSIONS_RE = re.compile(
    r'^\s*(\d+(?:\.\d+)?|\.\d+)\s*[xX]\s*(\d+(?:\.\d+)?|\.\d+)\s*$'
)


def parse_dimensions(size_key: Optional[str]) -> Optional[Tuple[float, float]]:
    """Parse a literal 'WxH' millimetre size key.

    Args:
        size_key: Size key such as '70x40' or '62.5X30'

    Returns:
        Tuple with width and height in mm, or None if the key is not a
        dimension spec
    """
    if not size_key:
        return None

    match = _DIMENSIONS_RE.match(size_key)
    if not match:
        return None

    return float(match.group(1)), float(match.group(2))


def _positive(area: Optional[float]) -> Optional[float]:
    if area is None or area <= 0:
        return None
    return float(area)


def product_area(product: Product) -> Optional[float]:
    """Explicit unit area of a product, or None."""
    return _positive(product.area)


def resolve_unit_area(
    size_key: str,
    candidate_products: Iterable[Product],
    default_areas: Optional[Dict[str, float]] = None
) -> Optional[float]:
    """Resolve the per-unit area (mm²) for a size key.

    Priority order:
        1. First bound product (catalog order) with an explicit area
        2. Default area for a canonical size key (case-insensitive)
        3. Literal 'WxH' dimensions parsed from the key
        4. None; the caller falls back to count-based costing

    Args:
        size_key: Size key being resolved
        candidate_products: Products already bound to this size key
        default_areas: Canonical size key → area mapping

    Returns:
        Unit area in mm², or None if it cannot be determined
    """
    for product in candidate_products:
        area = product_area(product)
        if area is not None:
            return area

    defaults = DEFAULT_SIZE_AREAS if default_areas is None else default_areas
    normalized = (size_key or '').strip().lower()
    for key, area in defaults.items():
        if key.strip().lower() == normalized:
            return _positive(area)

    dimensions = parse_dimensions(size_key)
    if dimensions:
        width, height = dimensions
        return _positive(width * height)

    return None
