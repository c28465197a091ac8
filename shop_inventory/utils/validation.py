# shop_inventory/utils/validation.py
from typing import Dict, Mapping, Optional

from shop_inventory.models import Product, Reservation
from shop_inventory.exceptions import ValidationError


def normalize_size_key(size_key: Optional[str]) -> str:
    """Normalize a plate size key.

    Strips surrounding whitespace and lower-cases, so '100X50 ' and
    '100x50' bind to the same products.

    Raises:
        ValidationError: if the key is missing or blank
    """
    if size_key is None or not str(size_key).strip():
        raise ValidationError("Size key is required", code='SIZE_KEY')
    return str(size_key).strip().lower()


def normalize_optional_size(size: Optional[str]) -> Optional[str]:
    """Normalize a product size label; blank labels become None."""
    if size is None or not str(size).strip():
        return None
    return str(size).strip().lower()


def normalize_category(category: str) -> str:
    if category is None or not str(category).strip():
        raise ValidationError("Category is required", code='CATEGORY')
    return str(category).strip().lower()


def normalize_quantities(quantities: Mapping[str, int]) -> Dict[str, int]:
    """Normalize a size-key → quantity map for a plate.

    Keys that normalize to the same value are summed.

    Raises:
        ValidationError: on blank keys, non-integer or negative quantities
    """
    normalized: Dict[str, int] = {}
    for raw_key, raw_qty in quantities.items():
        key = normalize_size_key(raw_key)
        try:
            qty = int(raw_qty)
        except (TypeError, ValueError):
            raise ValidationError(f"Quantity for size '{key}' must be an integer", code='QUANTITY')
        if qty != raw_qty and not isinstance(raw_qty, str):
            raise ValidationError(f"Quantity for size '{key}' must be an integer", code='QUANTITY')
        if qty < 0:
            raise ValidationError(f"Quantity for size '{key}' cannot be negative", code='QUANTITY')
        normalized[key] = normalized.get(key, 0) + qty
    return normalized


def validate_product(product: Product) -> Dict[str, str]:
    """Validate a product.

    Args:
        product: Product to validate

    Returns:
        Dictionary with validation errors
    """
    errors = {}

    if not product.name or not product.name.strip():
        errors['name'] = 'Product name is required'

    if not product.category:
        errors['category'] = 'Category is required'

    if product.price < 0:
        errors['price'] = 'Price cannot be negative'

    if product.cost < 0:
        errors['cost'] = 'Cost cannot be negative'

    for key in ('width_mm', 'height_mm', 'area_mm2'):
        value = getattr(product, key)
        if value is not None and value <= 0:
            errors[key] = f'{key} must be positive'

    return errors


def validate_reservation(reservation: Reservation) -> Dict[str, str]:
    """Validate a reservation.

    Args:
        reservation: Reservation to validate

    Returns:
        Dictionary with validation errors
    """
    errors = {}

    if not reservation.customer_name or not reservation.customer_name.strip():
        errors['customer_name'] = 'Customer name is required'

    if reservation.quantity <= 0:
        errors['quantity'] = 'Quantity must be positive'

    if reservation.unit_price < 0:
        errors['unit_price'] = 'Unit price cannot be negative'

    if reservation.advance_payment < 0:
        errors['advance_payment'] = 'Advance payment cannot be negative'
    elif reservation.advance_payment > reservation.total:
        errors['advance_payment'] = 'Advance payment cannot exceed the total'

    return errors
