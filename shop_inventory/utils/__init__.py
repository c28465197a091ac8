from .date_utils import now_iso, newest_first_key
from .math_utils import weighted_average, safe_divide, amounts_match
from .records import next_id, id_sequence
from .validation import (
    normalize_size_key, normalize_optional_size, normalize_category,
    normalize_quantities, validate_product, validate_reservation
)

__all__ = [
    'now_iso',
    'newest_first_key',
    'weighted_average',
    'safe_divide',
    'amounts_match',
    'next_id',
    'id_sequence',
    'normalize_size_key',
    'normalize_optional_size',
    'normalize_category',
    'normalize_quantities',
    'validate_product',
    'validate_reservation'
]
