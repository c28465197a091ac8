from .cost_ledger import weighted_average_cost, apply_addition
from .area import parse_dimensions, product_area, resolve_unit_area, DEFAULT_SIZE_AREAS
from .plate_lifecycle import PlateState, plate_state, can_print, can_delete, mark_printed
from .plate_allocation import (
    CostMode, PlateApplication, PlatePreview, ProductDelta, SizePreview,
    apply_plate, preview_plate, split_quantity, group_by_size, UNKNOWN_SIZE
)
from .pricing import shirt_cost_by_quantity, totebag_cost_by_size, reservation_advance

__all__ = [
    'weighted_average_cost',
    'apply_addition',
    'parse_dimensions',
    'product_area',
    'resolve_unit_area',
    'DEFAULT_SIZE_AREAS',
    'PlateState',
    'plate_state',
    'can_print',
    'can_delete',
    'mark_printed',
    'CostMode',
    'PlateApplication',
    'PlatePreview',
    'ProductDelta',
    'SizePreview',
    'apply_plate',
    'preview_plate',
    'split_quantity',
    'group_by_size',
    'UNKNOWN_SIZE',
    'shirt_cost_by_quantity',
    'totebag_cost_by_size',
    'reservation_advance'
]
