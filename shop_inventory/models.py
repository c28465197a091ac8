# shop_inventory/models.py
from dataclasses import dataclass, field, fields, asdict
from typing import Any, Dict, Optional
import enum

# Table names in the key-value store; each holds one JSON array
PRODUCTS_TABLE = 'products'
SALES_TABLE = 'sales'
PURCHASES_TABLE = 'purchases'
RESERVATIONS_TABLE = 'reservations'
PLATES_TABLE = 'printing_plates'
FIXED_COSTS_TABLE = 'fixed_costs'
FIXED_COST_ENTRIES_TABLE = 'fixed_cost_entries'

ALL_TABLES = [
    PRODUCTS_TABLE,
    SALES_TABLE,
    PURCHASES_TABLE,
    RESERVATIONS_TABLE,
    PLATES_TABLE,
    FIXED_COSTS_TABLE,
    FIXED_COST_ENTRIES_TABLE,
]

# Size keys mirrored into the legacy plate fields
SMALL_SIZE_KEY = 'chico'
LARGE_SIZE_KEY = 'grande'


class ProductCategory(enum.Enum):
    """Well-known product categories.

    Values:
        SHIRTS ('remeras'): Printed t-shirts, one product per garment size
        TOTEBAGS ('totebags'): Printed tote bags
        STICKERS ('stickers'): Stickers produced by printing plates
    """
    SHIRTS = 'remeras'
    TOTEBAGS = 'totebags'
    STICKERS = 'stickers'

    def __str__(self):
        """Return the string value of the enum."""
        return self.value


class ReservationStatus(enum.Enum):
    PENDING = 'pending'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'

    def __str__(self):
        return self.value


def _known_fields(cls, data: Dict[str, Any]) -> Dict[str, Any]:
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in data.items() if k in names}


def _optional_float(value) -> Optional[float]:
    if value is None or value == '':
        return None
    return float(value)


@dataclass
class Product:
    """A catalog product.

    ``stock`` is not clamped at zero; overselling leaves it negative.
    ``width_mm``/``height_mm``/``area_mm2`` only matter for stickers.
    """
    id: int
    name: str
    category: str
    price: float = 0.0
    stock: int = 0
    cost: float = 0.0
    size: Optional[str] = None
    width_mm: Optional[float] = None
    height_mm: Optional[float] = None
    area_mm2: Optional[float] = None
    created_at: Optional[str] = None

    @property
    def area(self) -> Optional[float]:
        """Effective unit area in mm², or None when no dimensions are set."""
        if self.area_mm2 is not None:
            return float(self.area_mm2)
        if self.width_mm is not None and self.height_mm is not None:
            return float(self.width_mm) * float(self.height_mm)
        return None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Product':
        values = _known_fields(cls, data)
        values['id'] = int(values['id'])
        values['price'] = float(values.get('price') or 0)
        values['stock'] = int(values.get('stock') or 0)
        values['cost'] = float(values.get('cost') or 0)
        for key in ('width_mm', 'height_mm', 'area_mm2'):
            values[key] = _optional_float(values.get(key))
        if values.get('size') == '':
            values['size'] = None
        return cls(**values)


@dataclass
class PrintingPlate:
    """A fixed-cost print run producing stickers of one or more size keys."""
    id: int
    name: str
    cost: float
    stickers_quantities: Dict[str, int] = field(default_factory=dict)
    small_stickers_quantity: int = 0
    large_stickers_quantity: int = 0
    is_printed: bool = False
    date_created: Optional[str] = None
    date_printed: Optional[str] = None

    def __post_init__(self):
        self.sync_legacy_quantities()

    def sync_legacy_quantities(self):
        """Mirror the small/large keys into the legacy quantity fields."""
        self.small_stickers_quantity = int(self.stickers_quantities.get(SMALL_SIZE_KEY, 0))
        self.large_stickers_quantity = int(self.stickers_quantities.get(LARGE_SIZE_KEY, 0))

    @property
    def total_quantity(self) -> int:
        return sum(self.stickers_quantities.values())

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['stickers_quantities'] = dict(self.stickers_quantities)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PrintingPlate':
        values = _known_fields(cls, data)
        quantities = values.get('stickers_quantities')
        if not quantities:
            # Records written before per-size quantities existed
            quantities = {}
            small = int(values.get('small_stickers_quantity') or 0)
            large = int(values.get('large_stickers_quantity') or 0)
            if small:
                quantities[SMALL_SIZE_KEY] = small
            if large:
                quantities[LARGE_SIZE_KEY] = large
        values['stickers_quantities'] = {str(k): int(v) for k, v in quantities.items()}
        values['id'] = int(values['id'])
        values['cost'] = float(values.get('cost') or 0)
        values['is_printed'] = bool(values.get('is_printed', False))
        return cls(**values)


@dataclass
class Purchase:
    id: int
    product_id: int
    quantity: int
    unit_cost: float
    total: float
    date: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Purchase':
        return cls(**_known_fields(cls, data))


@dataclass
class Sale:
    id: int
    product_id: int
    quantity: int
    unit_price: float
    unit_cost: float
    total: float
    reservation_id: Optional[int] = None
    date: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Sale':
        return cls(**_known_fields(cls, data))


@dataclass
class Reservation:
    """A customer order held against a deposit (advance payment)."""
    id: int
    product_id: int
    customer_name: str
    quantity: int
    unit_price: float
    advance_payment: float
    total: float
    status: str = ReservationStatus.PENDING.value
    design_motif: Optional[str] = None
    date: Optional[str] = None

    @property
    def remaining(self) -> float:
        return self.total - self.advance_payment

    @property
    def is_pending(self) -> bool:
        return self.status == ReservationStatus.PENDING.value

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Reservation':
        return cls(**_known_fields(cls, data))


@dataclass
class FixedCost:
    id: int
    name: str
    cost: float
    description: str = ''
    is_active: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FixedCost':
        return cls(**_known_fields(cls, data))


@dataclass
class FixedCostEntry:
    """A fixed cost applied on a date; ``cost_applied`` is a snapshot."""
    id: int
    fixed_cost_id: int
    cost_applied: float
    date: Optional[str] = None
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FixedCostEntry':
        return cls(**_known_fields(cls, data))
