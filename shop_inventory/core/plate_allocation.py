# shop_inventory/core/plate_allocation.py
"""Printing plate cost allocation.

A plate is a fixed-cost print run that yields stickers in several size keys.
Printing it splits each size's quantity across the sticker products bound to
that size key and spreads the plate cost over the units, either by area
(when every requested size has a known unit area) or flat per unit.

Both ``apply_plate`` and ``preview_plate`` build the same ``AllocationPlan``;
only ``apply_plate`` turns it into stock and cost changes.
"""
import enum
from collections import OrderedDict
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Iterator, List, Optional

from shop_inventory.models import Product, PrintingPlate, ProductCategory
from shop_inventory.core.area import parse_dimensions, product_area, resolve_unit_area
from shop_inventory.core.cost_ledger import apply_addition
from shop_inventory.core.plate_lifecycle import can_print, mark_printed
from shop_inventory.utils.date_utils import now_iso
from shop_inventory.utils.math_utils import amounts_match, safe_divide
from shop_inventory.utils.records import id_sequence

# Bucket for sticker products that have no size label
UNKNOWN_SIZE = 'unknown'

DEFAULT_NAME_PREFIX = 'Sticker'


class CostMode(enum.Enum):
    """How a plate's cost is spread over its units."""
    AREA = 'area'
    COUNT = 'count'

    def __str__(self):
        return self.value


@dataclass
class SizeAllocation:
    size_key: str
    quantity: int
    unit_area: Optional[float]
    products: List[Product]
    quantities: List[int]
    synthesized: bool = False


@dataclass
class AllocationPlan:
    plate: PrintingPlate
    sizes: List[SizeAllocation]
    created_products: List[Product]
    cost_mode: CostMode
    total_area: float
    total_count: int
    cost_per_area: float = 0.0
    cost_per_unit: float = 0.0

    def unit_cost_for(self, size: SizeAllocation, product: Product) -> float:
        """Unit cost assigned to a product within one size of the plate."""
        if self.cost_mode is CostMode.AREA:
            area = product_area(product)
            if area is None:
                area = size.unit_area
            return self.cost_per_area * area
        return self.cost_per_unit


@dataclass
class ProductDelta:
    """Stock and cost change applied to one product by a printed plate."""
    product_id: int
    name: str
    size_key: str
    quantity: int
    unit_cost: float
    stock_before: int
    stock_after: int
    cost_before: float
    cost_after: float

    @property
    def total_cost(self) -> float:
        return self.unit_cost * self.quantity

    def to_dict(self) -> Dict[str, Any]:
        return {
            'product_id': self.product_id,
            'name': self.name,
            'size_key': self.size_key,
            'quantity': self.quantity,
            'unit_cost': self.unit_cost,
            'total_cost': self.total_cost,
            'stock_before': self.stock_before,
            'stock_after': self.stock_after,
            'cost_before': self.cost_before,
            'cost_after': self.cost_after
        }


@dataclass
class PlateApplication:
    """Result of printing a plate; nothing here is persisted yet."""
    plate: PrintingPlate
    catalog: List[Product]
    deltas: List[ProductDelta]
    created_products: List[Product]
    cost_mode: CostMode
    total_area: float
    total_count: int

    @property
    def assigned_cost(self) -> float:
        return sum(delta.total_cost for delta in self.deltas)

    def quantities_by_size(self) -> Dict[str, int]:
        totals: Dict[str, int] = {}
        for delta in self.deltas:
            totals[delta.size_key] = totals.get(delta.size_key, 0) + delta.quantity
        return totals


@dataclass
class SizePreview:
    size_key: str
    quantity: int
    unit_area: Optional[float]
    unit_cost: float
    total_cost: float
    products: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'size_key': self.size_key,
            'quantity': self.quantity,
            'unit_area': self.unit_area,
            'unit_cost': self.unit_cost,
            'total_cost': self.total_cost,
            'products': [dict(p) for p in self.products]
        }


@dataclass
class PlatePreview:
    """What printing a plate would do, computed without touching any record."""
    plate_id: int
    plate_name: str
    plate_cost: float
    is_printed: bool
    cost_mode: CostMode
    total_area: float
    total_count: int
    sizes: List[SizePreview] = field(default_factory=list)

    @property
    def allocated_cost(self) -> float:
        return sum(size.total_cost for size in self.sizes)

    def is_reconciled(self, rel_tol: float = 1e-6) -> bool:
        """Whether the per-size costs add back up to the plate cost.

        A plate with no units allocates nothing, so it reconciles only when
        its cost is zero too.
        """
        return amounts_match(self.allocated_cost, self.plate_cost, rel_tol=rel_tol)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'plate_id': self.plate_id,
            'plate_name': self.plate_name,
            'plate_cost': self.plate_cost,
            'is_printed': self.is_printed,
            'cost_mode': self.cost_mode.value,
            'total_area': self.total_area,
            'total_count': self.total_count,
            'allocated_cost': self.allocated_cost,
            'sizes': [size.to_dict() for size in self.sizes]
        }


def split_quantity(quantity: int, parts: int) -> List[int]:
    """Split a quantity across ``parts`` products.

    Floor division, with the remainder handed out one unit at a time to the
    first products: 10 over 3 gives [4, 3, 3].
    """
    if parts <= 0:
        return []
    base, remainder = divmod(quantity, parts)
    return [base + 1 if i < remainder else base for i in range(parts)]


def is_sticker(product: Product, sticker_category: str = ProductCategory.STICKERS.value) -> bool:
    return (product.category or '').strip().lower() == sticker_category


def group_by_size(
    catalog: List[Product],
    sticker_category: str = ProductCategory.STICKERS.value
) -> Dict[str, List[Product]]:
    """Group sticker products by size key, keeping catalog order.

    Products without a size label fall into the 'unknown' bucket.
    """
    groups: Dict[str, List[Product]] = OrderedDict()
    for product in catalog:
        if not is_sticker(product, sticker_category):
            continue
        key = (product.size or '').strip().lower() or UNKNOWN_SIZE
        groups.setdefault(key, []).append(product)
    return groups


def requested_quantities(plate: PrintingPlate) -> Dict[str, int]:
    """Plate quantities by normalized size key, skipping non-positive ones."""
    requested: Dict[str, int] = OrderedDict()
    for raw_key, qty in plate.stickers_quantities.items():
        key = (raw_key or '').strip().lower()
        if not key or qty <= 0:
            continue
        requested[key] = requested.get(key, 0) + int(qty)
    return requested


def synthesize_product(
    size_key: str,
    product_id: int,
    sticker_category: str = ProductCategory.STICKERS.value,
    name_prefix: str = DEFAULT_NAME_PREFIX,
    created_at: Optional[str] = None
) -> Product:
    """Create a zero-priced sticker product for an unbound size key."""
    product = Product(
        id=product_id,
        name=f"{name_prefix} {size_key}",
        category=sticker_category,
        price=0.0,
        stock=0,
        cost=0.0,
        size=size_key,
        created_at=created_at
    )
    dimensions = parse_dimensions(size_key)
    if dimensions:
        product.width_mm, product.height_mm = dimensions
        product.area_mm2 = dimensions[0] * dimensions[1]
    return product


def build_plan(
    plate: PrintingPlate,
    catalog: List[Product],
    id_source: Iterator[int],
    sticker_category: str = ProductCategory.STICKERS.value,
    default_areas: Optional[Dict[str, float]] = None,
    name_prefix: str = DEFAULT_NAME_PREFIX,
    created_at: Optional[str] = None
) -> AllocationPlan:
    """Work out quantities and unit costs for every product a plate touches.

    Does not modify ``catalog``; products synthesized for unbound size keys
    are returned in ``created_products`` only.
    """
    groups = group_by_size(catalog, sticker_category)
    sizes: List[SizeAllocation] = []
    created: List[Product] = []

    for size_key, quantity in requested_quantities(plate).items():
        bound = list(groups.get(size_key, []))
        unit_area = resolve_unit_area(size_key, bound, default_areas)
        synthesized = False

        if not bound:
            product = synthesize_product(
                size_key, next(id_source), sticker_category, name_prefix, created_at
            )
            created.append(product)
            bound = [product]
            synthesized = True

        sizes.append(SizeAllocation(
            size_key=size_key,
            quantity=quantity,
            unit_area=unit_area,
            products=bound,
            quantities=split_quantity(quantity, len(bound)),
            synthesized=synthesized
        ))

    total_count = sum(size.quantity for size in sizes)

    # Area is summed per product so products whose own area differs from the
    # size's unit area still reconcile to the plate cost
    total_area = 0.0
    for size in sizes:
        if size.unit_area is None:
            continue
        for product, qty in zip(size.products, size.quantities):
            area = product_area(product)
            total_area += (size.unit_area if area is None else area) * qty

    all_resolved = all(size.unit_area is not None for size in sizes)

    if all_resolved and total_area > 0:
        return AllocationPlan(
            plate=plate,
            sizes=sizes,
            created_products=created,
            cost_mode=CostMode.AREA,
            total_area=total_area,
            total_count=total_count,
            cost_per_area=plate.cost / total_area
        )

    return AllocationPlan(
        plate=plate,
        sizes=sizes,
        created_products=created,
        cost_mode=CostMode.COUNT,
        total_area=total_area,
        total_count=total_count,
        cost_per_unit=safe_divide(plate.cost, total_count)
    )


def apply_plate(
    plate: Optional[PrintingPlate],
    catalog: List[Product],
    next_id: Optional[Callable[[], int]] = None,
    printed_at: Optional[str] = None,
    sticker_category: str = ProductCategory.STICKERS.value,
    default_areas: Optional[Dict[str, float]] = None,
    name_prefix: str = DEFAULT_NAME_PREFIX
) -> Optional[PlateApplication]:
    """Print a plate against a catalog.

    The input catalog and plate are left untouched; the returned
    ``PlateApplication`` carries updated copies for the caller to persist.

    Args:
        plate: Plate to print
        catalog: Current products, in catalog order
        next_id: Id generator for synthesized products (defaults to max id + 1)
        printed_at: Print timestamp (defaults to now)
        sticker_category: Category that plate stock is allocated to
        default_areas: Canonical size key → unit area overrides
        name_prefix: Name prefix for synthesized products

    Returns:
        PlateApplication, or None if the plate is missing or already printed
    """
    if not can_print(plate):
        return None

    printed_at = printed_at or now_iso()
    updated = [replace(product) for product in catalog]

    if next_id is None:
        id_source = id_sequence(updated)
    else:
        id_source = iter(next_id, None)

    plan = build_plan(
        plate, updated, id_source,
        sticker_category=sticker_category,
        default_areas=default_areas,
        name_prefix=name_prefix,
        created_at=printed_at
    )

    deltas: List[ProductDelta] = []
    for size in plan.sizes:
        for product, qty in zip(size.products, size.quantities):
            if qty <= 0:
                continue
            unit_cost = plan.unit_cost_for(size, product)
            stock_before, cost_before = product.stock, product.cost
            apply_addition(product, qty, unit_cost)
            deltas.append(ProductDelta(
                product_id=product.id,
                name=product.name,
                size_key=size.size_key,
                quantity=qty,
                unit_cost=unit_cost,
                stock_before=stock_before,
                stock_after=product.stock,
                cost_before=cost_before,
                cost_after=product.cost
            ))

    return PlateApplication(
        plate=mark_printed(plate, printed_at),
        catalog=updated + plan.created_products,
        deltas=deltas,
        created_products=plan.created_products,
        cost_mode=plan.cost_mode,
        total_area=plan.total_area,
        total_count=plan.total_count
    )


def preview_plate(
    plate: Optional[PrintingPlate],
    catalog: List[Product],
    sticker_category: str = ProductCategory.STICKERS.value,
    default_areas: Optional[Dict[str, float]] = None
) -> Optional[PlatePreview]:
    """Report what printing a plate would do without changing anything.

    Size keys with no bound product are costed with the area a synthesized
    product would get, and report an empty product list.

    Returns:
        PlatePreview, or None if the plate is missing
    """
    if plate is None:
        return None

    plan = build_plan(
        plate, catalog, id_sequence(catalog),
        sticker_category=sticker_category,
        default_areas=default_areas
    )

    sizes: List[SizePreview] = []
    for size in plan.sizes:
        total_cost = 0.0
        bound = []
        for product, qty in zip(size.products, size.quantities):
            unit_cost = plan.unit_cost_for(size, product)
            total_cost += unit_cost * qty
            if not size.synthesized:
                bound.append({
                    'id': product.id,
                    'name': product.name,
                    'stock': product.stock,
                    'cost': product.cost,
                    'assigned_quantity': qty,
                    'unit_cost': unit_cost
                })

        sizes.append(SizePreview(
            size_key=size.size_key,
            quantity=size.quantity,
            unit_area=size.unit_area,
            unit_cost=safe_divide(total_cost, size.quantity),
            total_cost=total_cost,
            products=bound
        ))

    return PlatePreview(
        plate_id=plate.id,
        plate_name=plate.name,
        plate_cost=plate.cost,
        is_printed=plate.is_printed,
        cost_mode=plan.cost_mode,
        total_area=plan.total_area,
        total_count=plan.total_count,
        sizes=sizes
    )
