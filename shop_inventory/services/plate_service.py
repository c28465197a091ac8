# shop_inventory/services/plate_service.py
from typing import Callable, Dict, List, Mapping, Optional

from shop_inventory.config import config
from shop_inventory.models import (
    PrintingPlate, Reservation, PLATES_TABLE, PRODUCTS_TABLE, RESERVATIONS_TABLE
)
from shop_inventory.core.plate_allocation import (
    PlateApplication, PlatePreview, apply_plate, group_by_size, is_sticker, preview_plate
)
from shop_inventory.core.plate_lifecycle import can_delete
from shop_inventory.exceptions import PlateError
from shop_inventory.logging_setup import get_logger, logger as log_manager
from shop_inventory.storage.catalog import CatalogStore
from shop_inventory.utils.date_utils import now_iso, newest_first_key
from shop_inventory.utils.records import next_id
from shop_inventory.utils.validation import normalize_quantities

logger = get_logger(__name__)


class PlateService:
    """Service for printing plates: creation, preview, printing, deletion."""

    def __init__(
        self,
        store: CatalogStore,
        clock: Callable[[], str] = now_iso,
        plate_rules: Optional[Dict] = None
    ):
        """Initialize the plate service.

        Args:
            store: Catalog store
            clock: Returns the current timestamp
            plate_rules: Overrides for the [PLATES] configuration
        """
        self.store = store
        self.clock = clock
        self.rules = plate_rules or config.plate_rules

    def get_plates(self) -> List[PrintingPlate]:
        """Get all plates, newest first."""
        plates = self.store.load_plates()
        return sorted(plates, key=lambda p: newest_first_key(p.date_created), reverse=True)

    def get_plate(self, plate_id: int) -> Optional[PrintingPlate]:
        return self.store.load_plate(plate_id)

    def create_plate(
        self,
        name: str,
        stickers_quantities: Optional[Mapping[str, int]] = None,
        cost: Optional[float] = None,
        small_quantity: int = 0,
        large_quantity: int = 0
    ) -> int:
        """Create a pending plate.

        Args:
            name: Plate name
            stickers_quantities: Size key → quantity
            cost: Total cost of the print run (defaults to the configured cost)
            small_quantity: Extra quantity for the small size key
            large_quantity: Extra quantity for the large size key

        Returns:
            New plate ID

        Raises:
            PlateError: on a blank name or negative cost
            ValidationError: on blank size keys or invalid quantities
        """
        if not name or not name.strip():
            raise PlateError("Plate name is required", code='NAME')

        if cost is None:
            cost = self.rules['default_cost']
        if cost < 0:
            raise PlateError("Plate cost cannot be negative", code='COST')

        quantities = dict(stickers_quantities or {})
        for key, extra in ((self.rules['small_size_key'], small_quantity),
                           (self.rules['large_size_key'], large_quantity)):
            if extra:
                quantities[key] = quantities.get(key, 0) + extra
        quantities = normalize_quantities(quantities)

        plates, version = self.store.load_plates_versioned()
        plate = PrintingPlate(
            id=next_id(plates),
            name=name.strip(),
            cost=float(cost),
            stickers_quantities=quantities,
            is_printed=False,
            date_created=self.clock()
        )
        plates.append(plate)
        self.store.save_plates(plates, expected_version=version)

        logger.info(f"Created plate {plate.id} '{plate.name}' cost {plate.cost:.2f}: {quantities}")
        return plate.id

    def preview_plate(self, plate_id: int) -> Optional[PlatePreview]:
        """Report what printing a plate would do, without changing anything.

        Returns:
            PlatePreview, or None if the plate does not exist
        """
        plate = self.store.load_plate(plate_id)
        if plate is None:
            return None

        return preview_plate(
            plate,
            self.store.load_catalog(),
            sticker_category=self.rules['sticker_category'],
            default_areas=self.rules['default_areas']
        )

    def print_plate_report(self, plate_id: int) -> Optional[PlateApplication]:
        """Print a plate and persist the updated catalog and plate.

        Returns:
            The applied PlateApplication, or None if the plate does not
            exist or is already printed

        Raises:
            StorageConflictError: if the products or plates table changed
                while the plate was being printed
        """
        log_info = log_manager.operation_start_log('print_plate', {'plate_id': plate_id})

        plates, plates_version = self.store.load_plates_versioned()
        catalog, catalog_version = self.store.load_catalog_versioned()
        plate = next((p for p in plates if p.id == plate_id), None)

        application = apply_plate(
            plate,
            catalog,
            printed_at=self.clock(),
            sticker_category=self.rules['sticker_category'],
            default_areas=self.rules['default_areas'],
            name_prefix=self.rules['synthesized_name_prefix']
        )

        if application is None:
            reason = 'not found' if plate is None else 'already printed'
            logger.warning(f"Plate {plate_id} cannot be printed: {reason}")
            log_manager.operation_end_log(log_info, success=False)
            return None

        plates = [application.plate if p.id == plate_id else p for p in plates]
        self.store.save_tables({
            PRODUCTS_TABLE: (application.catalog, catalog_version),
            PLATES_TABLE: (plates, plates_version)
        })

        for product in application.created_products:
            logger.info(f"Created product {product.id} '{product.name}' for size '{product.size}'")
        for delta in application.deltas:
            logger.info(
                f"Plate {plate_id}: +{delta.quantity} '{delta.name}' at {delta.unit_cost:.2f} "
                f"(cost {delta.cost_before:.2f} -> {delta.cost_after:.2f})"
            )

        log_manager.operation_end_log(log_info, success=True, result_info={
            'cost_mode': application.cost_mode.value,
            'units': application.total_count,
            'assigned_cost': round(application.assigned_cost, 2)
        })
        return application

    def print_plate(self, plate_id: int) -> bool:
        """Print a plate.

        Returns:
            False if the plate does not exist or is already printed
        """
        return self.print_plate_report(plate_id) is not None

    def delete_plate(self, plate_id: int) -> bool:
        """Delete a pending plate.

        Returns:
            False if the plate does not exist or is already printed
        """
        plates, version = self.store.load_plates_versioned()
        plate = next((p for p in plates if p.id == plate_id), None)

        if not can_delete(plate):
            logger.warning(f"Plate {plate_id} cannot be deleted")
            return False

        self.store.save_plates([p for p in plates if p.id != plate_id], expected_version=version)
        logger.info(f"Deleted plate {plate_id}")
        return True

    def pending_sticker_demand(self) -> Dict[str, int]:
        """Stickers still to print for pending reservations, by size key.

        For each sticker size key: units reserved by pending reservations
        minus the stock on hand for that size, never below zero. Only size
        keys with something left to print are returned.
        """
        catalog = self.store.load_catalog()
        sticker_category = self.rules['sticker_category']
        size_of: Dict[int, str] = {}
        for size_key, products in group_by_size(catalog, sticker_category).items():
            for product in products:
                size_of[product.id] = size_key

        reserved: Dict[str, int] = {}
        for reservation in self.store.load_records(RESERVATIONS_TABLE, Reservation):
            size_key = size_of.get(reservation.product_id)
            if reservation.is_pending and size_key is not None:
                reserved[size_key] = reserved.get(size_key, 0) + reservation.quantity

        on_hand: Dict[str, int] = {}
        for product in catalog:
            if is_sticker(product, sticker_category) and product.id in size_of:
                key = size_of[product.id]
                on_hand[key] = on_hand.get(key, 0) + product.stock

        pending = {}
        for size_key, quantity in reserved.items():
            missing = max(0, quantity - on_hand.get(size_key, 0))
            if missing > 0:
                pending[size_key] = missing
        return pending
