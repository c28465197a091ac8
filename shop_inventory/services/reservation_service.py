# shop_inventory/services/reservation_service.py
from typing import Callable, List, Optional

from shop_inventory.config import config
from shop_inventory.models import (
    Product, Reservation, ReservationStatus, PRODUCTS_TABLE, RESERVATIONS_TABLE
)
from shop_inventory.core.pricing import reservation_advance
from shop_inventory.exceptions import NotFoundError, ReservationError
from shop_inventory.logging_setup import get_logger
from shop_inventory.services.inventory_service import InventoryService
from shop_inventory.services.product_service import ProductService
from shop_inventory.storage.catalog import CatalogStore
from shop_inventory.utils.date_utils import now_iso, newest_first_key
from shop_inventory.utils.records import next_id
from shop_inventory.utils.validation import validate_reservation

logger = get_logger(__name__)


class ReservationService:
    """Service for customer reservations held against a deposit."""

    def __init__(
        self,
        store: CatalogStore,
        clock: Callable[[], str] = now_iso,
        inventory_service: Optional[InventoryService] = None
    ):
        """Initialize the reservation service.

        Args:
            store: Catalog store
            clock: Returns the current timestamp
            inventory_service: Records the sale when a reservation completes
        """
        self.store = store
        self.clock = clock
        self.inventory_service = inventory_service or InventoryService(store, clock)
        self.product_service = ProductService(store, clock)

    def get_reservations(self) -> List[Reservation]:
        """Get all reservations, newest first."""
        reservations = self.store.load_records(RESERVATIONS_TABLE, Reservation)
        return sorted(reservations, key=lambda r: newest_first_key(r.date), reverse=True)

    def get_reservation(self, reservation_id: int) -> Optional[Reservation]:
        return self.store.find(RESERVATIONS_TABLE, Reservation, reservation_id)

    def add_reservation(
        self,
        product_id: int,
        customer_name: str,
        quantity: int,
        unit_price: Optional[float] = None,
        advance_payment: Optional[float] = None,
        design_motif: Optional[str] = None
    ) -> int:
        """Create a pending reservation.

        Args:
            product_id: Product being reserved
            customer_name: Customer name
            quantity: Units reserved
            unit_price: Price per unit (defaults to the quoted list price)
            advance_payment: Deposit received (defaults to the configured
                share of the total)
            design_motif: Optional print design requested

        Returns:
            New reservation ID

        Raises:
            NotFoundError: if the product does not exist
            ReservationError: if the reservation data is invalid
        """
        if self.store.find(PRODUCTS_TABLE, Product, product_id) is None:
            raise NotFoundError(f"Product {product_id} not found", details={'product_id': product_id})

        if unit_price is None:
            unit_price = self.product_service.quote_unit_price(product_id, quantity)

        total = quantity * unit_price
        if advance_payment is None:
            ratio = config.reservation_rules['default_advance_ratio']
            advance_payment = reservation_advance(total, ratio)

        reservations, version = self.store.load_records_versioned(RESERVATIONS_TABLE, Reservation)
        reservation = Reservation(
            id=next_id(reservations),
            product_id=product_id,
            customer_name=(customer_name or '').strip(),
            quantity=quantity,
            unit_price=unit_price,
            advance_payment=advance_payment,
            total=total,
            status=ReservationStatus.PENDING.value,
            design_motif=design_motif or None,
            date=self.clock()
        )

        errors = validate_reservation(reservation)
        if errors:
            raise ReservationError("Invalid reservation", code='RESERVATION', details=errors)

        reservations.append(reservation)
        self.store.save_records(RESERVATIONS_TABLE, reservations, expected_version=version)
        logger.info(
            f"Reservation {reservation.id} for {reservation.customer_name}: "
            f"{quantity} x product {product_id}, total {total:.2f}, advance {advance_payment:.2f}"
        )
        return reservation.id

    def complete_reservation(self, reservation_id: int) -> bool:
        """Deliver a pending reservation and record the sale.

        The sale is recorded for the full reservation total at the product's
        current average cost. The status change, the sale and the stock
        change are saved together.

        Returns:
            False if the reservation does not exist or is not pending

        Raises:
            StorageConflictError: if the reservations, products or sales
                table changed meanwhile; the reservation stays pending
        """
        reservations, version = self.store.load_records_versioned(RESERVATIONS_TABLE, Reservation)
        reservation = next((r for r in reservations if r.id == reservation_id), None)
        if reservation is None or not reservation.is_pending:
            logger.warning(f"Reservation {reservation_id} cannot be completed")
            return False

        reservation.status = ReservationStatus.COMPLETED.value
        writes = {RESERVATIONS_TABLE: (reservations, version)}

        pending = None
        try:
            pending = self.inventory_service.prepare_sale(
                reservation.product_id,
                reservation.quantity,
                reservation.unit_price,
                reservation_id=reservation.id,
                allow_oversell=True
            )
            writes.update(pending.writes)
        except NotFoundError:
            logger.warning(
                f"Reservation {reservation_id} completed but product {reservation.product_id} "
                f"no longer exists; no sale recorded"
            )

        self.store.save_tables(writes)
        if pending is not None:
            self.inventory_service.log_sale(pending)

        logger.info(f"Reservation {reservation_id} completed (remaining {reservation.remaining:.2f})")
        return True

    def cancel_reservation(self, reservation_id: int) -> bool:
        """Cancel a pending reservation. Stock is not touched.

        Returns:
            False if the reservation does not exist or is not pending
        """
        def cancel(reservation: Reservation) -> bool:
            if not reservation.is_pending:
                return False
            reservation.status = ReservationStatus.CANCELLED.value
            return True

        if not self.store.update_record(RESERVATIONS_TABLE, Reservation, reservation_id, cancel):
            logger.warning(f"Reservation {reservation_id} cannot be cancelled")
            return False

        logger.info(f"Reservation {reservation_id} cancelled")
        return True
