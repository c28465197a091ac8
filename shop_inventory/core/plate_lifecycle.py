# shop_inventory/core/plate_lifecycle.py
import enum
from dataclasses import replace
from typing import Optional

from shop_inventory.models import PrintingPlate


class PlateState(enum.Enum):
    """Printing plate states. PRINTED is terminal."""
    PENDING = 'pending'
    PRINTED = 'printed'

    def __str__(self):
        return self.value


def plate_state(plate: PrintingPlate) -> PlateState:
    return PlateState.PRINTED if plate.is_printed else PlateState.PENDING


def can_print(plate: Optional[PrintingPlate]) -> bool:
    """A plate can be printed once, while pending."""
    return plate is not None and plate_state(plate) is PlateState.PENDING


def can_delete(plate: Optional[PrintingPlate]) -> bool:
    """Printed plates are kept as the record of the stock they produced."""
    return plate is not None and plate_state(plate) is PlateState.PENDING


def mark_printed(plate: PrintingPlate, printed_at: str) -> PrintingPlate:
    """Return a printed copy of a pending plate.

    Args:
        plate: Pending plate
        printed_at: Print timestamp

    Returns:
        New PrintingPlate with ``is_printed`` set and ``date_printed`` stamped

    Raises:
        ValueError: if the plate is already printed
    """
    if not can_print(plate):
        raise ValueError(f"Plate {plate.id} is already printed")

    return replace(
        plate,
        stickers_quantities=dict(plate.stickers_quantities),
        is_printed=True,
        date_printed=printed_at
    )
