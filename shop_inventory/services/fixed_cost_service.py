# shop_inventory/services/fixed_cost_service.py
from typing import Callable, Dict, List, Optional

from shop_inventory.models import (
    FixedCost, FixedCostEntry, FIXED_COSTS_TABLE, FIXED_COST_ENTRIES_TABLE
)
from shop_inventory.exceptions import ValidationError
from shop_inventory.logging_setup import get_logger
from shop_inventory.storage.catalog import CatalogStore
from shop_inventory.utils.date_utils import now_iso, newest_first_key
from shop_inventory.utils.records import next_id

logger = get_logger(__name__)

# Shop overheads seeded into an empty fixed_costs table
DEFAULT_FIXED_COSTS = [
    {'name': 'Plancha DTF Textil', 'cost': 20000.0, 'description': 'Costo de plancha DTF para textiles'},
    {'name': 'Bolsas (50 unidades)', 'cost': 3500.0, 'description': 'Paquete de 50 bolsas'},
    {'name': 'Stickers Decoración Bolsa', 'cost': 1200.0, 'description': 'Stickers decorativos para bolsas'},
    {'name': 'Stickers "Gracias por su compra"', 'cost': 1200.0, 'description': 'Stickers de agradecimiento'},
]

DELETED_COST_NAME = 'Deleted cost'


class FixedCostService:
    """Service for recurring overheads and the entries that apply them."""

    def __init__(self, store: CatalogStore, clock: Callable[[], str] = now_iso):
        self.store = store
        self.clock = clock

    def initialize_fixed_costs(self) -> int:
        """Seed the default fixed costs into an empty table.

        Returns:
            Number of fixed costs created (0 if the table was not empty)
        """
        costs, version = self.store.load_records_versioned(FIXED_COSTS_TABLE, FixedCost)
        if costs:
            return 0

        seeded = [
            FixedCost(id=index, is_active=True, **values)
            for index, values in enumerate(DEFAULT_FIXED_COSTS, start=1)
        ]
        self.store.save_records(FIXED_COSTS_TABLE, seeded, expected_version=version)
        logger.info(f"Initialized {len(seeded)} default fixed costs")
        return len(seeded)

    def get_fixed_costs(self) -> List[FixedCost]:
        return self.store.load_records(FIXED_COSTS_TABLE, FixedCost)

    def update_fixed_cost(self, fixed_cost_id: int, cost: float) -> bool:
        """Change the amount of a fixed cost.

        Entries already recorded keep the amount they were recorded with.

        Raises:
            ValidationError: if cost is negative
        """
        if cost < 0:
            raise ValidationError("Fixed cost cannot be negative", code='COST')

        def mutate(fixed_cost: FixedCost) -> bool:
            fixed_cost.cost = float(cost)
            return True

        updated = self.store.update_record(FIXED_COSTS_TABLE, FixedCost, fixed_cost_id, mutate)
        if updated:
            logger.info(f"Fixed cost {fixed_cost_id} set to {cost:.2f}")
        else:
            logger.warning(f"Fixed cost {fixed_cost_id} not found")
        return updated

    def add_fixed_cost_entry(self, fixed_cost_id: int, description: Optional[str] = None) -> Optional[int]:
        """Record that a fixed cost was incurred now, at its current amount.

        Returns:
            New entry ID, or None if the fixed cost does not exist
        """
        fixed_cost = self.store.find(FIXED_COSTS_TABLE, FixedCost, fixed_cost_id)
        if fixed_cost is None:
            logger.warning(f"Cannot add entry: fixed cost {fixed_cost_id} not found")
            return None

        entries, version = self.store.load_records_versioned(FIXED_COST_ENTRIES_TABLE, FixedCostEntry)
        entry = FixedCostEntry(
            id=next_id(entries),
            fixed_cost_id=fixed_cost_id,
            cost_applied=fixed_cost.cost,
            date=self.clock(),
            description=description or None
        )
        entries.append(entry)
        self.store.save_records(FIXED_COST_ENTRIES_TABLE, entries, expected_version=version)

        logger.info(f"Fixed cost entry {entry.id}: '{fixed_cost.name}' {entry.cost_applied:.2f}")
        return entry.id

    def get_fixed_cost_entries(self) -> List[Dict]:
        """Get fixed cost entries, newest first, with their cost's name.

        Returns:
            List of entry dictionaries with ``fixed_cost_name`` and
            ``fixed_cost_description`` added
        """
        costs = {c.id: c for c in self.get_fixed_costs()}
        entries = self.store.load_records(FIXED_COST_ENTRIES_TABLE, FixedCostEntry)
        entries.sort(key=lambda e: newest_first_key(e.date), reverse=True)

        result = []
        for entry in entries:
            data = entry.to_dict()
            fixed_cost = costs.get(entry.fixed_cost_id)
            data['fixed_cost_name'] = fixed_cost.name if fixed_cost else DELETED_COST_NAME
            data['fixed_cost_description'] = fixed_cost.description if fixed_cost else ''
            result.append(data)
        return result
