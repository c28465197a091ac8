"""
Tests for fixed costs and their entries.
"""
import unittest

from shop_inventory.models import FixedCost, FIXED_COSTS_TABLE
from shop_inventory.exceptions import ValidationError
from shop_inventory.services.fixed_cost_service import DELETED_COST_NAME, FixedCostService
from shop_inventory.tests.fixtures import FakeClock, make_store


class TestFixedCostService(unittest.TestCase):
    """Test cases for FixedCostService."""

    def setUp(self):
        """Set up test fixtures."""
        self.store = make_store()
        self.service = FixedCostService(self.store, clock=FakeClock())

    def test_initialize_seeds_defaults_once(self):
        self.assertEqual(self.service.initialize_fixed_costs(), 4)
        self.assertEqual(self.service.initialize_fixed_costs(), 0)

        costs = self.service.get_fixed_costs()
        self.assertEqual([c.id for c in costs], [1, 2, 3, 4])
        self.assertEqual(costs[0].name, 'Plancha DTF Textil')
        self.assertEqual(costs[0].cost, 20000.0)
        self.assertTrue(all(c.is_active for c in costs))

    def test_initialize_keeps_existing_costs(self):
        self.store.save_records(FIXED_COSTS_TABLE, [FixedCost(id=1, name='Alquiler', cost=50000.0)])

        self.assertEqual(self.service.initialize_fixed_costs(), 0)
        self.assertEqual([c.name for c in self.service.get_fixed_costs()], ['Alquiler'])

    def test_update_fixed_cost(self):
        self.service.initialize_fixed_costs()

        self.assertTrue(self.service.update_fixed_cost(2, 4000))
        self.assertEqual(self.service.get_fixed_costs()[1].cost, 4000.0)
        self.assertFalse(self.service.update_fixed_cost(99, 4000))

        with self.assertRaises(ValidationError):
            self.service.update_fixed_cost(2, -1)

    def test_entries_snapshot_cost(self):
        """Test that an entry keeps the cost it was recorded with."""
        self.service.initialize_fixed_costs()

        first = self.service.add_fixed_cost_entry(1, 'Marzo')
        self.service.update_fixed_cost(1, 25000)
        second = self.service.add_fixed_cost_entry(1)

        entries = {e['id']: e for e in self.service.get_fixed_cost_entries()}
        self.assertEqual(entries[first]['cost_applied'], 20000.0)
        self.assertEqual(entries[first]['description'], 'Marzo')
        self.assertEqual(entries[second]['cost_applied'], 25000.0)
        self.assertIsNone(entries[second]['description'])

    def test_entry_for_missing_cost(self):
        self.assertIsNone(self.service.add_fixed_cost_entry(7))
        self.assertEqual(self.service.get_fixed_cost_entries(), [])

    def test_entries_newest_first_with_names(self):
        self.service.initialize_fixed_costs()
        first = self.service.add_fixed_cost_entry(1)
        second = self.service.add_fixed_cost_entry(2)

        entries = self.service.get_fixed_cost_entries()

        self.assertEqual([e['id'] for e in entries], [second, first])
        self.assertEqual(entries[0]['fixed_cost_name'], 'Bolsas (50 unidades)')
        self.assertEqual(entries[0]['fixed_cost_description'], 'Paquete de 50 bolsas')

    def test_entry_of_deleted_cost(self):
        self.service.initialize_fixed_costs()
        entry_id = self.service.add_fixed_cost_entry(4)
        remaining = [c for c in self.service.get_fixed_costs() if c.id != 4]
        self.store.save_records(FIXED_COSTS_TABLE, remaining)

        entry = self.service.get_fixed_cost_entries()[0]

        self.assertEqual(entry['id'], entry_id)
        self.assertEqual(entry['fixed_cost_name'], DELETED_COST_NAME)
        self.assertEqual(entry['fixed_cost_description'], '')


if __name__ == '__main__':
    unittest.main()
