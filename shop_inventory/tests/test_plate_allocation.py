"""
Unit tests for printing plate allocation, preview and lifecycle.
"""
import itertools
import json
import unittest

from shop_inventory.models import Product, PrintingPlate
from shop_inventory.core.plate_allocation import (
    CostMode, UNKNOWN_SIZE, apply_plate, group_by_size, preview_plate,
    requested_quantities, split_quantity
)
from shop_inventory.core.plate_lifecycle import (
    PlateState, can_delete, can_print, mark_printed, plate_state
)

PRINTED_AT = '2024-03-01T10:00:00'


def sticker(product_id, size, stock=0, cost=0.0, **kwargs):
    return Product(
        id=product_id, name=f'Sticker {product_id}', category='stickers',
        price=300.0, stock=stock, cost=cost, size=size, **kwargs
    )


def base_catalog():
    return [
        sticker(1, 'chico'),
        sticker(2, 'grande'),
        Product(id=3, name='Remera M', category='remeras', price=3500.0, stock=4, cost=1500.0, size='m'),
    ]


def plate(quantities, cost=18500.0, **kwargs):
    return PrintingPlate(id=1, name='Plancha', cost=cost, stickers_quantities=quantities, **kwargs)


def by_id(catalog):
    return {p.id: p for p in catalog}


class TestSplitQuantity(unittest.TestCase):

    def test_remainder_goes_to_first_products(self):
        self.assertEqual(split_quantity(10, 3), [4, 3, 3])
        self.assertEqual(split_quantity(11, 3), [4, 4, 3])
        self.assertEqual(split_quantity(2, 3), [1, 1, 0])

    def test_split_sums_to_quantity(self):
        for quantity in (0, 1, 7, 100):
            for parts in (1, 2, 3, 7):
                self.assertEqual(sum(split_quantity(quantity, parts)), quantity)

    def test_no_parts(self):
        self.assertEqual(split_quantity(5, 0), [])


class TestGrouping(unittest.TestCase):

    def test_groups_stickers_by_normalized_size(self):
        catalog = [sticker(1, 'Chico'), sticker(2, 'grande'), sticker(3, ' chico '), sticker(4, None)]
        catalog.append(Product(id=5, name='Totebag Grande', category='totebags', size='grande'))

        groups = group_by_size(catalog)

        self.assertEqual([p.id for p in groups['chico']], [1, 3])
        self.assertEqual([p.id for p in groups['grande']], [2])
        self.assertEqual([p.id for p in groups[UNKNOWN_SIZE]], [4])

    def test_requested_quantities_skip_non_positive(self):
        requested = requested_quantities(plate({'CHICO': 5, 'grande': 0, 'chico': 2, '70x40': 3}))
        self.assertEqual(requested, {'chico': 7, '70x40': 3})


class TestApplyPlate(unittest.TestCase):
    """Test cases for apply_plate."""

    def setUp(self):
        """Set up test fixtures."""
        self.catalog = base_catalog()

    def test_area_mode_chico_grande(self):
        """Test the area-weighted split of an 18500 plate over 100 chico and 50 grande."""
        application = apply_plate(plate({'chico': 100, 'grande': 50}), self.catalog, printed_at=PRINTED_AT)

        products = by_id(application.catalog)
        self.assertEqual(application.cost_mode, CostMode.AREA)
        self.assertEqual(application.total_area, 750000.0)
        self.assertEqual(application.total_count, 150)
        self.assertEqual(products[1].stock, 100)
        self.assertEqual(products[2].stock, 50)
        self.assertAlmostEqual(products[1].cost, 61.6667, places=4)
        self.assertAlmostEqual(products[2].cost, 246.6667, places=4)
        self.assertAlmostEqual(application.assigned_cost, 18500.0, places=6)

    def test_inputs_are_not_mutated(self):
        """Test that the caller's catalog and plate are left untouched."""
        original = plate({'chico': 100, 'grande': 50})
        apply_plate(original, self.catalog, printed_at=PRINTED_AT)

        self.assertEqual(self.catalog[0].stock, 0)
        self.assertEqual(self.catalog[0].cost, 0.0)
        self.assertEqual(len(self.catalog), 3)
        self.assertFalse(original.is_printed)
        self.assertIsNone(original.date_printed)

    def test_plate_marked_printed(self):
        application = apply_plate(plate({'chico': 10}), self.catalog, printed_at=PRINTED_AT)

        self.assertTrue(application.plate.is_printed)
        self.assertEqual(application.plate.date_printed, PRINTED_AT)

    def test_non_sticker_products_untouched(self):
        application = apply_plate(plate({'chico': 10, 'm': 5}), self.catalog, printed_at=PRINTED_AT)

        shirt = by_id(application.catalog)[3]
        self.assertEqual(shirt.stock, 4)
        self.assertEqual(shirt.cost, 1500.0)
        # 'm' has no sticker product, so one is synthesized for it
        self.assertEqual([p.size for p in application.created_products], ['m'])

    def test_quantities_are_conserved(self):
        """Test that each size's assigned quantities sum to the request."""
        catalog = [sticker(1, 'chico'), sticker(2, 'chico'), sticker(3, 'chico'), sticker(4, 'grande')]
        application = apply_plate(plate({'chico': 10, 'grande': 7}), catalog, printed_at=PRINTED_AT)

        self.assertEqual(application.quantities_by_size(), {'chico': 10, 'grande': 7})
        stocks = [by_id(application.catalog)[i].stock for i in (1, 2, 3)]
        self.assertEqual(stocks, [4, 3, 3])

    def test_products_with_zero_share_get_no_delta(self):
        catalog = [sticker(1, 'chico'), sticker(2, 'chico'), sticker(3, 'chico')]
        application = apply_plate(plate({'chico': 2}), catalog, printed_at=PRINTED_AT)

        self.assertEqual([d.product_id for d in application.deltas], [1, 2])
        self.assertEqual(by_id(application.catalog)[3].stock, 0)

    def test_product_own_area_reconciles(self):
        """Test products whose area differs from the size's unit area."""
        catalog = [sticker(1, 'chico', area_mm2=2000.0), sticker(2, 'chico', area_mm2=4000.0)]
        application = apply_plate(plate({'chico': 10}, cost=3000.0), catalog, printed_at=PRINTED_AT)

        products = by_id(application.catalog)
        self.assertEqual(application.cost_mode, CostMode.AREA)
        self.assertAlmostEqual(products[1].cost, 200.0)
        self.assertAlmostEqual(products[2].cost, 400.0)
        self.assertAlmostEqual(application.assigned_cost, 3000.0)

    def test_existing_stock_is_averaged(self):
        self.catalog[0].stock = 100
        self.catalog[0].cost = 50.0

        application = apply_plate(plate({'chico': 100, 'grande': 50}), self.catalog, printed_at=PRINTED_AT)

        chico = by_id(application.catalog)[1]
        self.assertEqual(chico.stock, 200)
        self.assertAlmostEqual(chico.cost, (100 * 50.0 + 100 * 18500.0 / 300.0) / 200, places=6)

    def test_synthesizes_dimension_product(self):
        """Test that an unbound WxH key creates a sticker product."""
        application = apply_plate(plate({'70x40': 10}), self.catalog, printed_at=PRINTED_AT)

        self.assertEqual(len(application.created_products), 1)
        created = application.created_products[0]
        self.assertEqual(created.id, 4)
        self.assertEqual(created.name, 'Sticker 70x40')
        self.assertEqual(created.category, 'stickers')
        self.assertEqual(created.size, '70x40')
        self.assertEqual(created.price, 0.0)
        self.assertEqual((created.width_mm, created.height_mm, created.area_mm2), (70.0, 40.0, 2800.0))
        self.assertEqual(created.stock, 10)
        self.assertAlmostEqual(created.cost, 1850.0)
        self.assertEqual(created.created_at, PRINTED_AT)

        self.assertEqual(len(application.catalog), 4)
        self.assertIs(application.catalog[-1], created)
        self.assertEqual(application.cost_mode, CostMode.AREA)

    def test_synthesized_ids_from_callable(self):
        ids = itertools.count(100)
        application = apply_plate(
            plate({'70x40': 1, '30x30': 1}), self.catalog, next_id=ids.__next__, printed_at=PRINTED_AT
        )
        self.assertEqual([p.id for p in application.created_products], [100, 101])

    def test_synthesized_id_on_empty_catalog(self):
        application = apply_plate(plate({'chico': 3}), [], printed_at=PRINTED_AT)
        self.assertEqual(application.created_products[0].id, 1)
        self.assertEqual(application.created_products[0].name, 'Sticker chico')

    def test_name_prefix(self):
        application = apply_plate(plate({'70x40': 1}), [], printed_at=PRINTED_AT, name_prefix='Calco')
        self.assertEqual(application.created_products[0].name, 'Calco 70x40')

    def test_count_mode_when_an_area_is_unresolved(self):
        """Test that one unresolved size switches the whole plate to count mode."""
        application = apply_plate(plate({'chico': 10, 'mediano': 10}, cost=1000.0), self.catalog, printed_at=PRINTED_AT)

        products = by_id(application.catalog)
        mediano = application.created_products[0]
        self.assertEqual(application.cost_mode, CostMode.COUNT)
        self.assertEqual(application.total_count, 20)
        self.assertAlmostEqual(products[1].cost, 50.0)
        self.assertAlmostEqual(mediano.cost, 50.0)
        self.assertIsNone(mediano.area_mm2)
        self.assertAlmostEqual(application.assigned_cost, 1000.0)

    def test_unknown_bucket(self):
        """Test that the 'unknown' key binds stickers without a size."""
        catalog = [sticker(1, None), sticker(2, 'chico')]
        application = apply_plate(plate({'unknown': 5}, cost=100.0), catalog, printed_at=PRINTED_AT)

        self.assertEqual(application.created_products, [])
        self.assertEqual(by_id(application.catalog)[1].stock, 5)
        self.assertEqual(application.cost_mode, CostMode.COUNT)
        self.assertAlmostEqual(by_id(application.catalog)[1].cost, 20.0)

    def test_zero_cost_plate(self):
        application = apply_plate(plate({'chico': 10}, cost=0.0), self.catalog, printed_at=PRINTED_AT)

        chico = by_id(application.catalog)[1]
        self.assertEqual(chico.stock, 10)
        self.assertEqual(chico.cost, 0.0)

    def test_zero_quantity_plate(self):
        """Test that an empty plate is printed without touching stock."""
        application = apply_plate(plate({'chico': 0}), self.catalog, printed_at=PRINTED_AT)

        self.assertEqual(application.deltas, [])
        self.assertEqual(application.total_count, 0)
        self.assertEqual(application.assigned_cost, 0.0)
        self.assertTrue(application.plate.is_printed)
        self.assertEqual([p.stock for p in application.catalog], [0, 0, 4])

    def test_printed_plate_is_rejected(self):
        printed = plate({'chico': 10}, is_printed=True, date_printed=PRINTED_AT)
        self.assertIsNone(apply_plate(printed, self.catalog))
        self.assertEqual(self.catalog[0].stock, 0)

    def test_missing_plate_is_rejected(self):
        self.assertIsNone(apply_plate(None, self.catalog))

    def test_deltas(self):
        application = apply_plate(plate({'chico': 100, 'grande': 50}), self.catalog, printed_at=PRINTED_AT)

        delta = application.deltas[0]
        self.assertEqual(delta.product_id, 1)
        self.assertEqual(delta.size_key, 'chico')
        self.assertEqual((delta.stock_before, delta.stock_after), (0, 100))
        self.assertEqual(delta.cost_before, 0.0)
        self.assertAlmostEqual(delta.total_cost, 100 * delta.unit_cost)
        self.assertEqual(delta.to_dict()['quantity'], 100)


class TestPreviewPlate(unittest.TestCase):
    """Test cases for preview_plate."""

    def setUp(self):
        """Set up test fixtures."""
        self.catalog = base_catalog()

    def test_matches_apply(self):
        """Test that the preview reports the costs printing would assign."""
        preview = preview_plate(plate({'chico': 100, 'grande': 50}), self.catalog)

        self.assertEqual(preview.cost_mode, CostMode.AREA)
        self.assertEqual([s.size_key for s in preview.sizes], ['chico', 'grande'])
        chico = preview.sizes[0]
        self.assertEqual(chico.quantity, 100)
        self.assertEqual(chico.unit_area, 2500.0)
        self.assertAlmostEqual(chico.unit_cost, 61.6667, places=4)
        self.assertEqual(chico.products[0]['id'], 1)
        self.assertEqual(chico.products[0]['assigned_quantity'], 100)
        self.assertTrue(preview.is_reconciled())

    def test_changes_nothing(self):
        original = plate({'chico': 100, '70x40': 5})
        preview_plate(original, self.catalog)

        self.assertEqual(len(self.catalog), 3)
        self.assertEqual([p.stock for p in self.catalog], [0, 0, 4])
        self.assertFalse(original.is_printed)

    def test_is_idempotent(self):
        """Test that two previews serialize identically."""
        target = plate({'chico': 10, 'grande': 3, '70x40': 7})

        first = json.dumps(preview_plate(target, self.catalog).to_dict(), sort_keys=True)
        second = json.dumps(preview_plate(target, self.catalog).to_dict(), sort_keys=True)

        self.assertEqual(first, second)

    def test_unbound_size_has_no_products(self):
        preview = preview_plate(plate({'70x40': 10}), self.catalog)

        size = preview.sizes[0]
        self.assertEqual(size.products, [])
        self.assertEqual(size.unit_area, 2800.0)
        self.assertAlmostEqual(size.total_cost, 18500.0)

    def test_count_mode_reconciles(self):
        preview = preview_plate(plate({'chico': 3, 'mediano': 4}, cost=700.0), self.catalog)

        self.assertEqual(preview.cost_mode, CostMode.COUNT)
        self.assertAlmostEqual(preview.sizes[0].unit_cost, 100.0)
        self.assertTrue(preview.is_reconciled())

    def test_printed_plate_can_be_previewed(self):
        preview = preview_plate(plate({'chico': 10}, is_printed=True), self.catalog)
        self.assertTrue(preview.is_printed)

    def test_missing_plate(self):
        self.assertIsNone(preview_plate(None, self.catalog))


class TestPlateLifecycle(unittest.TestCase):

    def test_pending_plate(self):
        pending = plate({'chico': 1})
        self.assertEqual(plate_state(pending), PlateState.PENDING)
        self.assertTrue(can_print(pending))
        self.assertTrue(can_delete(pending))

    def test_printed_plate_is_terminal(self):
        printed = mark_printed(plate({'chico': 1}), PRINTED_AT)

        self.assertEqual(plate_state(printed), PlateState.PRINTED)
        self.assertFalse(can_print(printed))
        self.assertFalse(can_delete(printed))
        with self.assertRaises(ValueError):
            mark_printed(printed, PRINTED_AT)

    def test_missing_plate(self):
        self.assertFalse(can_print(None))
        self.assertFalse(can_delete(None))


if __name__ == '__main__':
    unittest.main()
