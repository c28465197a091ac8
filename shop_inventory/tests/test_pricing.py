"""
Unit tests for the pricing helpers.
"""
import unittest

from shop_inventory.core.pricing import reservation_advance, shirt_cost_by_quantity, totebag_cost_by_size


class TestPricing(unittest.TestCase):

    def test_shirt_quantity_tiers(self):
        self.assertEqual(shirt_cost_by_quantity(1000, 1), 1000)
        self.assertAlmostEqual(shirt_cost_by_quantity(1000, 3), 850.0)
        self.assertAlmostEqual(shirt_cost_by_quantity(1000, 10), 750.0)

    def test_shirt_quantities_between_tiers_pay_base_price(self):
        for quantity in (2, 5, 11, 50):
            self.assertEqual(shirt_cost_by_quantity(1000, quantity), 1000)

    def test_totebag_cost_by_size(self):
        self.assertEqual(totebag_cost_by_size('30x40'), 1800.0)
        self.assertEqual(totebag_cost_by_size(' 40X40 '), 2100.0)
        self.assertEqual(totebag_cost_by_size('mini'), 2100.0)
        self.assertEqual(totebag_cost_by_size(None), 2100.0)

    def test_reservation_advance(self):
        self.assertEqual(reservation_advance(7000), 3500.0)
        self.assertEqual(reservation_advance(1000, 0.3), 300.0)
        self.assertEqual(reservation_advance(0), 0.0)


if __name__ == '__main__':
    unittest.main()
