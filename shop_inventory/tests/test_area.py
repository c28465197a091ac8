"""
Unit tests for sticker area resolution.
"""
import unittest

from shop_inventory.models import Product
from shop_inventory.core.area import parse_dimensions, product_area, resolve_unit_area


def sticker(product_id, size=None, **kwargs):
    return Product(id=product_id, name=f'Sticker {product_id}', category='stickers', size=size, **kwargs)


class TestParseDimensions(unittest.TestCase):

    def test_parses_width_and_height(self):
        self.assertEqual(parse_dimensions('70x40'), (70.0, 40.0))
        self.assertEqual(parse_dimensions('62.5X30'), (62.5, 30.0))
        self.assertEqual(parse_dimensions(' 10 x 20 '), (10.0, 20.0))

    def test_rejects_other_labels(self):
        for value in ('chico', '', None, '70x', 'x40', '70x40x10', '70*40'):
            self.assertIsNone(parse_dimensions(value), value)


class TestProductArea(unittest.TestCase):

    def test_explicit_area_wins(self):
        product = sticker(1, width_mm=10.0, height_mm=10.0, area_mm2=250.0)
        self.assertEqual(product_area(product), 250.0)

    def test_width_times_height(self):
        self.assertEqual(product_area(sticker(1, width_mm=20.0, height_mm=30.0)), 600.0)

    def test_missing_or_non_positive_area(self):
        self.assertIsNone(product_area(sticker(1)))
        self.assertIsNone(product_area(sticker(1, width_mm=20.0)))
        self.assertIsNone(product_area(sticker(1, area_mm2=0.0)))


class TestResolveUnitArea(unittest.TestCase):
    """Test cases for the area priority order."""

    def test_first_product_with_area_wins(self):
        """Test that a bound product's area beats the default table."""
        products = [sticker(1, 'chico'), sticker(2, 'chico', area_mm2=3000.0), sticker(3, 'chico', area_mm2=9000.0)]
        self.assertEqual(resolve_unit_area('chico', products), 3000.0)

    def test_default_areas(self):
        """Test the canonical size keys, case-insensitively."""
        self.assertEqual(resolve_unit_area('chico', []), 2500.0)
        self.assertEqual(resolve_unit_area('GRANDE', []), 10000.0)
        self.assertEqual(resolve_unit_area(' Chico ', [sticker(1, 'chico')]), 2500.0)

    def test_default_areas_override(self):
        self.assertEqual(resolve_unit_area('chico', [], {'chico': 1600.0}), 1600.0)
        self.assertIsNone(resolve_unit_area('grande', [], {'chico': 1600.0}))

    def test_dimension_key(self):
        """Test that a literal WxH key resolves to its area."""
        self.assertEqual(resolve_unit_area('70x40', []), 2800.0)

    def test_default_beats_dimension_parsing(self):
        self.assertEqual(resolve_unit_area('10x10', [], {'10x10': 5.0}), 5.0)

    def test_unresolved(self):
        """Test that unknown labels resolve to None instead of raising."""
        self.assertIsNone(resolve_unit_area('mediano', [sticker(1, 'mediano')]))
        self.assertIsNone(resolve_unit_area('0x40', []))

    def test_non_positive_product_area_is_skipped(self):
        products = [sticker(1, 'chico', area_mm2=-5.0)]
        self.assertEqual(resolve_unit_area('chico', products), 2500.0)


if __name__ == '__main__':
    unittest.main()
