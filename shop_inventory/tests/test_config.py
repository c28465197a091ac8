"""
Tests for configuration, logging and the exception hierarchy.
"""
import unittest

from shop_inventory.config import config
from shop_inventory.logging_setup import get_logger, logger as log_manager
from shop_inventory.exceptions import (
    ConfigError, PlateError, ShopInventoryError, StorageConflictError, StorageError, ValidationError
)


class TestConfig(unittest.TestCase):

    def setUp(self):
        """Set up test fixtures."""
        self.saved_ratio = config.get('RESERVATIONS', 'default_advance_ratio')
        self.saved_width = config.get('PLATES', 'small_width_mm')

    def tearDown(self):
        """Tear down test fixtures."""
        config.set('RESERVATIONS', 'default_advance_ratio', self.saved_ratio)
        config.set('PLATES', 'small_width_mm', self.saved_width)

    def test_typed_getters(self):
        self.assertEqual(config.get('NOPE', 'key', 'fallback'), 'fallback')
        self.assertEqual(config.get_int('NOPE', 'key', 7), 7)
        self.assertEqual(config.get_float('NOPE', 'key', 1.5), 1.5)
        self.assertTrue(config.get_boolean('NOPE', 'key', True))

    def test_plate_rules_default_areas(self):
        config.set('PLATES', 'small_width_mm', 40)

        rules = config.plate_rules

        small_key = rules['small_size_key']
        self.assertEqual(rules['default_areas'][small_key], 40.0 * config.get_float('PLATES', 'small_height_mm'))

    def test_advance_ratio_must_be_a_fraction(self):
        config.set('RESERVATIONS', 'default_advance_ratio', 1.5)

        with self.assertRaises(ConfigError):
            config.reservation_rules


class TestLogging(unittest.TestCase):

    def test_loggers_are_cached_and_do_not_propagate(self):
        first = get_logger('shop_inventory.tests.logging')

        self.assertIs(get_logger('shop_inventory.tests.logging'), first)
        self.assertFalse(first.propagate)

    def test_operation_logs(self):
        """Test that an operation is traced from start to end in the operations log."""
        with self.assertLogs('operations', level='INFO') as cm:
            log_info = log_manager.operation_start_log('print_plate', {'plate_id': 3})
            log_manager.operation_end_log(log_info, success=True, result_info={'units': 10})

        self.assertIn("Starting operation: print_plate {'plate_id': 3}", cm.output[0])
        self.assertIn('Completed operation: print_plate', cm.output[1])
        self.assertIn("{'units': 10}", cm.output[1])

    def test_failed_operation_logs_warning(self):
        with self.assertLogs('operations', level='INFO') as cm:
            log_info = log_manager.operation_start_log('reset_database')
            log_manager.operation_end_log(log_info, success=False)

        self.assertTrue(cm.output[1].startswith('WARNING:operations:Did not complete operation: reset_database'))


class TestExceptions(unittest.TestCase):

    def test_to_dict(self):
        error = StorageConflictError("Table 'products' is at version 3, expected 2", details={'table': 'products'})

        self.assertEqual(error.to_dict(), {
            'error': 'StorageConflictError',
            'message': "Table 'products' is at version 3, expected 2",
            'code': 'CONFLICT',
            'details': {'table': 'products'}
        })
        self.assertTrue(str(error).startswith('[CONFLICT]'))

    def test_hierarchy(self):
        self.assertTrue(issubclass(StorageConflictError, StorageError))
        self.assertTrue(issubclass(PlateError, ValidationError))
        self.assertTrue(issubclass(ValidationError, ShopInventoryError))

    def test_default_message(self):
        self.assertEqual(ShopInventoryError().message, "An error occurred in the Print Shop Inventory")
        self.assertIsNone(ShopInventoryError("x").code)


if __name__ == '__main__':
    unittest.main()
