import os
import configparser
from pathlib import Path

from shop_inventory.exceptions import ConfigError

class Config:
    """Configuration manager for the Print Shop Inventory."""

    _instance = None

    def __new__(cls):
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super(Config, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Initialize the configuration if not already initialized."""
        if self._initialized:
            return

        env_path = os.getenv('SHOP_INVENTORY_CONFIG')
        if env_path:
            self._config_path = Path(env_path)
        else:
            self._config_path = Path('config') / 'settings.ini'
        self._config = configparser.ConfigParser(interpolation=None)

        # Defaults first, then whatever the settings file overrides
        self._create_default_config()
        if self._config_path.exists():
            try:
                self._config.read(self._config_path)
            except configparser.Error as e:
                raise ConfigError(f"Could not parse {self._config_path}: {str(e)}")

        self._initialized = True

    def _create_default_config(self):
        """Populate the default configuration."""
        self._config['STORAGE'] = {
            'url': 'sqlite:///shop_inventory.db',
            'echo': 'False'
        }

        self._config['LOGGING'] = {
            'level': 'INFO',
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            'directory': 'logs',
            'max_size_mb': '10',
            'backup_count': '5',
            'console_output': 'True',
            'file_output': 'True'
        }

        self._config['PLATES'] = {
            'default_cost': '18000',
            'sticker_category': 'stickers',
            'small_size_key': 'chico',
            'small_width_mm': '50',
            'small_height_mm': '50',
            'large_size_key': 'grande',
            'large_width_mm': '100',
            'large_height_mm': '100',
            'synthesized_name_prefix': 'Sticker'
        }

        self._config['RESERVATIONS'] = {
            'default_advance_ratio': '0.5'
        }

    def get(self, section, key, default=None):
        """Get configuration value."""
        try:
            return self._config.get(section, key)
        except (configparser.NoSectionError, configparser.NoOptionError):
            return default

    def get_int(self, section, key, default=None):
        """Get configuration value as integer."""
        try:
            return self._config.getint(section, key)
        except (configparser.NoSectionError, configparser.NoOptionError, ValueError):
            return default

    def get_float(self, section, key, default=None):
        """Get configuration value as float."""
        try:
            return self._config.getfloat(section, key)
        except (configparser.NoSectionError, configparser.NoOptionError, ValueError):
            return default

    def get_boolean(self, section, key, default=None):
        """Get configuration value as boolean."""
        try:
            return self._config.getboolean(section, key)
        except (configparser.NoSectionError, configparser.NoOptionError, ValueError):
            return default

    def set(self, section, key, value):
        """Set configuration value for this process."""
        if not self._config.has_section(section):
            self._config.add_section(section)

        self._config.set(section, key, str(value))

    @property
    def storage_config(self):
        """Get storage configuration."""
        return {
            'url': self.get('STORAGE', 'url', 'sqlite:///shop_inventory.db'),
            'echo': self.get_boolean('STORAGE', 'echo', False)
        }

    @property
    def log_config(self):
        """Get logging configuration."""
        return {
            'level': self.get('LOGGING', 'level', 'INFO'),
            'format': self.get('LOGGING', 'format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s'),
            'directory': self.get('LOGGING', 'directory', 'logs'),
            'max_size_mb': self.get_int('LOGGING', 'max_size_mb', 10),
            'backup_count': self.get_int('LOGGING', 'backup_count', 5),
            'console_output': self.get_boolean('LOGGING', 'console_output', True),
            'file_output': self.get_boolean('LOGGING', 'file_output', True)
        }

    @property
    def plate_rules(self):
        """Get printing plate rules.

        The default areas map the canonical small/large size keys to their
        unit area in mm².
        """
        small_key = self.get('PLATES', 'small_size_key', 'chico').strip().lower()
        large_key = self.get('PLATES', 'large_size_key', 'grande').strip().lower()
        small_area = (self.get_float('PLATES', 'small_width_mm', 50.0) *
                      self.get_float('PLATES', 'small_height_mm', 50.0))
        large_area = (self.get_float('PLATES', 'large_width_mm', 100.0) *
                      self.get_float('PLATES', 'large_height_mm', 100.0))
        return {
            'default_cost': self.get_float('PLATES', 'default_cost', 18000.0),
            'sticker_category': self.get('PLATES', 'sticker_category', 'stickers').strip().lower(),
            'small_size_key': small_key,
            'large_size_key': large_key,
            'default_areas': {small_key: small_area, large_key: large_area},
            'synthesized_name_prefix': self.get('PLATES', 'synthesized_name_prefix', 'Sticker')
        }

    @property
    def reservation_rules(self):
        """Get reservation rules."""
        ratio = self.get_float('RESERVATIONS', 'default_advance_ratio', 0.5)
        if ratio is None or not 0.0 <= ratio <= 1.0:
            raise ConfigError(f"default_advance_ratio must be between 0 and 1, got {ratio}")
        return {
            'default_advance_ratio': ratio
        }

# Global config instance
config = Config()
