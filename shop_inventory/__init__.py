from .config import config
from .logging_setup import logger, get_logger
from .exceptions import (
    ShopInventoryError, ValidationError, NotFoundError, StorageError,
    StorageConflictError, PlateError
)

__all__ = [
    'config',
    'logger',
    'get_logger',
    'ShopInventoryError',
    'ValidationError',
    'NotFoundError',
    'StorageError',
    'StorageConflictError',
    'PlateError'
]
