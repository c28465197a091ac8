# shop_inventory/storage/__init__.py
from .interface import TableStore, InMemoryTableStore
from .sqlalchemy_store import SQLAlchemyTableStore, KeyValueTable, create_store_engine
from .catalog import CatalogStore


def open_store(url=None):
    """Open a CatalogStore on the configured (or given) database URL."""
    return CatalogStore(SQLAlchemyTableStore(url))


__all__ = [
    'TableStore',
    'InMemoryTableStore',
    'SQLAlchemyTableStore',
    'KeyValueTable',
    'create_store_engine',
    'CatalogStore',
    'open_store'
]
