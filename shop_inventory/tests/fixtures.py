"""
Shared helpers for the shop inventory tests.
"""
from datetime import datetime, timedelta

from shop_inventory.storage import CatalogStore, InMemoryTableStore


class FakeClock:
    """Clock returning strictly increasing ISO timestamps, one minute apart."""

    def __init__(self, start=None):
        self.current = start or datetime(2024, 3, 1, 9, 0, 0)

    def __call__(self):
        value = self.current.isoformat(timespec='seconds')
        self.current += timedelta(minutes=1)
        return value


def make_store():
    """Empty catalog store on an in-memory table store."""
    return CatalogStore(InMemoryTableStore())
