# shop_inventory/storage/interface.py
import copy
import json
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from shop_inventory.exceptions import StorageConflictError, StorageError

TableWrite = Tuple[List[Dict[str, Any]], Optional[int]]


class TableStore(ABC):
    """Whole-table key-value store: each table is one JSON array of rows.

    Every write replaces the full table and bumps its version. Passing an
    expected version turns the write into a compare-and-swap. Writes that
    span several tables go through ``set_tables`` so they land together.
    """

    @abstractmethod
    def get_table(self, name: str) -> List[Dict[str, Any]]:
        """Read all rows of a table (empty list if it does not exist)."""
        pass

    @abstractmethod
    def get_version(self, name: str) -> int:
        """Current version of a table (0 if it does not exist)."""
        pass

    @abstractmethod
    def set_tables(self, writes: Dict[str, TableWrite]) -> Dict[str, int]:
        """Replace several tables in one all-or-nothing write.

        Args:
            writes: Table name to ``(rows, expected_version)``. An expected
                version of None skips the check for that table.

        Returns:
            New version of each written table

        Raises:
            StorageConflictError: if any table is not at its expected
                version; no table is written in that case
        """
        pass

    def set_table(self, name: str, rows: List[Dict[str, Any]], expected_version: Optional[int] = None) -> int:
        """Replace all rows of a table and return the new version."""
        return self.set_tables({name: (rows, expected_version)})[name]

    @abstractmethod
    def delete_table(self, name: str) -> None:
        """Drop all rows of a table. The version keeps counting up."""
        pass

    def read_table(self, name: str):
        """Read a table together with the version it was read at."""
        return self.get_table(name), self.get_version(name)


def ensure_serializable(name: str, rows: List[Dict[str, Any]]) -> None:
    """Reject rows that cannot be stored as a JSON array."""
    if not isinstance(rows, list):
        raise StorageError(f"Table '{name}' must be a list of rows", code='PAYLOAD')
    try:
        json.dumps(rows)
    except (TypeError, ValueError) as e:
        raise StorageError(f"Table '{name}' is not JSON serializable: {str(e)}", code='PAYLOAD')


def check_version(name: str, current: int, expected_version: Optional[int]) -> None:
    """Raise StorageConflictError if a table moved past the version it was read at."""
    if expected_version is not None and expected_version != current:
        raise StorageConflictError(
            f"Table '{name}' is at version {current}, expected {expected_version}",
            details={'table': name, 'current': current, 'expected': expected_version}
        )


class InMemoryTableStore(TableStore):
    """Process-local table store, mainly for tests and dry runs."""

    def __init__(self, tables: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self._tables: Dict[str, List[Dict[str, Any]]] = {}
        self._versions: Dict[str, int] = {}
        for name, rows in (tables or {}).items():
            self.set_table(name, rows)

    def get_table(self, name: str) -> List[Dict[str, Any]]:
        return copy.deepcopy(self._tables.get(name, []))

    def get_version(self, name: str) -> int:
        return self._versions.get(name, 0)

    def set_tables(self, writes: Dict[str, TableWrite]) -> Dict[str, int]:
        # Validate every table before touching any of them
        for name, (rows, expected_version) in writes.items():
            ensure_serializable(name, rows)
            check_version(name, self.get_version(name), expected_version)

        versions = {}
        for name, (rows, _) in writes.items():
            self._tables[name] = copy.deepcopy(rows)
            self._versions[name] = versions[name] = self.get_version(name) + 1
        return versions

    def delete_table(self, name: str) -> None:
        if name in self._tables:
            del self._tables[name]
            self._versions[name] = self.get_version(name) + 1
