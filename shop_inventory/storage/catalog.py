# shop_inventory/storage/catalog.py
from typing import Any, Callable, Dict, List, Optional, Tuple, Type, TypeVar

from shop_inventory.models import (
    Product, PrintingPlate, PRODUCTS_TABLE, PLATES_TABLE, ALL_TABLES
)
from shop_inventory.exceptions import StorageError
from shop_inventory.storage.interface import TableStore
from shop_inventory.utils.records import next_id

RecordT = TypeVar('RecordT')


class CatalogStore:
    """Typed access to the shop's tables on top of a TableStore.

    Reads return records in stored order; writes replace the whole table.
    """

    def __init__(self, table_store: TableStore):
        """Initialize the catalog store.

        Args:
            table_store: Backing key-value table store
        """
        self.tables = table_store

    def load_records(self, table: str, record_cls: Type[RecordT]) -> List[RecordT]:
        """Load all rows of a table as records.

        Raises:
            StorageError: if a row cannot be converted
        """
        return self.load_records_versioned(table, record_cls)[0]

    def load_records_versioned(self, table: str, record_cls: Type[RecordT]) -> Tuple[List[RecordT], int]:
        rows, version = self.tables.read_table(table)
        try:
            records = [record_cls.from_dict(row) for row in rows]
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(
                f"Malformed row in table '{table}': {str(e)}",
                code='MALFORMED',
                details={'table': table}
            )
        return records, version

    def save_records(self, table: str, records: List[Any], expected_version: Optional[int] = None) -> int:
        return self.tables.set_table(table, [record.to_dict() for record in records], expected_version)

    def save_tables(self, writes: Dict[str, Tuple[List[Any], Optional[int]]]) -> Dict[str, int]:
        """Save several tables of records together.

        Args:
            writes: Table name to ``(records, expected_version)``

        Returns:
            New version of each table

        Raises:
            StorageConflictError: if any table changed since it was read;
                none of the tables is written
        """
        return self.tables.set_tables({
            table: ([record.to_dict() for record in records], expected_version)
            for table, (records, expected_version) in writes.items()
        })

    def next_id(self, table: str) -> int:
        return next_id(self.tables.get_table(table))

    def find(self, table: str, record_cls: Type[RecordT], record_id: int) -> Optional[RecordT]:
        for record in self.load_records(table, record_cls):
            if record.id == record_id:
                return record
        return None

    def update_record(
        self,
        table: str,
        record_cls: Type[RecordT],
        record_id: int,
        mutate: Callable[[RecordT], bool]
    ) -> bool:
        """Load a table, mutate one record and write the table back.

        ``mutate`` returns False to abort without writing.

        Returns:
            True if the record was found and written
        """
        records, version = self.load_records_versioned(table, record_cls)
        for record in records:
            if record.id == record_id:
                if mutate(record) is False:
                    return False
                self.save_records(table, records, expected_version=version)
                return True
        return False

    # Products

    def load_catalog(self) -> List[Product]:
        return self.load_records(PRODUCTS_TABLE, Product)

    def load_catalog_versioned(self) -> Tuple[List[Product], int]:
        return self.load_records_versioned(PRODUCTS_TABLE, Product)

    def save_catalog(self, products: List[Product], expected_version: Optional[int] = None) -> int:
        return self.save_records(PRODUCTS_TABLE, products, expected_version)

    # Printing plates

    def load_plates(self) -> List[PrintingPlate]:
        return self.load_records(PLATES_TABLE, PrintingPlate)

    def load_plates_versioned(self) -> Tuple[List[PrintingPlate], int]:
        return self.load_records_versioned(PLATES_TABLE, PrintingPlate)

    def save_plates(self, plates: List[PrintingPlate], expected_version: Optional[int] = None) -> int:
        return self.save_records(PLATES_TABLE, plates, expected_version)

    def load_plate(self, plate_id: int) -> Optional[PrintingPlate]:
        return self.find(PLATES_TABLE, PrintingPlate, plate_id)

    def save_plate(self, plate: PrintingPlate) -> int:
        """Insert or replace one plate, rewriting the plates table."""
        plates, version = self.load_plates_versioned()
        for index, existing in enumerate(plates):
            if existing.id == plate.id:
                plates[index] = plate
                break
        else:
            plates.append(plate)
        return self.save_plates(plates, expected_version=version)

    # Whole database

    def table_counts(self) -> Dict[str, int]:
        return {table: len(self.tables.get_table(table)) for table in ALL_TABLES}

    def clear_all_tables(self):
        for table in ALL_TABLES:
            self.tables.delete_table(table)
