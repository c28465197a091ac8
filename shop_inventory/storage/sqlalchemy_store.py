# shop_inventory/storage/sqlalchemy_store.py
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import create_engine, Column, Integer, String, DateTime, JSON
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from shop_inventory.config import config
from shop_inventory.exceptions import StorageConflictError, StorageError
from shop_inventory.logging_setup import get_logger
from shop_inventory.storage.interface import TableStore, TableWrite, check_version, ensure_serializable

logger = get_logger(__name__)

Base = declarative_base()


class KeyValueTable(Base):
    """One row per logical table; ``payload`` is the table's JSON array."""
    __tablename__ = 'kv_tables'

    name = Column(String(64), primary_key=True)
    payload = Column(JSON, nullable=False, default=list)
    version = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    def __repr__(self):
        return f"<KeyValueTable(name='{self.name}', version={self.version})>"


def create_store_engine(url: Optional[str] = None, echo: Optional[bool] = None) -> Engine:
    """Create an engine for the table store.

    Args:
        url: Database URL; defaults to the [STORAGE] url setting
        echo: Log SQL statements; defaults to the [STORAGE] echo setting

    Returns:
        SQLAlchemy engine
    """
    storage = config.storage_config
    url = url or storage['url']
    echo = storage['echo'] if echo is None else echo

    if url in ('sqlite://', 'sqlite:///:memory:'):
        # One shared connection so every session sees the same in-memory database
        return create_engine(
            url,
            echo=echo,
            connect_args={'check_same_thread': False},
            poolclass=StaticPool
        )
    return create_engine(url, echo=echo)


class SQLAlchemyTableStore(TableStore):
    """Table store backed by a single SQL table of JSON payloads."""

    def __init__(self, url_or_engine: Union[str, Engine, None] = None, create_tables: bool = True):
        """Initialize the store.

        Args:
            url_or_engine: Database URL or an existing engine
            create_tables: Create the kv_tables table if it does not exist
        """
        if isinstance(url_or_engine, Engine):
            self._engine = url_or_engine
        else:
            self._engine = create_store_engine(url_or_engine)

        self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)

        if create_tables:
            self.create_all_tables()

    @property
    def engine(self) -> Engine:
        return self._engine

    def create_all_tables(self):
        """Create the kv_tables table."""
        try:
            Base.metadata.create_all(self._engine)
        except SQLAlchemyError as e:
            raise StorageError(f"Could not create storage tables: {str(e)}")

    def drop_all_tables(self):
        """Drop the kv_tables table."""
        Base.metadata.drop_all(self._engine)

    @contextmanager
    def session_scope(self):
        """Provide a transactional scope around a series of operations."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except IntegrityError as e:
            session.rollback()
            raise StorageConflictError(f"Concurrent write detected: {str(e.orig)}")
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageError(f"Storage operation failed: {str(e)}")
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def get_table(self, name: str) -> List[Dict[str, Any]]:
        return self.read_table(name)[0]

    def get_version(self, name: str) -> int:
        with self.session_scope() as session:
            record = session.get(KeyValueTable, name)
            return record.version if record else 0

    def read_table(self, name: str):
        with self.session_scope() as session:
            record = session.get(KeyValueTable, name)
            if record is None:
                return [], 0
            rows = record.payload if isinstance(record.payload, list) else []
            return list(rows), record.version

    def set_tables(self, writes: Dict[str, TableWrite]) -> Dict[str, int]:
        for name, (rows, _) in writes.items():
            ensure_serializable(name, rows)

        versions = {}
        with self.session_scope() as session:
            # Lock in name order so concurrent multi-table writers cannot deadlock
            locked = (
                session.query(KeyValueTable)
                .filter(KeyValueTable.name.in_(sorted(writes)))
                .order_by(KeyValueTable.name)
                .with_for_update()
                .all()
            )
            records = {record.name: record for record in locked}

            for name, (_, expected_version) in writes.items():
                record = records.get(name)
                check_version(name, record.version if record else 0, expected_version)

            for name, (rows, _) in writes.items():
                record = records.get(name)
                if record is None:
                    record = KeyValueTable(name=name, payload=list(rows), version=1)
                    session.add(record)
                else:
                    record.payload = list(rows)
                    record.version = record.version + 1
                versions[name] = record.version

        for name, version in versions.items():
            logger.debug(f"Wrote table {name}: {len(writes[name][0])} rows, version {version}")
        return versions

    def delete_table(self, name: str) -> None:
        with self.session_scope() as session:
            record = session.get(KeyValueTable, name)
            if record is not None:
                record.payload = []
                record.version = record.version + 1
