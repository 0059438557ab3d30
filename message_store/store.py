"""
Store clients for named key-value tables.

This module provides:
- StoreClient: the narrow interface MessagesTable talks to
- InMemoryStoreClient: process-local fake for tests and local runs
- SqlStoreClient: SQLAlchemy-backed implementation

Clients never translate errors; failures propagate to the caller as raised.
"""

import copy
import logging
import threading
from typing import Any, Dict, List, Protocol

from sqlalchemy import create_engine, text, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from message_store.models import Base, StoredItem

logger = logging.getLogger(__name__)

Item = Dict[str, Any]


def key_of(record: Item, key_field: str) -> str:
    """
    Extract the key value from an item or key mapping.

    Raises:
        KeyError: the key field is missing
        TypeError: the key is not a string
    """
    key = record[key_field]
    if not isinstance(key, str):
        raise TypeError(f"{key_field} must be a string, got {type(key).__name__}")
    return key


class StoreClient(Protocol):
    """Protocol describing put/scan/delete against named tables."""

    def put(self, table_name: str, item: Item) -> None:
        """Write ``item``, replacing any record with the same key."""
        ...

    def scan(self, table_name: str) -> List[Item]:
        """Return every record in ``table_name``."""
        ...

    def delete(self, table_name: str, key: Item) -> None:
        """Remove the record matching ``key`` if it exists."""
        ...


class InMemoryStoreClient:
    """Thread-safe in-memory store."""

    def __init__(self, key_field: str = "id") -> None:
        self.key_field = key_field
        self._tables: Dict[str, Dict[str, Item]] = {}
        self._lock = threading.Lock()

    def put(self, table_name: str, item: Item) -> None:
        key = key_of(item, self.key_field)
        with self._lock:
            self._tables.setdefault(table_name, {})[key] = copy.deepcopy(dict(item))

    def scan(self, table_name: str) -> List[Item]:
        """Return copies so callers cannot mutate stored records."""
        with self._lock:
            return [copy.deepcopy(item) for item in self._tables.get(table_name, {}).values()]

    def delete(self, table_name: str, key: Item) -> None:
        item_id = key_of(key, self.key_field)
        with self._lock:
            self._tables.get(table_name, {}).pop(item_id, None)


class SqlStoreClient:
    """
    Key-value tables stored in a SQL database.

    All logical tables live in the ``store_items`` table, see
    message_store.models.StoredItem.
    """

    def __init__(self, database_url: str, key_field: str = "id", echo: bool = False) -> None:
        connect_args = {}
        if database_url.startswith("sqlite"):
            # SQLite connections are shared across threads by the session factory
            connect_args["check_same_thread"] = False
        self.key_field = key_field
        self.engine = create_engine(database_url, connect_args=connect_args, echo=echo)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    @classmethod
    def from_settings(cls, settings=None) -> "SqlStoreClient":
        from message_store.config import get_settings

        settings = settings or get_settings()
        return cls(settings.DATABASE_URL)

    def init_db(self) -> None:
        """Create the store_items table if it does not exist."""
        logger.debug(f"Initializing store schema on {self.engine.url}")
        Base.metadata.create_all(bind=self.engine)
        logger.info("Store schema initialized")

    def check_health(self) -> bool:
        """
        Check that the database is reachable.

        Returns:
            True if a trivial query succeeds, False otherwise.
        """
        try:
            with self.SessionLocal() as db:
                db.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"Store health check failed: {e}")
            return False

    def _upsert_statement(self, values: Item):
        """
        Single-statement INSERT ... ON CONFLICT DO UPDATE for dialects that
        support it, None otherwise.
        """
        dialect = self.engine.dialect.name
        if dialect == "sqlite":
            from sqlalchemy.dialects.sqlite import insert
        elif dialect == "postgresql":
            from sqlalchemy.dialects.postgresql import insert
        else:
            return None
        stmt = insert(StoredItem).values(**values)
        return stmt.on_conflict_do_update(
            index_elements=[StoredItem.table_name, StoredItem.item_id],
            set_={"payload": stmt.excluded.payload},
        )

    def put(self, table_name: str, item: Item) -> None:
        item_id = key_of(item, self.key_field)
        values = {"table_name": table_name, "item_id": item_id, "payload": dict(item)}
        logger.debug(f"put table={table_name} id={item_id}")

        stmt = self._upsert_statement(values)
        with self.SessionLocal() as db:
            try:
                if stmt is not None:
                    db.execute(stmt)
                    db.commit()
                    return
                db.add(StoredItem(**values))
                db.commit()
            except IntegrityError:
                # Row already exists: overwrite it
                db.rollback()
                logger.debug(f"put table={table_name} id={item_id} exists, updating")
                try:
                    db.execute(
                        update(StoredItem)
                        .where(StoredItem.table_name == table_name, StoredItem.item_id == item_id)
                        .values(payload=values["payload"])
                    )
                    db.commit()
                except Exception:
                    db.rollback()
                    raise
            except Exception:
                db.rollback()
                raise

    def scan(self, table_name: str) -> List[Item]:
        logger.debug(f"scan table={table_name}")
        with self.SessionLocal() as db:
            rows = db.query(StoredItem).filter(StoredItem.table_name == table_name).all()
            return [dict(row.payload) for row in rows]

    def delete(self, table_name: str, key: Item) -> None:
        item_id = key_of(key, self.key_field)
        logger.debug(f"delete table={table_name} id={item_id}")
        with self.SessionLocal() as db:
            try:
                db.query(StoredItem).filter(
                    StoredItem.table_name == table_name,
                    StoredItem.item_id == item_id,
                ).delete()
                db.commit()
            except Exception:
                db.rollback()
                raise

    def dispose(self) -> None:
        self.engine.dispose()
