"""
Messages table: adapts add / get_all / delete onto a StoreClient.

Each operation issues exactly one store call. Store failures are re-raised
as StorageWriteError, StorageReadError or StorageDeleteError, chained to the
original exception. No retries, no caching.
"""

import logging
import time
from typing import Any, Callable, List, Mapping, Optional, Tuple, Type, Union

from message_store.config import TableConfig
from message_store.errors import (
    MessageDecodeError,
    StorageDeleteError,
    StorageError,
    StorageReadError,
    StorageWriteError,
)
from message_store.logging_utils import operation_context
from message_store.metrics import record_store_operation
from message_store.schemas import Message, decode_records
from message_store.store import Item, StoreClient

logger = logging.getLogger(__name__)


class MessagesTable:
    """
    Thin adapter between Message records and a named store table.

    The table name comes from ``config`` and is fixed for the adapter's
    lifetime. When no config is given it is resolved once from settings.
    """

    def __init__(self, store: StoreClient, config: Optional[TableConfig] = None) -> None:
        self.store = store
        self.config = config or TableConfig.from_settings()

    @property
    def table_name(self) -> str:
        return self.config.table_name

    def _call(self, operation: str, error_cls: Type[StorageError], func: Callable[..., Any], *args: Any) -> Any:
        """Run one store call, recording metrics and tagging failures."""
        start_time = time.perf_counter()
        try:
            result = func(self.table_name, *args)
        except Exception as e:
            record_store_operation(operation, self.table_name, "error", time.perf_counter() - start_time)
            logger.error(f"Store {operation} failed on table {self.table_name}: {e}")
            raise error_cls(self.table_name, e) from e
        record_store_operation(operation, self.table_name, "success", time.perf_counter() - start_time)
        return result

    def add(self, message: Union[Message, Mapping[str, Any]]) -> None:
        """
        Write a message, overwriting any record with the same id.

        Args:
            message: Message or structurally equivalent mapping with a non-empty 'id'

        Raises:
            ValueError: the record has no non-empty string id
            StorageWriteError: the store rejected the write
        """
        item = message.to_item() if isinstance(message, Message) else dict(message)
        if not isinstance(item.get("id"), str) or not item["id"]:
            raise ValueError("message id must be a non-empty string")

        with operation_context():
            logger.info(f"Adding message: id={item['id']}")
            self._call("put", StorageWriteError, self.store.put, item)
            logger.info(f"Message added: id={item['id']}")

    def get_all(self) -> List[Item]:
        """
        Return every record in the table, as the store returned them.

        Order is whatever the store yields. Paginated or truncated scan
        responses are not followed.

        Raises:
            StorageReadError: the scan failed
        """
        with operation_context():
            logger.info(f"Scanning table {self.table_name}")
            items = self._call("scan", StorageReadError, self.store.scan)
            logger.info(f"Scan returned {len(items)} records")
            return items

    def get_all_messages(self) -> Tuple[List[Message], List[MessageDecodeError]]:
        """
        Scan the table and decode each record into a Message.

        Returns:
            Tuple of (decoded messages, decode errors for records that did not fit)
        """
        messages, errors = decode_records(self.get_all())
        if errors:
            logger.warning(f"{len(errors)} records in {self.table_name} could not be decoded")
        return messages, errors

    def delete(self, message_id: str) -> None:
        """
        Delete the record with ``message_id``.

        Deleting an id that does not exist is not an error.

        Raises:
            ValueError: message_id is empty
            StorageDeleteError: the store rejected the delete
        """
        if not isinstance(message_id, str) or not message_id:
            raise ValueError("message id must be a non-empty string")

        with operation_context():
            logger.info(f"Deleting message: id={message_id}")
            self._call("delete", StorageDeleteError, self.store.delete, {"id": message_id})
            logger.info(f"Message deleted: id={message_id}")
