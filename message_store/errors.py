"""
Error taxonomy for the messages table.

Storage errors tag which operation failed and carry the store client's
original exception unchanged as ``cause`` (also chained as ``__cause__``).
"""

from typing import Any, Mapping, Optional


class StorageError(Exception):
    """Base class for failures reported by the underlying store client."""

    operation = "unknown"

    def __init__(self, table_name: str, cause: Optional[BaseException] = None):
        self.table_name = table_name
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"{self.operation} failed on table '{table_name}'{detail}")


class StorageWriteError(StorageError):
    operation = "put"


class StorageReadError(StorageError):
    operation = "scan"


class StorageDeleteError(StorageError):
    operation = "delete"


class MessageDecodeError(ValueError):
    """A raw store record could not be decoded into a Message."""

    def __init__(self, record: Any, reason: str):
        self.record = record
        self.reason = reason
        record_id = record.get("id") if isinstance(record, Mapping) else None
        super().__init__(f"Cannot decode record id={record_id!r}: {reason}")
