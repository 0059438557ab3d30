from message_store.config import Settings, TableConfig, get_settings
from message_store.errors import (
    MessageDecodeError,
    StorageDeleteError,
    StorageError,
    StorageReadError,
    StorageWriteError,
)
from message_store.schemas import IdPolicy, Message, decode_record, decode_records
from message_store.store import InMemoryStoreClient, SqlStoreClient, StoreClient
from message_store.table import MessagesTable

__all__ = [
    "IdPolicy",
    "InMemoryStoreClient",
    "Message",
    "MessageDecodeError",
    "MessagesTable",
    "Settings",
    "SqlStoreClient",
    "StorageDeleteError",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    "StoreClient",
    "TableConfig",
    "decode_record",
    "decode_records",
    "get_settings",
]
