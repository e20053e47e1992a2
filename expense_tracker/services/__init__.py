"""Services package."""

from expense_tracker.services.storage import (
    ExpenseStorageInterface,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
    LocalExpenseStorage,
    MalformedRecordError,
    RemoteExpenseStorage,
    RemoteServiceError,
    StorageConnectionError,
    StorageError,
)

__all__ = [
    "ExpenseStorageInterface",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "LocalExpenseStorage",
    "MalformedRecordError",
    "RemoteExpenseStorage",
    "RemoteServiceError",
    "StorageConnectionError",
    "StorageError",
]
