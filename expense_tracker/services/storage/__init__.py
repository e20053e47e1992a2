"""
Storage Services Package

Provides the abstract expense storage interface and its two
implementations: a local key-value slot and a remote HTTP service.
"""

from expense_tracker.services.storage.interface import (
    ExpenseStorageInterface,
    MalformedRecordError,
    RemoteServiceError,
    StorageConnectionError,
    StorageError,
)
from expense_tracker.services.storage.key_value import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
)
from expense_tracker.services.storage.local_storage import (
    DEFAULT_STORAGE_KEY,
    LocalExpenseStorage,
)
from expense_tracker.services.storage.remote_api import (
    DEFAULT_BASE_URL,
    RemoteExpenseStorage,
)

__all__ = [
    # Interface
    "ExpenseStorageInterface",
    # Exceptions
    "MalformedRecordError",
    "RemoteServiceError",
    "StorageConnectionError",
    "StorageError",
    # Key-value slots
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    # Backends
    "DEFAULT_BASE_URL",
    "DEFAULT_STORAGE_KEY",
    "LocalExpenseStorage",
    "RemoteExpenseStorage",
]
