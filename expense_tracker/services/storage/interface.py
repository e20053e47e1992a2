"""
Abstract Storage Interface

Both backends (the local key-value slot and the remote HTTP service)
implement this interface, so the repository can switch between them
without knowing which one it is talking to.

The interface is intentionally small: the whole collection is read at
once and every write touches a single record.
"""

from abc import ABC, abstractmethod
from typing import Optional

from expense_tracker.models.expense import ExpenseDraft, ExpenseRecord


class ExpenseStorageInterface(ABC):
    """
    Abstract interface for expense storage operations.

    Implementations raise StorageError (or a subclass) on failure.
    Unknown identifiers are not errors: update returns None and
    delete returns False.
    """

    @abstractmethod
    async def list_expenses(self) -> list[ExpenseRecord]:
        """
        Return the full collection, in stored order.

        Returns:
            Every record the backend holds (no filtering, no paging)

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def create_expense(self, draft: ExpenseDraft) -> ExpenseRecord:
        """
        Persist a new expense.

        Args:
            draft: The user-entered fields

        Returns:
            The stored record, carrying the backend's identifier

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def update_expense(
        self,
        identifier: str,
        draft: ExpenseDraft,
    ) -> Optional[ExpenseRecord]:
        """
        Replace the fields of an existing expense.

        Args:
            identifier: The record's identifier in this backend
            draft: The new field values

        Returns:
            The updated record, or None if no record has that identifier
        """
        pass

    @abstractmethod
    async def delete_expense(self, identifier: str) -> bool:
        """
        Delete an expense by identifier.

        Returns:
            True if a record was removed
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    error_type = "storage"


class StorageConnectionError(StorageError):
    """Could not reach the storage backend."""
    error_type = "connection"


class RemoteServiceError(StorageError):
    """The remote service answered with a non-success status."""
    error_type = "remote_service"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MalformedRecordError(StorageError):
    """A stored or returned record could not be parsed."""
    error_type = "malformed_record"
