"""
Operation Result Model

Every repository operation returns an OperationResult instead of letting
backend failures escape as exceptions. The controller decides what to
show the user; nothing is retried.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from expense_tracker.models.expense import ExpenseRecord, StorageMode


class OperationType(str, Enum):
    """Repository operations."""
    LOAD = "load"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class OperationResult(BaseModel):
    """
    Outcome of a single repository operation.

    `records` is filled by LOAD, `record` by CREATE/UPDATE. An UPDATE of an
    identifier the backend does not know succeeds with `record=None`.
    """

    operation: OperationType
    mode: StorageMode
    executed_at: datetime = Field(default_factory=datetime.now)

    success: bool
    error_type: Optional[str] = Field(
        default=None,
        description="Failure class, e.g. 'connection', 'remote_service', 'validation'"
    )
    error_message: Optional[str] = None

    record: Optional[ExpenseRecord] = None
    records: list[ExpenseRecord] = Field(default_factory=list)

    @classmethod
    def ok(
        cls,
        operation: OperationType,
        mode: StorageMode,
        record: Optional[ExpenseRecord] = None,
        records: Optional[list[ExpenseRecord]] = None,
    ) -> "OperationResult":
        return cls(
            operation=operation,
            mode=mode,
            success=True,
            record=record,
            records=records or [],
        )

    @classmethod
    def failed(
        cls,
        operation: OperationType,
        mode: StorageMode,
        error_type: str,
        error_message: str,
    ) -> "OperationResult":
        return cls(
            operation=operation,
            mode=mode,
            success=False,
            error_type=error_type,
            error_message=error_message,
        )
