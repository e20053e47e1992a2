"""
Data Models Package

Pydantic models for expenses and for the results of repository operations.
"""

from expense_tracker.models.expense import (
    DESCRIPTION_PLACEHOLDER,
    ExpenseDraft,
    ExpenseRecord,
    LocalRecord,
    RemoteRecord,
    StorageMode,
    parse_record,
    resolve_identifier,
)
from expense_tracker.models.result import OperationResult, OperationType

__all__ = [
    # Expense models
    "DESCRIPTION_PLACEHOLDER",
    "ExpenseDraft",
    "ExpenseRecord",
    "LocalRecord",
    "RemoteRecord",
    "StorageMode",
    "parse_record",
    "resolve_identifier",
    # Results
    "OperationResult",
    "OperationType",
]
