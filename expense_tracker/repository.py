"""
Expense Repository

The one object the rest of the application talks to for expense data.

It holds both backends and an explicit StorageMode, dispatches each
operation to the active backend, and keeps the last loaded collection for
the view to filter, sum and chart.

GUARANTEES:
- Writes go to the active backend only; nothing is mirrored or migrated
- Switching modes never touches backend data, but it does drop the held
  collection, so records from the previous backend are never shown under
  the new one
- Backend failures come back as failed OperationResults, and the held
  collection is left as it was
"""

from typing import Optional

import structlog

from expense_tracker.models.expense import ExpenseDraft, ExpenseRecord, StorageMode
from expense_tracker.models.result import OperationResult, OperationType
from expense_tracker.services.storage import ExpenseStorageInterface, StorageError


logger = structlog.get_logger(__name__)


class ExpenseRepository:
    """
    Dual-backend expense repository.

    Construct once per session:

        repo = ExpenseRepository(local=LocalExpenseStorage(store),
                                 remote=RemoteExpenseStorage(url))
        await repo.load()
    """

    def __init__(
        self,
        local: ExpenseStorageInterface,
        remote: ExpenseStorageInterface,
        mode: StorageMode = StorageMode.LOCAL,
    ):
        self._backends = {
            StorageMode.LOCAL: local,
            StorageMode.REMOTE: remote,
        }
        self._mode = StorageMode(mode)
        self._expenses: list[ExpenseRecord] = []

    @property
    def mode(self) -> StorageMode:
        return self._mode

    @property
    def backend(self) -> ExpenseStorageInterface:
        """The backend every operation is currently dispatched to."""
        return self._backends[self._mode]

    @property
    def expenses(self) -> tuple[ExpenseRecord, ...]:
        """The collection returned by the last successful load."""
        return tuple(self._expenses)

    def find(self, identifier: str) -> Optional[ExpenseRecord]:
        """Look up a held record by identifier, whichever backend made it."""
        for record in self._expenses:
            if record.identifier == identifier:
                return record
        return None

    def set_mode(self, mode: StorageMode) -> None:
        """
        Switch the active backend.

        Neither backend's data is copied, merged or cleared. The held
        collection is emptied until the next load().
        """
        mode = StorageMode(mode)
        if mode == self._mode:
            return
        previous = self._mode
        self._mode = mode
        self._expenses = []
        logger.info("mode_switched", previous=previous.value, mode=mode.value)

    def toggle_mode(self) -> StorageMode:
        """Flip between local and remote. Returns the new mode."""
        self.set_mode(
            StorageMode.REMOTE if self._mode == StorageMode.LOCAL else StorageMode.LOCAL
        )
        return self._mode

    def _failure(self, operation: OperationType, error: StorageError) -> OperationResult:
        logger.error(
            "expense_operation_failed",
            operation=operation.value,
            mode=self._mode.value,
            error_type=error.error_type,
            error=str(error),
        )
        return OperationResult.failed(
            operation=operation,
            mode=self._mode,
            error_type=error.error_type,
            error_message=str(error),
        )

    async def load(self) -> OperationResult:
        """Fetch the full collection from the active backend."""
        mode = self._mode
        try:
            records = await self._backends[mode].list_expenses()
        except StorageError as e:
            return self._failure(OperationType.LOAD, e)

        # A mode switch while the request was in flight makes this stale
        if mode != self._mode:
            logger.warning("stale_load_discarded", mode=mode.value, active=self._mode.value)
            return OperationResult.failed(
                operation=OperationType.LOAD,
                mode=mode,
                error_type="stale",
                error_message="Mode changed while loading",
            )

        self._expenses = list(records)
        logger.info("expenses_loaded", mode=mode.value, count=len(records))
        return OperationResult.ok(OperationType.LOAD, mode, records=list(records))

    async def save(
        self,
        draft: ExpenseDraft,
        existing_identifier: Optional[str] = None,
    ) -> OperationResult:
        """
        Create a record, or update one when `existing_identifier` is given.

        Updating an unknown identifier is a no-op that still succeeds,
        with `record=None`.
        """
        if existing_identifier:
            return await self._update(existing_identifier, draft)
        return await self._create(draft)

    async def _create(self, draft: ExpenseDraft) -> OperationResult:
        try:
            record = await self.backend.create_expense(draft)
        except StorageError as e:
            return self._failure(OperationType.CREATE, e)

        logger.info(
            "expense_created",
            mode=self._mode.value,
            identifier=record.identifier,
            category=record.category,
        )
        return OperationResult.ok(OperationType.CREATE, self._mode, record=record)

    async def _update(self, identifier: str, draft: ExpenseDraft) -> OperationResult:
        try:
            record = await self.backend.update_expense(identifier, draft)
        except StorageError as e:
            return self._failure(OperationType.UPDATE, e)

        if record is None:
            logger.warning("expense_not_found", mode=self._mode.value, identifier=identifier)
        else:
            logger.info("expense_updated", mode=self._mode.value, identifier=identifier)
        return OperationResult.ok(OperationType.UPDATE, self._mode, record=record)

    async def remove(self, identifier: str) -> OperationResult:
        """
        Delete a record from the active backend.

        The backend is called even if the identifier is not held locally.
        """
        try:
            removed = await self.backend.delete_expense(identifier)
        except StorageError as e:
            return self._failure(OperationType.DELETE, e)

        if removed:
            logger.info("expense_deleted", mode=self._mode.value, identifier=identifier)
        else:
            logger.warning("expense_not_found", mode=self._mode.value, identifier=identifier)
        return OperationResult.ok(OperationType.DELETE, self._mode)
