"""
Main Orchestrator for Expense Tracker

Ties the repository to the view. Every user action follows the same
shape:

    form / button -> controller -> repository -> active backend
                  -> reload full list -> view re-renders list, total, chart

The controller owns the small amount of UI state that is not data: which
record is being edited. Interactive confirmation of deletes is checked
here, not in the repository.
"""

import datetime as dt
from decimal import Decimal
from typing import Optional, Union

import structlog
from pydantic import BaseModel, ConfigDict, ValidationError

from expense_tracker.config import Settings, get_settings
from expense_tracker.logging_setup import configure_logging
from expense_tracker.models.expense import ExpenseDraft, StorageMode
from expense_tracker.models.result import OperationResult, OperationType
from expense_tracker.queries import ExpenseSummary, build_summary, category_options
from expense_tracker.repository import ExpenseRepository
from expense_tracker.services.storage import (
    JsonFileKeyValueStore,
    LocalExpenseStorage,
    RemoteExpenseStorage,
)


logger = structlog.get_logger(__name__)

MODE_LABELS = {
    StorageMode.LOCAL: "Local storage",
    StorageMode.REMOTE: "Remote API (FastAPI + MongoDB)",
}


class ExpenseForm(BaseModel):
    """
    Raw values from the expense form.

    Nothing is validated until `to_draft()`; the form may hold whatever
    the user typed.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    amount: Union[Decimal, float, str, None] = None
    category: str = ""
    description: str = ""
    date: Union[dt.date, str, None] = None
    expense_id: Optional[str] = None

    def to_draft(self) -> ExpenseDraft:
        """Validate into a draft. Raises pydantic.ValidationError."""
        return ExpenseDraft.model_validate({
            "amount": self.amount,
            "category": self.category,
            "description": self.description,
            "date": self.date,
        })


class ExpenseController:
    """
    Handles the expense form, the list actions and the mode toggle.

    Each action runs to completion before the next; there is no
    cancellation and nothing is retried.
    """

    def __init__(
        self,
        repository: ExpenseRepository,
        categories: Optional[list[str]] = None,
    ):
        self._repository = repository
        self._categories = list(categories or [])
        self._editing: Optional[str] = None
        self._pending_delete: Optional[str] = None

    @property
    def repository(self) -> ExpenseRepository:
        return self._repository

    @property
    def mode(self) -> StorageMode:
        return self._repository.mode

    @property
    def mode_label(self) -> str:
        return MODE_LABELS[self._repository.mode]

    @property
    def editing_identifier(self) -> Optional[str]:
        """Identifier of the record loaded into the form, if any."""
        return self._editing

    @property
    def pending_delete(self) -> Optional[str]:
        """Identifier awaiting delete confirmation, if any."""
        return self._pending_delete

    def request_delete(self, identifier: str) -> None:
        """Mark a record for deletion; delete(confirmed=True) carries it out."""
        self._pending_delete = identifier

    def cancel_delete(self) -> None:
        self._pending_delete = None

    @property
    def categories(self) -> list[str]:
        """Choices for the form's category field."""
        options = category_options(self._repository.expenses, self._categories)
        return options[1:]

    def filter_options(self) -> list[str]:
        """Choices for the list's category filter, starting with "All"."""
        return category_options(self._repository.expenses, self._categories)

    async def refresh(self) -> OperationResult:
        """Reload the full list from the active backend."""
        return await self._repository.load()

    async def submit(self, form: ExpenseForm) -> OperationResult:
        """
        Save the form: update when it carries an expense id, else create.

        On success the list is reloaded and the edit state cleared. On
        failure the form stays as it is so the user can try again.
        """
        operation = OperationType.UPDATE if form.expense_id else OperationType.CREATE
        try:
            draft = form.to_draft()
        except ValidationError as e:
            logger.warning(
                "expense_form_invalid",
                errors=[err["loc"] for err in e.errors()],
            )
            return OperationResult.failed(
                operation=operation,
                mode=self._repository.mode,
                error_type="validation",
                error_message=_validation_message(e),
            )

        result = await self._repository.save(draft, form.expense_id or None)
        if result.success:
            self._editing = None
            await self._repository.load()
        return result

    def begin_edit(self, identifier: str) -> Optional[ExpenseForm]:
        """
        Prefill the form from a held record.

        Returns None (and leaves the edit state alone) when no held record
        has that identifier.
        """
        record = self._repository.find(identifier)
        if record is None:
            logger.warning("edit_target_missing", identifier=identifier)
            return None

        self._editing = record.identifier
        return ExpenseForm(
            amount=record.amount,
            category=record.category,
            description=record.description,
            date=record.date,
            expense_id=record.identifier,
        )

    def clear_form(self) -> ExpenseForm:
        """Drop any edit in progress and return an empty form."""
        self._editing = None
        return ExpenseForm()

    async def delete(
        self,
        identifier: str,
        confirmed: bool = False,
    ) -> Optional[OperationResult]:
        """
        Delete a record once the user has confirmed.

        Returns None without touching the backend if not confirmed.
        """
        if not confirmed:
            return None

        if self._pending_delete == identifier:
            self._pending_delete = None
        result = await self._repository.remove(identifier)
        if result.success:
            if self._editing == identifier:
                self._editing = None
            await self._repository.load()
        return result

    async def toggle_mode(self) -> OperationResult:
        """Switch backends and load the newly active collection."""
        self._editing = None
        self._pending_delete = None
        self._repository.toggle_mode()
        return await self._repository.load()

    def summary(self, category: Optional[str] = None) -> ExpenseSummary:
        """Filtered list, total and chart data for the current collection."""
        return build_summary(self._repository.expenses, category)


def _validation_message(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        field = ".".join(str(loc) for loc in err["loc"])
        parts.append(f"{field}: {err['msg']}")
    return "; ".join(parts)


def create_app_components(
    settings: Optional[Settings] = None,
) -> ExpenseController:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to build from; defaults to get_settings()

    Returns:
        A controller wired to a repository with both backends
    """
    settings = settings or get_settings()
    app_settings = settings.app
    configure_logging(app_settings.log_level, app_settings.log_json)

    local_settings = settings.local_store
    remote_settings = settings.remote_api

    local = LocalExpenseStorage(
        JsonFileKeyValueStore(local_settings.path),
        storage_key=local_settings.storage_key,
    )
    remote = RemoteExpenseStorage(
        base_url=remote_settings.base_url,
        timeout=remote_settings.request_timeout_seconds,
    )
    repository = ExpenseRepository(
        local=local,
        remote=remote,
        mode=app_settings.default_mode,
    )

    logger.info(
        "components_created",
        mode=repository.mode.value,
        local_path=local_settings.path,
        remote_url=remote_settings.base_url,
    )
    return ExpenseController(repository, categories=app_settings.categories_list)
