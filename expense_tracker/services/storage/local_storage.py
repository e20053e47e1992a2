"""
Local Storage Implementation

The whole collection lives as one JSON array under a fixed key in a
key-value slot. Every write re-serializes the entire collection; there are
no partial writes.

Records look like:
    {"id": "1718000000000", "amount": 50.0, "category": "Food",
     "description": "—", "date": "2024-06-10"}

TRADEOFFS:
- Every operation is O(collection size)
- A missing or corrupt blob reads as an empty collection, and the next
  write replaces it
"""

import json
import time
from typing import Callable, Optional

import structlog
from pydantic import ValidationError

from expense_tracker.models.expense import ExpenseDraft, LocalRecord
from expense_tracker.services.storage.interface import ExpenseStorageInterface
from expense_tracker.services.storage.key_value import KeyValueStore


DEFAULT_STORAGE_KEY = "expenses"

logger = structlog.get_logger(__name__)


def _now_millis() -> int:
    return int(time.time() * 1000)


class LocalExpenseStorage(ExpenseStorageInterface):
    """
    Expense storage backed by a single key-value slot.

    Identifiers are the creation time in milliseconds. If the clock has not
    moved past the largest stored id, the next id is that id + 1, so two
    submissions within the same millisecond still get distinct ids.
    """

    def __init__(
        self,
        store: KeyValueStore,
        storage_key: str = DEFAULT_STORAGE_KEY,
        clock: Optional[Callable[[], int]] = None,
    ):
        self._store = store
        self._key = storage_key
        self._clock = clock or _now_millis

    @property
    def storage_key(self) -> str:
        return self._key

    def _read(self) -> list[LocalRecord]:
        """Parse the slot. Absent or malformed blobs yield an empty list."""
        blob = self._store.get_item(self._key)
        if not blob:
            return []

        try:
            data = json.loads(blob)
        except json.JSONDecodeError as e:
            logger.warning("local_blob_malformed", key=self._key, error=str(e))
            return []

        if not isinstance(data, list):
            logger.warning("local_blob_malformed", key=self._key, error="not an array")
            return []

        records = []
        for index, item in enumerate(data):
            if not isinstance(item, dict):
                logger.warning("local_record_skipped", key=self._key, index=index)
                continue
            try:
                records.append(LocalRecord.model_validate(item))
            except ValidationError as e:
                logger.warning(
                    "local_record_skipped",
                    key=self._key,
                    index=index,
                    error=str(e),
                )
        return records

    def _write(self, records: list[LocalRecord]) -> None:
        blob = json.dumps(
            [record.to_storage() for record in records],
            ensure_ascii=False,
        )
        self._store.set_item(self._key, blob)

    def _next_identifier(self, records: list[LocalRecord]) -> str:
        candidate = self._clock()
        numeric_ids = [int(r.id) for r in records if r.id.isdecimal()]
        if numeric_ids and candidate <= max(numeric_ids):
            candidate = max(numeric_ids) + 1
        return str(candidate)

    async def list_expenses(self) -> list[LocalRecord]:
        """Read the full collection from the slot."""
        return self._read()

    async def create_expense(self, draft: ExpenseDraft) -> LocalRecord:
        """Append a new record and rewrite the slot."""
        records = self._read()
        record = LocalRecord(
            id=self._next_identifier(records),
            **draft.to_draft().model_dump(),
        )
        records.append(record)
        self._write(records)
        return record

    async def update_expense(
        self,
        identifier: str,
        draft: ExpenseDraft,
    ) -> Optional[LocalRecord]:
        """Replace a record in place. Unknown ids leave the slot untouched."""
        records = self._read()
        for index, existing in enumerate(records):
            if existing.id == identifier:
                updated = LocalRecord(
                    id=identifier,
                    **draft.to_draft().model_dump(),
                )
                records[index] = updated
                self._write(records)
                return updated
        return None

    async def delete_expense(self, identifier: str) -> bool:
        """Drop a record and rewrite the slot."""
        records = self._read()
        remaining = [r for r in records if r.id != identifier]
        self._write(remaining)
        return len(remaining) != len(records)
