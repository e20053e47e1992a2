"""
Expense Data Models

These models define the single entity the tracker manages and the two
shapes it takes depending on which backend holds it.

DESIGN DECISION: The two backends name their primary key differently
(`id` in the local slot, `_id` from the remote service). Instead of
checking both fields wherever a record is used, each backend produces its
own tagged variant and every variant exposes the same `identifier`.

    ExpenseDraft   - what the user submits (no identifier yet)
    LocalRecord    - draft + `id`  (timestamp string, generated locally)
    RemoteRecord   - draft + `_id` (assigned by the remote service)
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
)


DESCRIPTION_PLACEHOLDER = "—"

# Amounts travel as JSON numbers on both backends
Amount = Annotated[
    Decimal,
    Field(ge=0, description="Amount in currency units"),
    PlainSerializer(float, return_type=float, when_used="json"),
]


class StorageMode(str, Enum):
    """Which backend the repository is talking to."""
    LOCAL = "local"
    REMOTE = "remote"


class ExpenseDraft(BaseModel):
    """
    An expense as entered by the user, before any backend has seen it.

    Empty descriptions become the placeholder glyph and a missing date
    becomes today, so every persisted record has all four fields.
    """
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    amount: Amount
    category: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="User-chosen label (open set)"
    )
    description: str = Field(
        default=DESCRIPTION_PLACEHOLDER,
        max_length=500,
        description="Free text, placeholder glyph when empty"
    )
    date: dt.date = Field(
        default_factory=dt.date.today,
        description="Calendar date of the expense"
    )

    @field_validator("description", mode="before")
    @classmethod
    def default_description(cls, v: Any) -> Any:
        """Blank descriptions are stored as the placeholder."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return DESCRIPTION_PLACEHOLDER
        return v

    @field_validator("date", mode="before")
    @classmethod
    def default_date(cls, v: Any) -> Any:
        """Missing dates default to today."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return dt.date.today()
        return v

    def to_payload(self) -> dict:
        """Body sent to a backend: {amount, category, description, date}."""
        return self.model_dump(mode="json", include={
            "amount", "category", "description", "date",
        })

    def to_draft(self) -> "ExpenseDraft":
        """Strip any identifier, leaving only the user fields."""
        return ExpenseDraft(
            amount=self.amount,
            category=self.category,
            description=self.description,
            date=self.date,
        )


class LocalRecord(ExpenseDraft):
    """An expense stored in the local key-value slot."""

    kind: Literal["local"] = Field(default="local", exclude=True)
    id: str = Field(..., min_length=1, description="Timestamp-derived id")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        if isinstance(v, int):
            return str(v)
        return v

    @property
    def identifier(self) -> str:
        return self.id

    def to_storage(self) -> dict:
        """Serialized form kept in the slot."""
        return {"id": self.id, **self.to_payload()}


class RemoteRecord(ExpenseDraft):
    """An expense held by the remote service."""
    model_config = ConfigDict(populate_by_name=True)

    kind: Literal["remote"] = Field(default="remote", exclude=True)
    remote_id: str = Field(
        ...,
        alias="_id",
        min_length=1,
        description="Identifier assigned by the service"
    )

    @field_validator("remote_id", mode="before")
    @classmethod
    def coerce_remote_id(cls, v: Any) -> Any:
        # ObjectId or any other id type arrives as its string form
        if v is not None and not isinstance(v, str):
            return str(v)
        return v

    @property
    def identifier(self) -> str:
        return self.remote_id

    def to_storage(self) -> dict:
        return {"_id": self.remote_id, **self.to_payload()}


ExpenseRecord = Union[LocalRecord, RemoteRecord]


def resolve_identifier(payload: dict) -> Optional[str]:
    """
    Return the primary key of a raw record, whichever field holds it.

    `_id` wins when both are populated; `None` when neither is.
    """
    for key in ("_id", "id"):
        value = payload.get(key)
        if value not in (None, ""):
            return str(value)
    return None


def parse_record(payload: dict) -> ExpenseRecord:
    """Build the right record variant for a raw payload."""
    if payload.get("_id") not in (None, ""):
        return RemoteRecord.model_validate(payload)
    return LocalRecord.model_validate(payload)
