"""
Remote API Storage Implementation

Translates each storage operation into exactly one HTTP request against
the expense service:

    list    -> GET    {base_url}
    create  -> POST   {base_url}          body {amount, category, description, date}
    update  -> PUT    {base_url}/{id}     same body
    delete  -> DELETE {base_url}/{id}

The service names its primary key `_id`; records come back as RemoteRecord.

TRADEOFFS:
- No retries. A failed request surfaces as a StorageError subclass.
- No timeout unless one is configured.
- A fresh client per operation, so the backend works from whichever event
  loop the caller happens to run.
"""

from typing import Any, Optional

import httpx
import structlog
from pydantic import ValidationError

from expense_tracker.models.expense import ExpenseDraft, RemoteRecord
from expense_tracker.services.storage.interface import (
    ExpenseStorageInterface,
    MalformedRecordError,
    RemoteServiceError,
    StorageConnectionError,
)


DEFAULT_BASE_URL = "http://127.0.0.1:5000/api/expenses"

logger = structlog.get_logger(__name__)


class RemoteExpenseStorage(ExpenseStorageInterface):
    """
    HTTP implementation of expense storage.

    Args:
        base_url: Collection endpoint, e.g. http://host:5000/api/expenses
        timeout: Seconds per request, or None to wait indefinitely
        transport: Optional httpx transport (tests pass a MockTransport)
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    def _item_url(self, identifier: str) -> str:
        return f"{self._base_url}/{identifier}"

    async def _request(
        self,
        method: str,
        url: str,
        payload: Optional[dict] = None,
    ) -> httpx.Response:
        """Send one request. Transport failures become StorageConnectionError."""
        headers = {"Content-Type": "application/json"} if payload is not None else None
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(
                    method,
                    url,
                    json=payload,
                    headers=headers,
                )
        except httpx.RequestError as e:
            logger.error(
                "remote_request_failed",
                method=method,
                url=url,
                error=str(e),
            )
            raise StorageConnectionError(f"{method} {url} failed: {e}")

        logger.debug(
            "remote_request_completed",
            method=method,
            url=url,
            status_code=response.status_code,
        )
        return response

    def _raise_for_status(self, response: httpx.Response) -> None:
        if response.is_success:
            return
        request = response.request
        logger.error(
            "remote_request_rejected",
            method=request.method,
            url=str(request.url),
            status_code=response.status_code,
        )
        raise RemoteServiceError(
            f"{request.method} {request.url} returned {response.status_code}",
            status_code=response.status_code,
        )

    def _json(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise MalformedRecordError(f"Response is not JSON: {e}")

    def _to_record(self, data: Any) -> RemoteRecord:
        if not isinstance(data, dict):
            raise MalformedRecordError(f"Expected an expense object, got {type(data).__name__}")
        try:
            return RemoteRecord.model_validate(data)
        except ValidationError as e:
            raise MalformedRecordError(f"Invalid expense from service: {e}")

    async def list_expenses(self) -> list[RemoteRecord]:
        """GET the collection."""
        response = await self._request("GET", self._base_url)
        self._raise_for_status(response)

        data = self._json(response)
        if not isinstance(data, list):
            raise MalformedRecordError("Expected an array of expenses")

        records = []
        for index, item in enumerate(data):
            try:
                records.append(self._to_record(item))
            except MalformedRecordError as e:
                logger.warning("remote_record_skipped", index=index, error=str(e))
        return records

    async def create_expense(self, draft: ExpenseDraft) -> RemoteRecord:
        """POST a new expense; the service assigns `_id`."""
        response = await self._request("POST", self._base_url, draft.to_payload())
        self._raise_for_status(response)
        return self._to_record(self._json(response))

    async def update_expense(
        self,
        identifier: str,
        draft: ExpenseDraft,
    ) -> Optional[RemoteRecord]:
        """PUT new field values. A 404 means there was nothing to update."""
        response = await self._request(
            "PUT",
            self._item_url(identifier),
            draft.to_payload(),
        )
        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        self._raise_for_status(response)
        return self._to_record(self._json(response))

    async def delete_expense(self, identifier: str) -> bool:
        """DELETE by id. Returns whether the service reports a removal."""
        response = await self._request("DELETE", self._item_url(identifier))
        if response.status_code == httpx.codes.NOT_FOUND:
            return False
        self._raise_for_status(response)

        # Services that answer without a {"deleted": n} body count as removed
        try:
            body = response.json()
        except ValueError:
            return True
        if isinstance(body, dict) and "deleted" in body:
            return bool(body["deleted"])
        return True
