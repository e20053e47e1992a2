"""
Shared fixtures.

The remote backend is exercised against FakeExpenseService, an in-memory
stand-in for the expense API mounted on an httpx.MockTransport. No test
touches the network or a real MongoDB.
"""

import itertools

import pytest

from expense_tracker.models.expense import StorageMode
from expense_tracker.repository import ExpenseRepository
from expense_tracker.services.storage import (
    InMemoryKeyValueStore,
    LocalExpenseStorage,
    RemoteExpenseStorage,
)

from tests.helpers.fake_service import BASE_URL, FakeExpenseService


@pytest.fixture
def clock():
    """Deterministic millisecond clock, one tick per call."""
    ticks = itertools.count(1_700_000_000_000)
    return lambda: next(ticks)


@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def local_storage(kv_store, clock) -> LocalExpenseStorage:
    return LocalExpenseStorage(kv_store, clock=clock)


@pytest.fixture
def remote_service() -> FakeExpenseService:
    return FakeExpenseService()


@pytest.fixture
def remote_storage(remote_service) -> RemoteExpenseStorage:
    return RemoteExpenseStorage(base_url=BASE_URL, transport=remote_service.transport)


@pytest.fixture
def repository(local_storage, remote_storage) -> ExpenseRepository:
    return ExpenseRepository(
        local=local_storage,
        remote=remote_storage,
        mode=StorageMode.LOCAL,
    )
