"""Tests for the dual-backend expense repository."""

import asyncio
from decimal import Decimal

import pytest

from expense_tracker.models.expense import ExpenseDraft, LocalRecord, RemoteRecord, StorageMode
from expense_tracker.models.result import OperationType
from expense_tracker.repository import ExpenseRepository


def draft(amount="10", category="Food", **kwargs) -> ExpenseDraft:
    return ExpenseDraft(amount=amount, category=category, date="2024-06-01", **kwargs)


def snapshot(repository: ExpenseRepository) -> list[tuple]:
    return [(r.identifier, r.amount, r.category) for r in repository.expenses]


class TestDispatch:
    """Tests that operations reach the active backend only."""

    def test_starts_in_given_mode(self, local_storage, remote_storage):
        repo = ExpenseRepository(local_storage, remote_storage, mode=StorageMode.REMOTE)
        assert repo.mode == StorageMode.REMOTE
        assert repo.backend is remote_storage

    def test_local_create_does_not_touch_remote(self, repository, remote_service):
        result = asyncio.run(repository.save(draft()))

        assert result.success is True
        assert result.operation == OperationType.CREATE
        assert isinstance(result.record, LocalRecord)
        assert remote_service.requests == []

    def test_remote_create_returns_service_id(self, repository, remote_service, kv_store):
        repository.set_mode(StorageMode.REMOTE)
        result = asyncio.run(repository.save(draft()))

        assert isinstance(result.record, RemoteRecord)
        assert result.record.identifier == remote_service.documents[0]["_id"]
        assert kv_store.get_item("expenses") is None

    def test_save_with_identifier_updates(self, repository):
        created = asyncio.run(repository.save(draft("5"))).record
        result = asyncio.run(repository.save(draft("8"), existing_identifier=created.identifier))

        assert result.operation == OperationType.UPDATE
        assert result.record.identifier == created.identifier
        assert result.record.amount == Decimal("8")


class TestNetEffect:
    """The loaded collection reflects exactly the operations applied."""

    @pytest.mark.parametrize("mode", [StorageMode.LOCAL, StorageMode.REMOTE])
    def test_sequence_of_operations(self, repository, mode):
        repository.set_mode(mode)

        a = asyncio.run(repository.save(draft("1", "Food"))).record
        b = asyncio.run(repository.save(draft("2", "Bills"))).record
        c = asyncio.run(repository.save(draft("3", "Travel"))).record
        asyncio.run(repository.save(draft("20", "Bills"), b.identifier))
        asyncio.run(repository.remove(a.identifier))
        d = asyncio.run(repository.save(draft("4", "Food"))).record

        result = asyncio.run(repository.load())
        assert result.success is True
        assert [(r.identifier, r.amount, r.category) for r in result.records] == [
            (b.identifier, Decimal("20"), "Bills"),
            (c.identifier, Decimal("3"), "Travel"),
            (d.identifier, Decimal("4"), "Food"),
        ]
        assert snapshot(repository) == [
            (r.identifier, r.amount, r.category) for r in result.records
        ]

    def test_load_replaces_held_collection(self, repository):
        asyncio.run(repository.save(draft()))
        asyncio.run(repository.load())
        assert len(repository.expenses) == 1

        asyncio.run(repository.save(draft()))
        asyncio.run(repository.load())
        assert len(repository.expenses) == 2


class TestModeSwitching:
    """Mode is a flag; it never moves data between backends."""

    def test_switch_and_back_leaves_data_unchanged(self, repository):
        asyncio.run(repository.save(draft("1")))
        repository.set_mode(StorageMode.REMOTE)
        asyncio.run(repository.save(draft("2", "Bills")))

        repository.set_mode(StorageMode.LOCAL)
        asyncio.run(repository.load())
        local_before = snapshot(repository)
        repository.set_mode(StorageMode.REMOTE)
        asyncio.run(repository.load())
        remote_before = snapshot(repository)

        repository.set_mode(StorageMode.LOCAL)
        repository.set_mode(StorageMode.REMOTE)
        repository.set_mode(StorageMode.LOCAL)
        asyncio.run(repository.load())
        assert snapshot(repository) == local_before

        repository.set_mode(StorageMode.REMOTE)
        asyncio.run(repository.load())
        assert snapshot(repository) == remote_before

    def test_collections_are_independent(self, repository):
        asyncio.run(repository.save(draft("1")))
        asyncio.run(repository.load())
        assert len(repository.expenses) == 1

        repository.set_mode(StorageMode.REMOTE)
        asyncio.run(repository.load())
        assert repository.expenses == ()

    def test_switch_drops_held_collection(self, repository):
        asyncio.run(repository.save(draft()))
        asyncio.run(repository.load())
        assert repository.expenses

        repository.set_mode(StorageMode.REMOTE)
        assert repository.expenses == ()

    def test_setting_same_mode_keeps_collection(self, repository):
        asyncio.run(repository.save(draft()))
        asyncio.run(repository.load())
        repository.set_mode(StorageMode.LOCAL)
        assert len(repository.expenses) == 1

    def test_toggle(self, repository):
        assert repository.toggle_mode() == StorageMode.REMOTE
        assert repository.toggle_mode() == StorageMode.LOCAL


class TestIdentifierLookup:
    """Tests for find() across both identifier schemes."""

    def test_find_local_record(self, repository):
        created = asyncio.run(repository.save(draft())).record
        asyncio.run(repository.load())
        assert repository.find(created.identifier).identifier == created.identifier

    def test_find_remote_record(self, repository, remote_service):
        remote_service.documents.append(
            {"_id": "665f1c2e9b1e8a3d4c5b6a79", "amount": 7, "category": "Food", "date": "2024-01-01"}
        )
        repository.set_mode(StorageMode.REMOTE)
        asyncio.run(repository.load())
        assert repository.find("665f1c2e9b1e8a3d4c5b6a79").amount == Decimal("7")

    def test_find_unknown(self, repository):
        assert repository.find("nope") is None


class TestFailures:
    """Backend failures come back as failed results."""

    def test_load_failure_is_result(self, repository, remote_service):
        repository.set_mode(StorageMode.REMOTE)
        remote_service.refuse_connections = True

        result = asyncio.run(repository.load())
        assert result.success is False
        assert result.error_type == "connection"
        assert result.operation == OperationType.LOAD
        assert result.mode == StorageMode.REMOTE

    def test_failed_load_keeps_held_collection(self, repository, remote_service):
        repository.set_mode(StorageMode.REMOTE)
        asyncio.run(repository.save(draft()))
        asyncio.run(repository.load())
        before = snapshot(repository)

        remote_service.fail_status = 503
        result = asyncio.run(repository.load())
        assert result.error_type == "remote_service"
        assert snapshot(repository) == before

    def test_load_discarded_when_mode_changes_mid_flight(self, local_storage, remote_storage):
        asyncio.run(local_storage.create_expense(draft()))

        class SwitchingBackend:
            # User toggles the mode while the local read is in flight
            async def list_expenses(self):
                records = await local_storage.list_expenses()
                repo.set_mode(StorageMode.REMOTE)
                return records

        repo = ExpenseRepository(SwitchingBackend(), remote_storage)
        result = asyncio.run(repo.load())

        assert result.success is False
        assert result.error_type == "stale"
        assert result.mode == StorageMode.LOCAL
        assert repo.mode == StorageMode.REMOTE
        assert repo.expenses == ()

    def test_save_failure_is_result(self, repository, remote_service):
        repository.set_mode(StorageMode.REMOTE)
        remote_service.fail_status = 500

        result = asyncio.run(repository.save(draft()))
        assert result.success is False
        assert result.operation == OperationType.CREATE
        assert "500" in result.error_message

    def test_remove_failure_is_result(self, repository, remote_service):
        repository.set_mode(StorageMode.REMOTE)
        remote_service.refuse_connections = True

        result = asyncio.run(repository.remove("abc"))
        assert result.success is False
        assert result.operation == OperationType.DELETE


class TestUnknownIdentifiers:
    """Editing or deleting a missing record is a silent no-op."""

    def test_update_unknown_local(self, repository):
        asyncio.run(repository.save(draft("1")))
        result = asyncio.run(repository.save(draft("2"), existing_identifier="missing"))

        assert result.success is True
        assert result.record is None
        asyncio.run(repository.load())
        assert [r.amount for r in repository.expenses] == [Decimal("1")]

    def test_update_unknown_remote(self, repository):
        repository.set_mode(StorageMode.REMOTE)
        result = asyncio.run(repository.save(draft(), existing_identifier="missing"))
        assert result.success is True
        assert result.record is None

    def test_remove_unknown_still_calls_backend(self, repository, remote_service):
        repository.set_mode(StorageMode.REMOTE)
        result = asyncio.run(repository.remove("missing"))

        assert result.success is True
        assert remote_service.requests[-1].method == "DELETE"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
