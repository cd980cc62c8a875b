"""Mutation coordinator tests — reconciliation, failure handling, mutual exclusion."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from payroll_console.common.constants import ActionPhase, MutationOutcome, Operation
from payroll_console.common.exceptions import BusyError, ConflictError, TransportError
from payroll_console.gateway.context import SessionContext
from payroll_console.sync.mutations import MutationCoordinator, RecordRef
from payroll_console.sync.store import CollectionStore
from tests.conftest import Item, make_items, mock_gateway, perform_calls


async def _loaded_store(*items: Item, name: str = "items") -> CollectionStore:
    store = CollectionStore("test")

    async def fetch():
        return items

    await store.load({name: fetch})
    return store


def _ref(record_id: int, collection: str = "items") -> RecordRef:
    return RecordRef(collection, record_id, f"Item #{record_id}")


@pytest.fixture
def ctx() -> SessionContext:
    return SessionContext(token="t", employee_id=1)


# ═════════════════════════════════════════════════════════════════════
# 1. SUCCESS PATHS
# ═════════════════════════════════════════════════════════════════════


class TestReconciliation:
    async def test_delete_removes_locally_without_refetch(self, ctx):
        store = await _loaded_store(*make_items((1, "a"), (2, "b")))
        gateway = mock_gateway()
        coordinator = MutationCoordinator(store, ctx)

        result = await coordinator.mutate(Operation.delete, _ref(1), gateway)

        assert result.outcome is MutationOutcome.succeeded
        assert [r.record_id for r in store.records("items")] == [2]
        assert perform_calls(gateway) == [(Operation.delete, 1)]
        gateway.list.assert_not_awaited()
        gateway.get_by_id.assert_not_awaited()
        assert result.refreshed is False

    async def test_transition_reply_replaces_record(self, ctx):
        store = await _loaded_store(*make_items((1, "a"), (2, "b")))
        updated = Item(id=2, name="b", status="PROCESSED")
        gateway = mock_gateway(perform=updated)

        result = await MutationCoordinator(store, ctx).mutate(Operation.process, _ref(2), gateway)

        assert result.ok
        assert result.record == updated
        assert store.get("items", 2).status == "PROCESSED"
        gateway.list.assert_not_awaited()

    async def test_empty_reply_uses_screen_fetcher(self, ctx):
        store = await _loaded_store(*make_items((1, "a"), (2, "b")))
        gateway = mock_gateway(perform=None)
        fresh = (Item(id=1, name="a", status="APPROVED"), Item(id=2, name="b"))

        async def refetch():
            return fresh

        coordinator = MutationCoordinator(store, ctx, lambda: {"items": refetch})
        result = await coordinator.mutate(Operation.approve, _ref(1), gateway)

        assert result.ok
        assert result.refreshed is True
        assert result.record == fresh[0]
        assert store.get("items", 1).status == "APPROVED"
        gateway.list.assert_not_awaited()

    async def test_empty_reply_falls_back_to_list(self, ctx):
        store = await _loaded_store(*make_items((1, "a"), (2, "b")))
        gateway = mock_gateway(perform=None, listing=[Item(id=2, name="b")])

        result = await MutationCoordinator(store, ctx).mutate(Operation.approve, _ref(1), gateway)

        assert result.refreshed is True
        gateway.list.assert_awaited_once_with(ctx)
        assert [r.record_id for r in store.records("items")] == [2]

    async def test_single_record_collection_rereads_record(self, ctx):
        store = await _loaded_store(Item(id=5, name="one"), name="payroll")
        gateway = mock_gateway(perform=None)
        gateway.get_by_id.return_value = Item(id=5, name="one", status="PROCESSED")

        result = await MutationCoordinator(store, ctx).mutate(
            Operation.process, _ref(5, "payroll"), gateway,
        )

        assert result.refreshed is True
        gateway.get_by_id.assert_awaited_once_with(ctx, 5)
        assert store.records("payroll")[0].status == "PROCESSED"

    async def test_refresh_failure_still_succeeds(self, ctx):
        store = await _loaded_store(*make_items((1, "a"), (2, "b")))
        gateway = mock_gateway(perform=None)
        gateway.list.side_effect = TransportError()

        result = await MutationCoordinator(store, ctx).mutate(Operation.approve, _ref(1), gateway)

        assert result.outcome is MutationOutcome.succeeded
        assert isinstance(result.error, TransportError)
        assert result.refreshed is False
        assert len(store.records("items")) == 2


# ═════════════════════════════════════════════════════════════════════
# 2. FAILURES
# ═════════════════════════════════════════════════════════════════════


class TestFailures:
    async def test_conflict_leaves_snapshot_unchanged(self, ctx):
        store = await _loaded_store(*make_items((1, "a"), (2, "b")))
        before = store.snapshot().collections
        revision = store.revision
        coordinator = MutationCoordinator(store, ctx)
        gateway = mock_gateway(perform=ConflictError("Payroll is already processed"))

        result = await coordinator.mutate(Operation.process, _ref(1), gateway)

        assert result.outcome is MutationOutcome.failed
        assert isinstance(result.error, ConflictError)
        assert store.snapshot().collections == before
        assert store.revision == revision
        assert coordinator.executing is None

    async def test_unexpected_error_propagates_and_clears(self, ctx):
        store = await _loaded_store(*make_items((1, "a")))
        coordinator = MutationCoordinator(store, ctx)
        gateway = mock_gateway(perform=RuntimeError("bug"))

        with pytest.raises(RuntimeError):
            await coordinator.mutate(Operation.delete, _ref(1), gateway)
        assert coordinator.busy is False


# ═════════════════════════════════════════════════════════════════════
# 3. MUTUAL EXCLUSION
# ═════════════════════════════════════════════════════════════════════


class TestMutualExclusion:
    async def test_second_mutation_is_busy(self, ctx):
        store = await _loaded_store(*make_items((1, "a"), (2, "b")))
        coordinator = MutationCoordinator(store, ctx)
        release = asyncio.Event()

        async def slow_perform(_ctx, operation, record_id):
            await release.wait()
            return None

        gateway = mock_gateway(perform=slow_perform)
        first = asyncio.create_task(coordinator.mutate(Operation.delete, _ref(1), gateway))
        await asyncio.sleep(0)

        assert coordinator.busy
        assert coordinator.executing.phase is ActionPhase.executing
        assert coordinator.executing.target.record_id == 1

        second = await coordinator.mutate(Operation.delete, _ref(2), gateway)
        assert second.outcome is MutationOutcome.busy
        assert isinstance(second.error, BusyError)
        with pytest.raises(BusyError):
            coordinator.ensure_idle()

        release.set()
        first_result = await first
        assert first_result.outcome is MutationOutcome.succeeded
        assert perform_calls(gateway) == [(Operation.delete, 1)]
        assert [r.record_id for r in store.records("items")] == [2]
        assert coordinator.busy is False

    async def test_busy_until_refetch_is_applied(self, ctx):
        store = await _loaded_store(*make_items((1, "a"), (2, "b")))
        coordinator = MutationCoordinator(store, ctx)
        release = asyncio.Event()
        gateway = mock_gateway(perform=None)

        async def slow_list(_ctx):
            await release.wait()
            return (Item(id=1, name="a", status="APPROVED"), Item(id=2, name="b"))

        gateway.list = AsyncMock(side_effect=slow_list)
        first = asyncio.create_task(coordinator.mutate(Operation.approve, _ref(1), gateway))
        for _ in range(3):
            await asyncio.sleep(0)
        assert gateway.list.await_count == 1

        assert coordinator.busy
        second = await coordinator.mutate(Operation.delete, _ref(2), gateway)
        assert second.outcome is MutationOutcome.busy

        release.set()
        first_result = await first
        assert first_result.refreshed is True
        assert perform_calls(gateway) == [(Operation.approve, 1)]
        assert [r.record_id for r in store.records("items")] == [1, 2]
        assert store.get("items", 1).status == "APPROVED"
        assert coordinator.busy is False

    async def test_delete_during_reload_is_not_undone(self, ctx):
        store = await _loaded_store(*make_items((1, "a"), (2, "b")))
        coordinator = MutationCoordinator(store, ctx)
        release = asyncio.Event()

        async def stale_listing():
            await release.wait()
            return make_items((1, "a"), (2, "b"))

        reload = asyncio.create_task(store.load({"items": stale_listing}))
        await asyncio.sleep(0)

        result = await coordinator.mutate(Operation.delete, _ref(1), mock_gateway())
        assert result.ok
        release.set()

        assert await reload is False
        assert [r.record_id for r in store.records("items")] == [2]
