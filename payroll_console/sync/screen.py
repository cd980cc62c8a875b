"""Screen controller — wires store, derivation, coordinator and gate together.

Every list/detail screen of the console is a ``ResourceScreen`` subclass that
only declares which collections it loads, how it projects them, and which
confirmed actions it offers.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, ClassVar, Mapping, Optional

from payroll_console.common.constants import LoadStatus, Operation
from payroll_console.common.exceptions import AppException
from payroll_console.common.models import Record
from payroll_console.gateway.base import ResourceGateway
from payroll_console.gateway.context import SessionContext
from payroll_console.sync.confirmation import AwaitingConfirmation, ConfirmationGate
from payroll_console.sync.derive import DerivedView, ViewParameters, ViewSpec, derive
from payroll_console.sync.mutations import (
    MutationCoordinator,
    MutationResult,
    PendingAction,
    RecordRef,
)
from payroll_console.sync.store import CollectionSnapshot, CollectionStore, Fetcher

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ResourceScreen:
    """Base controller for a screen backed by remote collections."""

    name: ClassVar[str] = "screen"
    view_spec: ClassVar[ViewSpec] = ViewSpec()
    actions: ClassVar[frozenset[Operation]] = frozenset()

    def __init__(self, ctx: SessionContext, *, clock: Optional[Clock] = None) -> None:
        self.ctx = ctx
        self.store = CollectionStore(self.name)
        self.coordinator = MutationCoordinator(self.store, ctx, self.fetchers)
        self.gate = ConfirmationGate(self.coordinator)
        self.params = ViewParameters()
        self.error: Optional[AppException] = None
        self._clock = clock or utcnow

    # ── Declarations (overridden per screen) ────────────────────────

    def fetchers(self) -> Mapping[str, Fetcher]:
        raise NotImplementedError

    def spec(self) -> ViewSpec:
        return self.view_spec

    def gateway_for(self, collection: str) -> ResourceGateway:
        raise NotImplementedError(f"{self.name} has no gateway for '{collection}'")

    def can(self, operation: Operation, record: Record) -> bool:
        """Whether *operation* is offered for *record* on this screen."""
        return operation in self.actions

    # ── Loading ─────────────────────────────────────────────────────

    async def load(self) -> bool:
        """(Re)load every collection; the previous data stays visible meanwhile."""
        ok = await self.store.load(self.fetchers())
        if ok:
            self.error = None
        elif self.store.status is LoadStatus.failed:
            self.error = self.store.error
        return ok

    retry = load

    @property
    def status(self) -> LoadStatus:
        return self.store.status

    @property
    def loading(self) -> bool:
        return self.store.status is LoadStatus.loading

    @property
    def snapshot(self) -> CollectionSnapshot:
        return self.store.snapshot()

    # ── Derived view ────────────────────────────────────────────────

    @property
    def view(self) -> DerivedView:
        return derive(self.store.snapshot(), self.params, self.spec(), self._clock())

    def set_filter(self, **values: Any) -> DerivedView:
        self.params = self.params.with_values(**values)
        return self.view

    def search(self, term: str) -> DerivedView:
        return self.set_filter(search=term)

    def clear_filters(self) -> DerivedView:
        self.params = self.params.cleared()
        return self.view

    # ── Confirmed actions ───────────────────────────────────────────

    @property
    def pending_action(self) -> Optional[PendingAction]:
        return self.gate.pending_action

    @property
    def busy(self) -> bool:
        return self.coordinator.busy

    def request(
        self,
        operation: Operation,
        record: Record,
        *,
        collection: Optional[str] = None,
        prompt: Optional[str] = None,
    ) -> AwaitingConfirmation:
        """Open the confirmation step for *operation* on *record*."""
        collection = collection or self.spec().collection
        if collection is None:
            raise ValueError(f"{self.name} has no collection to act on")
        if not self.can(operation, record):
            raise ValueError(f"Cannot {operation.value} {record.label} on {self.name}")
        return self.gate.request(
            RecordRef.of(collection, record),
            operation,
            self.gateway_for(collection),
            prompt=prompt or self.prompt_for(operation, record),
        )

    def request_delete(self, record: Record) -> AwaitingConfirmation:
        return self.request(Operation.delete, record)

    def prompt_for(self, operation: Operation, record: Record) -> Optional[str]:
        return None

    def cancel(self) -> None:
        self.gate.cancel()

    async def confirm(self) -> MutationResult:
        result = await self.gate.confirm()
        if result.error is not None:
            self.error = result.error
        return result

    def dismiss_error(self) -> None:
        self.error = None

    # ── Lifecycle ───────────────────────────────────────────────────

    def close(self) -> None:
        """Unmount: cancel in-flight loads and drop the snapshot."""
        self.gate.cancel()
        self.store.close()

    async def __aenter__(self) -> "ResourceScreen":
        await self.load()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.close()
