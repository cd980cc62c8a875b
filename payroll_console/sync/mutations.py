"""Mutation coordinator — runs one confirmed mutation and reconciles the store."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from payroll_console.common.constants import (
    TRANSITIONS,
    ActionPhase,
    MutationOutcome,
    Operation,
)
from payroll_console.common.exceptions import AppException, BusyError
from payroll_console.common.models import Record
from payroll_console.gateway.base import ResourceGateway
from payroll_console.gateway.context import SessionContext
from payroll_console.sync.store import CollectionStore, Fetcher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordRef:
    """Identifies the record a pending action targets."""

    collection: str
    record_id: Any
    label: str = ""

    @classmethod
    def of(cls, collection: str, record: Record) -> "RecordRef":
        return cls(collection=collection, record_id=record.record_id, label=record.label)


@dataclass(frozen=True)
class PendingAction:
    target: RecordRef
    operation: Operation
    phase: ActionPhase


@dataclass(frozen=True)
class MutationResult:
    """
    Terminal outcome of one mutation attempt.

    ``refreshed`` is set when the store had to re-fetch the collection;
    ``error`` on a succeeded result means that re-fetch failed and the
    snapshot still shows the pre-transition record.
    """

    outcome: MutationOutcome
    operation: Operation
    target: RecordRef
    record: Optional[Record] = None
    error: Optional[AppException] = None
    refreshed: bool = False

    @property
    def ok(self) -> bool:
        return self.outcome is MutationOutcome.succeeded


class MutationCoordinator:
    """Executes at most one mutation at a time against a screen's store."""

    def __init__(
        self,
        store: CollectionStore,
        ctx: SessionContext,
        fetchers: Optional[Callable[[], Mapping[str, Fetcher]]] = None,
    ) -> None:
        self.store = store
        self.ctx = ctx
        self._fetchers = fetchers
        self._executing: Optional[PendingAction] = None

    @property
    def busy(self) -> bool:
        return self._executing is not None

    @property
    def executing(self) -> Optional[PendingAction]:
        return self._executing

    def ensure_idle(self) -> None:
        if self._executing is not None:
            raise BusyError(
                detail=f"Still working on {self._executing.operation.value} of {self._executing.target.label}.",
            )

    async def mutate(
        self,
        operation: Operation,
        target: RecordRef,
        gateway: ResourceGateway,
    ) -> MutationResult:
        if self._executing is not None:
            logger.info("Rejected %s on %s: busy", operation.value, target.label)
            return MutationResult(MutationOutcome.busy, operation, target, error=BusyError())

        self._executing = PendingAction(target, operation, ActionPhase.executing)
        # The slot stays taken until the store is reconciled, re-fetch included.
        try:
            try:
                record = await gateway.perform(self.ctx, operation, target.record_id)
            except AppException as exc:
                logger.warning("%s on %s failed: %s", operation.value, target.label, exc.detail)
                return MutationResult(MutationOutcome.failed, operation, target, error=exc)

            logger.info("%s on %s succeeded", operation.value, target.label)
            if operation is Operation.delete:
                self.store.remove(target.collection, target.record_id)
                return MutationResult(MutationOutcome.succeeded, operation, target)

            if operation in TRANSITIONS and record is not None:
                if self.store.replace(target.collection, record):
                    return MutationResult(MutationOutcome.succeeded, operation, target, record=record)

            return await self._refresh(operation, target, gateway, record)
        finally:
            self._executing = None

    async def _refresh(
        self,
        operation: Operation,
        target: RecordRef,
        gateway: ResourceGateway,
        record: Optional[Record],
    ) -> MutationResult:
        """Re-fetch the affected collection when the reply can't be applied in place."""
        fetcher = self._fetcher_for(target, gateway)
        try:
            await self.store.refresh(target.collection, fetcher)
        except AppException as exc:
            logger.warning("Refreshing %s after %s failed: %s", target.collection, operation.value, exc.detail)
            return MutationResult(
                MutationOutcome.succeeded, operation, target, record=record, error=exc,
            )
        return MutationResult(
            MutationOutcome.succeeded, operation, target,
            record=record or self.store.get(target.collection, target.record_id),
            refreshed=True,
        )

    def _fetcher_for(self, target: RecordRef, gateway: ResourceGateway) -> Fetcher:
        if self._fetchers is not None:
            own = self._fetchers().get(target.collection)
            if own is not None:
                return own
        # Single-record collections (detail screens) re-read just that record.
        if len(self.store.records(target.collection)) == 1:
            return lambda: gateway.get_by_id(self.ctx, target.record_id)
        return lambda: gateway.list(self.ctx)
