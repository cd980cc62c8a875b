"""Confirmation gate — two-step commit in front of every destructive mutation.

State is a tagged variant, ``Idle`` or ``AwaitingConfirmation``. The only
path from a user's request to the gateway is ``request()`` followed by
``confirm()`` for that same target.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from payroll_console.common.constants import ActionPhase, Operation
from payroll_console.gateway.base import ResourceGateway
from payroll_console.sync.mutations import (
    MutationCoordinator,
    MutationResult,
    PendingAction,
    RecordRef,
)

logger = logging.getLogger(__name__)

_VERBS: dict[Operation, str] = {
    Operation.delete: "delete",
    Operation.approve: "approve",
    Operation.reject: "reject",
    Operation.process: "process",
}


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class AwaitingConfirmation:
    target: RecordRef
    operation: Operation
    gateway: ResourceGateway
    title: str
    prompt: str

    @property
    def confirm_text(self) -> str:
        return _VERBS[self.operation].capitalize()


GateState = Union[Idle, AwaitingConfirmation]

IDLE = Idle()


class ConfirmationGate:
    """Holds at most one unconfirmed request for a screen."""

    def __init__(self, coordinator: MutationCoordinator) -> None:
        self.coordinator = coordinator
        self.state: GateState = IDLE

    @property
    def awaiting(self) -> Optional[AwaitingConfirmation]:
        return self.state if isinstance(self.state, AwaitingConfirmation) else None

    @property
    def pending_action(self) -> Optional[PendingAction]:
        """What the screen should show as in progress, if anything."""
        executing = self.coordinator.executing
        if executing is not None:
            return executing
        if isinstance(self.state, AwaitingConfirmation):
            return PendingAction(
                self.state.target, self.state.operation, ActionPhase.awaiting_confirmation,
            )
        return None

    def request(
        self,
        target: RecordRef,
        operation: Operation,
        gateway: ResourceGateway,
        *,
        prompt: Optional[str] = None,
    ) -> AwaitingConfirmation:
        """
        Ask for confirmation of *operation* on *target*.

        Replaces an earlier unconfirmed request. Raises ``BusyError`` while
        a confirmed mutation is still executing.
        """
        self.coordinator.ensure_idle()
        verb = _VERBS[operation]
        label = target.label or f"#{target.record_id}"
        self.state = AwaitingConfirmation(
            target=target,
            operation=operation,
            gateway=gateway,
            title=f"{verb.capitalize()} {gateway.entity_type}",
            prompt=prompt or f"Are you sure you want to {verb} {label}?",
        )
        logger.debug("Awaiting confirmation: %s %s", verb, label)
        return self.state

    def cancel(self) -> None:
        if isinstance(self.state, AwaitingConfirmation):
            logger.debug("Cancelled %s of %s", self.state.operation.value, self.state.target.label)
        self.state = IDLE

    async def confirm(self) -> MutationResult:
        """Dispatch the awaited mutation once; the gate is idle afterwards."""
        state = self.state
        if not isinstance(state, AwaitingConfirmation):
            raise RuntimeError("Nothing is awaiting confirmation")

        self.state = IDLE
        return await self.coordinator.mutate(state.operation, state.target, state.gateway)
