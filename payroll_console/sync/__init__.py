"""Sync module — the controller pattern shared by every console screen."""

from payroll_console.sync.confirmation import (
    AwaitingConfirmation,
    ConfirmationGate,
    GateState,
    Idle,
)
from payroll_console.sync.derive import (
    DerivedView,
    Metric,
    ViewParameters,
    ViewSpec,
    derive,
    field_above,
    field_equals,
    within_days,
)
from payroll_console.sync.forms import FormScreen
from payroll_console.sync.mutations import (
    MutationCoordinator,
    MutationResult,
    PendingAction,
    RecordRef,
)
from payroll_console.sync.screen import ResourceScreen
from payroll_console.sync.store import CollectionSnapshot, CollectionStore

__all__ = [
    # Store
    "CollectionSnapshot",
    "CollectionStore",
    # Derivation
    "DerivedView",
    "Metric",
    "ViewParameters",
    "ViewSpec",
    "derive",
    "field_above",
    "field_equals",
    "within_days",
    # Mutations
    "MutationCoordinator",
    "MutationResult",
    "PendingAction",
    "RecordRef",
    # Confirmation
    "AwaitingConfirmation",
    "ConfirmationGate",
    "GateState",
    "Idle",
    # Screens
    "FormScreen",
    "ResourceScreen",
]
