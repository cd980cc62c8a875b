"""Enums and constants for the payroll console — matching the service's wire values."""

from __future__ import annotations

import enum


# ── Auth / Roles ────────────────────────────────────────────────────

class UserRole(str, enum.Enum):
    admin = "ADMIN"
    employee = "EMPLOYEE"


# ── Leave ───────────────────────────────────────────────────────────

class LeaveStatus(str, enum.Enum):
    pending = "PENDING"
    approved = "APPROVED"
    rejected = "REJECTED"


class LeaveType(str, enum.Enum):
    sick = "SICK"
    casual = "CASUAL"
    annual = "ANNUAL"
    maternity = "MATERNITY"
    paternity = "PATERNITY"
    unpaid = "UNPAID"


# ── Payroll ─────────────────────────────────────────────────────────

class PayrollStatus(str, enum.Enum):
    pending = "PENDING"
    processed = "PROCESSED"


# ── Screen synchronization ──────────────────────────────────────────

class LoadStatus(str, enum.Enum):
    not_loaded = "not_loaded"
    loading = "loading"
    ready = "ready"
    failed = "failed"


class Operation(str, enum.Enum):
    """Mutations that must pass the confirmation gate."""

    delete = "delete"
    approve = "approve"
    reject = "reject"
    process = "process"


class ActionPhase(str, enum.Enum):
    awaiting_confirmation = "awaiting_confirmation"
    executing = "executing"


class MutationOutcome(str, enum.Enum):
    succeeded = "succeeded"
    failed = "failed"
    busy = "busy"


# Operations that change a record's state rather than removing it.
TRANSITIONS: frozenset[Operation] = frozenset(
    {Operation.approve, Operation.reject, Operation.process},
)

# Leave decision sent to the service for each transition.
LEAVE_DECISIONS: dict[Operation, LeaveStatus] = {
    Operation.approve: LeaveStatus.approved,
    Operation.reject: LeaveStatus.rejected,
}


# ── Misc ────────────────────────────────────────────────────────────

MONEY_TOLERANCE = "0.000001"
MIN_PAYROLL_YEAR = 2020
MAX_PAYROLL_YEAR = 2030
RECENT_ITEMS = 3

MONTH_NAMES: tuple[str, ...] = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
