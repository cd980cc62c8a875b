"""Common module — shared utilities for the payroll console."""

from payroll_console.common.constants import (
    MONTH_NAMES,
    ActionPhase,
    LeaveStatus,
    LeaveType,
    LoadStatus,
    MutationOutcome,
    Operation,
    PayrollStatus,
    UserRole,
)
from payroll_console.common.exceptions import (
    AppException,
    AuthError,
    BusyError,
    ConflictError,
    MalformedResponseError,
    NotFoundException,
    TransportError,
    ValidationException,
    error_from_response,
)
from payroll_console.common.filters import apply_filters, apply_search, apply_sorting
from payroll_console.common.models import Record, WireModel
from payroll_console.common.pagination import (
    PaginatedResponse,
    PaginationMeta,
    PaginationParams,
    paginate,
)

__all__ = [
    # Constants / Enums
    "ActionPhase",
    "LeaveStatus",
    "LeaveType",
    "LoadStatus",
    "MutationOutcome",
    "Operation",
    "PayrollStatus",
    "UserRole",
    "MONTH_NAMES",
    # Exceptions
    "AppException",
    "AuthError",
    "BusyError",
    "ConflictError",
    "MalformedResponseError",
    "NotFoundException",
    "TransportError",
    "ValidationException",
    "error_from_response",
    # Filters
    "apply_filters",
    "apply_search",
    "apply_sorting",
    # Models
    "Record",
    "WireModel",
    # Pagination
    "PaginatedResponse",
    "PaginationMeta",
    "PaginationParams",
    "paginate",
]
