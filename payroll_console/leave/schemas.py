"""Leave Pydantic v2 schemas — records and request payloads."""

from __future__ import annotations

from datetime import date
from typing import ClassVar, Optional

from pydantic import Field, ValidationInfo, field_validator

from payroll_console.common.constants import LeaveStatus, LeaveType
from payroll_console.common.models import Record, WireModel


class LeaveRequest(Record):
    """Full leave request representation."""

    id_field: ClassVar[str] = "leave_id"
    entity_type: ClassVar[str] = "Leave Request"

    leave_id: int
    employee_id: int
    leave_type: str
    start_date: date
    end_date: date
    reason: Optional[str] = None
    status: LeaveStatus = LeaveStatus.pending
    applied_date: Optional[date] = None
    approved_by: Optional[int] = None

    @property
    def days(self) -> int:
        """Inclusive length of the leave in calendar days."""
        return (self.end_date - self.start_date).days + 1

    @property
    def label(self) -> str:
        return f"this leave request for Employee #{self.employee_id}"


class LeaveRequestCreate(WireModel):
    """Payload for applying for leave."""

    employee_id: int
    leave_type: LeaveType
    start_date: date = Field(..., description="Leave start date (inclusive)")
    end_date: date = Field(..., description="Leave end date (inclusive)")
    reason: str = Field(..., min_length=1, max_length=1000)

    @field_validator("end_date")
    @classmethod
    def _end_after_start(cls, v: date, info: ValidationInfo) -> date:
        start = info.data.get("start_date")
        if start is not None and v < start:
            raise ValueError("End date cannot be before the start date")
        return v


class LeaveStatusUpdate(WireModel):
    """Decision sent when approving or rejecting a request."""

    status: LeaveStatus
    approved_by: int
