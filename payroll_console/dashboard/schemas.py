"""Dashboard Pydantic v2 schemas — summary cards for both dashboards."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from payroll_console.employees.schemas import Employee
from payroll_console.leave.schemas import LeaveRequest
from payroll_console.payroll.schemas import Payroll


class AdminDashboardSummary(BaseModel):
    """KPI cards for the admin dashboard."""

    total_employees: int = Field(..., description="Employees on record")
    pending_leaves: int = Field(..., description="Leave requests awaiting a decision")
    recent_payrolls: int = Field(
        ..., description="Payrolls generated within the recent window",
    )
    active_employees: int = Field(
        ..., description="Employees with a positive leave balance",
    )
    evaluated_at: Optional[datetime] = None


class EmployeeDashboardSummary(BaseModel):
    """KPI cards and recent items for an employee's own dashboard."""

    employee: Optional[Employee] = None
    leave_balance: int = Field(0, description="Days remaining")
    pending_leaves: int = Field(0, description="Awaiting approval")
    recent_payrolls: int = Field(0, description="Payslips in the recent window")
    leaves_taken: int = Field(0, description="Approved leave requests")
    recent_leaves: list[LeaveRequest] = Field(default_factory=list)
    recent_payslips: list[Payroll] = Field(default_factory=list)
    evaluated_at: Optional[datetime] = None
