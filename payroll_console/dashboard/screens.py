"""Dashboard screens — read-only aggregation across collections.

Each dashboard loads its collections as one batch so every card is computed
from the same instant; a failure in any read leaves the previous figures.
"""

from __future__ import annotations

import asyncio
from typing import Any, ClassVar, Mapping, Optional

from payroll_console.common.constants import RECENT_ITEMS, LeaveStatus
from payroll_console.config import settings
from payroll_console.dashboard.schemas import AdminDashboardSummary, EmployeeDashboardSummary
from payroll_console.employees.gateway import EmployeeGateway
from payroll_console.gateway.context import SessionContext
from payroll_console.leave.gateway import LeaveGateway
from payroll_console.payroll.gateway import PayrollGateway
from payroll_console.sync.derive import Metric, ViewSpec, field_above, field_equals, within_days
from payroll_console.sync.screen import Clock, ResourceScreen
from payroll_console.sync.store import Fetcher

EMPLOYEES = "employees"
EMPLOYEE = "employee"
PENDING_LEAVES = "pending_leaves"
LEAVES = "leaves"
PAYROLLS = "payrolls"


class _DashboardScreen(ResourceScreen):
    def __init__(
        self,
        ctx: SessionContext,
        *,
        employees: EmployeeGateway,
        leaves: LeaveGateway,
        payrolls: PayrollGateway,
        recent_days: Optional[int] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.employees = employees
        self.leaves = leaves
        self.payrolls = payrolls
        self.recent_days = recent_days or settings.RECENT_PAYROLL_DAYS
        super().__init__(ctx, clock=clock)


# ═════════════════════════════════════════════════════════════════════
# Admin
# ═════════════════════════════════════════════════════════════════════


class AdminDashboardScreen(_DashboardScreen):
    name: ClassVar[str] = "admin-dashboard"

    def fetchers(self) -> Mapping[str, Fetcher]:
        return {
            EMPLOYEES: lambda: self.employees.list(self.ctx),
            PENDING_LEAVES: lambda: self.leaves.list_pending(self.ctx),
            PAYROLLS: lambda: self.payrolls.list(self.ctx),
        }

    def spec(self) -> ViewSpec:
        return ViewSpec(
            metrics=(
                Metric.count("total_employees", EMPLOYEES),
                Metric.count("pending_leaves", PENDING_LEAVES),
                Metric.count(
                    "recent_payrolls", PAYROLLS,
                    where=within_days("generated_date", self.recent_days),
                ),
                Metric.count("active_employees", EMPLOYEES, where=field_above("leave_balance", 0)),
            ),
        )

    @property
    def summary(self) -> AdminDashboardSummary:
        view = self.view
        return AdminDashboardSummary(
            total_employees=view["total_employees"],
            pending_leaves=view["pending_leaves"],
            recent_payrolls=view["recent_payrolls"],
            active_employees=view["active_employees"],
            evaluated_at=view.evaluated_at,
        )


# ═════════════════════════════════════════════════════════════════════
# Employee (self-service)
# ═════════════════════════════════════════════════════════════════════


class EmployeeDashboardScreen(_DashboardScreen):
    name: ClassVar[str] = "employee-dashboard"

    async def _mine(self) -> dict[str, Any]:
        employee = await self.employees.current(self.ctx)
        leaves, payrolls = await asyncio.gather(
            self.leaves.list_by_employee(self.ctx, employee.employee_id),
            self.payrolls.list_by_employee(self.ctx, employee.employee_id),
        )
        return {EMPLOYEE: employee, LEAVES: leaves, PAYROLLS: payrolls}

    def fetchers(self) -> Mapping[str, Fetcher]:
        return {"mine": self._mine}

    def spec(self) -> ViewSpec:
        return ViewSpec(
            metrics=(
                Metric.total("leave_balance", "leave_balance", EMPLOYEE),
                Metric.count("pending_leaves", LEAVES, where=field_equals("status", LeaveStatus.pending)),
                Metric.count(
                    "recent_payrolls", PAYROLLS,
                    where=within_days("generated_date", self.recent_days),
                ),
                Metric.count("leaves_taken", LEAVES, where=field_equals("status", LeaveStatus.approved)),
            ),
        )

    @property
    def summary(self) -> EmployeeDashboardSummary:
        view = self.view
        employees = self.store.records(EMPLOYEE)
        return EmployeeDashboardSummary(
            employee=employees[0] if employees else None,
            leave_balance=int(view["leave_balance"]),
            pending_leaves=view["pending_leaves"],
            recent_payrolls=view["recent_payrolls"],
            leaves_taken=view["leaves_taken"],
            recent_leaves=list(self.store.records(LEAVES)[:RECENT_ITEMS]),
            recent_payslips=list(self.store.records(PAYROLLS)[:RECENT_ITEMS]),
            evaluated_at=view.evaluated_at,
        )
