"""Console composition root — one shared client, its gateways, and screen factories.

Screens are cheap and short-lived; the console owns the HTTP client so every
screen mounted from it reuses the same connection pool.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from payroll_console.common.constants import UserRole
from payroll_console.config import Settings
from payroll_console.dashboard.screens import AdminDashboardScreen, EmployeeDashboardScreen
from payroll_console.departments.gateway import DepartmentGateway
from payroll_console.departments.screens import DepartmentForm, DepartmentListScreen
from payroll_console.employees.gateway import EmployeeGateway
from payroll_console.employees.screens import EmployeeForm, EmployeeListScreen, EmployeeProfileScreen
from payroll_console.gateway.client import ApiClient
from payroll_console.gateway.context import SessionContext
from payroll_console.job_roles.gateway import JobRoleGateway
from payroll_console.job_roles.screens import JobRoleForm, JobRoleListScreen
from payroll_console.leave.gateway import LeaveGateway
from payroll_console.leave.screens import LeaveApprovalScreen, LeaveListScreen, LeaveRequestForm
from payroll_console.payroll.gateway import PayrollGateway
from payroll_console.payroll.screens import PayrollDetailsScreen, PayrollForm, PayrollListScreen
from payroll_console.sync.screen import Clock, ResourceScreen

logger = logging.getLogger(__name__)


@dataclass
class ConsoleState:
    """UI state that outlives individual screens."""

    sidebar_expanded: bool = True
    active_screen: Optional[str] = None

    def toggle_sidebar(self) -> bool:
        self.sidebar_expanded = not self.sidebar_expanded
        return self.sidebar_expanded


@dataclass
class Gateways:
    departments: DepartmentGateway
    job_roles: JobRoleGateway
    employees: EmployeeGateway
    leaves: LeaveGateway
    payrolls: PayrollGateway

    @classmethod
    def for_client(cls, client: ApiClient) -> "Gateways":
        return cls(
            departments=DepartmentGateway(client),
            job_roles=JobRoleGateway(client),
            employees=EmployeeGateway(client),
            leaves=LeaveGateway(client),
            payrolls=PayrollGateway(client),
        )


def session_from_settings(settings: Settings) -> SessionContext:
    """Build the session from ``API_TOKEN``/``USER_ID``/``EMPLOYEE_ID``/``ROLE``; zero ids mean unset."""
    try:
        role = UserRole(settings.ROLE.upper())
    except ValueError:
        logger.warning("Unknown ROLE %r, falling back to EMPLOYEE", settings.ROLE)
        role = UserRole.employee
    return SessionContext(
        token=settings.API_TOKEN,
        user_id=settings.USER_ID or None,
        employee_id=settings.EMPLOYEE_ID or None,
        role=role,
    )


@dataclass
class Console:
    settings: Settings
    client: ApiClient
    ctx: SessionContext
    gateways: Gateways
    state: ConsoleState = field(default_factory=ConsoleState)
    clock: Optional[Clock] = None

    # ── Lists & dashboards ──────────────────────────────────────────

    def dashboard(self) -> ResourceScreen:
        """Admin or self-service dashboard depending on the session role."""
        screen_cls = AdminDashboardScreen if self.ctx.is_admin else EmployeeDashboardScreen
        return self._mount(screen_cls(
            self.ctx,
            employees=self.gateways.employees,
            leaves=self.gateways.leaves,
            payrolls=self.gateways.payrolls,
            recent_days=self.settings.RECENT_PAYROLL_DAYS,
            clock=self.clock,
        ))

    def departments(self) -> DepartmentListScreen:
        return self._mount(DepartmentListScreen(self.ctx, self.gateways.departments, clock=self.clock))

    def job_roles(self) -> JobRoleListScreen:
        return self._mount(JobRoleListScreen(self.ctx, self.gateways.job_roles, clock=self.clock))

    def employees(self) -> EmployeeListScreen:
        return self._mount(EmployeeListScreen(self.ctx, self.gateways.employees, clock=self.clock))

    def employee_profile(self, employee_id: int) -> EmployeeProfileScreen:
        return self._mount(EmployeeProfileScreen(
            self.ctx, employee_id,
            employees=self.gateways.employees,
            leaves=self.gateways.leaves,
            payrolls=self.gateways.payrolls,
            clock=self.clock,
        ))

    def leaves(self) -> LeaveListScreen:
        return self._mount(LeaveListScreen(self.ctx, self.gateways.leaves, clock=self.clock))

    def leave_approval(self) -> LeaveApprovalScreen:
        return self._mount(LeaveApprovalScreen(self.ctx, self.gateways.leaves, clock=self.clock))

    def payrolls(self) -> PayrollListScreen:
        return self._mount(PayrollListScreen(
            self.ctx, self.gateways.payrolls,
            recent_days=self.settings.RECENT_PAYROLL_DAYS,
            clock=self.clock,
        ))

    def payroll_details(self, payroll_id: int) -> PayrollDetailsScreen:
        return self._mount(PayrollDetailsScreen(
            self.ctx, payroll_id,
            payrolls=self.gateways.payrolls,
            employees=self.gateways.employees,
            clock=self.clock,
        ))

    # ── Forms ───────────────────────────────────────────────────────

    def department_form(self, department_id: Any = None) -> DepartmentForm:
        return DepartmentForm(self.ctx, self.gateways.departments, department_id)

    def job_role_form(self, job_id: Any = None) -> JobRoleForm:
        return JobRoleForm(self.ctx, self.gateways.job_roles, job_id)

    def employee_form(self, employee_id: Any = None) -> EmployeeForm:
        return EmployeeForm(
            self.ctx, self.gateways.employees, employee_id,
            departments=self.gateways.departments,
            job_roles=self.gateways.job_roles,
        )

    def leave_form(self) -> LeaveRequestForm:
        return LeaveRequestForm(self.ctx, self.gateways.leaves)

    def payroll_form(self) -> PayrollForm:
        return PayrollForm(self.ctx, self.gateways.payrolls, employees=self.gateways.employees)

    # ── Lifecycle ───────────────────────────────────────────────────

    def _mount(self, screen):
        self.state.active_screen = screen.name
        return screen

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "Console":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


def create_console(
    settings: Settings,
    *,
    ctx: Optional[SessionContext] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    clock: Optional[Clock] = None,
) -> Console:
    """Wire the client, gateways and session for one console run."""
    client = ApiClient.from_settings(settings, transport=transport)
    ctx = ctx or session_from_settings(settings)
    logger.info(
        "Console ready: %s as %s (%s)",
        settings.api_base_url, ctx.role.value, settings.ENVIRONMENT,
    )
    return Console(
        settings=settings,
        client=client,
        ctx=ctx,
        gateways=Gateways.for_client(client),
        clock=clock,
    )
