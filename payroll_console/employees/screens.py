"""Employee screens — list, profile, and the create/edit form."""

from __future__ import annotations

from typing import Any, ClassVar, Mapping, Optional

from payroll_console.common.constants import RECENT_ITEMS, LeaveStatus, Operation, PayrollStatus
from payroll_console.common.filters import apply_sorting
from payroll_console.config import settings
from payroll_console.departments.gateway import DepartmentGateway
from payroll_console.employees.gateway import EmployeeGateway
from payroll_console.employees.schemas import Employee, EmployeeCreate
from payroll_console.gateway.context import SessionContext
from payroll_console.job_roles.gateway import JobRoleGateway
from payroll_console.leave.gateway import LeaveGateway
from payroll_console.leave.schemas import LeaveRequest
from payroll_console.payroll.gateway import PayrollGateway
from payroll_console.payroll.schemas import Payroll
from payroll_console.sync.derive import Metric, ViewSpec, field_equals
from payroll_console.sync.forms import FormScreen
from payroll_console.sync.screen import Clock, ResourceScreen
from payroll_console.sync.store import Fetcher

EMPLOYEES = "employees"
EMPLOYEE = "employee"
LEAVES = "leaves"
PAYROLLS = "payrolls"


# ═════════════════════════════════════════════════════════════════════
# List
# ═════════════════════════════════════════════════════════════════════


class EmployeeListScreen(ResourceScreen):
    name: ClassVar[str] = "employees"
    view_spec: ClassVar[ViewSpec] = ViewSpec(
        collection=EMPLOYEES,
        search_fields=("first_name", "last_name", "job_title", "department_name"),
        numeric_filters={"department": "department_id", "job": "job_id"},
        sort="last_name",
        metrics=(
            Metric.count("shown", filtered=True),
            Metric.count("total"),
        ),
    )
    actions: ClassVar[frozenset[Operation]] = frozenset({Operation.delete})

    def __init__(
        self,
        ctx: SessionContext,
        gateway: EmployeeGateway,
        *,
        clock: Optional[Clock] = None,
    ) -> None:
        self.gateway = gateway
        super().__init__(ctx, clock=clock)

    def fetchers(self) -> Mapping[str, Fetcher]:
        return {EMPLOYEES: lambda: self.gateway.list(self.ctx)}

    def gateway_for(self, collection: str) -> EmployeeGateway:
        return self.gateway

    def can(self, operation: Operation, record: Any) -> bool:
        return self.ctx.is_admin and super().can(operation, record)


# ═════════════════════════════════════════════════════════════════════
# Profile
# ═════════════════════════════════════════════════════════════════════


class EmployeeProfileScreen(ResourceScreen):
    """One employee with their leave history and payslips, loaded together."""

    name: ClassVar[str] = "employee-profile"
    view_spec: ClassVar[ViewSpec] = ViewSpec(
        metrics=(
            Metric.count("leave_requests", LEAVES),
            Metric.count("leaves_taken", LEAVES, where=field_equals("status", LeaveStatus.approved)),
            Metric.count("pending_leaves", LEAVES, where=field_equals("status", LeaveStatus.pending)),
            Metric.count("payslips", PAYROLLS),
            Metric.total(
                "net_paid", "net_salary", PAYROLLS,
                where=field_equals("status", PayrollStatus.processed),
            ),
        ),
    )

    def __init__(
        self,
        ctx: SessionContext,
        employee_id: int,
        *,
        employees: EmployeeGateway,
        leaves: LeaveGateway,
        payrolls: PayrollGateway,
        clock: Optional[Clock] = None,
    ) -> None:
        self.employee_id = employee_id
        self.employees = employees
        self.leaves = leaves
        self.payrolls = payrolls
        super().__init__(ctx, clock=clock)

    def fetchers(self) -> Mapping[str, Fetcher]:
        return {
            EMPLOYEE: lambda: self.employees.get_by_id(self.ctx, self.employee_id),
            LEAVES: lambda: self.leaves.list_by_employee(self.ctx, self.employee_id),
            PAYROLLS: lambda: self.payrolls.list_by_employee(self.ctx, self.employee_id),
        }

    @property
    def employee(self) -> Optional[Employee]:
        records = self.store.records(EMPLOYEE)
        return records[0] if records else None  # type: ignore[return-value]

    @property
    def recent_leaves(self) -> list[LeaveRequest]:
        return apply_sorting(self.store.records(LEAVES), "-start_date")[:RECENT_ITEMS]  # type: ignore[return-value]

    @property
    def recent_payrolls(self) -> list[Payroll]:
        ordered = apply_sorting(self.store.records(PAYROLLS), "-generated_date")
        return ordered[:RECENT_ITEMS]  # type: ignore[return-value]


# ═════════════════════════════════════════════════════════════════════
# Form
# ═════════════════════════════════════════════════════════════════════


class EmployeeForm(FormScreen[Employee]):
    """Create/edit an employee; department and job role selectors are preloaded."""

    name: ClassVar[str] = "employee-form"
    payload_model: ClassVar[type] = EmployeeCreate

    def __init__(
        self,
        ctx: SessionContext,
        gateway: EmployeeGateway,
        record_id: Any = None,
        *,
        departments: DepartmentGateway,
        job_roles: JobRoleGateway,
    ) -> None:
        self.departments = departments
        self.job_roles = job_roles
        super().__init__(ctx, gateway, record_id)

    def initial_values(self) -> dict[str, Any]:
        return {
            "user_id": "",
            "first_name": "",
            "last_name": "",
            "date_of_birth": "",
            "phone_number": "",
            "address": "",
            "hire_date": "",
            "department_id": "",
            "job_id": "",
            "leave_balance": settings.DEFAULT_LEAVE_BALANCE,
        }

    def option_fetchers(self) -> dict[str, Fetcher]:
        return {
            "departments": lambda: self.departments.list(self.ctx),
            "job_roles": lambda: self.job_roles.list(self.ctx),
        }

    def validate(self) -> Optional[EmployeeCreate]:
        payload = super().validate()
        if not self.is_edit and self.clean(self.values).get("user_id") is None:
            self.field_errors.setdefault("user_id", []).append("User ID is required")
            return None
        return payload  # type: ignore[return-value]
