"""Payroll screens — list with month/year filters, details, and generation form."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, ClassVar, Mapping, Optional

from payroll_console.common.constants import Operation, PayrollStatus
from payroll_console.config import settings
from payroll_console.employees.gateway import EmployeeGateway
from payroll_console.employees.schemas import Employee
from payroll_console.gateway.context import SessionContext
from payroll_console.payroll.gateway import PayrollGateway
from payroll_console.payroll.schemas import Payroll, PayrollCreate, net_salary
from payroll_console.sync.derive import Metric, ViewSpec, field_equals, within_days
from payroll_console.sync.forms import FormScreen
from payroll_console.sync.screen import Clock, ResourceScreen
from payroll_console.sync.store import Fetcher

PAYROLLS = "payrolls"
PAYROLL = "payroll"
EMPLOYEE = "employee"
EMPLOYEES = "employees"


def _pending_admin_only(screen: ResourceScreen, operation: Operation, record: Any) -> bool:
    return (
        operation in screen.actions
        and screen.ctx.is_admin
        and record.status is PayrollStatus.pending
    )


# ═════════════════════════════════════════════════════════════════════
# List
# ═════════════════════════════════════════════════════════════════════


class PayrollListScreen(ResourceScreen):
    """Every payroll for admins, the actor's own payslips otherwise."""

    name: ClassVar[str] = "payrolls"
    actions: ClassVar[frozenset[Operation]] = frozenset({Operation.process})

    def __init__(
        self,
        ctx: SessionContext,
        gateway: PayrollGateway,
        *,
        recent_days: Optional[int] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.gateway = gateway
        self.recent_days = recent_days or settings.RECENT_PAYROLL_DAYS
        self._spec = ViewSpec(
            collection=PAYROLLS,
            numeric_filters={"month": "month", "year": "year", "employee": "employee_id"},
            choice_filters={"status": "status"},
            sort="-generated_date",
            metrics=(
                Metric.count("shown", filtered=True),
                Metric.total("net_total", "net_salary", filtered=True),
                Metric.count("pending", where=field_equals("status", PayrollStatus.pending), filtered=True),
                Metric.count("recent", where=within_days("generated_date", self.recent_days)),
            ),
        )
        super().__init__(ctx, clock=clock)

    def spec(self) -> ViewSpec:
        return self._spec

    def fetchers(self) -> Mapping[str, Fetcher]:
        if self.ctx.is_admin:
            return {PAYROLLS: lambda: self.gateway.list(self.ctx)}
        return {
            PAYROLLS: lambda: self.gateway.list_by_employee(self.ctx, self.ctx.require_employee_id()),
        }

    def gateway_for(self, collection: str) -> PayrollGateway:
        return self.gateway

    def can(self, operation: Operation, record: Any) -> bool:
        return _pending_admin_only(self, operation, record)

    def request_process(self, payroll: Payroll):
        return self.request(Operation.process, payroll)


# ═════════════════════════════════════════════════════════════════════
# Details (payslip)
# ═════════════════════════════════════════════════════════════════════


class PayrollDetailsScreen(ResourceScreen):
    """One payroll and the employee it pays; the employee read depends on the payroll."""

    name: ClassVar[str] = "payroll-details"
    view_spec: ClassVar[ViewSpec] = ViewSpec(collection=PAYROLL)
    actions: ClassVar[frozenset[Operation]] = frozenset({Operation.process})

    def __init__(
        self,
        ctx: SessionContext,
        payroll_id: int,
        *,
        payrolls: PayrollGateway,
        employees: EmployeeGateway,
        clock: Optional[Clock] = None,
    ) -> None:
        self.payroll_id = payroll_id
        self.payrolls = payrolls
        self.employees = employees
        super().__init__(ctx, clock=clock)

    async def _details(self) -> dict[str, Any]:
        payroll = await self.payrolls.get_by_id(self.ctx, self.payroll_id)
        employee = await self.employees.get_by_id(self.ctx, payroll.employee_id)
        return {PAYROLL: payroll, EMPLOYEE: employee}

    def fetchers(self) -> Mapping[str, Fetcher]:
        return {"details": self._details}

    def gateway_for(self, collection: str) -> PayrollGateway:
        return self.payrolls

    def can(self, operation: Operation, record: Any) -> bool:
        return _pending_admin_only(self, operation, record)

    @property
    def payroll(self) -> Optional[Payroll]:
        records = self.store.records(PAYROLL)
        return records[0] if records else None  # type: ignore[return-value]

    @property
    def employee(self) -> Optional[Employee]:
        records = self.store.records(EMPLOYEE)
        return records[0] if records else None  # type: ignore[return-value]

    def request_process(self):
        if self.payroll is None:
            raise ValueError("Payroll is not loaded")
        return self.request(Operation.process, self.payroll)


# ═════════════════════════════════════════════════════════════════════
# Generate payroll form
# ═════════════════════════════════════════════════════════════════════


class PayrollForm(FormScreen[Payroll]):
    """Generate a payroll; picking an employee pre-fills their role's base salary."""

    name: ClassVar[str] = "payroll-form"
    payload_model: ClassVar[type] = PayrollCreate

    def __init__(
        self,
        ctx: SessionContext,
        gateway: PayrollGateway,
        *,
        employees: EmployeeGateway,
        today: Optional[datetime] = None,
    ) -> None:
        self.employees = employees
        self._today = today or datetime.now()
        super().__init__(ctx, gateway)

    def initial_values(self) -> dict[str, Any]:
        return {
            "employee_id": "",
            "month": self._today.month,
            "year": self._today.year,
            "base_salary": "",
            "allowances": "0",
            "deductions": "0",
        }

    def option_fetchers(self) -> dict[str, Fetcher]:
        return {EMPLOYEES: lambda: self.employees.list(self.ctx)}

    def on_change(self, name: str, value: Any) -> None:
        if name != "employee_id":
            return
        employee = self._employee(value)
        base = employee.base_salary if employee is not None else None
        self.values["base_salary"] = "" if base is None else base

    def _employee(self, value: Any) -> Optional[Employee]:
        try:
            wanted = int(value)
        except (TypeError, ValueError):
            return None
        return next(
            (e for e in self.options(EMPLOYEES) if e.record_id == wanted),  # type: ignore[misc]
            None,
        )

    @property
    def net_salary_preview(self) -> Decimal:
        """Live ``base + allowances - deductions``; unparseable amounts count as zero."""
        amounts = []
        for key in ("base_salary", "allowances", "deductions"):
            try:
                amounts.append(net_salary(self.values.get(key)))
            except (InvalidOperation, ValueError):
                amounts.append(Decimal("0"))
        base, allowances, deductions = amounts
        return base + allowances - deductions
