"""Shared test fixtures — session contexts, fake payroll service, client, factories.

Gateway and screen tests talk to ``tests.fake_service`` through
``httpx.ASGITransport``; controller tests use ``AsyncMock`` gateways.
"""

from __future__ import annotations

import os

# Keep a developer's .env from leaking into the settings singleton.
os.environ.setdefault("API_BASE_URL", "http://test/api/v1")

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, AsyncGenerator, ClassVar, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport

from payroll_console.common.constants import Operation, UserRole
from payroll_console.common.models import Record
from payroll_console.config import Settings
from payroll_console.departments.gateway import DepartmentGateway
from payroll_console.employees.gateway import EmployeeGateway
from payroll_console.gateway.base import ResourceGateway
from payroll_console.gateway.client import ApiClient
from payroll_console.gateway.context import SessionContext
from payroll_console.job_roles.gateway import JobRoleGateway
from payroll_console.leave.gateway import LeaveGateway
from payroll_console.payroll.gateway import PayrollGateway
from tests.fake_service import create_fake_service

BASE_URL = "http://test/api/v1"
TOKEN = "test-token"

# Fixed evaluation instant for derived views.
NOW = datetime(2025, 3, 20, 12, 0, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return NOW


# ── Session contexts ────────────────────────────────────────────────

@pytest.fixture
def admin_ctx() -> SessionContext:
    return SessionContext(token=TOKEN, user_id=10, employee_id=1, role=UserRole.admin, username="admin")


@pytest.fixture
def employee_ctx() -> SessionContext:
    return SessionContext(token=TOKEN, user_id=20, employee_id=2, role=UserRole.employee, username="jane")


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        API_BASE_URL=BASE_URL,
        API_TOKEN=TOKEN,
        USER_ID=10,
        EMPLOYEE_ID=1,
        ROLE="ADMIN",
        RECENT_PAYROLL_DAYS=30,
        LOG_LEVEL="warning",
    )


# ── Wire-format factories (camelCase, as the service sends them) ────

def _make_department(
    *,
    department_id: int = 1,
    name: str = "Engineering",
    description: Optional[str] = "Builds the product",
) -> dict:
    return dict(departmentId=department_id, departmentName=name, description=description)


def _make_job_role(
    *,
    job_id: int = 1,
    title: str = "Software Engineer",
    base_salary: str = "5000.00",
    description: Optional[str] = None,
) -> dict:
    return dict(jobId=job_id, jobTitle=title, baseSalary=base_salary, description=description)


def _make_employee(
    *,
    employee_id: int = 1,
    user_id: Optional[int] = 10,
    first_name: str = "Test",
    last_name: str = "User",
    department_id: Optional[int] = 1,
    department_name: Optional[str] = "Engineering",
    job_id: Optional[int] = 1,
    job_title: Optional[str] = "Software Engineer",
    base_salary: Optional[str] = "5000.00",
    leave_balance: int = 20,
) -> dict:
    job_role = None
    if job_id is not None:
        job_role = dict(jobId=job_id, jobTitle=job_title, baseSalary=base_salary)
    return dict(
        employeeId=employee_id,
        userId=user_id,
        firstName=first_name,
        lastName=last_name,
        phoneNumber="9876543210",
        hireDate="2024-01-15",
        departmentId=department_id,
        departmentName=department_name,
        jobId=job_id,
        jobTitle=job_title if job_id is not None else None,
        jobRole=job_role,
        leaveBalance=leave_balance,
    )


def _make_leave(
    *,
    leave_id: int = 1,
    employee_id: int = 2,
    leave_type: str = "ANNUAL",
    start_date: str = "2025-03-10",
    end_date: str = "2025-03-12",
    status: str = "PENDING",
    reason: str = "Family trip",
    applied_date: str = "2025-03-01",
) -> dict:
    return dict(
        leaveId=leave_id,
        employeeId=employee_id,
        leaveType=leave_type,
        startDate=start_date,
        endDate=end_date,
        reason=reason,
        status=status,
        appliedDate=applied_date,
    )


def _make_payroll(
    *,
    payroll_id: int = 1,
    employee_id: int = 2,
    month: int = 3,
    year: int = 2025,
    base_salary: str = "1000.00",
    allowances: str = "200.00",
    deductions: str = "50.00",
    net_salary: Any = "1150.00",
    status: str = "PENDING",
    generated_date: str = "2025-03-15T09:00:00",
) -> dict:
    data = dict(
        payrollId=payroll_id,
        employeeId=employee_id,
        month=month,
        year=year,
        baseSalary=base_salary,
        allowances=allowances,
        deductions=deductions,
        status=status,
        generatedDate=generated_date,
    )
    if net_salary is not None:
        data["netSalary"] = net_salary
    return data


def default_seed() -> dict[str, list[dict]]:
    return {
        "departments": [
            _make_department(department_id=1, name="Engineering", description="Builds the product"),
            _make_department(department_id=2, name="Finance", description="Pays everyone"),
            _make_department(department_id=3, name="Sales", description=None),
        ],
        "jobroles": [
            _make_job_role(job_id=1, title="Software Engineer", base_salary="5000.00"),
            _make_job_role(job_id=2, title="Accountant", base_salary="4000.00"),
        ],
        "employees": [
            _make_employee(employee_id=1, user_id=10, first_name="Ada", last_name="Admin"),
            _make_employee(
                employee_id=2, user_id=20, first_name="Jane", last_name="Doe",
                department_id=2, department_name="Finance",
                job_id=2, job_title="Accountant", base_salary="4000.00",
                leave_balance=12,
            ),
            _make_employee(
                employee_id=3, user_id=30, first_name="Sam", last_name="Zero",
                job_id=None, leave_balance=0,
            ),
        ],
        "leaves": [
            _make_leave(leave_id=1, employee_id=2, status="PENDING"),
            _make_leave(leave_id=2, employee_id=2, status="APPROVED", start_date="2025-01-06", end_date="2025-01-07"),
            _make_leave(leave_id=3, employee_id=3, status="PENDING", leave_type="SICK", reason="Flu"),
        ],
        "payroll": [
            _make_payroll(payroll_id=1, employee_id=2, status="PENDING"),
            _make_payroll(
                payroll_id=2, employee_id=2, month=1, status="PROCESSED",
                generated_date="2025-01-15T09:00:00",
            ),
            _make_payroll(
                payroll_id=3, employee_id=1, base_salary="5000.00", allowances="0",
                deductions="0", net_salary="5000.00", generated_date="2025-03-18T09:00:00",
            ),
        ],
    }


# ── Fake service + client ───────────────────────────────────────────

@pytest.fixture
def service():
    """Fresh fake payroll service seeded with ``default_seed()``."""
    return create_fake_service(token=TOKEN, seed=default_seed())


@pytest.fixture
def transport(service) -> ASGITransport:
    return ASGITransport(app=service)


@pytest.fixture
async def client(transport) -> AsyncGenerator[ApiClient, None]:
    async with ApiClient(BASE_URL, transport=transport) as api:
        yield api


@pytest.fixture
def departments(client) -> DepartmentGateway:
    return DepartmentGateway(client)


@pytest.fixture
def job_roles(client) -> JobRoleGateway:
    return JobRoleGateway(client)


@pytest.fixture
def employees(client) -> EmployeeGateway:
    return EmployeeGateway(client)


@pytest.fixture
def leaves(client) -> LeaveGateway:
    return LeaveGateway(client)


@pytest.fixture
def payrolls(client) -> PayrollGateway:
    return PayrollGateway(client)


# ── Controller doubles ──────────────────────────────────────────────

class Item(Record):
    """Minimal record for controller tests."""

    entity_type: ClassVar[str] = "Item"

    id: int
    name: str = ""
    status: str = "PENDING"
    amount: Decimal = Decimal("0")


def make_items(*specs: tuple) -> tuple[Item, ...]:
    return tuple(Item(id=i, name=n) for i, n in specs)


def mock_gateway(
    *,
    perform: Any = None,
    listing: Any = (),
    entity_type: str = "Item",
) -> MagicMock:
    """A ``ResourceGateway`` double whose async methods are ``AsyncMock``s."""
    gateway = MagicMock(spec=ResourceGateway)
    gateway.entity_type = entity_type
    if isinstance(perform, BaseException) or callable(perform):
        gateway.perform = AsyncMock(side_effect=perform)
    else:
        gateway.perform = AsyncMock(return_value=perform)
    gateway.list = AsyncMock(return_value=tuple(listing))
    gateway.get_by_id = AsyncMock()
    gateway.delete = AsyncMock(return_value=None)
    return gateway


def perform_calls(gateway: MagicMock) -> list[tuple[Operation, Any]]:
    return [(c.args[1], c.args[2]) for c in gateway.perform.await_args_list]
