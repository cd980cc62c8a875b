"""Employee Pydantic v2 schemas — records and form payloads.

Naming conventions:
  - *Create  → request bodies (write)
  - *Brief   → compact embedded representations
"""

import re
from datetime import date
from decimal import Decimal
from typing import ClassVar, Optional

from pydantic import Field, field_validator

from payroll_console.common.models import Record, WireModel

PHONE_RE = re.compile(r"^\d{10}$")


# ═════════════════════════════════════════════════════════════════════
# Embedded
# ═════════════════════════════════════════════════════════════════════


class JobRoleBrief(WireModel):
    """Job role embedded in an employee record."""

    job_id: Optional[int] = None
    job_title: Optional[str] = None
    base_salary: Optional[Decimal] = None


# ═════════════════════════════════════════════════════════════════════
# Employee
# ═════════════════════════════════════════════════════════════════════


class Employee(Record):
    """Full employee representation."""

    id_field: ClassVar[str] = "employee_id"
    entity_type: ClassVar[str] = "Employee"

    employee_id: int
    user_id: Optional[int] = None
    first_name: str
    last_name: str
    date_of_birth: Optional[date] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    hire_date: Optional[date] = None
    department_id: Optional[int] = None
    department_name: Optional[str] = None
    job_id: Optional[int] = None
    job_title: Optional[str] = None
    job_role: Optional[JobRoleBrief] = None
    leave_balance: int = 0

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def label(self) -> str:
        return self.full_name

    @property
    def base_salary(self) -> Optional[Decimal]:
        """Base salary of the employee's job role, when known."""
        return self.job_role.base_salary if self.job_role else None


class EmployeeCreate(WireModel):
    """Payload for creating or editing an employee."""

    user_id: Optional[int] = None
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    date_of_birth: Optional[date] = None
    phone_number: Optional[str] = None
    address: Optional[str] = Field(None, max_length=500)
    hire_date: date
    department_id: Optional[int] = None
    job_id: Optional[int] = None
    leave_balance: int = Field(20, ge=0)

    @field_validator("first_name", "last_name")
    @classmethod
    def _strip_names(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("This field is required")
        return v

    @field_validator("phone_number")
    @classmethod
    def _check_phone(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        digits = re.sub(r"[\s\-()]", "", v)
        if not PHONE_RE.match(digits):
            raise ValueError("Please enter a valid 10-digit phone number")
        return digits
