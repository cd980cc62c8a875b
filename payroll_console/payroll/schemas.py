"""Payroll Pydantic v2 schemas — records and the generate-payroll payload.

Net salary is a fixed identity, ``base + allowances - deductions``. Records
from the service are filled in when the field is missing and rejected when
it disagrees; payloads always carry the client-side figure.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, ClassVar, Optional

from pydantic import Field, computed_field, model_validator

from payroll_console.common.constants import (
    MAX_PAYROLL_YEAR,
    MIN_PAYROLL_YEAR,
    MONEY_TOLERANCE,
    MONTH_NAMES,
    PayrollStatus,
)
from payroll_console.common.models import Record, WireModel

_TOLERANCE = Decimal(MONEY_TOLERANCE)


def net_salary(base_salary: Any, allowances: Any = 0, deductions: Any = 0) -> Decimal:
    """``base + allowances - deductions``; blanks count as zero."""
    return _money(base_salary) + _money(allowances) - _money(deductions)


def _money(value: Any) -> Decimal:
    if value is None or (isinstance(value, str) and not value.strip()):
        return Decimal("0")
    return Decimal(str(value))


def _pick(data: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


class Payroll(Record):
    """Full payroll representation."""

    id_field: ClassVar[str] = "payroll_id"
    entity_type: ClassVar[str] = "Payroll"

    payroll_id: int
    employee_id: int
    month: int = Field(..., ge=1, le=12)
    year: int
    base_salary: Decimal
    allowances: Decimal = Decimal("0")
    deductions: Decimal = Decimal("0")
    net_salary: Optional[Decimal] = None
    status: PayrollStatus = PayrollStatus.pending
    generated_date: Optional[datetime] = None
    processed_date: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def _fill_net_salary(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        if _pick(data, "netSalary", "net_salary") is not None:
            return data
        try:
            net = net_salary(
                _pick(data, "baseSalary", "base_salary"),
                _pick(data, "allowances"),
                _pick(data, "deductions"),
            )
        except (InvalidOperation, ValueError):
            # Field validation reports the bad amount.
            return data
        return {**data, "netSalary": net}

    @model_validator(mode="after")
    def _check_net_salary(self) -> "Payroll":
        expected = self.base_salary + self.allowances - self.deductions
        if self.net_salary is None or abs(self.net_salary - expected) > _TOLERANCE:
            raise ValueError(
                f"netSalary {self.net_salary} does not equal "
                f"baseSalary + allowances - deductions ({expected})"
            )
        return self

    @property
    def period(self) -> str:
        return f"{MONTH_NAMES[self.month - 1]} {self.year}"

    @property
    def label(self) -> str:
        return f"the {self.period} payroll for Employee #{self.employee_id}"


class PayrollCreate(WireModel):
    """Payload for generating a payroll run."""

    employee_id: int
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=MIN_PAYROLL_YEAR, le=MAX_PAYROLL_YEAR)
    base_salary: Decimal = Field(..., gt=0)
    allowances: Decimal = Field(Decimal("0"), ge=0)
    deductions: Decimal = Field(Decimal("0"), ge=0)

    @computed_field(alias="netSalary")  # type: ignore[prop-decorator]
    @property
    def net_salary(self) -> Decimal:
        return self.base_salary + self.allowances - self.deductions
