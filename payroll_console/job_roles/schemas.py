"""Job role Pydantic v2 schemas — records and form payloads."""

from decimal import Decimal
from typing import ClassVar, Optional

from pydantic import Field, field_validator

from payroll_console.common.models import Record, WireModel


class JobRole(Record):
    """Full job role representation."""

    id_field: ClassVar[str] = "job_id"
    entity_type: ClassVar[str] = "Job Role"

    job_id: int
    job_title: str
    base_salary: Decimal = Decimal("0")
    description: Optional[str] = None

    @property
    def label(self) -> str:
        return f"the {self.job_title} job role"


class JobRoleCreate(WireModel):
    """Payload for creating or editing a job role."""

    job_title: str = Field(..., min_length=1, max_length=100)
    base_salary: Decimal = Field(..., gt=0, decimal_places=2)
    description: Optional[str] = Field(None, max_length=500)

    @field_validator("job_title")
    @classmethod
    def _strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Job title is required")
        return v
