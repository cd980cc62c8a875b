"""Department Pydantic v2 schemas — records and form payloads."""

from typing import ClassVar, Optional

from pydantic import Field, field_validator

from payroll_console.common.models import Record, WireModel


class Department(Record):
    """Full department representation."""

    id_field: ClassVar[str] = "department_id"
    entity_type: ClassVar[str] = "Department"

    department_id: int
    department_name: str
    description: Optional[str] = None

    @property
    def label(self) -> str:
        return f"the {self.department_name} department"


class DepartmentCreate(WireModel):
    """Payload for creating or renaming a department."""

    department_name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)

    @field_validator("department_name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Department name is required")
        return v
