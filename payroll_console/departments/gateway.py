"""Department gateway — ``/departments``."""

from typing import ClassVar

from payroll_console.departments.schemas import Department
from payroll_console.gateway.base import ResourceGateway


class DepartmentGateway(ResourceGateway[Department]):
    path: ClassVar[str] = "/departments"
    record_model: ClassVar[type] = Department
