"""Job role gateway — ``/jobroles``."""

from typing import ClassVar

from payroll_console.gateway.base import ResourceGateway
from payroll_console.job_roles.schemas import JobRole


class JobRoleGateway(ResourceGateway[JobRole]):
    path: ClassVar[str] = "/jobroles"
    record_model: ClassVar[type] = JobRole
