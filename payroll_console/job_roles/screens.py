"""Job role screens — list with search + delete, and the create/edit form."""

from __future__ import annotations

from typing import ClassVar, Mapping, Optional

from payroll_console.common.constants import Operation
from payroll_console.gateway.context import SessionContext
from payroll_console.job_roles.gateway import JobRoleGateway
from payroll_console.job_roles.schemas import JobRole, JobRoleCreate
from payroll_console.sync.derive import Metric, ViewSpec
from payroll_console.sync.forms import FormScreen
from payroll_console.sync.screen import Clock, ResourceScreen
from payroll_console.sync.store import Fetcher

JOB_ROLES = "job_roles"


class JobRoleListScreen(ResourceScreen):
    name: ClassVar[str] = "job-roles"
    view_spec: ClassVar[ViewSpec] = ViewSpec(
        collection=JOB_ROLES,
        search_fields=("job_title", "description"),
        sort="job_title",
        metrics=(
            Metric.count("shown", filtered=True),
            Metric.total("base_salary_total", "base_salary", filtered=True),
        ),
    )
    actions: ClassVar[frozenset[Operation]] = frozenset({Operation.delete})

    def __init__(
        self,
        ctx: SessionContext,
        gateway: JobRoleGateway,
        *,
        clock: Optional[Clock] = None,
    ) -> None:
        self.gateway = gateway
        super().__init__(ctx, clock=clock)

    def fetchers(self) -> Mapping[str, Fetcher]:
        return {JOB_ROLES: lambda: self.gateway.list(self.ctx)}

    def gateway_for(self, collection: str) -> JobRoleGateway:
        return self.gateway


class JobRoleForm(FormScreen[JobRole]):
    name: ClassVar[str] = "job-role-form"
    payload_model: ClassVar[type] = JobRoleCreate

    def initial_values(self) -> dict:
        return {"job_title": "", "base_salary": "", "description": ""}
