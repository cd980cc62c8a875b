"""Department screens — list with search + delete, and the create/edit form."""

from __future__ import annotations

from typing import ClassVar, Mapping, Optional

from payroll_console.common.constants import Operation
from payroll_console.departments.gateway import DepartmentGateway
from payroll_console.departments.schemas import Department, DepartmentCreate
from payroll_console.gateway.context import SessionContext
from payroll_console.sync.derive import Metric, ViewSpec
from payroll_console.sync.forms import FormScreen
from payroll_console.sync.screen import Clock, ResourceScreen
from payroll_console.sync.store import Fetcher

DEPARTMENTS = "departments"


class DepartmentListScreen(ResourceScreen):
    name: ClassVar[str] = "departments"
    view_spec: ClassVar[ViewSpec] = ViewSpec(
        collection=DEPARTMENTS,
        search_fields=("department_name", "description"),
        metrics=(Metric.count("shown", filtered=True), Metric.count("total")),
    )
    actions: ClassVar[frozenset[Operation]] = frozenset({Operation.delete})

    def __init__(
        self,
        ctx: SessionContext,
        gateway: DepartmentGateway,
        *,
        clock: Optional[Clock] = None,
    ) -> None:
        self.gateway = gateway
        super().__init__(ctx, clock=clock)

    def fetchers(self) -> Mapping[str, Fetcher]:
        return {DEPARTMENTS: lambda: self.gateway.list(self.ctx)}

    def gateway_for(self, collection: str) -> DepartmentGateway:
        return self.gateway


class DepartmentForm(FormScreen[Department]):
    name: ClassVar[str] = "department-form"
    payload_model: ClassVar[type] = DepartmentCreate

    def initial_values(self) -> dict:
        return {"department_name": "", "description": ""}
