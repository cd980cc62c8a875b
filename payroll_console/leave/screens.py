"""Leave screens — history, approval queue, and the apply-for-leave form."""

from __future__ import annotations

from typing import Any, ClassVar, Mapping, Optional

from payroll_console.common.constants import LeaveStatus, Operation
from payroll_console.gateway.context import SessionContext
from payroll_console.leave.gateway import LeaveGateway
from payroll_console.leave.schemas import LeaveRequest, LeaveRequestCreate
from payroll_console.sync.derive import Metric, ViewSpec, field_equals
from payroll_console.sync.forms import FormScreen
from payroll_console.sync.screen import Clock, ResourceScreen
from payroll_console.sync.store import Fetcher

LEAVES = "leaves"


class LeaveListScreen(ResourceScreen):
    """All leave requests for admins, the actor's own otherwise."""

    name: ClassVar[str] = "leaves"
    view_spec: ClassVar[ViewSpec] = ViewSpec(
        collection=LEAVES,
        search_fields=("leave_type", "reason"),
        numeric_filters={"employee": "employee_id"},
        choice_filters={"status": "status"},
        sort="-start_date",
        metrics=(
            Metric.count("shown", filtered=True),
            Metric.count("pending", where=field_equals("status", LeaveStatus.pending)),
            Metric.count("approved", where=field_equals("status", LeaveStatus.approved)),
            Metric.count("rejected", where=field_equals("status", LeaveStatus.rejected)),
        ),
    )

    def __init__(
        self,
        ctx: SessionContext,
        gateway: LeaveGateway,
        *,
        clock: Optional[Clock] = None,
    ) -> None:
        self.gateway = gateway
        super().__init__(ctx, clock=clock)

    def fetchers(self) -> Mapping[str, Fetcher]:
        if self.ctx.is_admin:
            return {LEAVES: lambda: self.gateway.list(self.ctx)}
        return {
            LEAVES: lambda: self.gateway.list_by_employee(self.ctx, self.ctx.require_employee_id()),
        }


class LeaveApprovalScreen(ResourceScreen):
    """Pending requests an admin can approve or reject."""

    name: ClassVar[str] = "leave-approval"
    view_spec: ClassVar[ViewSpec] = ViewSpec(
        collection=LEAVES,
        fixed_filters={"status": LeaveStatus.pending},
        search_fields=("leave_type", "reason"),
        sort="applied_date",
        metrics=(Metric.count("pending", filtered=True),),
    )
    actions: ClassVar[frozenset[Operation]] = frozenset({Operation.approve, Operation.reject})

    def __init__(
        self,
        ctx: SessionContext,
        gateway: LeaveGateway,
        *,
        clock: Optional[Clock] = None,
    ) -> None:
        self.gateway = gateway
        super().__init__(ctx, clock=clock)

    def fetchers(self) -> Mapping[str, Fetcher]:
        return {LEAVES: lambda: self.gateway.list_pending(self.ctx)}

    def gateway_for(self, collection: str) -> LeaveGateway:
        return self.gateway

    def can(self, operation: Operation, record: Any) -> bool:
        return (
            super().can(operation, record)
            and self.ctx.is_admin
            and record.status is LeaveStatus.pending
        )

    def request_approve(self, leave: LeaveRequest):
        return self.request(Operation.approve, leave)

    def request_reject(self, leave: LeaveRequest):
        return self.request(Operation.reject, leave)


class LeaveRequestForm(FormScreen[LeaveRequest]):
    name: ClassVar[str] = "leave-form"
    payload_model: ClassVar[type] = LeaveRequestCreate

    def initial_values(self) -> dict[str, Any]:
        return {
            "employee_id": self.ctx.employee_id,
            "leave_type": "",
            "start_date": "",
            "end_date": "",
            "reason": "",
        }
