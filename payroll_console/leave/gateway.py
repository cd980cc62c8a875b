"""Leave gateway — ``/leaves`` plus the approve/reject transition."""

from __future__ import annotations

from typing import Any, ClassVar, Optional

from payroll_console.common.constants import LEAVE_DECISIONS, LeaveStatus, Operation
from payroll_console.gateway.base import ResourceGateway, Transition
from payroll_console.gateway.context import SessionContext
from payroll_console.leave.schemas import LeaveRequest, LeaveStatusUpdate


class LeaveGateway(ResourceGateway[LeaveRequest]):
    path: ClassVar[str] = "/leaves"
    record_model: ClassVar[type] = LeaveRequest

    async def list_pending(self, ctx: SessionContext) -> tuple[LeaveRequest, ...]:
        items = await self.client.get_all(ctx, f"{self.path}/pending", entity_type=self.entity_type)
        return self.parse_many(items)

    async def list_by_employee(self, ctx: SessionContext, employee_id: int) -> tuple[LeaveRequest, ...]:
        items = await self.client.get_all(
            ctx, f"{self.path}/employee/{employee_id}", entity_type=self.entity_type,
        )
        return self.parse_many(items)

    async def update_leave_status(
        self,
        ctx: SessionContext,
        leave_id: Any,
        decision: LeaveStatus,
        approver_id: int,
    ) -> Optional[LeaveRequest]:
        """Approve or reject; the service may answer with the updated request or nothing."""
        payload = LeaveStatusUpdate(status=decision, approved_by=approver_id)
        body = await self.client.request(
            ctx, "PUT", f"{self.path}/{leave_id}/status",
            json=payload.to_wire(), entity_type=self.entity_type, entity_id=leave_id,
        )
        return self._parse_optional(body)

    def transitions(self) -> dict[Operation, Transition]:
        def decide(decision: LeaveStatus) -> Transition:
            async def run(ctx: SessionContext, leave_id: Any) -> Optional[LeaveRequest]:
                return await self.update_leave_status(
                    ctx, leave_id, decision, ctx.require_employee_id(),
                )
            return run

        return {op: decide(status) for op, status in LEAVE_DECISIONS.items()}
