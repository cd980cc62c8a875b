"""Payroll gateway — ``/payroll`` plus the process transition."""

from __future__ import annotations

from typing import Any, ClassVar, Optional

from payroll_console.common.constants import Operation
from payroll_console.gateway.base import ResourceGateway, Transition
from payroll_console.gateway.context import SessionContext
from payroll_console.payroll.schemas import Payroll


class PayrollGateway(ResourceGateway[Payroll]):
    path: ClassVar[str] = "/payroll"
    record_model: ClassVar[type] = Payroll

    async def list_by_employee(self, ctx: SessionContext, employee_id: int) -> tuple[Payroll, ...]:
        items = await self.client.get_all(
            ctx, f"{self.path}/employee/{employee_id}", entity_type=self.entity_type,
        )
        return self.parse_many(items)

    async def process_payroll(self, ctx: SessionContext, payroll_id: Any) -> Optional[Payroll]:
        """Mark a pending payroll processed. ``ConflictError`` if it already is."""
        body = await self.client.request(
            ctx, "PUT", f"{self.path}/{payroll_id}/process",
            entity_type=self.entity_type, entity_id=payroll_id,
        )
        return self._parse_optional(body)

    def transitions(self) -> dict[Operation, Transition]:
        return {Operation.process: self.process_payroll}
