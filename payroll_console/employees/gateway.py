"""Employee gateway — ``/employees``."""

from typing import ClassVar

from payroll_console.employees.schemas import Employee
from payroll_console.gateway.base import ResourceGateway
from payroll_console.gateway.context import SessionContext


class EmployeeGateway(ResourceGateway[Employee]):
    path: ClassVar[str] = "/employees"
    record_model: ClassVar[type] = Employee

    async def get_by_user_id(self, ctx: SessionContext, user_id: int) -> Employee:
        """Employee record linked to a login account."""
        body = await self.client.request(
            ctx, "GET", f"{self.path}/user/{user_id}",
            entity_type=self.entity_type, entity_id=user_id,
        )
        return self.parse(body)

    async def current(self, ctx: SessionContext) -> Employee:
        """The employee operating the console."""
        if ctx.employee_id is not None:
            return await self.get_by_id(ctx, ctx.employee_id)
        if ctx.user_id is None:
            ctx.require_employee_id()
        return await self.get_by_user_id(ctx, ctx.user_id)
