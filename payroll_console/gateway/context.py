"""Explicit session context passed into every gateway call."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from payroll_console.common.constants import UserRole
from payroll_console.common.exceptions import AuthError


@dataclass(frozen=True)
class SessionContext:
    """Who is operating the console, and with which credentials."""

    token: str = ""
    user_id: Optional[int] = None
    employee_id: Optional[int] = None
    role: UserRole = UserRole.employee
    username: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.admin

    def headers(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def require_employee_id(self) -> int:
        """Employee id of the actor, e.g. the approver of a leave decision."""
        if self.employee_id is None:
            raise AuthError(
                detail="No employee record is linked to this session.",
                status_code=403,
            )
        return self.employee_id

    def with_employee(self, employee_id: int) -> "SessionContext":
        return SessionContext(
            token=self.token,
            user_id=self.user_id,
            employee_id=employee_id,
            role=self.role,
            username=self.username,
        )
