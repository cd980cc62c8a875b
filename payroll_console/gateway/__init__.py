"""Gateway module — HTTP access to the remote payroll service."""

from payroll_console.gateway.base import ResourceGateway
from payroll_console.gateway.client import ApiClient
from payroll_console.gateway.context import SessionContext

__all__ = [
    "ApiClient",
    "ResourceGateway",
    "SessionContext",
]
