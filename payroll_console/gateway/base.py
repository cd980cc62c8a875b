"""Generic CRUD gateway — one subclass per domain collection."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, ClassVar, Generic, Optional, TypeVar

from pydantic import ValidationError

from payroll_console.common.constants import Operation
from payroll_console.common.exceptions import MalformedResponseError, field_errors
from payroll_console.common.models import Record, WireModel
from payroll_console.gateway.client import ApiClient
from payroll_console.gateway.context import SessionContext

RecordT = TypeVar("RecordT", bound=Record)

Transition = Callable[[SessionContext, Any], Awaitable[Optional[Record]]]


class ResourceGateway(Generic[RecordT]):
    """
    Remote CRUD for one collection under ``path``.

    Subclasses add their domain transitions and expose them through
    ``transitions()`` so ``perform()`` can dispatch a confirmed operation.
    """

    path: ClassVar[str]
    record_model: ClassVar[type[Record]]

    def __init__(self, client: ApiClient) -> None:
        self.client = client

    @property
    def entity_type(self) -> str:
        return self.record_model.entity_type

    # ── Parsing ─────────────────────────────────────────────────────

    def parse(self, data: Any) -> RecordT:
        try:
            return self.record_model.model_validate(data)  # type: ignore[return-value]
        except ValidationError as exc:
            raise MalformedResponseError(self.entity_type, field_errors(exc)) from exc

    def parse_many(self, items: list[Any]) -> tuple[RecordT, ...]:
        return tuple(self.parse(item) for item in items)

    # ── CRUD ────────────────────────────────────────────────────────

    async def list(self, ctx: SessionContext) -> tuple[RecordT, ...]:
        items = await self.client.get_all(ctx, self.path, entity_type=self.entity_type)
        return self.parse_many(items)

    async def get_by_id(self, ctx: SessionContext, record_id: Any) -> RecordT:
        body = await self.client.request(
            ctx, "GET", f"{self.path}/{record_id}",
            entity_type=self.entity_type, entity_id=record_id,
        )
        return self.parse(body)

    async def create(self, ctx: SessionContext, payload: WireModel) -> RecordT:
        body = await self.client.request(
            ctx, "POST", self.path,
            json=payload.to_wire(), entity_type=self.entity_type,
        )
        return self.parse(body)

    async def update(self, ctx: SessionContext, record_id: Any, payload: WireModel) -> RecordT:
        body = await self.client.request(
            ctx, "PUT", f"{self.path}/{record_id}",
            json=payload.to_wire(), entity_type=self.entity_type, entity_id=record_id,
        )
        return self.parse(body)

    async def delete(self, ctx: SessionContext, record_id: Any) -> None:
        await self.client.request(
            ctx, "DELETE", f"{self.path}/{record_id}",
            entity_type=self.entity_type, entity_id=record_id,
        )

    # ── Confirmed operations ────────────────────────────────────────

    def transitions(self) -> dict[Operation, Transition]:
        """State transitions this collection supports, keyed by operation."""
        return {}

    async def perform(
        self,
        ctx: SessionContext,
        operation: Operation,
        record_id: Any,
    ) -> Optional[RecordT]:
        """
        Run a confirmed *operation* and return the updated record, if the
        service sent one back. Deletes always return ``None``.
        """
        if operation is Operation.delete:
            await self.delete(ctx, record_id)
            return None

        handler = self.transitions().get(operation)
        if handler is None:
            raise ValueError(f"{self.entity_type} does not support '{operation.value}'")
        return await handler(ctx, record_id)  # type: ignore[return-value]

    def _parse_optional(self, body: Any) -> Optional[RecordT]:
        return None if body is None else self.parse(body)
