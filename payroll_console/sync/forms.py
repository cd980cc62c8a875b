"""Create/edit form controller shared by every domain form."""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Generic, Mapping, Optional, TypeVar

from pydantic import ValidationError

from payroll_console.common.constants import LoadStatus
from payroll_console.common.exceptions import (
    AppException,
    BusyError,
    ValidationException,
    field_errors,
)
from payroll_console.common.models import Record, WireModel
from payroll_console.gateway.base import ResourceGateway
from payroll_console.gateway.context import SessionContext
from payroll_console.sync.store import CollectionStore, Fetcher

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=Record)

RECORD = "record"


class FormScreen(Generic[RecordT]):
    """
    Holds editable field values, validates them locally with the payload
    model, and submits through the gateway. Field errors from either side
    land in ``field_errors`` keyed by Python field name; the form stays
    editable after any failure.
    """

    name: ClassVar[str] = "form"
    payload_model: ClassVar[type[WireModel]]

    def __init__(
        self,
        ctx: SessionContext,
        gateway: ResourceGateway,
        record_id: Any = None,
    ) -> None:
        self.ctx = ctx
        self.gateway = gateway
        self.record_id = record_id
        self.store = CollectionStore(self.name)
        self.values: dict[str, Any] = self.initial_values()
        self.field_errors: dict[str, list[str]] = {}
        self.error: Optional[AppException] = None
        self.submitting = False
        self.saved: Optional[RecordT] = None

    @property
    def is_edit(self) -> bool:
        return self.record_id is not None

    # ── Overridable hooks ───────────────────────────────────────────

    def initial_values(self) -> dict[str, Any]:
        return {}

    def option_fetchers(self) -> dict[str, Fetcher]:
        """Collections the form needs for its selectors."""
        return {}

    def values_from(self, record: RecordT) -> dict[str, Any]:
        return record.model_dump(include=set(self.payload_model.model_fields))

    def clean(self, values: Mapping[str, Any]) -> dict[str, Any]:
        """Blank inputs mean "not given"."""
        return {
            k: (None if isinstance(v, str) and not v.strip() else v)
            for k, v in values.items()
        }

    def on_change(self, name: str, value: Any) -> None:
        pass

    # ── Loading ─────────────────────────────────────────────────────

    async def load(self) -> bool:
        fetchers = dict(self.option_fetchers())
        if self.is_edit:
            fetchers[RECORD] = lambda: self.gateway.get_by_id(self.ctx, self.record_id)
        if not fetchers:
            return True

        ok = await self.store.load(fetchers)
        if not ok:
            if self.store.status is LoadStatus.failed:
                self.error = self.store.error
            return False

        if self.is_edit:
            record = self.store.records(RECORD)[0]
            self.values.update(self.values_from(record))  # type: ignore[arg-type]
        return True

    def options(self, name: str) -> tuple[Record, ...]:
        return self.store.records(name)

    # ── Editing ─────────────────────────────────────────────────────

    def set_field(self, name: str, value: Any) -> None:
        if self.submitting:
            raise BusyError(detail="The form is being saved.")
        self.values[name] = value
        self.field_errors.pop(name, None)
        self.on_change(name, value)

    def validate(self) -> Optional[WireModel]:
        """Build the payload, or fill ``field_errors`` and return ``None``."""
        try:
            payload = self.payload_model.model_validate(self.clean(self.values))
        except ValidationError as exc:
            self.field_errors = self._by_field_name(field_errors(exc))
            return None
        self.field_errors = {}
        return payload

    async def submit(self) -> Optional[RecordT]:
        if self.submitting:
            raise BusyError(detail="The form is already being saved.")

        self.error = None
        payload = self.validate()
        if payload is None:
            return None

        self.submitting = True
        try:
            if self.is_edit:
                record = await self.gateway.update(self.ctx, self.record_id, payload)
            else:
                record = await self.gateway.create(self.ctx, payload)
        except ValidationException as exc:
            self.field_errors = self._by_field_name(exc.errors or {})
            self.error = exc
            return None
        except AppException as exc:
            logger.warning("%s: submit failed: %s", self.name, exc.detail)
            self.error = exc
            return None
        finally:
            self.submitting = False

        logger.info("%s: saved %s", self.name, record.label)
        self.saved = record
        return record

    def _by_field_name(self, errors: Mapping[str, list[str]]) -> dict[str, list[str]]:
        aliases = {
            info.alias: name
            for name, info in self.payload_model.model_fields.items()
            if info.alias
        }
        return {aliases.get(key, key): list(msgs) for key, msgs in errors.items()}
