"""Base model for domain records received from the payroll service."""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Record(WireModel):
    """
    Immutable domain record.

    Subclasses name their identifier field in ``id_field``; ``record_id``
    reads it so collections can be keyed generically.
    """

    model_config = ConfigDict(frozen=True)

    id_field: ClassVar[str] = "id"
    entity_type: ClassVar[str] = "Record"

    @property
    def record_id(self) -> Any:
        return getattr(self, self.id_field)

    @property
    def label(self) -> str:
        """Human-readable name used in confirmation prompts."""
        return f"{self.entity_type} #{self.record_id}"
