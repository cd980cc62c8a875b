"""Pagination envelope shared by the service's list endpoints and derived views."""


import math
from typing import Any, Generic, Optional, Sequence, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


# ── Query parameters ────────────────────────────────────────────────

class PaginationParams:
    """Page request sent to (or applied like) a list endpoint."""

    def __init__(
        self,
        page: int = 1,
        page_size: int = 50,
        sort: Optional[str] = None,
    ) -> None:
        if page < 1:
            raise ValueError("page must be >= 1")
        if page_size < 1:
            raise ValueError("page_size must be >= 1")
        self.page = page
        self.page_size = page_size
        self.sort = sort

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    def as_query(self) -> dict[str, Any]:
        query: dict[str, Any] = {"page": self.page, "page_size": self.page_size}
        if self.sort:
            query["sort"] = self.sort
        return query


# ── Pydantic response models ───────────────────────────────────────

class PaginationMeta(BaseModel):
    """Metadata block embedded in every paginated response."""

    page: int
    page_size: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class PaginatedResponse(BaseModel, Generic[T]):
    """Standard envelope: ``{"data": [...], "meta": {...}}``."""

    data: Sequence[T]
    meta: PaginationMeta


# ── In-memory helper ────────────────────────────────────────────────

def paginate(records: Sequence[T], params: PaginationParams) -> PaginatedResponse:
    """Slice *records* into the page described by *params*."""
    total = len(records)
    total_pages = math.ceil(total / params.page_size) if total else 0

    return PaginatedResponse(
        data=list(records[params.offset:params.offset + params.page_size]),
        meta=PaginationMeta(
            page=params.page,
            page_size=params.page_size,
            total=total,
            total_pages=total_pages,
            has_next=params.page < total_pages,
            has_prev=params.page > 1,
        ),
    )
