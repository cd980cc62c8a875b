"""Generic in-memory filtering, sorting, and search utilities."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, Optional, Sequence, TypeVar

T = TypeVar("T")


# ── Sorting ─────────────────────────────────────────────────────────

def apply_sorting(records: Iterable[T], sort: Optional[str]) -> list[T]:
    """
    Parse a sort string like ``"-generated_date"`` and order *records*.

    * Leading ``-`` → descending; otherwise ascending.
    * Records missing the field (or holding ``None``) sort last either way.
    """
    items = list(records)
    if not sort:
        return items

    descending = sort.startswith("-")
    field = sort.lstrip("-")

    present = [r for r in items if get_field(r, field) is not None]
    missing = [r for r in items if get_field(r, field) is None]
    present.sort(key=lambda r: _sort_key(get_field(r, field)), reverse=descending)
    return present + missing


# ── Generic filtering ──────────────────────────────────────────────

def apply_filters(records: Iterable[T], filters: dict[str, Any]) -> list[T]:
    """
    Keep the records matching every entry in *filters*.

    Key suffixes determine the operator:

    ============  ==================
    Suffix        Operator
    ============  ==================
    (none)        ``==``
    ``__ilike``   case-insensitive substring
    ``__from``    ``>=``
    ``__to``      ``<=``
    ``__in``      membership
    ============  ==================

    ``None`` values are silently skipped.
    """
    conditions = [(k, v) for k, v in filters.items() if v is not None]
    return [r for r in records if all(_matches(r, k, v) for k, v in conditions)]


def _matches(record: Any, key: str, value: Any) -> bool:
    if key.endswith("__ilike"):
        actual = get_field(record, key.removesuffix("__ilike"))
        return actual is not None and str(value).lower() in str(actual).lower()

    if key.endswith("__from"):
        actual = get_field(record, key.removesuffix("__from"))
        return actual is not None and _comparable(actual) >= _comparable(value)

    if key.endswith("__to"):
        actual = get_field(record, key.removesuffix("__to"))
        return actual is not None and _comparable(actual) <= _comparable(value)

    if key.endswith("__in"):
        return _plain(get_field(record, key.removesuffix("__in"))) in {_plain(v) for v in value}

    return _plain(get_field(record, key)) == _plain(value)


# ── Free-text search ────────────────────────────────────────────────

def apply_search(
    records: Iterable[T],
    search: Optional[str],
    columns: Sequence[str],
) -> list[T]:
    """
    Case-insensitive substring search across *columns*.

    A record passes when **any** column contains the term. A blank term
    matches everything.
    """
    items = list(records)
    if not search or not search.strip():
        return items

    term = search.strip().lower()
    return [
        r for r in items
        if any(
            (value := get_field(r, name)) is not None and term in str(value).lower()
            for name in columns
        )
    ]


# ── Internal helpers ────────────────────────────────────────────────

def get_field(record: Any, name: str) -> Any:
    """Read *name* from a model or dict; dotted names walk nested values."""
    value = record
    for part in name.split("."):
        if value is None:
            return None
        if isinstance(value, dict):
            value = value.get(part)
        else:
            value = getattr(value, part, None)
    return value


def _plain(value: Any) -> Any:
    # Enums compare by wire value so "PENDING" matches LeaveStatus.pending.
    return getattr(value, "value", value)


def _comparable(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return Decimal(str(value))
    return value


def _sort_key(value: Any) -> Any:
    value = _plain(value)
    if isinstance(value, str):
        return value.lower()
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime(value.year, value.month, value.day)
    return _comparable(value)
