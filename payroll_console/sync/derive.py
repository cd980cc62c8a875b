"""Derivation engine — pure projections of a snapshot for display.

``derive()`` never touches the network and never mutates its inputs; calling
it twice with the same snapshot, parameters and evaluation time returns equal
views.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Sequence, Union

from payroll_console.common.filters import (
    apply_filters,
    apply_search,
    apply_sorting,
    get_field,
)
from payroll_console.common.models import Record
from payroll_console.common.pagination import PaginatedResponse, PaginationParams, paginate
from payroll_console.sync.store import CollectionSnapshot

Number = Union[int, Decimal]
Predicate = Callable[[Record, datetime], bool]

SEARCH_KEY = "search"


# ═════════════════════════════════════════════════════════════════════
# View parameters
# ═════════════════════════════════════════════════════════════════════


class ViewParameters(Mapping[str, Any]):
    """
    Immutable filter values owned by a screen (search term, month, year,
    status, ...). ``None`` and blank strings mean "unset".
    """

    __slots__ = ("_values",)

    def __init__(self, values: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> None:
        merged = dict(values or {})
        merged.update(kwargs)
        self._values = MappingProxyType(merged)

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self):
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Mapping):
            return dict(self._values) == dict(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(tuple(sorted((k, repr(v)) for k, v in self._values.items())))

    def __repr__(self) -> str:
        return f"ViewParameters({dict(self._values)!r})"

    @property
    def search(self) -> str:
        return str(self._values.get(SEARCH_KEY) or "")

    def with_values(self, **changes: Any) -> "ViewParameters":
        return ViewParameters(self._values, **changes)

    def cleared(self) -> "ViewParameters":
        return ViewParameters()


# ═════════════════════════════════════════════════════════════════════
# Metrics
# ═════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class Metric:
    """One aggregate figure: a count or a sum over a collection."""

    name: str
    collection: Optional[str] = None
    kind: str = "count"
    field: Optional[str] = None
    where: Optional[Predicate] = None
    filtered: bool = False

    @classmethod
    def count(
        cls,
        name: str,
        collection: Optional[str] = None,
        *,
        where: Optional[Predicate] = None,
        filtered: bool = False,
    ) -> "Metric":
        return cls(name=name, collection=collection, where=where, filtered=filtered)

    @classmethod
    def total(
        cls,
        name: str,
        field: str,
        collection: Optional[str] = None,
        *,
        where: Optional[Predicate] = None,
        filtered: bool = False,
    ) -> "Metric":
        return cls(
            name=name, collection=collection, kind="sum",
            field=field, where=where, filtered=filtered,
        )

    def evaluate(self, records: Sequence[Record], now: datetime) -> Number:
        selected = [r for r in records if self.where is None or self.where(r, now)]
        if self.kind == "count":
            return len(selected)
        return sum(
            (Decimal(str(get_field(r, self.field) or 0)) for r in selected),
            Decimal("0"),
        )


def within_days(field_name: str, days: int) -> Predicate:
    """Records whose *field_name* timestamp lies within ``days × 24h`` of now."""
    window = timedelta(days=days)

    def predicate(record: Record, now: datetime) -> bool:
        value = get_field(record, field_name)
        if value is None:
            return False
        return _as_datetime(value, now.tzinfo) > now - window

    return predicate


def field_equals(field_name: str, expected: Any) -> Predicate:
    expected = getattr(expected, "value", expected)

    def predicate(record: Record, now: datetime) -> bool:
        value = get_field(record, field_name)
        return getattr(value, "value", value) == expected

    return predicate


def field_above(field_name: str, threshold: Number) -> Predicate:
    def predicate(record: Record, now: datetime) -> bool:
        value = get_field(record, field_name)
        return value is not None and value > threshold

    return predicate


# ═════════════════════════════════════════════════════════════════════
# View spec + derived view
# ═════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ViewSpec:
    """
    How one screen projects its snapshot.

    * ``search_fields`` — matched case-insensitively by the ``search`` key.
    * ``numeric_filters`` — parameter key → record field, exact int equality.
    * ``choice_filters`` — parameter key → record field, case-insensitive
      equality (status selectors).
    * ``fixed_filters`` — always applied, ``apply_filters`` suffix syntax.
    """

    collection: Optional[str] = None
    search_fields: tuple[str, ...] = ()
    numeric_filters: Mapping[str, str] = field(default_factory=dict)
    choice_filters: Mapping[str, str] = field(default_factory=dict)
    fixed_filters: Mapping[str, Any] = field(default_factory=dict)
    sort: Optional[str] = None
    metrics: tuple[Metric, ...] = ()


@dataclass(frozen=True)
class DerivedView:
    records: tuple[Record, ...] = ()
    aggregates: Mapping[str, Number] = field(default_factory=dict)
    total: int = 0
    evaluated_at: Optional[datetime] = None

    def __getitem__(self, metric: str) -> Number:
        return self.aggregates[metric]

    @property
    def ids(self) -> tuple[Any, ...]:
        return tuple(r.record_id for r in self.records)

    @property
    def is_empty(self) -> bool:
        return not self.records

    def page(self, page: int = 1, page_size: int = 20) -> PaginatedResponse:
        return paginate(self.records, PaginationParams(page=page, page_size=page_size))


def derive(
    snapshot: CollectionSnapshot,
    params: Mapping[str, Any],
    spec: ViewSpec,
    now: Optional[datetime] = None,
) -> DerivedView:
    """Filter the primary collection and compute the configured metrics."""
    now = now or datetime.now(timezone.utc)

    filtered: tuple[Record, ...] = ()
    if spec.collection is not None:
        filtered = filter_records(snapshot.records(spec.collection), params, spec)

    aggregates: dict[str, Number] = {}
    for metric in spec.metrics:
        if metric.filtered:
            source: Sequence[Record] = filtered
        else:
            source = snapshot.records(metric.collection or spec.collection or "")
        aggregates[metric.name] = metric.evaluate(source, now)

    return DerivedView(
        records=filtered,
        aggregates=MappingProxyType(aggregates),
        total=len(filtered),
        evaluated_at=now,
    )


def filter_records(
    records: Sequence[Record],
    params: Mapping[str, Any],
    spec: ViewSpec,
) -> tuple[Record, ...]:
    items = apply_filters(records, dict(spec.fixed_filters))

    for key, field_name in spec.numeric_filters.items():
        try:
            wanted = parse_int(params.get(key))
        except ValueError:
            # Unparseable selector: nothing can equal it.
            return ()
        if wanted is not None:
            items = apply_filters(items, {field_name: wanted})

    for key, field_name in spec.choice_filters.items():
        wanted = params.get(key)
        if wanted not in (None, ""):
            wanted = str(getattr(wanted, "value", wanted)).lower()
            items = [
                r for r in items
                if str(getattr(get_field(r, field_name), "value", get_field(r, field_name))).lower() == wanted
            ]

    items = apply_search(items, params.get(SEARCH_KEY), spec.search_fields)
    return tuple(apply_sorting(items, spec.sort))


# ── Helpers ─────────────────────────────────────────────────────────

def parse_int(value: Any) -> Optional[int]:
    """Parse a selector value; blanks and ``None`` mean "no filter"."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        raise ValueError(f"Expected a whole number, got {value!r}") from None


def _as_datetime(value: Any, tz: Any) -> datetime:
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime(value.year, value.month, value.day)
    else:
        moment = datetime.fromisoformat(str(value))
    if moment.tzinfo is None and tz is not None:
        moment = moment.replace(tzinfo=tz)
    elif moment.tzinfo is not None and tz is None:
        moment = moment.replace(tzinfo=None)
    return moment
