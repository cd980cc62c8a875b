"""Collection store — the last loaded snapshot of a screen's collections.

Loads are all-or-nothing: every fetcher of a batch runs concurrently and the
store only changes once all of them have finished. One failure keeps the
previous snapshot and marks the store failed; nothing from the fetchers that
did succeed is applied.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Mapping, Optional, Sequence, Union

from payroll_console.common.constants import LoadStatus
from payroll_console.common.exceptions import AppException
from payroll_console.common.models import Record

logger = logging.getLogger(__name__)

FetchResult = Union[Record, Sequence[Record], Mapping[str, Any]]
Fetcher = Callable[[], Awaitable[FetchResult]]


@dataclass(frozen=True)
class CollectionSnapshot:
    """Read-only view of the store at one instant."""

    collections: Mapping[str, tuple[Record, ...]] = field(default_factory=dict)
    status: LoadStatus = LoadStatus.not_loaded
    error: Optional[AppException] = None
    loaded_at: Optional[datetime] = None

    def records(self, name: str) -> tuple[Record, ...]:
        return self.collections.get(name, ())

    @property
    def is_stale(self) -> bool:
        """Previous data shown while a reload runs or after it failed."""
        return self.loaded_at is not None and self.status is not LoadStatus.ready


class CollectionStore:
    """Holds named record collections plus a load status for one screen."""

    def __init__(self, name: str = "screen") -> None:
        self.name = name
        self._collections: dict[str, tuple[Record, ...]] = {}
        self.status = LoadStatus.not_loaded
        self.error: Optional[AppException] = None
        self.loaded_at: Optional[datetime] = None
        self.revision = 0
        self._generation = 0
        self._latest_load = 0
        self._task: Optional[asyncio.Future] = None
        self._closed = False

    # ── Reads ───────────────────────────────────────────────────────

    @property
    def closed(self) -> bool:
        return self._closed

    def records(self, name: str) -> tuple[Record, ...]:
        return self._collections.get(name, ())

    def get(self, name: str, record_id: Any) -> Optional[Record]:
        return next((r for r in self.records(name) if r.record_id == record_id), None)

    def snapshot(self) -> CollectionSnapshot:
        return CollectionSnapshot(
            collections=MappingProxyType(dict(self._collections)),
            status=self.status,
            error=self.error,
            loaded_at=self.loaded_at,
        )

    # ── Loading ─────────────────────────────────────────────────────

    async def load(self, fetchers: Mapping[str, Fetcher]) -> bool:
        """
        Run every fetcher concurrently and apply the batch atomically.

        Returns ``True`` when the batch was applied. ``False`` means it failed
        (``status``/``error`` say why) or was discarded because the store was
        closed or a newer load superseded it.
        """
        if self._closed:
            raise RuntimeError(f"Store '{self.name}' is closed")

        self._generation += 1
        generation = self._latest_load = self._generation
        previous = self.status
        self.status = LoadStatus.loading
        logger.debug("%s: loading %s", self.name, ", ".join(fetchers))

        names = list(fetchers)
        task = asyncio.ensure_future(
            asyncio.gather(*(_run(fetchers[n]) for n in names), return_exceptions=True),
        )
        self._task = task
        try:
            results = await task
        except asyncio.CancelledError:
            if not self._closed:
                raise
            logger.debug("%s: load cancelled by close()", self.name)
            return False
        finally:
            if self._task is task:
                self._task = None

        if self._closed or generation != self._generation:
            logger.debug("%s: discarding superseded load", self.name)
            if not self._closed and self._latest_load == generation:
                # Superseded by a local change rather than a newer load.
                self.status = previous
            return False

        failures = [r for r in results if isinstance(r, BaseException)]
        unexpected = [f for f in failures if not isinstance(f, AppException)]
        if unexpected:
            self.status = previous
            raise unexpected[0]

        if failures:
            self.status = LoadStatus.failed
            self.error = failures[0]
            logger.warning(
                "%s: load failed (%d of %d fetchers): %s",
                self.name, len(failures), len(names), self.error.detail,
            )
            return False

        batch: dict[str, tuple[Record, ...]] = {}
        for name, result in zip(names, results):
            batch.update(_collections_of(name, result))

        self._collections.update(batch)
        self.status = LoadStatus.ready
        self.error = None
        self.loaded_at = datetime.now(timezone.utc)
        self.revision += 1
        logger.debug(
            "%s: ready (%s)",
            self.name,
            ", ".join(f"{k}={len(v)}" for k, v in batch.items()),
        )
        return True

    async def refresh(self, name: str, fetcher: Fetcher) -> None:
        """
        Re-fetch a single collection. On failure the collection is left as
        it was and the error propagates to the caller.
        """
        if self._closed:
            return
        result = await fetcher()
        if self._closed:
            return
        self._collections.update(_collections_of(name, result))
        self.revision += 1
        self._supersede()

    # ── Local reconciliation ────────────────────────────────────────

    def remove(self, name: str, record_id: Any) -> bool:
        records = self.records(name)
        kept = tuple(r for r in records if r.record_id != record_id)
        if len(kept) == len(records):
            return False
        self._collections[name] = kept
        self.revision += 1
        self._supersede()
        return True

    def replace(self, name: str, record: Record) -> bool:
        """Swap the record with the same id in place; order is kept."""
        records = self.records(name)
        replaced = tuple(record if r.record_id == record.record_id else r for r in records)
        if not any(r.record_id == record.record_id for r in records):
            return False
        self._collections[name] = replaced
        self.revision += 1
        self._supersede()
        return True

    def _supersede(self) -> None:
        """A load already in flight read the service before this change; drop its batch."""
        self._generation += 1

    # ── Lifecycle ───────────────────────────────────────────────────

    def close(self) -> None:
        """Discard the snapshot and cancel any in-flight load."""
        self._closed = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._collections.clear()


async def _run(fetcher: Fetcher) -> FetchResult:
    # Errors raised while building the request are reported like gateway errors.
    return await fetcher()


def _collections_of(name: str, result: Any) -> dict[str, tuple[Record, ...]]:
    """Normalise a fetcher result into ``{collection: records}``."""
    if isinstance(result, Record):
        return {name: (result,)}
    if isinstance(result, Mapping):
        merged: dict[str, tuple[Record, ...]] = {}
        for key, value in result.items():
            merged.update(_collections_of(key, value))
        return merged
    if result is None:
        return {name: ()}
    return {name: tuple(result)}
