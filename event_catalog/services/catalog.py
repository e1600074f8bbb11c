"""The authoritative set of canonical events.

The catalog always keeps the events of the current process in memory. When a
persistence delegate is configured, batches are written through to it and
queries read from it, falling back to the in-memory copy whenever the
delegate fails. Every query re-applies deduplication so that the raw
("total") and reconciled ("unique") counts stay observable.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Iterable, List, Optional, Protocol, Sequence, Set, TypeVar

from ..exceptions import PersistenceError
from ..models import CatalogStats, Event
from ..utils.datetime_utils import align_timezone, end_of_day, get_current_timestamp, start_of_day
from .deduplication import Deduplicator
from .normalization import Normalizer

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EventRepository(Protocol):
    """Capabilities the catalog needs from a durable event store."""

    def bulk_upsert(self, events: Sequence[Event]) -> int: ...
    def find_all(self) -> List[Event]: ...
    def find_by_range(self, start: datetime, end: datetime) -> List[Event]: ...
    def find_by_category(self, category: str) -> List[Event]: ...
    def categories(self) -> List[str]: ...
    def count(self) -> int: ...
    def delete_all(self) -> int: ...


class EventCatalog:
    """Owns canonical events; ingestion goes through the normaliser."""

    def __init__(
        self,
        normalizer: Optional[Normalizer] = None,
        deduplicator: Optional[Deduplicator] = None,
        repository: Optional[EventRepository] = None,
        clock: Callable[[], datetime] = get_current_timestamp,
    ) -> None:
        self._normalizer = normalizer or Normalizer()
        self._deduplicator = deduplicator or Deduplicator()
        self._repository = repository
        self._clock = clock
        self._events: List[Event] = []
        self._ids: Set[str] = set()
        self._last_ingest: Optional[datetime] = None

    @property
    def using_database(self) -> bool:
        return self._repository is not None

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------
    def ingest(
        self,
        raw_events: Iterable[Any],
        source: str,
        reference_now: Optional[datetime] = None,
    ) -> List[Event]:
        """Normalise a source batch and merge it into the catalog.

        The batch is fully normalised before the catalog changes, and the
        in-memory merge is a single list swap.
        """
        normalized = self._normalizer.normalize_batch(raw_events, source, reference_now or self._clock())
        batch = self._with_unique_ids(normalized)

        self._events = self._events + batch
        self._ids.update(event.id for event in batch)
        self._last_ingest = self._clock()

        if self._repository is not None and batch:
            try:
                self._repository.bulk_upsert(batch)
            except PersistenceError as exc:
                logger.error(
                    "Persisting %d events from %s failed: %s – kept in memory only",
                    len(batch),
                    source,
                    exc,
                )

        logger.info("Ingested %d events from %s", len(batch), source)
        return batch

    def _with_unique_ids(self, events: List[Event]) -> List[Event]:
        taken = set(self._ids)
        result: List[Event] = []
        for event in events:
            candidate = event.id
            suffix = 2
            while candidate in taken:
                candidate = f"{event.id}-{suffix}"
                suffix += 1
            taken.add(candidate)
            result.append(event if candidate == event.id else event.with_id(candidate))
        return result

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def all(self) -> List[Event]:
        events = self._read(lambda repo: repo.find_all(), lambda: list(self._events))
        return self._reconcile(events)

    def query_range(self, start: datetime, end: datetime) -> List[Event]:
        """Events whose start falls within ``[start, end]``."""

        def from_memory() -> List[Event]:
            return [
                event
                for event in self._events
                if align_timezone(start, event.start_date)
                <= event.start_date
                <= align_timezone(end, event.start_date)
            ]

        events = self._read(lambda repo: repo.find_by_range(start, end), from_memory)
        return self._reconcile(events)

    def query_by_category(self, name: str) -> List[Event]:
        wanted = name.lower()

        def from_memory() -> List[Event]:
            return [event for event in self._events if event.category.lower() == wanted]

        events = self._read(lambda repo: repo.find_by_category(name), from_memory)
        return self._reconcile(events)

    def today(self, now: Optional[datetime] = None) -> List[Event]:
        now = now or self._clock()
        return self.query_range(start_of_day(now), end_of_day(now))

    def upcoming(self, days: int, now: Optional[datetime] = None) -> List[Event]:
        """Events from *now* up to *days* ahead (7 for a week view, 30 for a month)."""
        now = now or self._clock()
        return self.query_range(now, now + timedelta(days=days))

    def categories(self) -> List[str]:
        def from_memory() -> List[str]:
            return sorted({event.category for event in self._events if event.category})

        return self._read(lambda repo: repo.categories(), from_memory)

    def event_ids(self) -> Set[str]:
        """Ids of every stored event, duplicates included."""
        return self._read(lambda repo: {event.id for event in repo.find_all()}, lambda: set(self._ids))

    def stats(self) -> CatalogStats:
        total = self._read(lambda repo: repo.count(), lambda: len(self._events))
        return CatalogStats(
            total_events=total,
            unique_events=len(self.all()),
            categories=len(self.categories()),
            last_ingest=self._last_ingest,
            using_database=self.using_database,
        )

    def clear(self) -> None:
        self._events = []
        self._ids = set()
        self._last_ingest = None
        if self._repository is not None:
            try:
                self._repository.delete_all()
            except PersistenceError as exc:
                logger.error("Clearing persisted events failed: %s", exc)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _read(self, from_repository: Callable[[EventRepository], T], from_memory: Callable[[], T]) -> T:
        if self._repository is None:
            return from_memory()
        try:
            return from_repository(self._repository)
        except PersistenceError as exc:
            logger.warning("Event repository read failed: %s – using in-memory events", exc)
            return from_memory()

    def _reconcile(self, events: List[Event]) -> List[Event]:
        return sorted(self._deduplicator.dedupe(events), key=lambda event: event.start_date)


__all__ = ["EventCatalog", "EventRepository"]
