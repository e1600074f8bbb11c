"""Embedding storage with cosine-similarity top-k search.

The store keeps every embedding in an in-process cache and always searches
that cache. With a persistence delegate the cache is loaded on
:meth:`VectorStore.initialize` and reloaded after every successful bulk
write; without one the cache is the store. Writers build a new dict and
swap it in, so a concurrent search sees either the old or the new cache,
never a half-written one.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Sequence, Union

import numpy as np

from ..config import EMBEDDING_MODEL, RETRIEVAL_TOP_K
from ..exceptions import PersistenceError, VectorDimensionError
from ..models import EmbeddingRecord, Event, SearchResult

logger = logging.getLogger(__name__)

MetadataSource = Union[Mapping[str, Union[Event, Mapping[str, Any]]], Iterable[Event]]


class EmbeddingRepository(Protocol):
    """Capabilities the store needs from a durable embedding collection."""

    def upsert(self, record: EmbeddingRecord) -> None: ...
    def bulk_upsert(self, records: Sequence[EmbeddingRecord]) -> int: ...
    def find_all(self) -> List[EmbeddingRecord]: ...
    def delete_except(self, event_ids: Iterable[str]) -> int: ...
    def delete_all(self) -> int: ...


def cosine_similarity(vec_a: Sequence[float], vec_b: Sequence[float]) -> float:
    """Cosine of the angle between two vectors; 0.0 if either has zero norm.

    The result is clamped to ``[-1.0, 1.0]`` and identical vectors score
    exactly ``1.0``. Otherwise the usual float rounding applies.
    """
    a = np.asarray(vec_a, dtype=float)
    b = np.asarray(vec_b, dtype=float)
    if a.shape != b.shape:
        raise VectorDimensionError(f"Vectors must have the same length ({a.size} != {b.size})")

    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    if np.array_equal(a, b):
        return 1.0
    return float(np.clip(np.dot(a, b) / (norm_a * norm_b), -1.0, 1.0))


@dataclass(frozen=True, slots=True)
class _Entry:
    record: EmbeddingRecord
    # metadata captured at index time; superseded by live catalog metadata
    metadata: Optional[Dict[str, Any]] = None


class VectorStore:
    """Event embeddings keyed by event id."""

    def __init__(
        self,
        repository: Optional[EmbeddingRepository] = None,
        model: str = EMBEDDING_MODEL,
    ) -> None:
        self._repository = repository
        self.model = model
        self._cache: Dict[str, _Entry] = {}
        self._write_lock = threading.Lock()

    @property
    def persistent(self) -> bool:
        return self._repository is not None

    def initialize(self) -> None:
        """Load persisted embeddings into the cache (no-op in memory mode)."""
        if self._repository is None:
            return
        with self._write_lock:
            loaded = self._load(self._cache)
            if loaded is not None:
                self._cache = loaded
        logger.info("Vector store initialised with %d embeddings", len(self._cache))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def upsert(
        self,
        event_id: str,
        vector: Sequence[float],
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        record = self._record(event_id, vector)
        with self._write_lock:
            if self._repository is not None:
                try:
                    self._repository.upsert(record)
                except PersistenceError as exc:
                    logger.error("Persisting embedding for %s failed: %s – kept in memory", event_id, exc)
            self._cache = {**self._cache, event_id: _Entry(record, metadata)}

    def bulk_upsert(self, events: Sequence[Event], vectors: Sequence[Sequence[float]]) -> None:
        """Store one vector per event; ``events[i]`` pairs with ``vectors[i]``."""
        if len(events) != len(vectors):
            raise ValueError(f"Got {len(events)} events but {len(vectors)} vectors")
        if not events:
            return

        entries = {
            event.id: _Entry(self._record(event.id, vector), event.to_dict())
            for event, vector in zip(events, vectors)
        }
        with self._write_lock:
            local = {**self._cache, **entries}
            if self._repository is None:
                self._cache = local
                return

            try:
                self._repository.bulk_upsert([entry.record for entry in entries.values()])
            except PersistenceError as exc:
                logger.error("Persisting %d embeddings failed: %s – kept in memory", len(entries), exc)
                self._cache = local
                return

            refreshed = self._load(local)
            self._cache = local if refreshed is None else refreshed
        logger.info("Stored %d embeddings (%d total)", len(entries), len(self._cache))

    def retain(self, event_ids: Iterable[str]) -> int:
        """Drop embeddings whose event is no longer in the catalog; returns the count."""
        keep = set(event_ids)
        with self._write_lock:
            stale = [event_id for event_id in self._cache if event_id not in keep]
            if not stale:
                return 0
            self._cache = {k: v for k, v in self._cache.items() if k in keep}
            if self._repository is not None:
                try:
                    self._repository.delete_except(keep)
                except PersistenceError as exc:
                    logger.error("Pruning persisted embeddings failed: %s", exc)
        logger.info("Pruned %d stale embeddings", len(stale))
        return len(stale)

    def clear(self) -> None:
        with self._write_lock:
            self._cache = {}
            if self._repository is not None:
                try:
                    self._repository.delete_all()
                except PersistenceError as exc:
                    logger.error("Clearing persisted embeddings failed: %s", exc)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def has(self, event_id: str) -> bool:
        return event_id in self._cache

    def size(self) -> int:
        return len(self._cache)

    def search(
        self,
        query_vector: Sequence[float],
        k: int = RETRIEVAL_TOP_K,
        current_metadata: Optional[MetadataSource] = None,
    ) -> List[SearchResult]:
        """Top *k* events by cosine similarity to *query_vector*.

        When *current_metadata* is given, results carry that live metadata and
        embeddings whose event is absent from it are skipped as stale.
        Raises :class:`VectorDimensionError` if the query's dimensionality
        differs from a stored vector's.
        """
        snapshot = self._cache
        if not snapshot or k <= 0:
            return []

        live = _index_metadata(current_metadata)
        results: List[SearchResult] = []
        for event_id, entry in snapshot.items():
            if live is None:
                metadata = entry.metadata or {"id": event_id}
            else:
                metadata = live.get(event_id)
                if metadata is None:
                    continue
            score = cosine_similarity(query_vector, entry.record.vector)
            results.append(SearchResult(event_id=event_id, metadata=metadata, score=score))

        # list.sort is stable, so ties keep insertion order
        results.sort(key=lambda result: result.score, reverse=True)
        return results[:k]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _record(self, event_id: str, vector: Sequence[float]) -> EmbeddingRecord:
        return EmbeddingRecord(event_id=event_id, vector=tuple(float(x) for x in vector), model=self.model)

    def _load(self, previous: Dict[str, _Entry]) -> Optional[Dict[str, _Entry]]:
        """Read every persisted record, keeping index-time metadata we already hold."""
        try:
            records = self._repository.find_all()
        except PersistenceError as exc:
            logger.error("Refreshing embedding cache failed: %s – keeping current cache", exc)
            return None
        loaded: Dict[str, _Entry] = {}
        for record in records:
            known = previous.get(record.event_id)
            loaded[record.event_id] = _Entry(record, known.metadata if known else None)
        return loaded


def _index_metadata(source: Optional[MetadataSource]) -> Optional[Dict[str, Dict[str, Any]]]:
    if source is None:
        return None
    if isinstance(source, Mapping):
        return {key: _as_metadata(value) for key, value in source.items()}
    return {event.id: event.to_dict() for event in source}


def _as_metadata(value: Union[Event, Mapping[str, Any]]) -> Dict[str, Any]:
    if isinstance(value, Event):
        return value.to_dict()
    return dict(value)


__all__ = ["VectorStore", "EmbeddingRepository", "cosine_similarity"]
