"""Persistence delegates: MongoDB collections for events and embeddings.

Both repositories translate :class:`pymongo.errors.PyMongoError` into
:class:`PersistenceError` so callers can fall back to their in-memory path
without depending on the driver.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Iterable, List, Sequence

from pymongo import ASCENDING, UpdateOne
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from ..clients.mongodb_client import get_database
from ..config import EMBEDDING_MODEL, EMBEDDINGS_COLLECTION, EVENTS_COLLECTION
from ..exceptions import PersistenceError
from ..models import EmbeddingRecord, Event
from ..utils.field_parsing import extract_embedding_values

logger = logging.getLogger(__name__)


class MongoEventRepository:
    """Event documents keyed by ``event_id``."""

    def __init__(self, collection: Collection) -> None:
        self._collection = collection

    @classmethod
    def from_config(cls) -> "MongoEventRepository":
        return cls(get_database()[EVENTS_COLLECTION])

    def ensure_indexes(self) -> None:
        try:
            self._collection.create_index("event_id", unique=True)
            self._collection.create_index([("start_date", ASCENDING), ("category", ASCENDING)])
            self._collection.create_index([("source", ASCENDING), ("start_date", ASCENDING)])
        except PyMongoError as exc:
            raise PersistenceError(f"Could not create event indexes: {exc}") from exc

    def bulk_upsert(self, events: Sequence[Event]) -> int:
        """Insert or replace *events*; returns the number of documents written."""
        if not events:
            return 0
        operations = [
            UpdateOne({"event_id": event.id}, {"$set": event.to_document()}, upsert=True)
            for event in events
        ]
        try:
            result = self._collection.bulk_write(operations, ordered=False)
        except PyMongoError as exc:
            raise PersistenceError(f"Event bulk upsert failed: {exc}") from exc
        written = result.upserted_count + result.modified_count
        logger.info("Upserted %d event documents to MongoDB", written)
        return written

    def find_all(self) -> List[Event]:
        return self._find({})

    def find_by_range(self, start: datetime, end: datetime) -> List[Event]:
        return self._find({"start_date": {"$gte": start, "$lte": end}})

    def find_by_category(self, category: str) -> List[Event]:
        pattern = re.compile(f"^{re.escape(category)}$", re.IGNORECASE)
        return self._find({"category": pattern})

    def categories(self) -> List[str]:
        try:
            values = self._collection.distinct("category")
        except PyMongoError as exc:
            raise PersistenceError(f"Category lookup failed: {exc}") from exc
        return sorted(value for value in values if value)

    def count(self) -> int:
        try:
            return self._collection.count_documents({})
        except PyMongoError as exc:
            raise PersistenceError(f"Event count failed: {exc}") from exc

    def delete_all(self) -> int:
        try:
            return self._collection.delete_many({}).deleted_count
        except PyMongoError as exc:
            raise PersistenceError(f"Event delete failed: {exc}") from exc

    def _find(self, query: dict) -> List[Event]:
        try:
            documents = list(self._collection.find(query).sort("start_date", ASCENDING))
        except PyMongoError as exc:
            raise PersistenceError(f"Event query failed: {exc}") from exc
        return [Event.from_document(document) for document in documents]


class MongoEmbeddingRepository:
    """One embedding document per event id."""

    def __init__(self, collection: Collection) -> None:
        self._collection = collection

    @classmethod
    def from_config(cls) -> "MongoEmbeddingRepository":
        return cls(get_database()[EMBEDDINGS_COLLECTION])

    def ensure_indexes(self) -> None:
        try:
            self._collection.create_index("event_id", unique=True)
        except PyMongoError as exc:
            raise PersistenceError(f"Could not create embedding indexes: {exc}") from exc

    def upsert(self, record: EmbeddingRecord) -> None:
        try:
            self._collection.update_one(
                {"event_id": record.event_id}, {"$set": record.to_document()}, upsert=True
            )
        except PyMongoError as exc:
            raise PersistenceError(f"Embedding upsert failed for {record.event_id}: {exc}") from exc

    def bulk_upsert(self, records: Sequence[EmbeddingRecord]) -> int:
        if not records:
            return 0
        operations = [
            UpdateOne({"event_id": record.event_id}, {"$set": record.to_document()}, upsert=True)
            for record in records
        ]
        try:
            result = self._collection.bulk_write(operations, ordered=False)
        except PyMongoError as exc:
            raise PersistenceError(f"Embedding bulk upsert failed: {exc}") from exc
        return result.upserted_count + result.modified_count

    def find_all(self) -> List[EmbeddingRecord]:
        try:
            documents = list(self._collection.find({}, {"event_id": 1, "embedding": 1, "model": 1}))
        except PyMongoError as exc:
            raise PersistenceError(f"Embedding load failed: {exc}") from exc

        records: List[EmbeddingRecord] = []
        for document in documents:
            try:
                vector = extract_embedding_values(document.get("embedding"))
            except ValueError as exc:
                logger.warning("Ignoring unreadable embedding for %s: %s", document.get("event_id"), exc)
                continue
            records.append(
                EmbeddingRecord(
                    event_id=document["event_id"],
                    vector=tuple(vector),
                    model=document.get("model", EMBEDDING_MODEL),
                )
            )
        return records

    def delete_except(self, event_ids: Iterable[str]) -> int:
        """Remove embeddings whose event id is not in *event_ids*."""
        try:
            result = self._collection.delete_many({"event_id": {"$nin": list(event_ids)}})
        except PyMongoError as exc:
            raise PersistenceError(f"Embedding prune failed: {exc}") from exc
        return result.deleted_count

    def count(self) -> int:
        try:
            return self._collection.count_documents({})
        except PyMongoError as exc:
            raise PersistenceError(f"Embedding count failed: {exc}") from exc

    def delete_all(self) -> int:
        try:
            return self._collection.delete_many({}).deleted_count
        except PyMongoError as exc:
            raise PersistenceError(f"Embedding delete failed: {exc}") from exc


__all__ = ["MongoEventRepository", "MongoEmbeddingRepository"]
