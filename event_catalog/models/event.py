"""Dataclasses describing raw collector input, canonical events and embeddings."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..config import DEFAULT_CATEGORY, DEFAULT_PRICE
from ..utils.field_parsing import (
    coerce_category,
    coerce_link,
    coerce_text,
    coerce_time,
    coerce_venue,
)


@dataclass(slots=True)
class RawEvent:
    """Loosely-typed record handed over by a collector.

    Every field is optional; ``None`` means the collector did not provide it.
    ``date`` and ``end_date`` are kept as the source's own strings (or
    datetimes) and are only resolved by the normaliser.
    """

    id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[Any] = None
    end_date: Optional[Any] = None
    date_display: Optional[str] = None
    time: Optional[str] = None
    price: Optional[str] = None
    category: Optional[str] = None
    image: Optional[str] = None
    link: Optional[str] = None
    venue: Optional[str] = None
    organizer: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "RawEvent":
        """Build a :class:`RawEvent` from a scraper dict, tolerating any missing key."""
        return cls(
            id=coerce_text(data.get("id")),
            title=coerce_text(data.get("title")),
            description=coerce_text(data.get("description")),
            date=_date_value(data.get("date", data.get("startDate"))),
            end_date=_date_value(data.get("endDate", data.get("end_date"))),
            date_display=coerce_text(data.get("dateDisplay", data.get("date_display"))),
            time=coerce_time(data.get("time")),
            price=coerce_text(data.get("price")),
            category=coerce_category(data.get("category")),
            image=coerce_text(data.get("image")),
            link=coerce_link(data.get("link")),
            venue=coerce_venue(data.get("venue") or data.get("location")),
            organizer=coerce_text(data.get("organizer")),
        )


def _date_value(value: Any) -> Optional[Any]:
    if isinstance(value, datetime):
        return value
    return coerce_text(value)


@dataclass(slots=True)
class Event:
    """A canonical, source-independent event."""

    id: str
    title: str
    start_date: datetime
    source: str
    description: str = ""
    end_date: Optional[datetime] = None
    time: str = ""
    price: str = DEFAULT_PRICE
    category: str = DEFAULT_CATEGORY
    venue: str = ""
    organizer: str = ""
    image: str = ""
    link: str = ""
    date_display: Optional[str] = None

    def with_id(self, event_id: str) -> "Event":
        return replace(self, id=event_id)

    def to_dict(self) -> Dict[str, Any]:
        """Plain metadata dict returned to API callers and search results."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "date_display": self.date_display,
            "time": self.time,
            "price": self.price,
            "category": self.category,
            "venue": self.venue,
            "organizer": self.organizer,
            "image": self.image,
            "link": self.link,
            "source": self.source,
        }

    def to_document(self) -> Dict[str, Any]:
        """MongoDB document; the catalog id is stored as ``event_id``."""
        document = self.to_dict()
        document["event_id"] = document.pop("id")
        return document

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "Event":
        return cls(
            id=document["event_id"],
            title=document.get("title", ""),
            start_date=document["start_date"],
            source=document.get("source", ""),
            description=document.get("description", ""),
            end_date=document.get("end_date"),
            time=document.get("time", ""),
            price=document.get("price", DEFAULT_PRICE),
            category=document.get("category", DEFAULT_CATEGORY),
            venue=document.get("venue", ""),
            organizer=document.get("organizer", ""),
            image=document.get("image", ""),
            link=document.get("link", ""),
            date_display=document.get("date_display"),
        )


@dataclass(frozen=True, slots=True)
class EmbeddingRecord:
    """The embedding of one event. Created once, never mutated."""

    event_id: str
    vector: Tuple[float, ...]
    model: str

    @property
    def dimension(self) -> int:
        return len(self.vector)

    def to_document(self) -> Dict[str, Any]:
        return {
            "event_id": self.event_id,
            "embedding": list(self.vector),
            "model": self.model,
            "dimension": self.dimension,
        }


@dataclass(slots=True)
class SearchResult:
    event_id: str
    metadata: Dict[str, Any]
    score: float


@dataclass(slots=True)
class RetrievalAnswer:
    response_text: str
    matched_events: List[Dict[str, Any]] = field(default_factory=list)


@dataclass(slots=True)
class CatalogStats:
    total_events: int
    unique_events: int
    categories: int
    last_ingest: Optional[datetime]
    using_database: bool = False


__all__ = [
    "RawEvent",
    "Event",
    "EmbeddingRecord",
    "SearchResult",
    "RetrievalAnswer",
    "CatalogStats",
]
