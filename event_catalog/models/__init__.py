"""Domain models used across the project."""

from .event import (  # noqa: F401
    CatalogStats,
    EmbeddingRecord,
    Event,
    RawEvent,
    RetrievalAnswer,
    SearchResult,
)

__all__ = [
    "CatalogStats",
    "EmbeddingRecord",
    "Event",
    "RawEvent",
    "RetrievalAnswer",
    "SearchResult",
]
