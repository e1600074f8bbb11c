"""Service layer modules grouping business logic by concern.

This module provides convenience re-exports so that callers can simply do for
example `from event_catalog.services import EventCatalog` without having to
know which underlying module provides the symbol.
"""

from .date_resolver import DateResolver  # noqa: F401
from .normalization import Normalizer  # noqa: F401
from .deduplication import Deduplicator, word_overlap_similarity  # noqa: F401
from .classification import CategoryClassifier, STANDARD_CATEGORIES  # noqa: F401
from .catalog import EventCatalog  # noqa: F401
from .embeddings import generate_embedding  # noqa: F401
from .generation import generate_text  # noqa: F401
from .vector_store import VectorStore, cosine_similarity  # noqa: F401
from .retrieval import RetrievalPipeline, IndexState  # noqa: F401
from .storage import MongoEventRepository, MongoEmbeddingRepository  # noqa: F401

__all__ = [
    "DateResolver",
    "Normalizer",
    "Deduplicator",
    "word_overlap_similarity",
    "CategoryClassifier",
    "STANDARD_CATEGORIES",
    "EventCatalog",
    "generate_embedding",
    "generate_text",
    "VectorStore",
    "cosine_similarity",
    "RetrievalPipeline",
    "IndexState",
    "MongoEventRepository",
    "MongoEmbeddingRepository",
]
