"""End-to-end ingestion, indexing and query orchestration."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from ..logging_config import logging as _  # noqa: F401  # ensure config applied early
from ..clients.mongodb_client import ping as ping_mongodb
from ..clients.openai_client import is_configured as openai_configured
from ..config import CLASSIFY_WITH_LLM
from ..exceptions import PersistenceError
from ..models import RetrievalAnswer
from ..services.catalog import EventCatalog
from ..services.classification import CategoryClassifier
from ..services.generation import generate_text
from ..services.retrieval import RetrievalPipeline
from ..services.storage import MongoEmbeddingRepository, MongoEventRepository
from ..services.vector_store import VectorStore
from ..utils.datetime_utils import get_current_timestamp

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """The explicitly constructed instances one application works with."""

    catalog: EventCatalog
    vector_store: VectorStore
    retrieval: RetrievalPipeline
    classifier: CategoryClassifier
    using_database: bool = False

    def reset(self) -> None:
        """Drop every event and embedding."""
        self.catalog.clear()
        self.vector_store.clear()


@dataclass
class RunStats:
    started_at: datetime
    finished_at: datetime
    sources: List[str] = field(default_factory=list)
    ingested: int = 0
    unique: int = 0
    indexed: int = 0
    pruned: int = 0
    failed_sources: List[str] = field(default_factory=list)


def build_context(use_database: Optional[bool] = None) -> AppContext:
    """Select the storage strategy once and wire the components together.

    With ``use_database=None`` MongoDB is used when it answers a ping.
    """
    if use_database is None:
        use_database = ping_mongodb()

    event_repository: Optional[MongoEventRepository] = None
    embedding_repository: Optional[MongoEmbeddingRepository] = None
    if use_database:
        try:
            event_repository = MongoEventRepository.from_config()
            embedding_repository = MongoEmbeddingRepository.from_config()
            event_repository.ensure_indexes()
            embedding_repository.ensure_indexes()
        except PersistenceError as exc:
            logger.warning("MongoDB unavailable (%s) – running in memory only", exc)
            event_repository = embedding_repository = None
            use_database = False

    logger.info("Using %s storage", "MongoDB" if use_database else "in-memory")

    vector_store = VectorStore(repository=embedding_repository)
    vector_store.initialize()

    classify_generate = generate_text if CLASSIFY_WITH_LLM and openai_configured() else None
    return AppContext(
        catalog=EventCatalog(repository=event_repository),
        vector_store=vector_store,
        retrieval=RetrievalPipeline(vector_store),
        classifier=CategoryClassifier(generate=classify_generate),
        using_database=bool(use_database),
    )


class IngestionPipeline:
    """Single-flight ingestion: classify → ingest → index → prune."""

    def __init__(self, context: AppContext) -> None:
        self.context = context
        self._lock = threading.Lock()
        self.last_run: Optional[RunStats] = None
        self.last_error: Optional[str] = None

    @property
    def in_progress(self) -> bool:
        return self._lock.locked()

    def run(self, batches: Mapping[str, Iterable[Any]], replace: bool = True) -> Optional[RunStats]:
        """Ingest one batch of raw events per source.

        Returns ``None`` without doing anything when another run is active,
        and ``None`` after logging when the run fails. A source whose batch
        cannot be read is skipped and listed in ``failed_sources``.
        """
        if not self._lock.acquire(blocking=False):
            logger.warning("Ingestion already in progress, skipping…")
            return None

        try:
            return self._run(batches, replace)
        except Exception as exc:
            logger.exception("Ingestion run failed: %s", exc)
            self.last_error = str(exc)
            return None
        finally:
            self._lock.release()

    def _run(self, batches: Mapping[str, Iterable[Any]], replace: bool) -> RunStats:
        catalog = self.context.catalog
        stats = RunStats(started_at=get_current_timestamp(), finished_at=get_current_timestamp())
        self.last_error = None
        logger.info("Starting ingestion run over %d sources", len(batches))

        # every batch is classified before the catalog is touched
        prepared: List[Tuple[str, List[Any]]] = []
        for source, raw_events in batches.items():
            try:
                prepared.append((source, self.context.classifier.classify_batch(raw_events)))
            except Exception as exc:
                logger.error("Skipping source %s: %s", source, exc)
                stats.failed_sources.append(source)
                self.last_error = f"{source}: {exc}"

        if replace and (prepared or not batches):
            catalog.clear()
        elif replace:
            logger.warning("No source batch could be read – keeping the current catalog")

        for source, classified in prepared:
            stats.ingested += len(catalog.ingest(classified, source))
            stats.sources.append(source)

        events = catalog.all()
        stats.unique = len(events)
        stats.indexed = self.context.retrieval.index_new(events)
        stats.pruned = self.context.vector_store.retain(catalog.event_ids())
        stats.finished_at = get_current_timestamp()

        self.last_run = stats
        _log_stats(stats)
        return stats

    def answer(self, query: str) -> RetrievalAnswer:
        return self.context.retrieval.answer(query, self.context.catalog.all())

    def health(self) -> Dict[str, Any]:
        catalog_stats = self.context.catalog.stats()
        return {
            "timestamp": get_current_timestamp(),
            "database": {
                "configured": self.context.using_database,
                "healthy": ping_mongodb() if self.context.using_database else False,
            },
            "events": {
                "total": catalog_stats.total_events,
                "unique": catalog_stats.unique_events,
                "categories": catalog_stats.categories,
                "last_ingest": catalog_stats.last_ingest,
            },
            "retrieval": self.context.retrieval.stats(),
            "ingestion": {
                "in_progress": self.in_progress,
                "last_run": self.last_run.finished_at if self.last_run else None,
                "last_error": self.last_error,
            },
        }


def _log_stats(stats: RunStats) -> None:
    logger.info("=== Event Catalog Ingestion Statistics ===")
    logger.info("Sources: %s", ", ".join(stats.sources) or "none")
    if stats.failed_sources:
        logger.info("Skipped sources: %s", ", ".join(stats.failed_sources))
    logger.info("Events ingested: %d", stats.ingested)
    logger.info("Unique events: %d", stats.unique)
    logger.info("Newly indexed: %d", stats.indexed)
    logger.info("Stale embeddings pruned: %d", stats.pruned)
    logger.info("==========================================")

__all__ = ["AppContext", "RunStats", "IngestionPipeline", "build_context"]
