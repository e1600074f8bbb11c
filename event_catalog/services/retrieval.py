"""Retrieval-augmented answering over the indexed event catalog.

Indexing embeds each new event once; answering embeds the user's question,
retrieves the closest events from the vector store, and asks the generation
provider to respond using those events as context. Provider or retrieval
failures never reach the caller: they turn into a fixed apology.
"""

from __future__ import annotations

import enum
import logging
import threading
import time
from typing import Any, Callable, Dict, Iterable, List, Mapping, Sequence

from ..clients.openai_client import is_configured as provider_configured
from ..config import INDEXING_DELAY_SECONDS, RETRIEVAL_TOP_K
from ..exceptions import ProviderNotConfiguredError
from ..models import Event, RetrievalAnswer, SearchResult
from ..utils.datetime_utils import format_display_date
from .embeddings import generate_embedding
from .generation import generate_text
from .vector_store import VectorStore

logger = logging.getLogger(__name__)

EmbedFn = Callable[[str], Sequence[float]]
GenerateFn = Callable[[str], str]

NOT_INDEXED_MESSAGE: str = (
    "I don't have any events indexed yet. Please wait for the events to load."
)
FALLBACK_MESSAGE: str = (
    "I'm sorry, I encountered an error processing your request. Please try again."
)

SYSTEM_FRAMING: str = (
    "You are a helpful assistant for an events guide. Your role is to help users "
    "find and learn about upcoming events."
)
RESPONSE_GUIDELINES: str = (
    "Please provide a helpful, conversational response. If the user is asking about "
    "specific events, reference them by name. If they're looking for recommendations, "
    "suggest the most relevant events from the list above. Keep your response concise "
    "and friendly."
)


class IndexState(str, enum.Enum):
    NOT_INDEXED = "not_indexed"
    INDEXING = "indexing"
    READY = "ready"


class RetrievalPipeline:
    """Embed → search → build context → generate."""

    def __init__(
        self,
        vector_store: VectorStore,
        embed: EmbedFn = generate_embedding,
        generate: GenerateFn = generate_text,
        top_k: int = RETRIEVAL_TOP_K,
        throttle_seconds: float = INDEXING_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._store = vector_store
        self._embed = embed
        self._generate = generate
        self.top_k = top_k
        self._throttle = throttle_seconds
        self._sleep = sleep
        self._index_lock = threading.Lock()
        self._indexing = False

    @property
    def state(self) -> IndexState:
        if self._indexing:
            return IndexState.INDEXING
        return IndexState.READY if self._store.size() else IndexState.NOT_INDEXED

    # ------------------------------------------------------------------
    # Indexing
    # ------------------------------------------------------------------
    def index_new(self, events: Iterable[Event]) -> int:
        """Embed and store every event the vector store does not hold yet.

        Returns the number of events indexed. A failing embedding call skips
        that event only; an unconfigured provider stops the whole batch.
        """
        pending = [event for event in events if not self._store.has(event.id)]
        if not pending:
            logger.info("All events already indexed, skipping")
            return 0

        with self._index_lock:
            self._indexing = True
            indexed: List[Event] = []
            vectors: List[Sequence[float]] = []
            try:
                logger.info("Indexing %d new events…", len(pending))
                for position, event in enumerate(pending):
                    if position and self._throttle > 0:
                        self._sleep(self._throttle)
                    try:
                        vectors.append(self._embed(build_searchable_text(event)))
                    except ProviderNotConfiguredError as exc:
                        logger.warning("Embedding provider not configured (%s) – skipping indexing", exc)
                        break
                    except Exception as exc:  # network / provider failure
                        logger.warning("Embedding failed for %s: %s – skipping", event.id, exc)
                        continue
                    indexed.append(event)

                self._store.bulk_upsert(indexed, vectors)
            finally:
                self._indexing = False

        logger.info("Indexed %d of %d new events", len(indexed), len(pending))
        return len(indexed)

    # ------------------------------------------------------------------
    # Answering
    # ------------------------------------------------------------------
    def answer(self, query: str, catalog_snapshot: Iterable[Event]) -> RetrievalAnswer:
        """Answer *query* using the events most similar to it."""
        if self._store.size() == 0:
            return RetrievalAnswer(response_text=NOT_INDEXED_MESSAGE, matched_events=[])

        try:
            query_vector = self._embed(query)
            results = self._store.search(query_vector, self.top_k, list(catalog_snapshot))
            prompt = build_prompt(query, build_context(results))
            response_text = self._generate(prompt)
        except Exception as exc:  # provider, retrieval or dimension failure
            logger.error("Answering query failed: %s", exc, exc_info=True)
            return RetrievalAnswer(response_text=FALLBACK_MESSAGE, matched_events=[])

        return RetrievalAnswer(
            response_text=response_text,
            matched_events=[result.metadata for result in results],
        )

    def stats(self) -> Dict[str, Any]:
        return {
            "indexed_events": self._store.size(),
            "state": self.state.value,
            "provider_configured": provider_configured(),
        }


# ---------------------------------------------------------------------------
# Text builders
# ---------------------------------------------------------------------------

def _display_date(metadata: Mapping[str, Any]) -> str:
    if metadata.get("date_display"):
        return metadata["date_display"]
    start = metadata.get("start_date")
    return format_display_date(start) if start else ""


def build_searchable_text(event: Event) -> str:
    """Concatenate the fields worth embedding, skipping empty ones."""
    parts = [
        event.title,
        event.description,
        event.category,
        event.venue,
        _display_date(event.to_dict()),
        event.price,
    ]
    return " ".join(part for part in parts if part)


def build_context(results: Sequence[SearchResult]) -> str:
    blocks = []
    for index, result in enumerate(results, start=1):
        event = result.metadata
        blocks.append(
            f"Event {index}:\n"
            f"Title: {event.get('title', '')}\n"
            f"Date: {_display_date(event)}\n"
            f"Category: {event.get('category', '')}\n"
            f"Venue: {event.get('venue', '')}\n"
            f"Price: {event.get('price', '')}\n"
            f"Description: {event.get('description', '')}\n"
        )
    return "\n".join(blocks)


def build_prompt(query: str, context: str) -> str:
    return (
        f"{SYSTEM_FRAMING}\n\n"
        "Here are the most relevant events based on the user's query:\n\n"
        f"{context}\n\n"
        f"User Query: {query}\n\n"
        f"{RESPONSE_GUIDELINES}"
    )


__all__ = [
    "RetrievalPipeline",
    "IndexState",
    "NOT_INDEXED_MESSAGE",
    "FALLBACK_MESSAGE",
    "build_searchable_text",
    "build_context",
    "build_prompt",
]
