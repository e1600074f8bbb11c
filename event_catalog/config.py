"""Centralised configuration for event_catalog.

Environment variables are loaded once and all related constants are
grouped by concern for easier maintenance.
"""

from __future__ import annotations

import os
from dotenv import load_dotenv

# ---------------------------------------------------------------------------
# Load environment variables from `.env` (if present)
# ---------------------------------------------------------------------------
load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


# ---------------------------------------------------------------------------
# Core credentials (from environment)
# ---------------------------------------------------------------------------
OPENAI_API_KEY: str | None = os.getenv("OPENAI_API_KEY")
MONGODB_URI: str | None = os.getenv("MONGODB_URI")

# ---------------------------------------------------------------------------
# Persistence delegate
# ---------------------------------------------------------------------------
MONGODB_DATABASE: str = os.getenv("MONGODB_DATABASE", "event_catalog")
EVENTS_COLLECTION: str = "events"
EMBEDDINGS_COLLECTION: str = "embeddings"
MONGODB_SERVER_SELECTION_TIMEOUT_MS: int = 5000

# ---------------------------------------------------------------------------
# Embedding / generation provider
# ---------------------------------------------------------------------------
EMBEDDING_MODEL: str = os.getenv("EMBEDDING_MODEL", "text-embedding-3-small")
CHAT_MODEL: str = os.getenv("CHAT_MODEL", "gpt-4o-mini")
CLASSIFY_WITH_LLM: bool = _env_bool("CLASSIFY_WITH_LLM")

# ---------------------------------------------------------------------------
# Reconciliation and retrieval tuning
# ---------------------------------------------------------------------------
DUPLICATE_SIMILARITY_THRESHOLD: float = 0.8
ROLLOVER_WINDOW_DAYS: int = 30
RETRIEVAL_TOP_K: int = 5
# pause between per-event embedding calls (rate limits)
INDEXING_DELAY_SECONDS: float = float(os.getenv("INDEXING_DELAY_SECONDS", "0.1"))

# ---------------------------------------------------------------------------
# Canonical event defaults
# ---------------------------------------------------------------------------
UNTITLED_EVENT_TITLE: str = "Untitled Event"
DEFAULT_PRICE: str = "Free"
DEFAULT_CATEGORY: str = "General"

# ---------------------------------------------------------------------------
# Re-exported names
# ---------------------------------------------------------------------------
__all__ = [
    # credentials
    "OPENAI_API_KEY",
    "MONGODB_URI",
    # persistence
    "MONGODB_DATABASE",
    "EVENTS_COLLECTION",
    "EMBEDDINGS_COLLECTION",
    "MONGODB_SERVER_SELECTION_TIMEOUT_MS",
    # providers
    "EMBEDDING_MODEL",
    "CHAT_MODEL",
    "CLASSIFY_WITH_LLM",
    # tuning
    "DUPLICATE_SIMILARITY_THRESHOLD",
    "ROLLOVER_WINDOW_DAYS",
    "RETRIEVAL_TOP_K",
    "INDEXING_DELAY_SECONDS",
    # defaults
    "UNTITLED_EVENT_TITLE",
    "DEFAULT_PRICE",
    "DEFAULT_CATEGORY",
]
