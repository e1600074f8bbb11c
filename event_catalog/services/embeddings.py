"""Embedding provider backed by the OpenAI API."""

from __future__ import annotations

import logging
from typing import List

from ..clients.openai_client import get_openai
from ..config import EMBEDDING_MODEL
from ..utils.field_parsing import extract_embedding_values

logger = logging.getLogger(__name__)


def generate_embedding(text: str) -> List[float]:
    """Generate a vector embedding for *text* using the configured model.

    Raises :class:`~event_catalog.exceptions.ProviderNotConfiguredError` when
    no API key is set; SDK errors propagate to the caller.
    """
    logger.debug("Generating embedding for text (first 50 chars): %s…", text[:50])
    response = get_openai().embeddings.create(model=EMBEDDING_MODEL, input=text)
    embedding = extract_embedding_values(response)
    logger.debug("Generated embedding of length %d", len(embedding))
    return embedding

__all__ = ["generate_embedding"]
