"""Text generation provider backed by the OpenAI chat completions API."""

from __future__ import annotations

import logging

from ..clients.openai_client import get_openai
from ..config import CHAT_MODEL
from ..utils.text_cleaning import sanitize_llm_text

logger = logging.getLogger(__name__)


def generate_text(prompt: str, *, temperature: float = 0.4, max_tokens: int = 600) -> str:
    """Send *prompt* as a single user message and return the cleaned reply."""
    logger.debug("Generating completion with %s for prompt of %d chars", CHAT_MODEL, len(prompt))
    response = get_openai().chat.completions.create(
        model=CHAT_MODEL,
        messages=[{"role": "user", "content": prompt}],
        temperature=temperature,
        max_tokens=max_tokens,
    )
    content = response.choices[0].message.content or ""
    return sanitize_llm_text(content)

__all__ = ["generate_text"]
