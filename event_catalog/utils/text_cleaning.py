"""Shared string helpers used by normalisation, deduplication and generation."""

from __future__ import annotations

import re
from typing import Final

# ---------------------------------------------------------------------------
# Title normalisation
# ---------------------------------------------------------------------------

STOP_WORDS: Final[tuple[str, ...]] = ("the", "a", "an", "in", "at", "on", "for")

_PUNCTUATION_RE: Final = re.compile(r"[^\w\s]")
_WHITESPACE_RE: Final = re.compile(r"\s+")
_STOP_WORDS_RE: Final = re.compile(r"\b(?:%s)\b" % "|".join(STOP_WORDS))
_SLUG_RE: Final = re.compile(r"[^a-z0-9]")
_HTML_TAG_RE: Final = re.compile(r"<[^>]*>")


def normalize_title(title: str | None) -> str:
    """Return *title* lower-cased, without punctuation or stop words.

    Whitespace is collapsed before stop words are removed, so a removed
    inner stop word leaves its two separators behind: ``"jazz at night"``
    becomes ``"jazz  night"``. Those separators count towards the title
    length in similarity scoring.
    """
    if not title:
        return ""
    cleaned = _PUNCTUATION_RE.sub("", title.lower().strip())
    cleaned = _WHITESPACE_RE.sub(" ", cleaned)
    return _STOP_WORDS_RE.sub("", cleaned).strip()


def slugify(text: str, max_length: int = 50) -> str:
    """Replace every character outside ``[a-z0-9]`` with ``-`` and truncate."""
    return _SLUG_RE.sub("-", (text or "").lower())[:max_length]


def strip_html(text: str | None) -> str:
    """Drop HTML tags and non-breaking space entities from scraped text."""
    if not text:
        return ""
    cleaned = _HTML_TAG_RE.sub("", text)
    return cleaned.replace("&nbsp;", " ").strip()


# ---------------------------------------------------------------------------
# LLM output cleanup
# ---------------------------------------------------------------------------

def strip_think_blocks(text: str) -> str:
    """Return the content after a closing ``</think>`` tag, if any."""
    if not text:
        return ""

    marker: Final[str] = "</think>"
    idx: int = text.rfind(marker)
    after: str = text if idx == -1 else text[idx + len(marker) :]
    return after.strip()


def sanitize_llm_text(text: str) -> str:
    """Standardise generated text before it is handed back to callers.

    Parameters
    ----------
    text : str
        Raw LLM response.
    """
    cleaned: str = strip_think_blocks(text)
    return cleaned.strip()


__all__ = [
    "STOP_WORDS",
    "normalize_title",
    "slugify",
    "strip_html",
    "strip_think_blocks",
    "sanitize_llm_text",
]
