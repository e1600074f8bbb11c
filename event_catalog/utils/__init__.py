"""Utility functions for the event catalog project.

Re-exports the text-cleaning helpers, datetime utilities and field adapters
so that imports like `from ..utils import normalize_title` work as expected.
"""

from .text_cleaning import (  # noqa: F401
    normalize_title,
    slugify,
    strip_html,
    strip_think_blocks,
    sanitize_llm_text,
)
from .datetime_utils import (  # noqa: F401
    get_current_timestamp,
    format_display_date,
    start_of_day,
    end_of_day,
    align_timezone,
)
from .field_parsing import extract_embedding_values  # noqa: F401

__all__ = [
    "normalize_title",
    "slugify",
    "strip_html",
    "strip_think_blocks",
    "sanitize_llm_text",
    "get_current_timestamp",
    "format_display_date",
    "start_of_day",
    "end_of_day",
    "align_timezone",
    "extract_embedding_values",
]
