"""Category classification into a fixed event taxonomy.

Collector categories are free text ("Events", "Concerts, Live", ...). A
category that already names one of the standard categories is kept;
otherwise an optional LLM is asked, and keyword rules are the final
fallback.
"""

from __future__ import annotations

import logging
import re
import time
from typing import Any, Callable, Dict, Final, Iterable, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

STANDARD_CATEGORIES: Final[Tuple[str, ...]] = (
    "Arts & Culture",
    "Music & Concerts",
    "Sports & Fitness",
    "Food & Dining",
    "Family & Kids",
    "Entertainment",
    "Education & Workshops",
    "Business & Networking",
    "Community & Social",
    "Tourism & Travel",
    "Exhibitions",
    "Festivals",
    "Other",
)

# Checked in order; the first matching pattern wins.
_KEYWORD_RULES: Final[Tuple[Tuple[str, "re.Pattern[str]"], ...]] = tuple(
    (category, re.compile(pattern, re.IGNORECASE))
    for category, pattern in (
        ("Music & Concerts", r"concert|music|jazz|orchestra|performance|singer"),
        ("Arts & Culture", r"art|exhibition|gallery|museum|painting|sculpture"),
        ("Sports & Fitness", r"sport|fitness|run|marathon|football|basketball|yoga"),
        ("Food & Dining", r"food|dining|restaurant|cuisine|chef|cooking"),
        ("Family & Kids", r"kids|children|family|playground"),
        ("Education & Workshops", r"workshop|training|seminar|course|education|learn"),
        ("Business & Networking", r"business|networking|conference|summit"),
        ("Festivals", r"festival|celebration|carnival"),
        ("Tourism & Travel", r"tour|travel|desert|safari|cruise"),
        ("Entertainment", r"comedy|theater|show|entertainment"),
        ("Community & Social", r"community|volunteer|charity|social"),
    )
)


class CategoryClassifier:
    """Map raw event categories onto :data:`STANDARD_CATEGORIES`."""

    def __init__(
        self,
        generate: Optional[Callable[[str], str]] = None,
        delay_seconds: float = 0.1,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._generate = generate
        self._delay = delay_seconds
        self._sleep = sleep

    @staticmethod
    def is_standard(category: Optional[str]) -> bool:
        if not category:
            return False
        normalized = category.strip().lower()
        return any(normalized == std.lower() or std.lower() in normalized for std in STANDARD_CATEGORIES)

    def classify(self, event: Mapping[str, Any]) -> str:
        original = _as_text(event.get("category"))
        if self.is_standard(original):
            return original

        if self._generate is not None:
            try:
                category = self._classify_with_llm(event)
            except Exception as exc:  # provider failure
                logger.warning("LLM classification failed for %r: %s", event.get("title"), exc)
            else:
                if category:
                    return category

        return self.classify_with_rules(event)

    @staticmethod
    def classify_with_rules(event: Mapping[str, Any]) -> str:
        original = _as_text(event.get("category"))
        text = " ".join(
            _as_text(event.get(key)) for key in ("title", "description", "category")
        )
        for category, pattern in _KEYWORD_RULES:
            if pattern.search(text):
                return category
        return original or "Other"

    def classify_batch(self, events: Iterable[Any]) -> List[Any]:
        """Return copies of *events* with ``category`` and ``original_category`` set.

        Entries that are not mappings, or whose classification fails, are
        passed through unchanged.
        """
        results: List[Any] = []
        for event in events:
            if not isinstance(event, Mapping):
                results.append(event)
                continue
            try:
                category = self.classify(event)
            except Exception as exc:
                logger.error("Error classifying event %r: %s", event.get("title"), exc)
                results.append(event)
                continue
            classified: Dict[str, Any] = dict(event)
            classified["original_category"] = event.get("category")
            classified["category"] = category
            results.append(classified)
            if self._generate is not None and self._delay > 0:
                self._sleep(self._delay)
        return results

    def _classify_with_llm(self, event: Mapping[str, Any]) -> Optional[str]:
        prompt = (
            "You are an event categorization expert. Given an event, classify it into ONE "
            f"of these categories:\n{', '.join(STANDARD_CATEGORIES)}\n\n"
            "Event Details:\n"
            f"Title: {_as_text(event.get('title'))}\n"
            f"Description: {_as_text(event.get('description')) or 'N/A'}\n"
            f"Original Category: {_as_text(event.get('category')) or 'N/A'}\n"
            f"Venue: {_as_text(event.get('venue')) or 'N/A'}\n"
            f"Organizer: {_as_text(event.get('organizer')) or 'N/A'}\n\n"
            "Return ONLY the category name, nothing else."
        )
        answer = self._generate(prompt).strip().lower()
        if not answer:
            return None
        for std in STANDARD_CATEGORIES:
            if std.lower() in answer or answer in std.lower():
                return std
        return None


def _as_text(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value)
    return str(value) if value else ""


__all__ = ["CategoryClassifier", "STANDARD_CATEGORIES"]
