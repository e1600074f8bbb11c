"""Fuzzy cross-source duplicate detection for canonical events.

Two events are duplicates when they fall on the same calendar day and their
normalised titles are identical, contain one another, or score above a
similarity threshold. The first event seen wins; later duplicates are
dropped without merging fields.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from typing import Callable, Dict, Iterable, List, Set, Tuple

from ..config import DUPLICATE_SIMILARITY_THRESHOLD
from ..models import Event
from ..utils.text_cleaning import normalize_title

logger = logging.getLogger(__name__)

TitleScorer = Callable[[str, str], float]


def word_overlap_similarity(title_a: str, title_b: str) -> float:
    """Share of the longer title's characters covered by words both titles have.

    Only words longer than two characters count. Both inputs are expected to
    be normalised already.
    """
    if len(title_a) > len(title_b):
        longer, shorter = title_a, title_b
    else:
        longer, shorter = title_b, title_a

    if not longer:
        return 1.0

    # split on single spaces; empty tokens left by stop-word removal never count
    longer_words = set(longer.split(" "))
    matches = sum(
        len(word) for word in shorter.split(" ") if len(word) > 2 and word in longer_words
    )
    return matches / len(longer)


class Deduplicator:
    """Collapse near-identical events, keeping the first occurrence."""

    def __init__(
        self,
        threshold: float = DUPLICATE_SIMILARITY_THRESHOLD,
        scorer: TitleScorer = word_overlap_similarity,
    ) -> None:
        self.threshold = threshold
        self._scorer = scorer

    def titles_match(self, title_a: str, title_b: str) -> bool:
        """Compare two already-normalised titles."""
        if title_a == title_b:
            return True
        if title_a in title_b or title_b in title_a:
            return True
        return self._scorer(title_a, title_b) > self.threshold

    def is_duplicate(self, event_a: Event, event_b: Event) -> bool:
        """Return ``True`` if *event_a* and *event_b* describe the same happening."""
        if _calendar_day(event_a) != _calendar_day(event_b):
            return False
        return self.titles_match(normalize_title(event_a.title), normalize_title(event_b.title))

    def dedupe(self, events: Iterable[Event]) -> List[Event]:
        """Return *events* without duplicates, in first-occurrence order."""
        seen_keys: Set[Tuple[str, date]] = set()
        kept_by_day: Dict[date, List[str]] = defaultdict(list)
        result: List[Event] = []
        total = 0

        for event in events:
            total += 1
            title = normalize_title(event.title)
            day = _calendar_day(event)
            key = (title, day)

            if key in seen_keys:
                logger.debug("Duplicate detected: %r from %s", event.title, event.source)
                continue

            if any(self.titles_match(title, kept) for kept in kept_by_day[day]):
                logger.debug("Similar event detected: %r from %s", event.title, event.source)
                continue

            seen_keys.add(key)
            kept_by_day[day].append(title)
            result.append(event)

        if total != len(result):
            logger.info("Removed %d duplicate events", total - len(result))
        return result


def _calendar_day(event: Event) -> date:
    return event.start_date.date()


__all__ = ["Deduplicator", "TitleScorer", "word_overlap_similarity"]
