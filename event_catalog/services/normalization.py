"""Mapping of raw collector records onto canonical :class:`Event` objects."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Iterable, List, Mapping, Optional, Union

from ..config import DEFAULT_CATEGORY, DEFAULT_PRICE, UNTITLED_EVENT_TITLE
from ..models import Event, RawEvent
from ..utils.datetime_utils import get_current_timestamp
from ..utils.text_cleaning import slugify, strip_html
from .date_resolver import DateResolver

logger = logging.getLogger(__name__)

RawInput = Union[RawEvent, Mapping[str, Any]]


class Normalizer:
    """Turn one source's raw records into canonical events."""

    def __init__(self, date_resolver: Optional[DateResolver] = None) -> None:
        self._dates = date_resolver or DateResolver()

    def normalize(
        self,
        raw: RawInput,
        source: str,
        reference_now: Optional[datetime] = None,
    ) -> Event:
        """Build an :class:`Event` from *raw*; missing fields get safe defaults."""
        if not isinstance(raw, RawEvent):
            raw = RawEvent.from_mapping(raw)
        now = reference_now or get_current_timestamp()

        title = raw.title or UNTITLED_EVENT_TITLE
        native_id = raw.id or slugify(title)

        return Event(
            id=f"{source}-{native_id}",
            title=title,
            description=strip_html(raw.description),
            start_date=self._dates.resolve(raw.date, now),
            end_date=self._dates.resolve(raw.end_date, now) if raw.end_date else None,
            time=raw.time or "",
            price=raw.price or DEFAULT_PRICE,
            category=raw.category or DEFAULT_CATEGORY,
            venue=raw.venue or "",
            organizer=raw.organizer or "",
            image=raw.image or "",
            link=raw.link or "",
            source=source,
            date_display=raw.date_display,
        )

    def normalize_batch(
        self,
        raw_events: Iterable[Any],
        source: str,
        reference_now: Optional[datetime] = None,
    ) -> List[Event]:
        """Normalise every usable record of a batch, skipping malformed entries."""
        now = reference_now or get_current_timestamp()
        events: List[Event] = []
        skipped = 0
        for raw in raw_events:
            if not isinstance(raw, (RawEvent, Mapping)):
                logger.warning("Skipping malformed %s record from %s", type(raw).__name__, source)
                skipped += 1
                continue
            events.append(self.normalize(raw, source, now))

        logger.info("Normalised %d events from %s (%d skipped)", len(events), source, skipped)
        return events


__all__ = ["Normalizer", "RawInput"]
