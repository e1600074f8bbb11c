"""Resolution of scraped date strings into concrete timestamps.

Collectors frequently omit the year ("5 May", "Jan 3rd"), list a range
("12 - 14 December") or emit placeholder text when a listing has no date.
The resolver always answers with a concrete datetime: it takes the start of
a range, fills in the current year, rolls dates that fall well in the past
over to next year, and falls back to the reference time when nothing can be
parsed.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta
from typing import Any, Callable, Final, Optional

from dateutil import parser as date_parser

from ..config import ROLLOVER_WINDOW_DAYS
from ..utils.datetime_utils import align_timezone, get_current_timestamp

logger = logging.getLogger(__name__)

# Year the parser fills in when the source omits one; anything this old is
# treated as "year missing". A leap year, so "29 February" still parses.
_PARSER_DEFAULT: Final[datetime] = datetime(2000, 1, 1)

_PLACEHOLDER_RE: Final = re.compile(
    r"\b(?:undefined|null|nan|tba|tbc|tbd|no date)\b|\?\?", re.IGNORECASE
)
_ORDINAL_RE: Final = re.compile(r"\b(\d{1,2})(?:st|nd|rd|th)\b", re.IGNORECASE)
_TRAILING_YEAR_RE: Final = re.compile(r",?\s*\d{4}.*$")
_RANGE_SPLIT_RE: Final = re.compile(r"\s+(?:-|–|—|to|until)\s+", re.IGNORECASE)
# "5-7 November", "5–7 Nov 2026"
_DAY_RANGE_RE: Final = re.compile(r"^(\d{1,2})\s*[-–—]\s*\d{1,2}(\s+\D.*)$")
# "Nov 5-7", "November 5–7, 2026"
_MONTH_FIRST_RANGE_RE: Final = re.compile(r"^([A-Za-z]+\.?\s+\d{1,2})\s*[-–—]\s*\d{1,2}\b(.*)$")


class DateResolver:
    """Parse ambiguous date strings relative to a reference time."""

    def __init__(
        self,
        rollover_days: int = ROLLOVER_WINDOW_DAYS,
        clock: Callable[[], datetime] = get_current_timestamp,
    ) -> None:
        self._rollover = timedelta(days=rollover_days)
        self._clock = clock

    def resolve(self, raw: Any, reference_now: Optional[datetime] = None) -> datetime:
        """Return a concrete timestamp for *raw*; never raises."""
        now = reference_now or self._clock()

        if isinstance(raw, datetime):
            return align_timezone(raw, now)
        if not isinstance(raw, str) or not raw.strip():
            return now
        if _PLACEHOLDER_RE.search(raw):
            logger.debug("Placeholder date %r – using reference time", raw)
            return now

        text = range_start(_ORDINAL_RE.sub(r"\1", raw.strip()))
        current_year = now.year

        parsed = _parse(text, _PARSER_DEFAULT)
        if parsed is None or parsed.year < current_year - 1:
            stripped = _TRAILING_YEAR_RE.sub("", text).strip()
            if stripped:
                reparsed = _parse(stripped, datetime(current_year, 1, 1))
                if reparsed is not None:
                    parsed, text = reparsed, stripped

        if parsed is None or not _names_month(text):
            logger.debug("Unparseable date %r – using reference time", raw)
            return now

        if parsed.year < current_year - 1:
            parsed = _with_year(parsed, current_year)

        parsed = align_timezone(parsed, now)

        if parsed < now - self._rollover:
            parsed = _with_year(parsed, parsed.year + 1)

        return parsed


def range_start(text: str) -> str:
    """Reduce a date range to its first date; other text is returned unchanged.

    ``"5 - 7 May"`` and ``"5-7 May"`` give ``"5 May"``, ``"Nov 5-7, 2026"``
    gives ``"Nov 5, 2026"`` and ``"5 May to 7 June"`` gives ``"5 May"``.
    """
    match = _DAY_RANGE_RE.match(text)
    if match:
        return f"{match.group(1)}{match.group(2)}"

    match = _MONTH_FIRST_RANGE_RE.match(text)
    if match:
        return f"{match.group(1)}{match.group(2)}"

    parts = _RANGE_SPLIT_RE.split(text, maxsplit=1)
    if len(parts) != 2:
        return text
    start, end = parts[0].strip(), parts[1].strip()
    if start.isdigit():
        # bare day number; borrow the month (and year) from the end of the range
        month = re.sub(r"^\d{1,2}\b\s*", "", end).strip()
        if month:
            return f"{start} {month}"
    return start


def _parse(text: str, default: datetime) -> Optional[datetime]:
    try:
        return date_parser.parse(text, default=default)
    except (ValueError, OverflowError):
        return None


def _names_month(text: str) -> bool:
    """``False`` when the month in a parse of *text* would come from the parser default.

    Time-only, day-only and year-only strings parse without error but carry
    no calendar date.
    """
    january = _parse(text, datetime(2000, 1, 1))
    december = _parse(text, datetime(2000, 12, 1))
    return january is not None and december is not None and january.month == december.month


def _with_year(value: datetime, year: int) -> datetime:
    try:
        return value.replace(year=year)
    except ValueError:  # 29 February in a non-leap year
        return value.replace(year=year, day=28)


__all__ = ["DateResolver", "range_start"]
