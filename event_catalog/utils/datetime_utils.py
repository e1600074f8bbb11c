"""Utility functions for working with dates and times."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone

__all__ = [
    "get_current_timestamp",
    "format_display_date",
    "start_of_day",
    "end_of_day",
    "align_timezone",
]


def get_current_timestamp() -> datetime:
    """Return the current UTC datetime with micro-second precision.

    This object can be stored directly in MongoDB where it will be written as
    a BSON Date.
    """
    return datetime.now(tz=timezone.utc)


def format_display_date(value: datetime | date) -> str:
    """Human-readable date used in searchable text and LLM context, e.g. ``5 May 2026``."""
    return f"{value.day} {value.strftime('%B %Y')}"


def start_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.min, tzinfo=value.tzinfo)


def end_of_day(value: datetime) -> datetime:
    return start_of_day(value) + timedelta(days=1) - timedelta(microseconds=1)


def align_timezone(value: datetime, reference: datetime) -> datetime:
    """Make *value* comparable with *reference* (both naive or both aware).

    Naive values adopt the reference's timezone; aware values are converted
    to UTC and made naive when the reference is naive.
    """
    if reference.tzinfo is None:
        if value.tzinfo is None:
            return value
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    if value.tzinfo is None:
        return value.replace(tzinfo=reference.tzinfo)
    return value
