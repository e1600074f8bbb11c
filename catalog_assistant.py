#!/usr/bin/env python3
"""Ingest scraped event batches and optionally ask the assistant a question.

Batches are read from JSON files mapping a source name to its list of raw
events, e.g. ``{"VisitQatar": [{"title": "Jazz Night", "date": "5 Nov"}]}``.

    python catalog_assistant.py scraped/*.json --ask "Any jazz this week?"
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict, List

from event_catalog.logging_config import logging as _  # noqa: F401  # ensure config applied early
from event_catalog.utils.datetime_utils import format_display_date
from event_catalog.workflows import IngestionPipeline, build_context

logger = logging.getLogger(__name__)


def load_batches(paths: List[str]) -> Dict[str, List[Any]]:
    batches: Dict[str, List[Any]] = {}
    for path in paths:
        with open(path, encoding="utf-8") as handle:
            payload = json.load(handle)
        if not isinstance(payload, dict):
            logger.warning("Skipping %s: expected an object keyed by source name", path)
            continue
        for source, events in payload.items():
            if isinstance(events, list):
                batches.setdefault(source, []).extend(events)
            else:
                logger.warning("Skipping source %s in %s: events must be a list", source, path)
    return batches


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("files", nargs="*", help="JSON files with raw events per source")
    parser.add_argument("--ask", action="append", default=[], help="question to answer after ingestion")
    parser.add_argument("--memory", action="store_true", help="do not use MongoDB even when configured")
    parser.add_argument("--keep", action="store_true", help="merge into the existing catalog instead of replacing it")
    args = parser.parse_args()

    context = build_context(use_database=False if args.memory else None)
    pipeline = IngestionPipeline(context)

    if args.files:
        stats = pipeline.run(load_batches(args.files), replace=not args.keep)
        if stats is None:
            logger.error("Ingestion failed: %s", pipeline.last_error)
            return 1

    for question in args.ask:
        result = pipeline.answer(question)
        print(f"\nQ: {question}\nA: {result.response_text}")
        for event in result.matched_events:
            when = event.get("date_display") or format_display_date(event["start_date"])
            print(f"   - {event['title']} ({when})")

    return 0


if __name__ == "__main__":
    sys.exit(main())
