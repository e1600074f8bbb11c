"""Singleton accessor for the MongoDB client."""

from __future__ import annotations

import logging

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

from ..config import MONGODB_DATABASE, MONGODB_SERVER_SELECTION_TIMEOUT_MS, MONGODB_URI

logger = logging.getLogger(__name__)
_client: MongoClient | None = None


def get_mongo_client() -> MongoClient:
    """Return a singleton :class:`pymongo.MongoClient`.

    Datetimes come back timezone-aware (UTC) so they compare cleanly with
    the values produced by the date resolver.
    """
    global _client
    if _client is None:
        _client = MongoClient(
            MONGODB_URI,
            tz_aware=True,
            serverSelectionTimeoutMS=MONGODB_SERVER_SELECTION_TIMEOUT_MS,
        )
    return _client


def get_database() -> Database:
    return get_mongo_client()[MONGODB_DATABASE]


def ping() -> bool:
    """Return ``True`` when the configured server answers an admin ping."""
    if not MONGODB_URI:
        return False
    try:
        get_mongo_client().admin.command("ping")
    except PyMongoError as exc:
        logger.warning("MongoDB ping failed: %s", exc)
        return False
    return True

__all__ = ["get_mongo_client", "get_database", "ping"]
