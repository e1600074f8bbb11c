"""Convenience re-exports for singleton SDK accessors."""

from .openai_client import get_openai  # noqa: F401
from .openai_client import is_configured as is_openai_configured  # noqa: F401
from .mongodb_client import get_mongo_client, get_database  # noqa: F401
from .mongodb_client import ping as ping_mongodb  # noqa: F401

__all__ = [
    "get_openai",
    "is_openai_configured",
    "get_mongo_client",
    "get_database",
    "ping_mongodb",
]
