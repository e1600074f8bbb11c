"""Singleton accessor for the OpenAI SDK client."""

from __future__ import annotations

from openai import OpenAI as _OpenAIClient

from ..config import OPENAI_API_KEY
from ..exceptions import ProviderNotConfiguredError

_client: _OpenAIClient | None = None


def is_configured() -> bool:
    return bool(OPENAI_API_KEY)


def get_openai() -> _OpenAIClient:
    """Return a singleton instance of :class:`openai.OpenAI`."""
    global _client
    if _client is None:
        if not OPENAI_API_KEY:
            raise ProviderNotConfiguredError("OPENAI_API_KEY is not set in environment variables")
        _client = _OpenAIClient(api_key=OPENAI_API_KEY, timeout=30.0)
    return _client

__all__ = ["get_openai", "is_configured"]
