"""Adapters for loosely-typed field shapes coming from collectors and providers.

Scrapers and SDKs disagree on how they encode the same information: a
venue may be a plain string or an object with a ``name``, a category may
be a list, an embedding may arrive as an SDK object, a dict or a JSON
string. Each helper here accepts every shape seen in practice and returns
one normalised internal type so the rest of the pipeline never has to
duck-type.
"""

from __future__ import annotations

import json
from typing import Any, List, Mapping, Optional

__all__ = [
    "coerce_text",
    "coerce_time",
    "coerce_category",
    "coerce_venue",
    "coerce_link",
    "extract_embedding_values",
]


def coerce_text(value: Any) -> Optional[str]:
    """Return a stripped string, or ``None`` when *value* carries no text."""
    if value is None:
        return None
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def coerce_time(value: Any) -> Optional[str]:
    """Time is either a display string or an object with ``formatted12Hour``."""
    if isinstance(value, Mapping):
        return coerce_text(value.get("formatted12Hour") or value.get("formatted"))
    return coerce_text(value)


def coerce_category(value: Any) -> Optional[str]:
    """Categories arrive as a string or as a list of tag strings."""
    if isinstance(value, (list, tuple)):
        parts = [part for part in (coerce_text(item) for item in value) if part]
        return ", ".join(parts) or None
    return coerce_text(value)


def coerce_venue(value: Any) -> Optional[str]:
    """Venues/locations arrive as a string or as an object with a ``name``."""
    if isinstance(value, Mapping):
        return coerce_text(value.get("name"))
    return coerce_text(value)


def coerce_link(value: Any) -> Optional[str]:
    """Links arrive as a URL string or as an object with a ``url``."""
    if isinstance(value, Mapping):
        return coerce_text(value.get("url"))
    return coerce_text(value)


def extract_embedding_values(payload: Any) -> List[float]:
    """Normalise an embedding payload into a list of floats.

    Parameters
    ----------
    payload
        One of: an OpenAI ``CreateEmbeddingResponse`` (``.data[0].embedding``),
        an object/dict exposing ``embedding`` or ``values``, a sequence of
        numbers, or a JSON string encoding any of the above.

    Returns
    -------
    list[float]
        The vector components.

    Raises
    ------
    ValueError
        If no numeric vector can be located in *payload*.
    """
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise ValueError("Embedding payload is not valid JSON") from exc

    data = getattr(payload, "data", None)
    if isinstance(data, list) and data:
        return extract_embedding_values(data[0])

    if isinstance(payload, Mapping):
        if isinstance(payload.get("data"), list) and payload["data"]:
            return extract_embedding_values(payload["data"][0])
        for key in ("embedding", "values", "vector"):
            if key in payload:
                return extract_embedding_values(payload[key])
        raise ValueError("Embedding payload has no embedding/values/vector field")

    for attr in ("embedding", "values"):
        nested = getattr(payload, attr, None)
        if nested is not None:
            return extract_embedding_values(nested)

    if isinstance(payload, (list, tuple)):
        try:
            return [float(component) for component in payload]
        except (TypeError, ValueError) as exc:
            raise ValueError("Embedding payload contains non-numeric values") from exc

    raise ValueError(f"Unsupported embedding payload type: {type(payload).__name__}")
