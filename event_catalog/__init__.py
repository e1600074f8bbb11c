"""Top-level package for the event-catalog project.

This package exposes the application wiring helpers so callers can do
`from event_catalog import build_context, IngestionPipeline`.
"""

from importlib import metadata as _metadata

try:
    __version__: str = _metadata.version("event-catalog")
except _metadata.PackageNotFoundError:  # pragma: no cover – running from source
    __version__ = "0.0.0"

from .workflows.event_pipeline import AppContext, IngestionPipeline, build_context  # convenience re-export

__all__ = ["AppContext", "IngestionPipeline", "build_context", "__version__"]
