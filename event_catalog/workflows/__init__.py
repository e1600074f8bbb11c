"""Orchestration of the catalog, vector store and retrieval services."""

from .event_pipeline import AppContext, IngestionPipeline, RunStats, build_context  # noqa: F401

__all__ = ["AppContext", "IngestionPipeline", "RunStats", "build_context"]
