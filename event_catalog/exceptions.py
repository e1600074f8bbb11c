"""Exception types shared across the catalog, storage and retrieval layers."""

from __future__ import annotations


class ProviderNotConfiguredError(EnvironmentError):
    """The embedding/generation provider has no credentials configured."""


class PersistenceError(RuntimeError):
    """A persistence delegate failed to read or write."""


class VectorDimensionError(ValueError):
    """Two vectors of different dimensionality were compared."""


__all__ = ["ProviderNotConfiguredError", "PersistenceError", "VectorDimensionError"]
