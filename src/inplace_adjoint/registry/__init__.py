"""Deduplication of repeated block shapes."""

from inplace_adjoint.registry.registry import DeduplicatingRegistry

__all__ = ["DeduplicatingRegistry"]
