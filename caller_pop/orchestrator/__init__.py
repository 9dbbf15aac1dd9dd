"""Batch orchestration for resolving many callers in one run."""

from .service import BatchLookupService

__all__ = ["BatchLookupService"]
