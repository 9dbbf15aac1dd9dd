"""Utilities for importing batch lookup requests and exporting their outcomes."""
from __future__ import annotations

from .exporters import export_outcomes, outcomes_to_dataframe
from .loaders import UnsupportedFileTypeError, load_lookup_requests
from .models import BatchResult, LookupRequest

__all__ = [
    "BatchResult",
    "LookupRequest",
    "UnsupportedFileTypeError",
    "export_outcomes",
    "load_lookup_requests",
    "outcomes_to_dataframe",
]
