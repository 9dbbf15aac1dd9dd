"""Data models used by batch lookup ingestion utilities."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..models import LookupOutcome


@dataclass(slots=True)
class LookupRequest:
    """One row of a batch lookup spreadsheet."""

    phone: str = ""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    request_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class BatchResult:
    """Outcome of a single batch row."""

    request: LookupRequest
    outcome: LookupOutcome


__all__ = ["BatchResult", "LookupRequest"]
