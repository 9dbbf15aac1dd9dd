"""Data models shared by the lookup client, the coercer and the presentation layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from .errors import CallerLookupError, UpstreamFailure, ValidationError

UNKNOWN_NAME = "Unknown"

MetaValue = Union[str, int, float]


# --- Core Record ---

@dataclass(frozen=True, slots=True)
class CallerRecord:
    """Canonical description of a caller, independent of the upstream schema."""

    phone: str = ""
    name: str = UNKNOWN_NAME
    company: str = ""
    title: str = ""
    emails: Tuple[str, ...] = ()
    alt_phones: Tuple[str, ...] = ()
    address: str = ""
    tags: Tuple[str, ...] = ()
    risk: Optional[Union[int, float]] = None
    status: str = ""
    customer_since: str = ""
    notes: Tuple[str, ...] = ()
    meta: Mapping[str, MetaValue] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "meta", MappingProxyType(dict(self.meta)))

    def as_dict(self) -> Dict[str, Any]:
        """Return the record keyed the way the rendering layer expects."""

        return {
            "phone": self.phone,
            "name": self.name,
            "company": self.company,
            "title": self.title,
            "emails": list(self.emails),
            "altPhones": list(self.alt_phones),
            "address": self.address,
            "tags": list(self.tags),
            "risk": self.risk,
            "status": self.status,
            "customerSince": self.customer_since,
            "notes": list(self.notes),
            "meta": dict(self.meta),
        }


# --- Query Models ---

@dataclass(frozen=True, slots=True)
class NameQuery:
    """First/last name pair used by name-qualified lookups."""

    first_name: str = ""
    last_name: str = ""

    @classmethod
    def from_parts(cls, first_name: Optional[str], last_name: Optional[str]) -> "NameQuery":
        return cls(first_name=(first_name or "").strip(), last_name=(last_name or "").strip())

    @property
    def is_complete(self) -> bool:
        return bool(self.first_name and self.last_name)

    @property
    def is_empty(self) -> bool:
        return not (self.first_name or self.last_name)

    def missing_field(self) -> Optional[str]:
        """Return the first name part that is missing, if any."""

        if not self.first_name:
            return "first_name"
        if not self.last_name:
            return "last_name"
        return None


# --- Pipeline Outcome ---

class OutcomeKind(str, Enum):
    """Category of a pipeline result, used by the renderer to pick a presentation."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    CONFIGURATION_ERROR = "configuration_error"
    VALIDATION_ERROR = "validation_error"
    UPSTREAM_FAILURE = "upstream_failure"


@dataclass(frozen=True)
class LookupOutcome:
    """Tagged result of one caller lookup."""

    kind: OutcomeKind
    searched_phone: str = ""
    raw_phone: str = ""
    records: Tuple[CallerRecord, ...] = ()
    message: str = ""
    error: Optional[CallerLookupError] = None
    low_confidence_phone: bool = False
    demo: bool = False

    @property
    def ok(self) -> bool:
        return self.kind in (OutcomeKind.FOUND, OutcomeKind.NOT_FOUND)

    @property
    def is_failure(self) -> bool:
        return not self.ok

    @property
    def record(self) -> Optional[CallerRecord]:
        return self.records[0] if self.records else None

    def as_dict(self) -> Dict[str, Any]:
        """Return a JSON-serialisable representation of the outcome."""

        payload: Dict[str, Any] = {
            "kind": self.kind.value,
            "searched": self.searched_phone or self.raw_phone,
            "message": self.message,
            "lowConfidencePhone": self.low_confidence_phone,
            "demo": self.demo,
            "records": [record.as_dict() for record in self.records],
        }
        if isinstance(self.error, UpstreamFailure):
            payload["upstream"] = {
                "status": self.error.status_code,
                "statusText": self.error.status_text,
                "body": self.error.body_excerpt,
            }
        elif isinstance(self.error, ValidationError):
            payload["field"] = self.error.field
        return payload

