"""Caller lookup pipeline: phone normalisation, upstream lookup and schema coercion."""

from .client import LookupClient, lookup
from .coercion import HEALTHCARE_PROFILE, STANDARD_PROFILE, FieldRule, SchemaProfile, coerce
from .config import LookupSettings, load_settings
from .errors import CallerLookupError, ConfigurationError, UpstreamFailure, ValidationError
from .models import CallerRecord, LookupOutcome, NameQuery, OutcomeKind
from .phone import is_plausible, normalize
from .pipeline import classify, resolve_caller

__all__ = [
    "CallerLookupError",
    "CallerRecord",
    "ConfigurationError",
    "FieldRule",
    "HEALTHCARE_PROFILE",
    "LookupClient",
    "LookupOutcome",
    "LookupSettings",
    "NameQuery",
    "OutcomeKind",
    "STANDARD_PROFILE",
    "SchemaProfile",
    "UpstreamFailure",
    "ValidationError",
    "classify",
    "coerce",
    "is_plausible",
    "load_settings",
    "lookup",
    "normalize",
    "resolve_caller",
    "ingestion",
    "orchestrator",
]
