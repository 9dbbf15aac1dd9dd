"""End-to-end caller resolution: normalise, look up, coerce and classify."""
from __future__ import annotations

import logging
from typing import Optional

from .client import LookupClient
from .config import LookupSettings
from .demo import demo_record
from .errors import CallerLookupError, ConfigurationError, UpstreamFailure, ValidationError
from .models import LookupOutcome, NameQuery, OutcomeKind
from .phone import is_plausible, normalize

LOGGER = logging.getLogger(__name__)


def classify(error: CallerLookupError) -> OutcomeKind:
    """Map a lookup exception onto its outcome category."""

    if isinstance(error, ConfigurationError):
        return OutcomeKind.CONFIGURATION_ERROR
    if isinstance(error, ValidationError):
        return OutcomeKind.VALIDATION_ERROR
    if isinstance(error, UpstreamFailure):
        return OutcomeKind.UPSTREAM_FAILURE
    raise TypeError(f"Unclassified lookup error: {type(error).__name__}")


def _log_failure(kind: OutcomeKind, error: CallerLookupError, phone: str) -> None:
    if kind is OutcomeKind.CONFIGURATION_ERROR:
        LOGGER.error("Lookup is misconfigured: %s", error)
    elif kind is OutcomeKind.UPSTREAM_FAILURE:
        LOGGER.warning("Upstream lookup failed for %s: %s", phone, error)
    else:
        LOGGER.info("Rejected lookup request for %r: %s", phone, error)


async def resolve_caller(
    raw_phone: Optional[str],
    settings: LookupSettings,
    *,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
    demo: bool = False,
    client: Optional[LookupClient] = None,
) -> LookupOutcome:
    """Resolve the caller behind ``raw_phone``.

    Never raises for lookup failures; the category is reported on the returned
    :class:`LookupOutcome` instead. Demo requests skip the network entirely.
    """

    raw = (raw_phone or "").strip()
    searched = normalize(raw, settings.default_country)
    low_confidence = bool(searched) and not is_plausible(searched)
    if low_confidence:
        LOGGER.warning("Phone %r normalised to %s, which does not look dialable", raw, searched)

    if demo:
        record = demo_record()
        return LookupOutcome(
            kind=OutcomeKind.FOUND,
            searched_phone=searched,
            raw_phone=raw,
            records=(record,),
            low_confidence_phone=low_confidence,
            demo=True,
        )

    name = NameQuery.from_parts(first_name, last_name)
    try:
        lookup_client = client or LookupClient(settings)
        records = await lookup_client.lookup(searched, name)
    except CallerLookupError as exc:
        kind = classify(exc)
        _log_failure(kind, exc, searched or raw)
        return LookupOutcome(
            kind=kind,
            searched_phone=searched,
            raw_phone=raw,
            message=str(exc),
            error=exc,
            low_confidence_phone=low_confidence,
        )

    if not records:
        LOGGER.info("No caller found for %s", searched)
        return LookupOutcome(
            kind=OutcomeKind.NOT_FOUND,
            searched_phone=searched,
            raw_phone=raw,
            message="No matching caller found",
            low_confidence_phone=low_confidence,
        )

    return LookupOutcome(
        kind=OutcomeKind.FOUND,
        searched_phone=searched,
        raw_phone=raw,
        records=tuple(records),
        low_confidence_phone=low_confidence,
    )


__all__ = ["classify", "resolve_caller"]
