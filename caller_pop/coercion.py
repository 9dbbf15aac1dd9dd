"""Schema-on-read coercion of upstream payloads into :class:`CallerRecord`.

Upstream lookup services disagree on field names: a retail CRM returns
``full_name`` and ``tags`` while a healthcare deployment returns
``first_name``/``last_name``, ``clinic_name`` and ``program_eligibility``.
Rather than one hand-written mapping per deployment, :func:`coerce` walks a
:class:`SchemaProfile`, a declarative table of ordered key aliases per logical
attribute, and takes the first present, non-empty value.

Every access is defensive. :func:`coerce` never raises and always returns a
record with every field populated.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .models import UNKNOWN_NAME, CallerRecord, MetaValue
from .phone import DEFAULT_COUNTRY_PREFIX, normalize

ADDRESS_SEPARATOR = " • "

RULE_KINDS = ("text", "number")

_ELEMENT_KEYS = ("value", "address", "email", "number", "phone", "label", "name")

_ADDRESS_KEYS: Mapping[str, Sequence[str]] = {
    "line1": ("line1", "line_1", "street", "street1", "address1", "address_line1"),
    "line2": ("line2", "line_2", "street2", "address2", "address_line2", "unit"),
    "city": ("city", "town", "locality"),
    "state": ("state", "region", "province", "state_code"),
    "postal_code": ("postal_code", "postalCode", "zip", "zip_code", "zipcode", "postcode"),
    "country": ("country", "country_code"),
}


@dataclass(frozen=True)
class FieldRule:
    """Copies one upstream value into ``meta`` or ``notes`` under ``label``."""

    label: str
    path: str
    kind: str = "text"


@dataclass(frozen=True)
class SchemaProfile:
    """Ordered alias table describing how one family of upstream schemas maps onto a record."""

    name: str
    aliases: Mapping[str, Tuple[str, ...]]
    meta_rules: Tuple[FieldRule, ...] = ()
    note_rules: Tuple[FieldRule, ...] = ()

    def paths(self, attribute: str) -> Tuple[str, ...]:
        return tuple(self.aliases.get(attribute, ()))

    def extend(
        self,
        *,
        name: Optional[str] = None,
        aliases: Optional[Mapping[str, Iterable[str]]] = None,
        meta_rules: Iterable[FieldRule] = (),
        note_rules: Iterable[FieldRule] = (),
        prepend: bool = False,
    ) -> "SchemaProfile":
        """Return a new profile with extra aliases and rules.

        Extra aliases are appended after the existing ones unless ``prepend``
        is set, in which case they take priority.
        """

        merged: Dict[str, Tuple[str, ...]] = {key: tuple(value) for key, value in self.aliases.items()}
        for attribute, paths in (aliases or {}).items():
            extra = tuple(paths) if not isinstance(paths, str) else (paths,)
            current = merged.get(attribute, ())
            combined = extra + current if prepend else current + extra
            merged[attribute] = tuple(dict.fromkeys(combined))
        return replace(
            self,
            name=name or self.name,
            aliases=merged,
            meta_rules=self.meta_rules + tuple(meta_rules),
            note_rules=self.note_rules + tuple(note_rules),
        )


STANDARD_PROFILE = SchemaProfile(
    name="standard",
    aliases={
        "name": ("name", "full_name", "fullName", "display_name", "caller_name", "contact.name"),
        "first_name": ("first_name", "firstName", "first", "given_name"),
        "last_name": ("last_name", "lastName", "last", "family_name", "surname"),
        "company": ("company", "company_name", "organization", "organisation", "business_name", "employer"),
        "title": ("title", "job_title", "jobTitle", "role", "position"),
        "emails": ("emails", "email", "email_address", "emailAddress", "email_addresses", "contact.email"),
        "alt_phones": ("phones", "alt_phones", "altPhones", "phone_numbers", "other_phones", "phone"),
        "address": ("address", "mailing_address", "home_address", "billing_address", "location"),
        "tags": ("tags", "labels", "segments", "categories"),
        "risk": ("risk", "risk_score", "riskScore", "risk_level"),
        "status": ("status", "customer_status", "account_status", "caller_status"),
        "customer_since": ("customer_since", "customerSince", "member_since", "created_at", "since"),
        "notes": ("notes", "note", "comments"),
    },
    meta_rules=(
        FieldRule("Customer ID", "customer_id"),
        FieldRule("Account", "account_number"),
    ),
)


HEALTHCARE_PROFILE = STANDARD_PROFILE.extend(
    name="healthcare",
    aliases={
        "company": ("clinic_name", "clinic", "practice_name"),
        "title": ("provider_name", "provider"),
        "tags": ("program_eligibility", "eligibility", "programs"),
        "address": ("home_address",),
    },
    prepend=True,
    meta_rules=(
        FieldRule("Provider", "provider_name"),
        FieldRule("Clinic", "clinic_name"),
        FieldRule("PAP ID", "pap_id", "number"),
        FieldRule("Copay", "copay_amount", "number"),
    ),
    note_rules=(
        FieldRule("PAP ID", "pap_id"),
        FieldRule("Primary Insurance", "insurance.primary"),
        FieldRule("Secondary Insurance", "insurance.secondary"),
        FieldRule("DOB", "date_of_birth"),
    ),
)


PROFILES: Mapping[str, SchemaProfile] = {
    STANDARD_PROFILE.name: STANDARD_PROFILE,
    HEALTHCARE_PROFILE.name: HEALTHCARE_PROFILE,
}


# ---------------------------------------------------------------------------
# Value helpers
# ---------------------------------------------------------------------------

def _get_path(payload: Mapping[str, Any], path: str) -> Any:
    current: Any = payload
    for key in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
        if current is None:
            return None
    return current


def _clean_text(value: Any) -> str:
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return ""
        return str(int(value)) if value.is_integer() else str(value)
    return ""


def _to_number(value: Any) -> Optional[Union[int, float]]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return None if math.isnan(value) or math.isinf(value) else value
    if isinstance(value, str):
        text = value.strip().replace(",", "").lstrip("$")
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return None
        return None if math.isnan(number) or math.isinf(number) else number
    return None


def _element_text(value: Any) -> str:
    if isinstance(value, Mapping):
        for key in _ELEMENT_KEYS:
            text = _clean_text(value.get(key))
            if text:
                return text
        return ""
    return _clean_text(value)


def _as_text_list(value: Any) -> List[str]:
    if value is None:
        return []
    items: Iterable[Any] = value if isinstance(value, (list, tuple)) else [value]
    cleaned: List[str] = []
    for item in items:
        text = _element_text(item)
        if text:
            cleaned.append(text)
    return cleaned


def _first_text(payload: Mapping[str, Any], paths: Sequence[str]) -> str:
    for path in paths:
        text = _clean_text(_get_path(payload, path))
        if text:
            return text
    return ""


def _first_list(payload: Mapping[str, Any], paths: Sequence[str]) -> List[str]:
    for path in paths:
        values = _as_text_list(_get_path(payload, path))
        if values:
            return values
    return []


def _first_number(payload: Mapping[str, Any], paths: Sequence[str]) -> Optional[Union[int, float]]:
    for path in paths:
        number = _to_number(_get_path(payload, path))
        if number is not None:
            return number
    return None


def format_address(value: Any) -> str:
    """Render an upstream address as a single line.

    Strings pass through unchanged. Mappings are composed from line 1, line 2,
    ``"city, state"``, postal code and country, skipping empty parts.
    """

    if isinstance(value, str):
        return value
    if not isinstance(value, Mapping):
        return ""

    parts = {key: _first_text(value, keys) for key, keys in _ADDRESS_KEYS.items()}
    city_state = ", ".join(part for part in (parts["city"], parts["state"]) if part)
    components = [parts["line1"], parts["line2"], city_state, parts["postal_code"], parts["country"]]
    return ADDRESS_SEPARATOR.join(component for component in components if component)


def _first_address(payload: Mapping[str, Any], paths: Sequence[str]) -> str:
    for path in paths:
        address = format_address(_get_path(payload, path))
        if address.strip():
            return address
    return ""


def _resolve_name(payload: Mapping[str, Any], profile: SchemaProfile) -> str:
    full_name = _first_text(payload, profile.paths("name"))
    if full_name:
        return full_name
    parts = [
        _first_text(payload, profile.paths("first_name")),
        _first_text(payload, profile.paths("last_name")),
    ]
    return " ".join(part for part in parts if part).strip() or UNKNOWN_NAME


def _alt_phones(
    payload: Mapping[str, Any],
    paths: Sequence[str],
    searched_phone: str,
    default_country: str,
) -> List[str]:
    for path in paths:
        raw_values = _as_text_list(_get_path(payload, path))
        if not raw_values:
            continue
        phones: List[str] = []
        for raw in raw_values:
            canonical = normalize(raw, default_country)
            if canonical and canonical != searched_phone:
                phones.append(canonical)
        return phones
    return []


def _apply_meta_rules(payload: Mapping[str, Any], rules: Sequence[FieldRule]) -> Dict[str, MetaValue]:
    meta: Dict[str, MetaValue] = {}
    for rule in rules:
        value: Optional[MetaValue]
        if rule.kind == "number":
            value = _to_number(_get_path(payload, rule.path))
        else:
            value = _clean_text(_get_path(payload, rule.path)) or None
        if value is not None and rule.label not in meta:
            meta[rule.label] = value
    return meta


def _apply_note_rules(payload: Mapping[str, Any], rules: Sequence[FieldRule]) -> List[str]:
    notes: List[str] = []
    for rule in rules:
        raw = _get_path(payload, rule.path)
        if rule.kind == "number":
            number = _to_number(raw)
            text = _clean_text(number) if number is not None else ""
        else:
            text = ", ".join(_as_text_list(raw))
        if text:
            notes.append(f"{rule.label}: {text}")
    return notes


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def coerce(
    payload: Any,
    searched_phone: str,
    *,
    profile: SchemaProfile = STANDARD_PROFILE,
    default_country: str = DEFAULT_COUNTRY_PREFIX,
) -> CallerRecord:
    """Map an arbitrary upstream JSON value onto a :class:`CallerRecord`."""

    data: Mapping[str, Any] = payload if isinstance(payload, Mapping) else {}

    notes = _first_list(data, profile.paths("notes"))
    notes.extend(_apply_note_rules(data, profile.note_rules))

    return CallerRecord(
        phone=searched_phone or "",
        name=_resolve_name(data, profile),
        company=_first_text(data, profile.paths("company")),
        title=_first_text(data, profile.paths("title")),
        emails=tuple(_first_list(data, profile.paths("emails"))),
        alt_phones=tuple(_alt_phones(data, profile.paths("alt_phones"), searched_phone, default_country)),
        address=_first_address(data, profile.paths("address")),
        tags=tuple(_first_list(data, profile.paths("tags"))),
        risk=_first_number(data, profile.paths("risk")),
        status=_first_text(data, profile.paths("status")),
        customer_since=_first_text(data, profile.paths("customer_since")),
        notes=tuple(notes),
        meta=_apply_meta_rules(data, profile.meta_rules),
    )


__all__ = [
    "ADDRESS_SEPARATOR",
    "FieldRule",
    "HEALTHCARE_PROFILE",
    "PROFILES",
    "RULE_KINDS",
    "STANDARD_PROFILE",
    "SchemaProfile",
    "coerce",
    "format_address",
]
