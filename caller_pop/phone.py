"""Best-effort normalisation of user-entered phone numbers."""
from __future__ import annotations

import re

DEFAULT_COUNTRY_PREFIX = "+1"

_NON_DIGITS = re.compile(r"\D")
_PLAUSIBLE = re.compile(r"^\+\d{10,15}$")


def digits_only(value: object) -> str:
    """Return only the digit characters of ``value``."""

    if value is None:
        return ""
    return _NON_DIGITS.sub("", str(value))


def _country_prefix(prefix: str) -> str:
    digits = digits_only(prefix)
    return f"+{digits}" if digits else DEFAULT_COUNTRY_PREFIX


def normalize(raw: object, default_country_prefix: str = DEFAULT_COUNTRY_PREFIX) -> str:
    """Convert free text into a ``+``-prefixed digit string.

    Never fails. An input without digits yields ``""``; ten digit numbers get
    ``default_country_prefix``; everything else is returned as ``+<digits>``
    whether or not it looks dialable. The upstream system is the real
    validator.

    >>> normalize("(714) 555-1212")
    '+17145551212'
    >>> normalize("1-714-555-1212")
    '+17145551212'
    >>> normalize("abc")
    ''
    """

    digits = digits_only(raw)
    if not digits:
        return ""
    if len(digits) == 11 and digits.startswith("1"):
        return f"+{digits}"
    if len(digits) == 10:
        return f"{_country_prefix(default_country_prefix)}{digits}"
    # 11-15 digits is the international case; shorter or longer input is
    # passed through the same way.
    return f"+{digits}"


def is_plausible(canonical: str) -> bool:
    """Return whether a canonical phone has a dialable shape (11-16 characters)."""

    return bool(canonical) and _PLAUSIBLE.match(canonical) is not None


__all__ = ["DEFAULT_COUNTRY_PREFIX", "digits_only", "is_plausible", "normalize"]
