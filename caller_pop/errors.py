"""Exception hierarchy for the caller lookup pipeline."""
from __future__ import annotations

from typing import Optional


class CallerLookupError(RuntimeError):
    """Base class for every failure surfaced by a caller lookup."""


class ConfigurationError(CallerLookupError):
    """Raised when the deployment is misconfigured (missing endpoint, credential, bad file)."""

    def __init__(self, message: str, *, setting: Optional[str] = None) -> None:
        super().__init__(message)
        self.setting = setting


class ValidationError(CallerLookupError):
    """Raised when caller-supplied input is insufficient for a lookup."""

    def __init__(self, message: str, *, field: str) -> None:
        super().__init__(message)
        self.field = field


class UpstreamFailure(CallerLookupError):
    """Raised for network errors, unexpected statuses and malformed responses."""

    BODY_EXCERPT_LIMIT = 300

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        status_text: str = "",
        body_excerpt: str = "",
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.status_text = status_text
        self.body_excerpt = (body_excerpt or "")[: self.BODY_EXCERPT_LIMIT]

    @classmethod
    def from_status(cls, status_code: int, status_text: str, body: str) -> "UpstreamFailure":
        excerpt = (body or "")[: cls.BODY_EXCERPT_LIMIT]
        return cls(
            f"Upstream {status_code} {status_text}: {excerpt}".rstrip(),
            status_code=status_code,
            status_text=status_text,
            body_excerpt=excerpt,
        )


__all__ = [
    "CallerLookupError",
    "ConfigurationError",
    "UpstreamFailure",
    "ValidationError",
]
