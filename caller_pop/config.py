"""Configuration helpers for the caller lookup pipeline."""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from .errors import ConfigurationError
from .phone import DEFAULT_COUNTRY_PREFIX

LOGGER = logging.getLogger(__name__)

QUERY_PROTOCOL = "query"
VERIFICATION_TOKEN_PROTOCOL = "verification_token"
PROTOCOLS = (QUERY_PROTOCOL, VERIFICATION_TOKEN_PROTOCOL)

_SUPPORTED_EXTENSIONS = {".json", ".yaml", ".yml"}
_TRUTHY = {"1", "true", "yes", "on"}

# Settings field -> environment variables, first match wins.
_ENVIRONMENT_KEYS: Mapping[str, Tuple[str, ...]] = {
    "endpoint_url": ("CALLER_POP_API_URL", "API_URL"),
    "credential": ("CALLER_POP_API_TOKEN", "API_TOKEN", "VERIFY_TOKEN"),
    "protocol": ("CALLER_POP_PROTOCOL",),
    "default_country": ("CALLER_POP_DEFAULT_COUNTRY", "DEFAULT_COUNTRY"),
    "require_name": ("CALLER_POP_REQUIRE_NAME",),
    "timeout_seconds": ("CALLER_POP_TIMEOUT",),
    "schema": ("CALLER_POP_SCHEMA",),
}


@dataclass(frozen=True)
class LookupSettings:
    """Runtime configuration consumed by :class:`caller_pop.client.LookupClient`."""

    endpoint_url: Optional[str] = None
    credential: Optional[str] = None
    protocol: str = QUERY_PROTOCOL
    default_country: str = DEFAULT_COUNTRY_PREFIX
    require_name: bool = False
    phone_param: str = "phone"
    token_header: str = "verification-token"
    not_found_statuses: Tuple[int, ...] = (404,)
    timeout_seconds: Optional[float] = None
    schema: str = "standard"
    schema_overrides: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.protocol not in PROTOCOLS:
            raise ConfigurationError(
                f"Unsupported lookup protocol '{self.protocol}'. Supported protocols: {list(PROTOCOLS)}",
                setting="protocol",
            )

    @property
    def credential_setting(self) -> str:
        """Name of the environment variable an operator should set for the credential."""

        return "VERIFY_TOKEN" if self.protocol == VERIFICATION_TOKEN_PROTOCOL else "API_TOKEN"

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "LookupSettings":
        """Build settings from a loosely typed mapping, ignoring unknown keys."""

        known = {item.name for item in fields(cls)}
        unknown = sorted(key for key in values if key not in known)
        if unknown:
            LOGGER.debug("Ignoring unknown configuration keys: %s", ", ".join(unknown))

        kwargs: Dict[str, Any] = {}
        for key, value in values.items():
            if key not in known or value is None:
                continue
            kwargs[key] = _coerce_setting(key, value)
        return cls(**kwargs)


def _coerce_setting(key: str, value: Any) -> Any:
    if key == "require_name":
        if isinstance(value, str):
            return value.strip().lower() in _TRUTHY
        return bool(value)
    if key == "timeout_seconds":
        try:
            return float(value)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid timeout '{value}'", setting=key) from exc
    if key == "not_found_statuses":
        if isinstance(value, (int, str)):
            value = [value]
        try:
            return tuple(int(status) for status in value)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid not_found_statuses '{value}'", setting=key) from exc
    if key == "schema_overrides":
        if not isinstance(value, Mapping):
            raise ConfigurationError("schema_overrides must be a mapping", setting=key)
        return dict(value)
    if isinstance(value, str):
        return value.strip()
    return value


def load_configuration(path: str | Path) -> Dict[str, Any]:
    """Load configuration data from a JSON or YAML file."""

    file_path = Path(path)
    if not file_path.exists():
        raise ConfigurationError(f"Configuration file '{file_path}' was not found")

    if file_path.suffix.lower() not in _SUPPORTED_EXTENSIONS:
        raise ConfigurationError(
            f"Unsupported configuration format '{file_path.suffix}'. Supported extensions: {sorted(_SUPPORTED_EXTENSIONS)}"
        )

    text = file_path.read_text(encoding="utf-8")
    if file_path.suffix.lower() == ".json":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Configuration file '{file_path}' is not valid JSON: {exc}") from exc
    else:
        import yaml

        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Configuration file '{file_path}' is not valid YAML: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file '{file_path}' must contain a mapping")
    return data


def settings_from_environment(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Collect raw setting values from environment variables."""

    environ = os.environ if environ is None else environ
    values: Dict[str, Any] = {}
    for setting, names in _ENVIRONMENT_KEYS.items():
        for name in names:
            value = environ.get(name)
            if value is not None and value.strip():
                values[setting] = value
                break

    # A bare VERIFY_TOKEN deployment posts with the verification header and
    # answers with the healthcare payload.
    if "protocol" not in values and environ.get("VERIFY_TOKEN") and not (
        environ.get("CALLER_POP_API_TOKEN") or environ.get("API_TOKEN")
    ):
        values["protocol"] = VERIFICATION_TOKEN_PROTOCOL
        values.setdefault("schema", "healthcare")
    return values


def load_settings(
    path: str | Path | None = None,
    environ: Optional[Mapping[str, str]] = None,
) -> LookupSettings:
    """Resolve settings from the environment, overridden by an optional config file."""

    values = settings_from_environment(environ)
    if path is not None:
        file_values = load_configuration(path)
        LOGGER.debug("Loaded configuration from %s", path)
        values.update(file_values)
    return LookupSettings.from_mapping(values)


__all__ = [
    "ConfigurationError",
    "LookupSettings",
    "PROTOCOLS",
    "QUERY_PROTOCOL",
    "VERIFICATION_TOKEN_PROTOCOL",
    "load_configuration",
    "load_settings",
    "settings_from_environment",
]
