"""Factory helpers for constructing schema profiles from configuration."""
from __future__ import annotations

import importlib
from typing import Any, Iterable, List, Mapping

from .coercion import PROFILES, RULE_KINDS, FieldRule, SchemaProfile
from .config import ConfigurationError, LookupSettings


def _load_object(path: str) -> Any:
    module_name, _, attr = path.rpartition(".")
    if not module_name:
        raise ConfigurationError(f"Unknown schema profile '{path}'", setting="schema")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigurationError(f"Unable to import schema module '{module_name}'", setting="schema") from exc
    try:
        return getattr(module, attr)
    except AttributeError as exc:
        raise ConfigurationError(f"Module '{module_name}' does not define '{attr}'", setting="schema") from exc


def _build_rules(spec: Any, section: str) -> List[FieldRule]:
    """Accept either ``{"Label": "path"}`` or a list of ``{"label", "path", "kind"}`` entries."""

    entries: Iterable[Mapping[str, Any]]
    if isinstance(spec, Mapping):
        entries = [{"label": label, "path": path} for label, path in spec.items()]
    elif isinstance(spec, list):
        entries = spec
    else:
        raise ConfigurationError(f"schema_overrides.{section} must be a mapping or a list", setting="schema_overrides")

    rules: List[FieldRule] = []
    for entry in entries:
        if not isinstance(entry, Mapping) or not entry.get("label") or not entry.get("path"):
            raise ConfigurationError(
                f"schema_overrides.{section} entries require 'label' and 'path'", setting="schema_overrides"
            )
        kind = str(entry.get("kind", "text"))
        if kind not in RULE_KINDS:
            raise ConfigurationError(
                f"Unsupported rule kind '{kind}' in schema_overrides.{section}", setting="schema_overrides"
            )
        rules.append(FieldRule(label=str(entry["label"]), path=str(entry["path"]), kind=kind))
    return rules


def resolve_profile(settings: LookupSettings) -> SchemaProfile:
    """Return the schema profile named by ``settings.schema`` with overrides applied."""

    name = settings.schema or "standard"
    profile = PROFILES.get(name)
    if profile is None:
        profile = _load_object(name)
        if not isinstance(profile, SchemaProfile):
            raise ConfigurationError(f"'{name}' is not a SchemaProfile", setting="schema")

    overrides = settings.schema_overrides
    if not overrides:
        return profile

    aliases = overrides.get("aliases") or {}
    if not isinstance(aliases, Mapping):
        raise ConfigurationError("schema_overrides.aliases must be a mapping", setting="schema_overrides")
    return profile.extend(
        aliases=aliases,
        meta_rules=_build_rules(overrides.get("meta") or {}, "meta"),
        note_rules=_build_rules(overrides.get("notes") or {}, "notes"),
        prepend=bool(overrides.get("prepend", False)),
    )


__all__ = ["resolve_profile"]
