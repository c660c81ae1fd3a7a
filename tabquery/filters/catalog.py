"""
Loads and caches the filter type catalog YAML into typed records.

The catalog is the single source of truth for:
  - operator descriptors (display text, wire suffix, multi-value rules)
  - legacy alias names
  - opposite / single<->multi value pairings keyed by URL suffix
  - which operators apply to each JSON column type, and the default one
"""
from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

_CATALOG_PATH = Path(__file__).resolve().with_name("catalog.yml")

JSON_TYPES = ("boolean", "date", "float", "int", "string")


# ── Typed records ────────────────────────────────────────

@dataclass(frozen=True)
class TypeEntry:
    name: str
    display_text: str
    display_symbol: str | None = None
    url_suffix: str | None = None
    data_value_required: bool = False
    multi_value_separator: str | None = None
    long_display_text: str | None = None
    min_occurs: int | None = None
    max_occurs: int | None = None


@dataclass(frozen=True)
class Catalog:
    entries: list[TypeEntry]
    aliases: dict[str, str] = field(default_factory=dict)
    opposites: dict[str, str] = field(default_factory=dict)
    single_value_to_multi: dict[str, str] = field(default_factory=dict)
    multi_value_to_single: dict[str, str] = field(default_factory=dict)
    json_types: dict[str, list[str]] = field(default_factory=dict)
    json_type_defaults: dict[str, str] = field(default_factory=dict)


# ── Parsing ──────────────────────────────────────────────

def _parse_entry(raw: dict[str, Any], parsed: dict[str, TypeEntry]) -> TypeEntry:
    base = parsed.get(raw["derive_from"]) if raw.get("derive_from") else None
    display_text = raw.get("display_text") or (base.display_text if base else None)
    if not display_text:
        raise ValueError(f"Filter type '{raw['name']}' has no display text")
    return TypeEntry(
        name=raw["name"],
        display_text=display_text,
        display_symbol=raw.get("display_symbol") or (base.display_symbol if base else None),
        url_suffix=raw.get("url_suffix"),
        data_value_required=raw.get("data_value_required", False),
        multi_value_separator=raw.get("multi_value_separator"),
        long_display_text=raw.get("long_display_text"),
        min_occurs=raw.get("min_occurs"),
        max_occurs=raw.get("max_occurs"),
    )


def _str_map(raw: dict[Any, Any] | None) -> dict[str, str]:
    return {str(k): str(v) for k, v in (raw or {}).items()}


def _parse_catalog(raw_yaml: dict[str, Any]) -> Catalog:
    parsed: dict[str, TypeEntry] = {}
    for raw in raw_yaml.get("types", []):
        entry = _parse_entry(raw, parsed)
        parsed[entry.name] = entry

    json_types = {k: list(v) for k, v in (raw_yaml.get("json_types") or {}).items()}
    json_type_defaults = _str_map(raw_yaml.get("json_type_defaults"))
    unknown = (set(json_types) | set(json_type_defaults)) - set(JSON_TYPES)
    if unknown:
        raise ValueError(f"Unknown JSON types in catalog: {sorted(unknown)}")

    return Catalog(
        entries=list(parsed.values()),
        aliases=_str_map(raw_yaml.get("aliases")),
        opposites=_str_map(raw_yaml.get("opposites")),
        single_value_to_multi=_str_map(raw_yaml.get("single_value_to_multi")),
        multi_value_to_single=_str_map(raw_yaml.get("multi_value_to_single")),
        json_types=json_types,
        json_type_defaults=json_type_defaults,
    )


# ── Public API ───────────────────────────────────────────

@lru_cache
def load_catalog() -> Catalog:
    """Load and cache the filter type catalog from YAML."""
    with open(_CATALOG_PATH, encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    return _parse_catalog(raw)
