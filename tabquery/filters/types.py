"""
Filter type registry -- the fixed catalog of comparison / membership operators.

Built once at import in two phases:
  1. every catalog entry becomes a frozen ``FilterType`` and is indexed by its
     URL suffix in the shared registry;
  2. aliases, pairing tables and JSON-type tables are bound by name.

Opposite and single/multi value lookups read the shared registry at call time,
so they resolve against the fully populated tables regardless of the order in
which entries were built.  Nothing is added or removed after import.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping

from tabquery.core.logging import get_logger
from tabquery.filters.catalog import Catalog, TypeEntry, load_catalog
from tabquery.filters.validation import ValidationResult, validate_multiple, validate_value

logger = get_logger(__name__)


# ── Shared lookup tables ─────────────────────────────────

@dataclass
class FilterTypeRegistry:
    """Suffix-keyed lookup tables shared by every ``FilterType``."""

    url_map: dict[str, FilterType] = field(default_factory=dict)
    opposite_map: dict[str, str] = field(default_factory=dict)
    single_value_to_multi_map: dict[str, str] = field(default_factory=dict)
    multi_value_to_single_map: dict[str, str] = field(default_factory=dict)
    types_by_json_type: dict[str, list[FilterType]] = field(default_factory=dict)
    default_by_json_type: dict[str, FilterType] = field(default_factory=dict)

    def resolve(self, table: Mapping[str, str], url_suffix: str | None) -> FilterType | None:
        if url_suffix is None:
            return None
        target = table.get(url_suffix)
        if target is None:
            return None
        return self.url_map.get(target)


# ── Descriptor ───────────────────────────────────────────

@dataclass(frozen=True, eq=False)
class FilterType:
    """Immutable descriptor of one filter operator.

    Equality is identity: alias names share the same instance.
    """

    name: str
    display_text: str
    display_symbol: str | None = None
    url_suffix: str | None = None
    data_value_required: bool = False
    multi_value_separator: str | None = None
    long_display_text: str | None = None
    min_occurs: int | None = None
    max_occurs: int | None = None
    registry: FilterTypeRegistry = field(default_factory=FilterTypeRegistry, repr=False)

    # ── Static attributes ────────────────────────────

    def get_display_text(self) -> str:
        return self.display_text

    def get_display_symbol(self) -> str | None:
        return self.display_symbol

    def get_long_display_text(self) -> str:
        return self.long_display_text or self.display_text

    def get_url_suffix(self) -> str | None:
        return self.url_suffix

    def get_multi_value_separator(self) -> str | None:
        return self.multi_value_separator

    def get_multi_value_min_occurs(self) -> int | None:
        return self.min_occurs

    def get_multi_value_max_occurs(self) -> int | None:
        return self.max_occurs

    def is_data_value_required(self) -> bool:
        return self.data_value_required is True

    def is_multi_valued(self) -> bool:
        return self.multi_value_separator is not None

    # ── Related operators ────────────────────────────

    def get_opposite(self) -> FilterType | None:
        """The operator that negates this one, if any."""
        return self.registry.resolve(self.registry.opposite_map, self.url_suffix)

    def get_multi_value_filter(self) -> FilterType | None:
        """The multi-valued counterpart (``eq`` -> ``in``); ``None`` if already multi-valued."""
        if self.is_multi_valued():
            return None
        return self.registry.resolve(self.registry.single_value_to_multi_map, self.url_suffix)

    def get_single_value_filter(self) -> FilterType | None:
        """The single-valued counterpart (``in`` -> ``eq``).

        Resolution is attempted for every operator, single-valued ones included;
        they simply have no entry in the multi-to-single table.
        """
        return self.registry.resolve(self.registry.multi_value_to_single_map, self.url_suffix)

    # ── Validation ───────────────────────────────────

    def validate(self, value: Any, json_type: str, column_name: str | None = None) -> ValidationResult:
        """Check that this operator applies to *json_type* and normalise *value*.

        Operators without a data value are always valid and pass *value*
        through untouched.
        """
        if not self.is_data_value_required():
            return ValidationResult.ok(value)

        allowed = self.registry.types_by_json_type.get(json_type.lower(), [])
        if not any(t.url_suffix == self.url_suffix for t in allowed):
            return ValidationResult.invalid(
                f"Filter type '{self.display_text}' can't be applied to {json_type} types."
            )

        if self.is_multi_valued():
            return validate_multiple(
                json_type,
                value,
                column_name,
                self.multi_value_separator,  # type: ignore[arg-type]
                self.min_occurs,
                self.max_occurs,
            )
        return validate_value(json_type, value, column_name)


# ── Name -> descriptor namespace ─────────────────────────

class FilterTypes(Mapping[str, FilterType]):
    """Read-only ``Types.EQUAL`` / ``Types["EQUAL"]`` access to the registry."""

    def __init__(self, types: dict[str, FilterType]):
        self._types = dict(types)

    def __getattr__(self, name: str) -> FilterType:
        try:
            return self.__dict__["_types"][name]
        except KeyError:
            raise AttributeError(f"Unknown filter type '{name}'") from None

    def __setattr__(self, name: str, value: Any) -> None:
        if name != "_types" or "_types" in self.__dict__:
            raise AttributeError("Filter types are read-only")
        super().__setattr__(name, value)

    def __getitem__(self, name: str) -> FilterType:
        return self._types[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._types)

    def __len__(self) -> int:
        return len(self._types)

    def __dir__(self) -> list[str]:
        return list(self._types)


# ── Registry construction ────────────────────────────────

def _build_type(entry: TypeEntry, registry: FilterTypeRegistry) -> FilterType:
    filter_type = FilterType(
        name=entry.name,
        display_text=entry.display_text,
        display_symbol=entry.display_symbol,
        url_suffix=entry.url_suffix,
        data_value_required=entry.data_value_required,
        multi_value_separator=entry.multi_value_separator,
        long_display_text=entry.long_display_text,
        min_occurs=entry.min_occurs,
        max_occurs=entry.max_occurs,
        registry=registry,
    )
    if entry.url_suffix is not None:
        registry.url_map[entry.url_suffix] = filter_type
    return filter_type


def build_registry(catalog: Catalog) -> tuple[FilterTypeRegistry, FilterTypes]:
    """Build the shared tables and the name map from *catalog*."""
    registry = FilterTypeRegistry()

    # Phase 1: descriptors
    named: dict[str, FilterType] = {}
    for entry in catalog.entries:
        named[entry.name] = _build_type(entry, registry)

    # Phase 2: aliases and cross references
    for alias, target in catalog.aliases.items():
        named[alias] = named[target]

    registry.opposite_map.update(catalog.opposites)
    registry.single_value_to_multi_map.update(catalog.single_value_to_multi)
    registry.multi_value_to_single_map.update(catalog.multi_value_to_single)
    for json_type, names in catalog.json_types.items():
        registry.types_by_json_type[json_type] = [named[n] for n in names]
    for json_type, name in catalog.json_type_defaults.items():
        registry.default_by_json_type[json_type] = named[name]

    logger.debug(
        "Filter registry built: %d descriptors, %d names",
        len(catalog.entries), len(named),
    )
    return registry, FilterTypes(named)


_registry, Types = build_registry(load_catalog())


# ── Public API ───────────────────────────────────────────

def get_registry() -> FilterTypeRegistry:
    """Return the process-wide registry."""
    return _registry


def get_filter_type_for_url_suffix(url_suffix: str) -> FilterType | None:
    return _registry.url_map.get(url_suffix)


def get_filter_types_for_type(json_type: str | None, mv_enabled: bool = False) -> list[FilterType]:
    """Operators applicable to *json_type*, plus missing-value ones if *mv_enabled*."""
    types: list[FilterType] = []
    if json_type:
        types.extend(_registry.types_by_json_type.get(json_type.lower(), []))
    if mv_enabled:
        types.append(Types.HAS_MISSING_VALUE)
        types.append(Types.DOES_NOT_HAVE_MISSING_VALUE)
    return types


def get_default_filter_for_type(json_type: str | None) -> FilterType:
    """Default operator for *json_type*; ``EQUAL`` when the type is unknown."""
    if json_type:
        default = _registry.default_by_json_type.get(json_type.lower())
        if default is not None:
            return default
    return Types.EQUAL
