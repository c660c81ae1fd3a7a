"""
Filters -- column/value/operator triples and their URL parameter form.

A filter serialises to one request parameter:

  name   ``<region>.<column>~<suffix>``   (region defaults to "query")
  value  the raw value, or "" for operators that take no value

Neither part is escaped here; percent-encoding is the transport's job.
Repeated filters on the same column and operator collapse into a list value.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Protocol, runtime_checkable

from tabquery.client.action_url import encode_uri_component, get_parameters
from tabquery.core.errors import InvalidArgument
from tabquery.core.utils import accumulate, ensure_region_name
from tabquery.filters.types import FilterType, Types, get_filter_type_for_url_suffix


# ── Capability ───────────────────────────────────────────

@runtime_checkable
class FilterLike(Protocol):
    """What request builders need from a filter."""

    @property
    def column_name(self) -> str: ...

    @property
    def value(self) -> Any: ...

    @property
    def filter_type(self) -> FilterType: ...

    def url_parameter_name(self, region_name: str | None = None) -> str: ...

    def url_parameter_value(self) -> Any: ...


def ensure_filter(obj: Any) -> FilterLike:
    """Return *obj* if it behaves like a filter, else raise ``InvalidArgument``."""
    if not isinstance(obj, FilterLike):
        raise InvalidArgument(f"Expected a filter created by create(), got {obj!r}")
    return obj


# ── Value object ─────────────────────────────────────────

@dataclass(frozen=True, eq=False)
class Filter:
    """Immutable column filter.  Compares and hashes by identity."""

    column_name: str
    value: Any
    filter_type: FilterType = Types.EQUAL

    def url_parameter_name(self, region_name: str | None = None) -> str:
        region = ensure_region_name(region_name)
        return f"{region}.{self.column_name}~{self.filter_type.get_url_suffix()}"

    def url_parameter_value(self) -> Any:
        return self.value if self.filter_type.is_data_value_required() else ""


def create(column: str, value: Any = None, filter_type: FilterType | None = None) -> Filter:
    """Bind *column*, *value* and *filter_type* (``Types.EQUAL`` by default).

    No validation happens here; use ``FilterType.validate`` when needed.
    """
    return Filter(column, value, filter_type or Types.EQUAL)


# ── Request parameters ───────────────────────────────────

def append_filter_params(
    params: dict[str, Any] | None,
    filters: Iterable[Any] | None,
    region_name: str | None = None,
) -> dict[str, Any]:
    """Add URL parameters for *filters* to *params* and return it.

    *params* is updated in place when given, otherwise a new dict is returned.
    A filter whose operator needs a value but whose value is ``None`` is
    skipped (an ``~eq=null`` filter is a no-op).
    """
    region = ensure_region_name(region_name)
    filter_params = params if params is not None else {}

    for obj in filters or []:
        flt = ensure_filter(obj)
        if flt.filter_type.is_data_value_required() and flt.url_parameter_value() is None:
            continue
        accumulate(filter_params, flt.url_parameter_name(region), flt.url_parameter_value())

    return filter_params


def append_aggregate_params(
    params: dict[str, Any] | None,
    aggregates: Iterable[dict[str, Any]] | None,
    region_name: str | None = None,
) -> dict[str, Any]:
    """Add ``<region>.agg.<column>`` parameters for each aggregate.

    Each aggregate is a dict with ``type``, ``column`` and optional ``label``.
    Entries missing ``type`` or ``column`` are ignored.
    """
    prefix = ensure_region_name(region_name) + ".agg."
    agg_params = params if params is not None else {}

    for aggregate in aggregates or []:
        agg_type = aggregate.get("type")
        column = aggregate.get("column")
        if not agg_type or not column:
            continue
        value = f"type={agg_type}"
        if aggregate.get("label"):
            value += f"&label={aggregate['label']}"
        accumulate(agg_params, prefix + column, encode_uri_component(value))

    return agg_params


def merge(
    base_filters: Iterable[Any] | None,
    column_name: str,
    column_filters: Iterable[Any] | None = None,
) -> list[FilterLike]:
    """Replace every filter on *column_name* with *column_filters*.

    Returns a new list; *base_filters* is never modified.
    """
    merged = [
        flt for flt in map(ensure_filter, base_filters or [])
        if flt.column_name != column_name
    ]
    merged.extend(ensure_filter(flt) for flt in column_filters or [])
    return merged


# ── Reading filters back from URLs ───────────────────────

def get_filters_from_url(url: str, region_name: str | None = None) -> list[Filter]:
    """Rebuild filters from ``<region>.<column>~<suffix>`` parameters in *url*.

    Each filter's value is the list of values for that parameter.  Unknown
    suffixes fall back to ``Types.EQUAL``.
    """
    region = ensure_region_name(region_name)
    filters: list[Filter] = []

    for param_name, values in get_parameters(url).items():
        if not param_name.startswith(region + "."):
            continue
        tilde = param_name.find("~")
        if tilde == -1:
            continue
        column = param_name[len(region) + 1:tilde]
        filter_type = get_filter_type_for_url_suffix(param_name[tilde + 1:])
        if not isinstance(values, list):
            values = [values]
        filters.append(create(column, values, filter_type))

    return filters


def get_filter_description(url: str, region_name: str, column_name: str) -> str:
    """Human-readable filter text for one column, e.g. ``"Is Greater Than 10 AND Is Less Than 100"``."""
    prefix = f"{region_name}.{column_name}~"
    descriptions: list[str] = []

    for param_name, values in get_parameters(url).items():
        if not param_name.startswith(prefix):
            continue
        suffix = param_name[param_name.index("~") + 1:]
        friendly = get_filter_type_for_url_suffix(suffix)
        display_text = friendly.get_display_text() if friendly else suffix
        if not isinstance(values, list):
            values = [values]
        descriptions.extend(f"{display_text} {v}" for v in values)

    return " AND ".join(descriptions)


def get_query_params_from_url(url: str, region_name: str | None = None) -> dict[str, Any]:
    """Collect ``<region>.param.<name>`` parameters as ``{name: value}``."""
    key = ensure_region_name(region_name) + ".param."
    return {
        name[len(key):]: value
        for name, value in get_parameters(url).items()
        if name.startswith(key)
    }


def get_sort_from_url(url: str, region_name: str | None = None) -> Any:
    return get_parameters(url).get(ensure_region_name(region_name) + ".sort")
