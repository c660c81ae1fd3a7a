"""
Small shared utilities.
"""
from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Generator

DEFAULT_REGION_NAME = "query"


def ensure_region_name(region_name: Any = None) -> str:
    """Return *region_name* when it is a non-empty string, else ``"query"``."""
    if region_name and isinstance(region_name, str):
        return region_name
    return DEFAULT_REGION_NAME


def is_sequence(value: Any) -> bool:
    """True for lists and tuples (strings and mappings are not sequences here)."""
    return isinstance(value, (list, tuple))


def accumulate(params: dict[str, Any], name: str, value: Any) -> None:
    """Set ``params[name]``, turning an existing entry into a list of values."""
    if name in params:
        existing = params[name]
        values = list(existing) if isinstance(existing, list) else [existing]
        values.append(value)
        value = values
    params[name] = value


@contextmanager
def timer() -> Generator[dict, None, None]:
    """Context manager that records elapsed wall-clock milliseconds."""
    result: dict = {}
    start = time.perf_counter()
    try:
        yield result
    finally:
        result["elapsed_ms"] = int((time.perf_counter() - start) * 1000)
