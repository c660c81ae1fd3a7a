"""
Filter value validation -- normalises a raw filter value for a JSON column type.

Every check returns a ``ValidationResult``; nothing here raises or prompts.
Callers decide how to surface an invalid result.

Normalisation rules:
  boolean  true/1/yes/y/on/t -> "1", false/0/no/n/off/f -> "0"
  date     "YYYY-MM-DD[ HH:MM]" and relative dates ("+1d", "-5H") pass through,
           other recognised formats become "YYYY-MM-DD[ HH:MM]"
  int      leading integer ("12abc" -> "12")
  float    leading decimal must parse; the value is returned unchanged
  string   passed through
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from tabquery.core.logging import get_logger

logger = get_logger(__name__)


# ── Result type ──────────────────────────────────────────

@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one filter value."""

    valid: bool
    value: Any = None
    message: str | None = None

    def __bool__(self) -> bool:
        return self.valid

    @classmethod
    def ok(cls, value: Any) -> ValidationResult:
        return cls(True, value)

    @classmethod
    def invalid(cls, message: str) -> ValidationResult:
        logger.info("Filter value rejected: %s", message)
        return cls(False, None, message)


# ── Patterns ─────────────────────────────────────────────

_TRUE_VALUES = {"TRUE", "1", "YES", "Y", "ON", "T"}
_FALSE_VALUES = {"FALSE", "0", "NO", "N", "OFF", "F"}

_ISO_DATE_RE = re.compile(r"^\s*(\d\d\d\d)-(\d\d)-(\d\d)\s*$")
_ISO_DATE_TIME_RE = re.compile(r"^\s*(\d\d\d\d)-(\d\d)-(\d\d)\s*(\d\d):(\d\d)\s*$")
_RELATIVE_DATE_RE = re.compile(r"^(-|\+)")
_TWO_DIGIT_YEAR_RE = re.compile(r"^\s*\d{1,2}/\d{1,2}/\d{2}(\D|$)")

_DATE_FORMATS = (
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d",
    "%Y/%m/%d %H:%M",
    "%m/%d/%Y",
    "%m/%d/%Y %H:%M",
    "%m/%d/%y",
    "%m/%d/%y %H:%M",
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %b %Y",
    "%d %B %Y",
)

_INT_RE = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_RE = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?|^\s*[+-]?Infinity")


# ── Per-type checks ──────────────────────────────────────

def _format_datetime(dt: datetime) -> str:
    text = f"{dt.year:04d}-{dt.month:02d}-{dt.day:02d}"
    if dt.hour or dt.minute:
        text += f" {dt.hour:02d}:{dt.minute:02d}"
    return text


def _parse_date(text: str) -> datetime | None:
    stripped = text.strip()
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(stripped, fmt)
        except ValueError:
            continue
    return None


def _validate_boolean(str_value: str, column_name: str) -> ValidationResult:
    upper = str_value.upper()
    if upper in _TRUE_VALUES:
        return ValidationResult.ok("1")
    if upper in _FALSE_VALUES:
        return ValidationResult.ok("0")
    return ValidationResult.invalid(
        f"{str_value} is not a valid boolean for field '{column_name}'. "
        "Try true,false; yes,no; y,n; on,off; or 1,0."
    )


def _validate_date(value: Any, str_value: str, column_name: str) -> ValidationResult:
    if isinstance(value, datetime):
        return ValidationResult.ok(_format_datetime(value))
    if isinstance(value, date):
        return ValidationResult.ok(value.isoformat())

    if _ISO_DATE_RE.match(str_value) or _ISO_DATE_TIME_RE.match(str_value):
        return ValidationResult.ok(str_value)

    dt = _parse_date(str_value)
    if dt is None:
        # Relative dates ("+1d", "-5H") are resolved by the server.
        if _RELATIVE_DATE_RE.match(str_value):
            return ValidationResult.ok(str_value)
        return ValidationResult.invalid(f"{str_value} is not a valid date for field '{column_name}'.")

    if _TWO_DIGIT_YEAR_RE.search(str_value):
        # Two-digit years start in the 1900s and roll forward a century
        # when more than 80 years old.
        year = 1900 + dt.year % 100
        if year < date.today().year - 80:
            year += 100
        dt = dt.replace(year=year)
    return ValidationResult.ok(_format_datetime(dt))


def _validate_float(str_value: str, column_name: str) -> ValidationResult:
    if not _FLOAT_RE.match(str_value):
        return ValidationResult.invalid(
            f"{str_value} is not a valid decimal number for field '{column_name}'."
        )
    return ValidationResult.ok(str_value)


def _validate_int(str_value: str, column_name: str) -> ValidationResult:
    m = _INT_RE.match(str_value)
    if not m:
        return ValidationResult.invalid(f"{str_value} is not a valid integer for field '{column_name}'.")
    return ValidationResult.ok(str(int(m.group(1))))


# ── Public API ───────────────────────────────────────────

def validate_value(json_type: str, value: Any, column_name: str | None = None) -> ValidationResult:
    """Validate and normalise a single value for *json_type*."""
    column_name = column_name or ""
    str_value = "" if value is None else str(value)
    json_type = json_type.lower()

    if json_type == "boolean":
        if isinstance(value, bool):
            return ValidationResult.ok("1" if value else "0")
        return _validate_boolean(str_value, column_name)
    if json_type == "date":
        return _validate_date(value, str_value, column_name)
    if json_type == "float":
        return _validate_float(str_value, column_name)
    if json_type == "int":
        return _validate_int(str_value, column_name)
    return ValidationResult.ok(str_value)


def validate_multiple(
    json_type: str,
    value: Any,
    column_name: str | None,
    separator: str,
    min_occurs: int | None = None,
    max_occurs: int | None = None,
) -> ValidationResult:
    """Validate a *separator*-delimited value, one part at a time.

    The normalised parts are re-joined with *separator*.  Occurrence bounds
    of ``None`` or ``0`` are not enforced.
    """
    if isinstance(value, (list, tuple)):
        parts = [str(v) for v in value]
    else:
        parts = ("" if value is None else str(value)).split(separator)

    normalised: list[str] = []
    for part in parts:
        result = validate_value(json_type, part.strip(), column_name)
        if not result:
            return result
        normalised.append(result.value)

    if min_occurs and len(parts) < min_occurs:
        return ValidationResult.invalid(
            f"At least {min_occurs} '{separator}' separated values are required"
        )
    if max_occurs and len(parts) > max_occurs:
        return ValidationResult.invalid(
            f"At most {max_occurs} '{separator}' separated values are allowed"
        )

    return ValidationResult.ok(separator.join(normalised))
