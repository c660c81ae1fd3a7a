"""
Hierarchical query keys -- the encoded identifiers used for columns and schemas.

A key is a chain of unencoded name segments linked root-first through
``parent``.  On the wire each segment is escaped with ``encode_part`` and the
segments are joined by the key's divider:

  FieldKey   ``/``   column paths, possibly traversing lookups
  SchemaKey  ``.``   schema paths, possibly nested

The escaping scheme must stay byte-for-byte compatible with the server's
decoder.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, ClassVar, Iterable

from tabquery.core.errors import InvalidArgument
from tabquery.core.utils import is_sequence


# ── Encoding tables ──────────────────────────────────────

# Applied in order; "$" must be escaped first.
_ENCODE_STEPS: tuple[tuple[str, str], ...] = (
    ("$", "$D"),
    ("/", "$S"),
    ("&", "$A"),
    ("}", "$B"),
    ("~", "$T"),
    (",", "$C"),
    (".", "$P"),
)

# Applied in order; "$D" must be decoded last.
_DECODE_STEPS: tuple[tuple[str, str], ...] = (
    ("$P", "."),
    ("$C", ","),
    ("$T", "~"),
    ("$B", "}"),
    ("$A", "&"),
    ("$S", "/"),
    ("$D", "$"),
)

_IDENTIFIER_RE = re.compile(r"[a-zA-Z][_$a-zA-Z0-9]*")

_RESERVED_WORDS = frozenset({
    "all", "any", "and", "as", "asc", "avg", "between", "class", "count",
    "delete", "desc", "distinct", "elements", "escape", "exists", "false",
    "fetch", "from", "full", "group", "having", "in", "indices", "inner",
    "insert", "into", "is", "join", "left", "like", "limit", "max", "min",
    "new", "not", "null", "or", "order", "outer", "right", "select", "set",
    "some", "sum", "true", "union", "update", "user", "versioned", "where",
    "case", "end", "else", "then", "when", "on", "both", "empty", "leading",
    "member", "of", "trailing",
})


# ── Base key ─────────────────────────────────────────────

@dataclass(frozen=True, eq=False)
class QueryKey:
    """One segment of a hierarchical key plus a link to its parent segment.

    Concrete key types only choose a ``divider``; every operation lives here.
    """

    parent: QueryKey | None
    name: str

    divider: ClassVar[str] = ""

    # ── Segment codec ────────────────────────────────

    @staticmethod
    def encode_part(s: str) -> str:
        """Escape a single unencoded segment."""
        for old, new in _ENCODE_STEPS:
            s = s.replace(old, new)
        return s

    @staticmethod
    def decode_part(s: str) -> str:
        """Reverse ``encode_part`` for a single encoded segment."""
        for old, new in _DECODE_STEPS:
            s = s.replace(old, new)
        return s

    @staticmethod
    def needs_quotes(s: str) -> bool:
        """True if *s* is not a plain identifier or is a reserved word."""
        if not _IDENTIFIER_RE.fullmatch(s):
            return True
        return s.lower() in _RESERVED_WORDS

    @staticmethod
    def quote(s: str) -> str:
        """SQL-quote a bare string."""
        return '"' + s.replace('"', '""') + '"'

    # ── Factories ────────────────────────────────────

    @classmethod
    def from_parts(cls, *args: Any) -> QueryKey | None:
        """Build a key from unencoded segments, leftmost argument as the root.

        Each argument is a segment string or a list/tuple of segment strings.
        ``None``, empty strings and empty sequences contribute nothing; when no
        segment is produced the result is ``None``.

        Raises
        ------
        InvalidArgument
            If an argument (or a sequence element) is not a string.
        """
        ret: QueryKey | None = None
        for arg in args:
            if arg is None or arg == "":
                continue
            if isinstance(arg, str):
                ret = cls(ret, arg)
            elif is_sequence(arg):
                for part in arg:
                    if not isinstance(part, str):
                        raise InvalidArgument(f"Illegal argument to from_parts: {arg!r}")
                    ret = cls(ret, part)
            else:
                raise InvalidArgument(f"Illegal argument to from_parts: {arg!r}")
        return ret

    @classmethod
    def from_string(cls, s: str) -> QueryKey:
        """Parse an encoded, divider-joined key string.

        An empty string yields a key with a single empty segment.
        """
        ret: QueryKey | None = None
        for piece in s.split(cls.divider):
            ret = cls(ret, cls.decode_part(piece))
        return ret  # type: ignore[return-value]

    # ── Accessors ────────────────────────────────────

    def get_name(self) -> str:
        return self.name

    def get_parts(self) -> list[str]:
        """Unencoded segments, root first."""
        parts: list[str] = []
        key: QueryKey | None = self
        while key is not None:
            parts.append(key.name)
            key = key.parent
        parts.reverse()
        return parts

    # ── Rendering ────────────────────────────────────

    def to_string(self, divider: str | None = None) -> str:
        if divider is None:
            divider = self.divider
        return divider.join(self.encode_part(p) for p in self.get_parts())

    def to_display_string(self) -> str:
        return ".".join(self.get_parts())

    def to_sql_string(self) -> str:
        return ".".join(
            self.quote(p) if self.needs_quotes(p) else p
            for p in self.get_parts()
        )

    def to_json(self) -> str:
        return self.to_string()

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_string()!r})"

    def __eq__(self, other: object) -> bool:
        if other is None or type(other) is not type(self):
            return False
        return self.to_string().lower() == other.to_string().lower()  # type: ignore[attr-defined]

    def __ne__(self, other: object) -> bool:
        return not self.__eq__(other)

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.to_string().lower()))


# ── Concrete keys ────────────────────────────────────────

class FieldKey(QueryKey):
    """Column identifier; segments joined by ``/``."""

    divider: ClassVar[str] = "/"


class SchemaKey(QueryKey):
    """Schema identifier; segments joined by ``.``."""

    divider: ClassVar[str] = "."


def key_strings(keys: Iterable[Any]) -> list[str]:
    """Render a mix of keys and plain strings as encoded strings."""
    return [str(k) for k in keys]
