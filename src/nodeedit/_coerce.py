"""Convert edited leaf text back into a value of the leaf's original type."""

from __future__ import annotations

import math
import re
from enum import Enum

from nodeedit.errors import InvalidBoolean, InvalidNumber
from nodeedit.mutate import loads
from nodeedit.rows import RowType

_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)


class LeafType(Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"
    OTHER = "other"

    @classmethod
    def from_row_type(cls, row_type: RowType) -> LeafType:
        try:
            return cls(row_type.value)
        except ValueError:
            return cls.OTHER


def coerce_leaf(raw: str, leaf_type: LeafType) -> object:
    """Turn *raw* into a value of *leaf_type*.

    Strings, numbers, booleans and nulls are strict so they keep their type
    across an edit.  Anything else is parsed as JSON when possible and kept
    as a plain string when not.
    """
    if leaf_type is LeafType.STRING:
        return raw
    elif leaf_type is LeafType.NUMBER:
        return parse_number(raw)
    elif leaf_type is LeafType.BOOLEAN:
        v = raw.strip().lower()
        if v not in ("true", "false"):
            raise InvalidBoolean()
        return v == "true"
    elif leaf_type is LeafType.NULL:
        return None
    elif leaf_type is LeafType.OTHER:
        try:
            return loads(raw)
        except ValueError:
            return raw
    raise ValueError(f"Unknown leaf type: {leaf_type!r}")


def parse_number(raw: str) -> int | float:
    """Parse a numeric literal; integral literals stay ints."""
    text = raw.strip()
    if not _NUMBER_RE.fullmatch(text):
        raise InvalidNumber()
    if text.lstrip("+-").isdigit():
        return int(text)
    value = float(text)
    if not math.isfinite(value):
        raise InvalidNumber()
    return value
