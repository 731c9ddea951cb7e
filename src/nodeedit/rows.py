"""Row projection of graph nodes.

A graph node is shown as a list of rows.  A scalar node has a single row
without a key; an object or array node has one row per member, where nested
containers appear as rows of type ``OBJECT``/``ARRAY`` carrying their size.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

from nodeedit._path import Path

INDENT = 2


class RowType(Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"
    OBJECT = "object"
    ARRAY = "array"

    @property
    def is_container(self) -> bool:
        return self in (RowType.OBJECT, RowType.ARRAY)


class NodeKind(Enum):
    LEAF = "leaf"
    COMPOSITE = "composite"


@dataclass(frozen=True)
class NodeRow:
    key: str | None
    value: object
    type: RowType


def row_type(value: object) -> RowType:
    """Classify a parsed JSON value."""
    if value is None:
        return RowType.NULL
    # before the number check: True is an int too
    if isinstance(value, bool):
        return RowType.BOOLEAN
    if isinstance(value, (int, float)):
        return RowType.NUMBER
    if isinstance(value, str):
        return RowType.STRING
    if isinstance(value, dict):
        return RowType.OBJECT
    if isinstance(value, list):
        return RowType.ARRAY
    raise TypeError(f"Not a JSON value: {type(value).__name__}")


def node_rows(value: object) -> tuple[NodeRow, ...]:
    """Build the rows the graph view shows for a node holding *value*."""
    if isinstance(value, dict):
        return tuple(_member_row(str(k), v) for k, v in value.items())
    if isinstance(value, list):
        # keyed by index so a one-item array never reads as a leaf
        return tuple(_member_row(str(i), item) for i, item in enumerate(value))
    return (NodeRow(None, value, row_type(value)),)


def _member_row(key: str, value: object) -> NodeRow:
    kind = row_type(value)
    if kind.is_container:
        return NodeRow(key, len(value), kind)  # type: ignore[arg-type]
    return NodeRow(key, value, kind)


def iter_nodes(
    value: object, path: Path = ()
) -> Iterator[tuple[Path, tuple[NodeRow, ...]]]:
    """Yield ``(path, rows)`` for every node of the graph, depth first.

    Containers are nodes of their own, and so is every scalar array item.
    Scalar object members live as rows of their parent.
    """
    yield path, node_rows(value)
    if isinstance(value, dict):
        for k, v in value.items():
            if isinstance(v, (dict, list)):
                yield from iter_nodes(v, path + (str(k),))
    elif isinstance(value, list):
        for i, item in enumerate(value):
            if isinstance(item, (dict, list)):
                yield from iter_nodes(item, path + (i,))
            else:
                yield path + (i,), node_rows(item)


def node_kind(rows: tuple[NodeRow, ...] | list[NodeRow]) -> NodeKind:
    if len(rows) == 1 and rows[0].key is None:
        return NodeKind.LEAF
    return NodeKind.COMPOSITE


def scalar_text(value: object) -> str:
    """Natural text of a scalar: strings unquoted, ``null``/``true``/``false``."""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def rows_to_text(rows: tuple[NodeRow, ...] | list[NodeRow]) -> str:
    """Text shown for a node and used to seed its edit box.

    Leaves render as bare text.  Composites render their scalar fields as an
    indented JSON object; nested containers are left out and edited by
    selecting them in the graph.
    """
    if not rows:
        return "{}"
    if node_kind(rows) is NodeKind.LEAF:
        return scalar_text(rows[0].value)

    fields: dict[str, object] = {}
    for row in rows:
        if row.type.is_container or row.key is None:
            continue
        fields[row.key] = row.value
    return json.dumps(fields, indent=INDENT, ensure_ascii=False)
