"""Install a value at a path of a JSON document.

The document is never changed in place.  Every edit parses the current
text afresh, builds a new tree by copying only the containers along the
path, and serialises the result.
"""

from __future__ import annotations

import json
import logging

from nodeedit._path import Path, Segment, format_path
from nodeedit.errors import ApplyFailed, MalformedDocument

INDENT = 2

logger = logging.getLogger(__name__)


def _reject_constant(name: str) -> object:
    raise ValueError(f"Out of range float value: {name}")


def loads(text: str) -> object:
    """Strict JSON parse: ``NaN`` and ``Infinity`` are rejected."""
    return json.loads(text, parse_constant=_reject_constant)


def dumps(value: object) -> str:
    """Serialise with two-space indentation, keeping non-ASCII text."""
    return json.dumps(value, indent=INDENT, ensure_ascii=False, allow_nan=False)


def parse_document(text: str) -> object:
    try:
        return loads(text)
    except ValueError as exc:
        raise MalformedDocument.from_exception(exc) from exc


_MISSING = object()


def assoc_path(node: object, path: Path, value: object) -> object:
    """Return a copy of *node* with *value* installed at *path*.

    Only containers along *path* are copied; everything else is shared with
    *node*.  A missing intermediate container is created as an empty object,
    whatever the type of the segment that addresses it.
    """
    if not path:
        return value

    head, rest = path[0], path[1:]
    if isinstance(node, dict):
        key = str(head)
        child = node[key] if key in node else _MISSING
        new = dict(node)
        new[key] = _assoc_child(child, rest, value)
        return new

    if isinstance(node, list):
        index = _list_index(head)
        child = node[index] if index < len(node) else _MISSING
        new = list(node)
        if index >= len(new):
            new.extend([None] * (index + 1 - len(new)))
        new[index] = _assoc_child(child, rest, value)
        return new

    raise ApplyFailed(f"Cannot set {head!r} on {_describe(node)}")


def _assoc_child(child: object, rest: Path, value: object) -> object:
    if not rest:
        return value
    if child is _MISSING:
        child = {}
    return assoc_path(child, rest, value)


def _list_index(segment: Segment) -> int:
    if isinstance(segment, bool):
        raise ApplyFailed(f"Invalid array index: {segment!r}")
    if isinstance(segment, int):
        if segment < 0:
            raise ApplyFailed(f"Negative array index: {segment}")
        return segment
    if segment.isascii() and segment.isdigit():
        return int(segment)
    raise ApplyFailed(f"Cannot use key {segment!r} on an array")


def _describe(node: object) -> str:
    if node is None:
        return "null"
    if isinstance(node, bool):
        return "a boolean"
    if isinstance(node, (int, float)):
        return "a number"
    return "a string"


def apply_edit(document_text: str, path: Path, new_value: object) -> str:
    """Return the document text with *new_value* installed at *path*.

    Raises :class:`MalformedDocument` when *document_text* does not parse and
    :class:`ApplyFailed` when the path cannot be walked or the result cannot
    be serialised.
    """
    document = parse_document(document_text)
    updated = assoc_path(document, tuple(path), new_value)
    try:
        text = dumps(updated)
    except (TypeError, ValueError) as exc:
        raise ApplyFailed(f"{ApplyFailed.default_message}: {exc}") from exc
    logger.debug("applied edit at %s", format_path(path))
    return text
