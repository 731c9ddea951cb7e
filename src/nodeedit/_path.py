"""Path helpers: display form, parsing and lookup of node paths."""

from __future__ import annotations

import json

ROOT_MARKER = "$"

Segment = str | int
Path = tuple[Segment, ...]


def format_path(path: Path | list[Segment] | None) -> str:
    """Render *path* in bracket form, e.g. ``$["customer"][0]``.

    Object keys are written as JSON strings, array indices stay bare and
    the empty path is just the root marker.
    """
    if not path:
        return ROOT_MARKER
    parts = [
        str(seg) if isinstance(seg, int) else json.dumps(seg, ensure_ascii=False)
        for seg in path
    ]
    return f"{ROOT_MARKER}[{']['.join(parts)}]"


def parse_path(text: str) -> Path:
    """Parse the bracket form produced by :func:`format_path`.

    Quoted segments are decoded as JSON strings so escaped quotes survive.
    Raises ``ValueError`` for anything that is not a bracket path.
    """
    text = text.strip()
    if not text.startswith(ROOT_MARKER):
        raise ValueError("Path must start with $")

    remaining = text[len(ROOT_MARKER) :]
    segments: list[Segment] = []
    while remaining:
        if not remaining.startswith("["):
            raise ValueError(f"Unexpected text in path: {remaining!r}")

        if remaining.startswith('["'):
            end = _closing_quote(remaining, 2)
            if end == -1 or remaining[end + 1 : end + 2] != "]":
                raise ValueError("Unclosed bracket")
            segments.append(json.loads(remaining[1 : end + 1]))
            remaining = remaining[end + 2 :]
            continue

        end = remaining.find("]")
        if end == -1:
            raise ValueError("Unclosed bracket")
        index_str = remaining[1:end]
        if not (index_str.isascii() and index_str.isdigit()):
            raise ValueError(f"Invalid array index: {index_str!r}")
        segments.append(int(index_str))
        remaining = remaining[end + 1 :]

    return tuple(segments)


def _closing_quote(text: str, start: int) -> int:
    """Return the index of the quote closing a string that begins before *start*."""
    i = start
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == '"':
            return i
        i += 1
    return -1


def get_value_at_path(
    data: object, path: Path | list[Segment], default: object = None
) -> object:
    """Get the value at *path* in *data*, or *default* if any step is missing."""
    current = data
    for key in path:
        if isinstance(current, dict):
            key = str(key)
            if key not in current:
                return default
            current = current[key]
        elif isinstance(current, list) and isinstance(key, int):
            if 0 <= key < len(current):
                current = current[key]
            else:
                return default
        else:
            return default
    return current
