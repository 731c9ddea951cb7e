"""Document and graph stores shared by the text pane, the tree and the modal."""

from __future__ import annotations

import logging
from collections.abc import Callable

from nodeedit._path import Path
from nodeedit.errors import MalformedDocument
from nodeedit.mutate import dumps, parse_document
from nodeedit.rows import iter_nodes
from nodeedit.session import Selection

logger = logging.getLogger(__name__)


class DocumentStore:
    """Authoritative JSON text plus what the text pane currently shows.

    ``json`` only changes wholesale.  ``contents`` follows the text pane and
    may hold unsaved, even invalid, text while ``has_changes`` is set.
    """

    def __init__(self, json_text: str = "{}") -> None:
        self.json: str = json_text
        self.contents: str = json_text
        self.has_changes: bool = False
        self._subscribers: list[Callable[[str], None]] = []

    def subscribe(self, callback: Callable[[str], None]) -> None:
        self._subscribers.append(callback)

    def set_json(self, text: str) -> None:
        self.json = text
        for callback in list(self._subscribers):
            callback(text)

    def set_contents(self, contents: str, has_changes: bool = True) -> None:
        self.contents = contents
        self.has_changes = has_changes

    def replace(self, text: str) -> None:
        """Adopt an edited document: new JSON and new pane contents."""
        self.set_contents(text, has_changes=True)
        self.set_json(text)

    @property
    def validation_error(self) -> str:
        try:
            parse_document(self.contents)
        except MalformedDocument as exc:
            return str(exc)
        return ""

    def save_contents(self) -> str:
        """Make the text pane contents authoritative.

        The JSON is re-formatted while the pane keeps the text as typed, so
        subscribers are not told to reload it.  Raises
        :class:`~nodeedit.errors.MalformedDocument` if the contents do not
        parse.
        """
        formatted = dumps(parse_document(self.contents))
        self.json = formatted
        self.has_changes = False
        return formatted


class GraphStore:
    """Nodes derived from the document and the one currently selected."""

    def __init__(self) -> None:
        self.nodes: list[Selection] = []
        self.selected_node: Selection | None = None

    def set_graph(self, text: str) -> None:
        """Rebuild the nodes; invalid text keeps the previous graph."""
        try:
            document = parse_document(text)
        except MalformedDocument as exc:
            logger.info("graph not rebuilt: %s", exc)
            return
        self.nodes = [Selection(rows, path) for path, rows in iter_nodes(document)]

    def set_selected_node(self, node: Selection | None) -> None:
        self.selected_node = node

    def find(self, path: Path) -> Selection | None:
        path = tuple(path)
        for node in self.nodes:
            if node.path == path:
                return node
        return None
