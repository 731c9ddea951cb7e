"""Terminal JSON editor: text pane, node tree and node modal."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Horizontal
from textual.logging import TextualHandler
from textual.widgets import Footer, Header, Static, TextArea, Tree
from textual.widgets.tree import TreeNode

from nodeedit._path import ROOT_MARKER
from nodeedit.errors import MalformedDocument
from nodeedit.modal import NodeModal
from nodeedit.rows import NodeKind, scalar_text
from nodeedit.session import EditSession, Selection
from nodeedit.store import DocumentStore, GraphStore

logger = logging.getLogger(__name__)

SAMPLE_JSON = """\
{
  "name": "json-node-editor",
  "version": "1.0.0",
  "customer": {
    "name": "Ada",
    "vip": true,
    "credit": 120.5,
    "note": null
  },
  "tags": ["alpha", "beta"],
  "orders": [
    {"id": 1, "total": 9.99},
    {"id": 2, "total": 20}
  ]
}"""


def node_label(node: Selection) -> Text:
    """Tree label: last path segment followed by a dimmed summary."""
    name = str(node.path[-1]) if node.path else ROOT_MARKER
    label = Text(name, style="bold")
    if node.kind is NodeKind.LEAF:
        label.append(f"  {scalar_text(node.rows[0].value)}", style="dim")
    elif [row.key for row in node.rows] == [str(i) for i in range(len(node.rows))]:
        label.append(f"  [{len(node.rows)}]", style="dim")
    else:
        label.append(f"  {{{len(node.rows)}}}", style="dim")
    return label


class NodeEditApp(App):
    """TUI app pairing a JSON text pane with a tree of its nodes."""

    CSS = """
    Screen {
        layout: vertical;
    }
    #panes {
        height: 1fr;
    }
    #text-pane {
        width: 1fr;
        border: solid $accent;
    }
    #graph {
        width: 1fr;
        border: solid $accent;
    }
    #status {
        height: 1;
        padding: 0 1;
        color: $text-muted;
        background: $surface;
    }
    """

    TITLE = "JSON Node Editor"
    BINDINGS = [
        ("ctrl+s", "save_contents", "Save text"),
        ("ctrl+q", "quit", "Quit"),
    ]
    ENABLE_COMMAND_PALETTE = False

    def __init__(
        self,
        file_path: str = "",
        initial_content: str = "{}",
        read_only: bool = False,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.file_path = file_path
        self.read_only = read_only
        self.documents = DocumentStore(initial_content)
        self.graph = GraphStore()
        self.session = EditSession(
            get_document=lambda: self.documents.json,
            set_document=self.documents.replace,
            clear_selection=self._clear_selection,
            on_document_replaced=self._refresh_graph,
        )
        self.documents.subscribe(self._load_text_pane)

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        # kept as attributes: the modal screen hides them from query_one
        self._text_pane = TextArea(
            self.documents.contents, read_only=self.read_only, id="text-pane"
        )
        self._graph_tree: Tree[Selection] = Tree(Text(ROOT_MARKER), id="graph")
        self._status_bar = Static("", id="status")
        with Horizontal(id="panes"):
            yield self._text_pane
            yield self._graph_tree
        yield self._status_bar
        yield Footer()

    def on_mount(self) -> None:
        ro = " [RO]" if self.read_only else ""
        self.sub_title = (self.file_path or "[new]") + ro
        self._refresh_graph(self.documents.json)
        self._update_status()
        self._graph_tree.focus()

    # -- Collaborators of the edit session ----------------------------------

    def _clear_selection(self) -> None:
        self.graph.set_selected_node(None)

    def _refresh_graph(self, text: str) -> None:
        self.graph.set_graph(text)
        self._rebuild_tree()

    def _load_text_pane(self, text: str) -> None:
        pane = self._text_pane
        if pane.text != text:
            pane.load_text(text)
        self._update_status()

    # -- Tree --------------------------------------------------------------

    def _rebuild_tree(self) -> None:
        tree = self._graph_tree
        tree.clear()
        tree_nodes: dict[tuple, TreeNode] = {(): tree.root}
        for node in self.graph.nodes:
            if not node.path:
                tree.root.data = node
                tree.root.set_label(node_label(node))
                continue
            parent = tree_nodes.get(node.path[:-1])
            if parent is None:
                continue
            if node.kind is NodeKind.LEAF:
                tree_nodes[node.path] = parent.add_leaf(node_label(node), data=node)
            else:
                tree_nodes[node.path] = parent.add(
                    node_label(node), data=node, expand=True
                )
        tree.root.expand()

    def open_node(self, node: Selection) -> None:
        self.graph.set_selected_node(node)
        self.session.select(node)
        self.push_screen(NodeModal(self.session, read_only=self.read_only))

    def on_tree_node_selected(self, event: Tree.NodeSelected) -> None:
        node = event.node.data
        if isinstance(node, Selection):
            self.open_node(node)

    # -- Text pane -----------------------------------------------------------

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        if event.text_area.id != "text-pane":
            return
        text = event.text_area.text
        if text != self.documents.contents:
            self.documents.set_contents(text)
            self._update_status()

    def _update_status(self) -> None:
        status = Text()
        if self.documents.has_changes:
            status.append("Unsaved changes", style="yellow")
        error = self.documents.validation_error
        if error:
            if status:
                status.append("  ")
            status.append(error, style="red")
        self._status_bar.update(status)

    def action_save_contents(self) -> None:
        """Make the text pane authoritative and redraw the tree."""
        if self.read_only:
            self.notify("Document is read-only", severity="warning")
            return
        try:
            text = self.documents.save_contents()
        except MalformedDocument as exc:
            self.notify(str(exc), severity="error", timeout=6)
            return
        self._refresh_graph(text)
        self._update_status()
        self.notify("Saved and graph updated", severity="information")


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="nodeedit",
        description="Edit JSON documents node by node",
    )
    parser.add_argument(
        "file",
        nargs="?",
        default="",
        help="JSON file to open",
    )
    parser.add_argument(
        "-R", "--read-only",
        action="store_true",
        default=False,
        help="open in read-only mode",
    )
    parser.add_argument(
        "--log-level",
        default="",
        choices=["", "debug", "info", "warning", "error"],
        help="send log records of this level to the textual console",
    )
    args = parser.parse_args()

    if args.log_level:
        logging.basicConfig(
            level=args.log_level.upper(), handlers=[TextualHandler()]
        )

    file_path: str = args.file
    initial_content: str = SAMPLE_JSON
    if file_path:
        path = Path(file_path)
        try:
            initial_content = path.read_text(encoding="utf-8") if path.exists() else "{}"
        except OSError as exc:
            print(f"nodeedit: {exc}", file=sys.stderr)
            sys.exit(1)

    logger.debug("opening %s", file_path or "sample document")
    app = NodeEditApp(
        file_path=file_path,
        initial_content=initial_content,
        read_only=args.read_only,
    )
    app.run()


if __name__ == "__main__":
    main()
