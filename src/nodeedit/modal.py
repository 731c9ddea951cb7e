"""Modal screen showing, and editing, the node selected in the tree."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Static, TextArea

from nodeedit.session import EditSession


class NodeModal(ModalScreen[None]):
    """Content and JSON path of a node, with Edit / Save / Cancel."""

    DEFAULT_CSS = """
    NodeModal {
        align: center middle;
    }
    #node-modal {
        width: 70%;
        max-width: 100;
        height: auto;
        max-height: 90%;
        padding: 1 2;
        border: thick $accent;
        background: $surface;
    }
    #modal-header, #path-row {
        height: auto;
    }
    #content-title, #path-title {
        width: 1fr;
        color: $text-muted;
    }
    #content-view, #path-view {
        width: 1fr;
        padding: 0 1;
        background: $panel;
    }
    #content-view {
        max-height: 15;
        overflow-y: auto;
    }
    #content-edit {
        height: 12;
    }
    #error {
        color: $error;
        height: auto;
    }
    """

    BINDINGS = [
        ("escape", "close", "Close"),
        ("ctrl+s", "save", "Save"),
    ]

    def __init__(
        self,
        session: EditSession,
        *,
        read_only: bool = False,
        name: str | None = None,
        id: str | None = None,
        classes: str | None = None,
    ) -> None:
        super().__init__(name=name, id=id, classes=classes)
        self.session = session
        self.read_only = read_only

    def compose(self) -> ComposeResult:
        with Vertical(id="node-modal"):
            with Horizontal(id="modal-header"):
                yield Static("[b]Content[/b]", id="content-title")
                yield Button("Edit", id="edit", variant="primary")
                yield Button("Save", id="save", variant="success")
                yield Button("Cancel", id="cancel")
                yield Button("✕", id="close", variant="error")
            yield Static("", id="content-view")
            yield TextArea("", id="content-edit")
            with Horizontal(id="path-row"):
                yield Static("[b]JSON Path[/b]", id="path-title")
                yield Button("Copy", id="copy-path")
            yield Static("", id="path-view")
            yield Static("", id="error")

    def on_mount(self) -> None:
        self._sync()

    def _sync(self) -> None:
        """Show the widgets matching the session state."""
        editing = self.session.editing
        self.query_one("#edit", Button).display = not editing
        self.query_one("#edit", Button).disabled = (
            self.read_only or self.session.selection is None
        )
        self.query_one("#save", Button).display = editing
        self.query_one("#cancel", Button).display = editing
        self.query_one("#content-view", Static).display = not editing
        self.query_one("#content-edit", TextArea).display = editing

        self.query_one("#content-view", Static).update(Text(self.session.projection))
        self.query_one("#path-view", Static).update(Text(self.session.path_label))
        error = self.query_one("#error", Static)
        error.update(Text(self.session.error or "", style="bold red"))
        error.display = bool(self.session.error)

    # -- Actions -----------------------------------------------------------

    def action_edit(self) -> None:
        if self.read_only:
            self.notify("Document is read-only", severity="warning")
            return
        self.session.start_edit()
        if self.session.editing:
            editor = self.query_one("#content-edit", TextArea)
            editor.load_text(self.session.edited)
            self._sync()
            editor.focus()

    def action_save(self) -> None:
        if not self.session.editing:
            return
        self.session.update_text(self.query_one("#content-edit", TextArea).text)
        result = self.session.submit()
        if result.ok:
            self.notify("Node updated", severity="information")
            self.dismiss()
        else:
            self._sync()

    def action_cancel(self) -> None:
        self.session.cancel()
        self._sync()

    def action_close(self) -> None:
        self.session.close()
        self.dismiss()

    def action_copy_path(self) -> None:
        self.app.copy_to_clipboard(self.session.path_label)
        self.notify("Copied to clipboard", severity="information")

    # -- Event handlers ----------------------------------------------------

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        actions = {
            "edit": self.action_edit,
            "save": self.action_save,
            "cancel": self.action_cancel,
            "close": self.action_close,
            "copy-path": self.action_copy_path,
        }
        action = actions.get(event.button.id or "")
        if action is not None:
            action()

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        event.stop()
        self.session.update_text(event.text_area.text)
