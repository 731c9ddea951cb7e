"""Edit session for the node currently selected in the graph.

The session moves between three states::

    VIEWING --start_edit--> EDITING --submit--> SAVING --ok--> VIEWING
                               ^                   |
                               +-----failed--------+
    EDITING --cancel--> VIEWING

Choosing another node, or closing the modal, always lands back in VIEWING.
The document, the selection and the graph are owned elsewhere and reached
only through the callables given to :class:`EditSession`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto

from nodeedit._coerce import LeafType, coerce_leaf
from nodeedit._path import Path, format_path
from nodeedit.errors import ApplyFailed, EditError, InvalidFragment
from nodeedit.mutate import apply_edit, loads
from nodeedit.rows import NodeKind, NodeRow, node_kind, rows_to_text

logger = logging.getLogger(__name__)


class SessionState(Enum):
    VIEWING = auto()
    EDITING = auto()
    SAVING = auto()


@dataclass(frozen=True)
class Selection:
    """A graph node: its rows and where it lives in the document."""

    rows: tuple[NodeRow, ...]
    path: Path = ()

    @property
    def kind(self) -> NodeKind:
        return node_kind(self.rows)


@dataclass
class SaveResult:
    content: str = ""
    error: EditError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def project(selection: Selection | None) -> str:
    """Text shown for *selection*; ``{}`` when nothing is selected."""
    return rows_to_text(selection.rows if selection else ())


def parse_edit(selection: Selection, edited_text: str, kind: NodeKind) -> object:
    """Turn the edit box contents into the value to install."""
    if kind is NodeKind.LEAF:
        leaf_type = LeafType.from_row_type(selection.rows[0].type)
        return coerce_leaf(edited_text, leaf_type)
    elif kind is NodeKind.COMPOSITE:
        try:
            return loads(edited_text)
        except ValueError as exc:
            raise InvalidFragment() from exc
    raise ValueError(f"Unknown node kind: {kind!r}")


def save(
    selection: Selection,
    edited_text: str,
    document_text: str,
    kind: NodeKind | None = None,
) -> SaveResult:
    """Apply *edited_text* to the node of *selection* inside *document_text*.

    *kind* defaults to the kind of *selection*.  Never raises: failures are
    returned in :attr:`SaveResult.error`.
    """
    if kind is None:
        kind = selection.kind
    try:
        value = parse_edit(selection, edited_text, kind)
        return SaveResult(content=apply_edit(document_text, selection.path, value))
    except EditError as exc:
        return SaveResult(error=exc)
    except Exception as exc:
        logger.exception("unexpected failure applying edit at %s", format_path(selection.path))
        return SaveResult(error=ApplyFailed(f"{ApplyFailed.default_message}: {exc}"))


class EditSession:
    """State of the node modal.

    *get_document* returns the current document text and *set_document*
    replaces it.  *clear_selection* drops the graph's selected node, and
    *on_document_replaced* lets the graph re-derive itself from new text.
    """

    def __init__(
        self,
        get_document: Callable[[], str],
        set_document: Callable[[str], None],
        clear_selection: Callable[[], None],
        on_document_replaced: Callable[[str], None] | None = None,
    ) -> None:
        self._get_document = get_document
        self._set_document = set_document
        self._clear_selection = clear_selection
        self._on_document_replaced = on_document_replaced
        self.selection: Selection | None = None
        self.state: SessionState = SessionState.VIEWING
        self.edited: str = ""
        self.error: str | None = None
        self._kind: NodeKind | None = None

    # -- Read-only views ---------------------------------------------------

    @property
    def editing(self) -> bool:
        return self.state is SessionState.EDITING

    @property
    def projection(self) -> str:
        return project(self.selection)

    @property
    def path_label(self) -> str:
        return format_path(self.selection.path if self.selection else ())

    # -- Transitions -------------------------------------------------------

    def _reset(self) -> None:
        self.state = SessionState.VIEWING
        self.edited = ""
        self.error = None
        self._kind = None

    def select(self, selection: Selection | None) -> None:
        """Show another node, dropping any edit in progress."""
        if self.state is not SessionState.VIEWING:
            logger.debug("selection changed, discarding edit")
        self.selection = selection
        self._reset()

    def close(self) -> None:
        self._reset()

    def start_edit(self) -> None:
        if self.selection is None:
            logger.debug("start_edit ignored: no node selected")
            return
        self.edited = self.projection
        self.error = None
        self._kind = self.selection.kind
        self.state = SessionState.EDITING

    def update_text(self, text: str) -> None:
        if self.state is SessionState.EDITING:
            self.edited = text

    def cancel(self) -> None:
        if self.state is SessionState.EDITING:
            self._reset()

    def submit(self) -> SaveResult:
        """Save the edit box into the document.

        On success the new text is pushed to the collaborators and the
        selection is cleared.  On failure the edit box is kept and
        :attr:`error` says why.
        """
        if self.state is not SessionState.EDITING or self.selection is None:
            result = SaveResult(error=ApplyFailed("Nothing is being edited"))
            self.error = result.error.message
            return result

        self.state = SessionState.SAVING
        result = save(
            self.selection, self.edited, self._get_document(), kind=self._kind
        )
        if result.ok:
            try:
                self._set_document(result.content)
                if self._on_document_replaced is not None:
                    self._on_document_replaced(result.content)
                self._clear_selection()
            except Exception as exc:
                logger.exception("failed to propagate edited document")
                result = SaveResult(error=ApplyFailed(f"{ApplyFailed.default_message}: {exc}"))

        if not result.ok:
            logger.info("save rejected at %s: %s", self.path_label, result.error)
            self.error = result.error.message
            self.state = SessionState.EDITING
            return result

        self.selection = None
        self._reset()
        return result
