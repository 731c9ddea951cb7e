"""Tests for saving node edits and the edit session state machine."""

import json

from nodeedit.errors import (
    ApplyFailed,
    InvalidBoolean,
    InvalidFragment,
    InvalidNumber,
    MalformedDocument,
)
from nodeedit.rows import NodeKind, NodeRow, RowType, node_rows
from nodeedit.session import EditSession, SessionState, Selection, project, save

DOC = json.dumps(
    {"customer": {"name": "Ada", "age": 36, "vip": False, "orders": [1, 2]}},
    indent=2,
)

CUSTOMER = Selection(
    rows=node_rows({"name": "Ada", "age": 36, "vip": False, "orders": [1, 2]}),
    path=("customer",),
)
AGE = Selection(rows=(NodeRow(None, 36, RowType.NUMBER),), path=("customer", "age"))
VIP = Selection(rows=(NodeRow(None, False, RowType.BOOLEAN),), path=("customer", "vip"))


class FakeCollaborators:
    """Records what the session pushes to the document and the graph."""

    def __init__(self, document: str = DOC) -> None:
        self.document = document
        self.set_calls: list[str] = []
        self.replaced: list[str] = []
        self.cleared = 0

    def set_document(self, text: str) -> None:
        self.set_calls.append(text)
        self.document = text

    def clear_selection(self) -> None:
        self.cleared += 1

    def session(self) -> EditSession:
        return EditSession(
            get_document=lambda: self.document,
            set_document=self.set_document,
            clear_selection=self.clear_selection,
            on_document_replaced=self.replaced.append,
        )


class TestSave:
    """The pure save operation."""

    def test_leaf_number(self):
        result = save(AGE, "37", DOC)
        assert result.ok
        assert json.loads(result.content)["customer"]["age"] == 37

    def test_leaf_invalid_number(self):
        result = save(AGE, "abc", DOC)
        assert isinstance(result.error, InvalidNumber)
        assert result.content == ""

    def test_leaf_invalid_boolean(self):
        result = save(VIP, "yes", DOC)
        assert isinstance(result.error, InvalidBoolean)

    def test_composite_replaces_node(self):
        result = save(CUSTOMER, '{"name": "Bob"}', DOC)
        assert json.loads(result.content) == {"customer": {"name": "Bob"}}

    def test_composite_invalid_fragment(self):
        result = save(CUSTOMER, '{"name": ', DOC)
        assert isinstance(result.error, InvalidFragment)
        assert result.error.message == "Invalid JSON for object/array node"

    def test_composite_accepts_any_json(self):
        result = save(CUSTOMER, "[1, 2]", DOC)
        assert json.loads(result.content) == {"customer": [1, 2]}

    def test_malformed_document(self):
        result = save(AGE, "1", "{not json")
        assert isinstance(result.error, MalformedDocument)

    def test_path_through_scalar(self):
        sel = Selection(rows=(NodeRow(None, 1, RowType.NUMBER),), path=("customer", "age", "x"))
        result = save(sel, "1", DOC)
        assert isinstance(result.error, ApplyFailed)

    def test_kind_override(self):
        """A kind fixed when editing started wins over the rows."""
        result = save(AGE, '"text"', DOC, kind=NodeKind.COMPOSITE)
        assert json.loads(result.content)["customer"]["age"] == "text"

    def test_project_nothing_selected(self):
        assert project(None) == "{}"


class TestEditSession:
    """State transitions and collaborator calls."""

    def test_starts_viewing(self):
        session = FakeCollaborators().session()
        assert session.state is SessionState.VIEWING
        assert session.path_label == "$"

    def test_start_edit_seeds_projection(self):
        session = FakeCollaborators().session()
        session.select(CUSTOMER)
        session.start_edit()
        assert session.state is SessionState.EDITING
        assert json.loads(session.edited) == {"name": "Ada", "age": 36, "vip": False}
        assert session.path_label == '$["customer"]'

    def test_start_edit_without_selection(self):
        session = FakeCollaborators().session()
        session.start_edit()
        assert session.state is SessionState.VIEWING

    def test_successful_save(self):
        fake = FakeCollaborators()
        session = fake.session()
        session.select(AGE)
        session.start_edit()
        assert session.edited == "36"
        session.update_text("40")
        result = session.submit()

        assert result.ok
        assert fake.set_calls == [result.content]
        assert fake.replaced == [result.content]
        assert fake.cleared == 1
        assert session.state is SessionState.VIEWING
        assert session.selection is None
        assert session.edited == ""
        assert session.error is None
        assert json.loads(fake.document)["customer"]["age"] == 40

    def test_failed_save_keeps_text(self):
        fake = FakeCollaborators()
        session = fake.session()
        session.select(VIP)
        session.start_edit()
        session.update_text("maybe")
        result = session.submit()

        assert not result.ok
        assert session.state is SessionState.EDITING
        assert session.edited == "maybe"
        assert session.error == "Invalid boolean (must be true or false)"
        assert fake.set_calls == []
        assert fake.cleared == 0

    def test_retry_after_failure(self):
        fake = FakeCollaborators()
        session = fake.session()
        session.select(VIP)
        session.start_edit()
        session.update_text("maybe")
        session.submit()
        session.update_text("TRUE")
        assert session.submit().ok
        assert json.loads(fake.document)["customer"]["vip"] is True

    def test_malformed_document_leaves_setter_uninvoked(self):
        fake = FakeCollaborators(document="{broken")
        session = fake.session()
        session.select(AGE)
        session.start_edit()
        result = session.submit()
        assert isinstance(result.error, MalformedDocument)
        assert fake.set_calls == []
        assert session.error.startswith("Failed to parse current JSON document")

    def test_cancel(self):
        fake = FakeCollaborators()
        session = fake.session()
        session.select(AGE)
        session.start_edit()
        session.update_text("99")
        session.cancel()
        assert session.state is SessionState.VIEWING
        assert session.edited == ""
        assert fake.set_calls == []
        assert session.selection is AGE

    def test_selection_change_discards_edit(self):
        session = FakeCollaborators().session()
        session.select(AGE)
        session.start_edit()
        session.update_text("1")
        session.select(VIP)
        assert session.state is SessionState.VIEWING
        assert session.edited == ""
        assert session.projection == "false"

    def test_close_discards_edit(self):
        session = FakeCollaborators().session()
        session.select(AGE)
        session.start_edit()
        session.close()
        assert session.state is SessionState.VIEWING

    def test_update_text_ignored_when_viewing(self):
        session = FakeCollaborators().session()
        session.select(AGE)
        session.update_text("5")
        assert session.edited == ""

    def test_submit_when_not_editing(self):
        fake = FakeCollaborators()
        session = fake.session()
        result = session.submit()
        assert isinstance(result.error, ApplyFailed)
        assert fake.set_calls == []

    def test_collaborator_failure_reported(self):
        fake = FakeCollaborators()

        def broken(_text: str) -> None:
            raise RuntimeError("graph down")

        session = EditSession(
            get_document=lambda: fake.document,
            set_document=fake.set_document,
            clear_selection=fake.clear_selection,
            on_document_replaced=broken,
        )
        session.select(AGE)
        session.start_edit()
        result = session.submit()
        assert isinstance(result.error, ApplyFailed)
        assert session.state is SessionState.EDITING
        assert "graph down" in session.error


class TestEmptyKeyNode:
    """An object whose only member has the key ``""``."""

    DOC = '{"x": {"": 5}}'
    NODE = Selection(rows=node_rows({"": 5}), path=("x",))

    def test_is_composite(self):
        assert self.NODE.kind is NodeKind.COMPOSITE
        assert json.loads(project(self.NODE)) == {"": 5}

    def test_save_keeps_object(self):
        result = save(self.NODE, '{"": 6}', self.DOC)
        assert json.loads(result.content) == {"x": {"": 6}}

    def test_session_edit_keeps_object(self):
        fake = FakeCollaborators(document=self.DOC)
        session = fake.session()
        session.select(self.NODE)
        session.start_edit()
        result = session.submit()
        assert result.ok
        assert json.loads(fake.document) == {"x": {"": 5}}
