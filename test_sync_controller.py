"""
Unit tests for the bidirectional sync controller.
"""

import json

import pytest

from schema_studio.config_loader import get_default_config
from schema_studio.field_model import FieldType, append_field, new_field, update_field
from schema_studio.schema_exceptions import DocumentSyntaxError, ParseError
from schema_studio.sync_controller import DOCUMENT_SIDE, FIELDS_SIDE, SchemaEditorSession

EMPTY_DOCUMENT_TEXT = json.dumps({"type": "object", "properties": {}}, indent=2)


@pytest.fixture
def session():
    return SchemaEditorSession(fields=[new_field("age", FieldType.NUMBER, required=True)])


class TestFieldEdits:
    """Tree edits always regenerate the document text."""

    def test_new_session(self):
        session = SchemaEditorSession()

        assert session.fields == []
        assert session.document_text == EMPTY_DOCUMENT_TEXT
        assert session.last_edited == FIELDS_SIDE

    def test_initial_fields_are_encoded(self, session):
        assert json.loads(session.document_text) == {
            "type": "object",
            "properties": {"age": {"type": "number"}},
            "required": ["age"],
        }

    def test_apply_edit(self, session):
        session.apply(update_field, (0,), allow_null=True)

        assert json.loads(session.document_text)["properties"]["age"] == {"type": ["number", "null"]}
        assert session.fields[0].allow_null is True

    def test_edit_clears_document_error(self, session):
        session.edit_document_text("{ not json")
        session.apply(append_field, new_field("name"))

        assert session.document_error is None
        assert session.last_edited == FIELDS_SIDE
        assert "name" in json.loads(session.document_text)["properties"]

    def test_edit_count_increases(self, session):
        before = session.edit_count
        session.apply(append_field)
        assert session.edit_count == before + 1


class TestDocumentEdits:
    """Document edits replace the tree only when the text holds a schema."""

    def test_valid_document_replaces_tree(self, session):
        text = '{"type": "object", "properties": {"role": {"type": "string", "enum": ["A", "B"]}}}'

        assert session.edit_document_text(text) is True

        assert session.fields == [new_field("role", FieldType.ENUM, enum_values=["A", "B"])]
        assert session.document_text == text
        assert session.last_edited == DOCUMENT_SIDE

    def test_syntax_error_keeps_tree_and_text(self, session):
        original_fields = session.fields

        assert session.edit_document_text('{"type": "obj') is False

        assert session.fields == original_fields
        assert session.document_text == '{"type": "obj'
        assert isinstance(session.document_error, DocumentSyntaxError)

    @pytest.mark.parametrize("text", ["{}", "[]", "  {  }  "])
    def test_empty_document_keeps_tree(self, session, text):
        original_fields = session.fields

        assert session.edit_document_text(text) is False

        assert session.fields == original_fields
        assert session.document_text == text
        assert session.document_error is None

    def test_yaml_documents(self):
        config = get_default_config()
        config["editor"]["document_format"] = "yaml"
        session = SchemaEditorSession(config, fields=[new_field("id", required=True)])

        assert session.document_text.startswith("type: object")
        assert session.edit_document_text("properties:\n  flag:\n    type: boolean\n") is True
        assert session.fields == [new_field("flag", FieldType.BOOLEAN)]


class TestImport:
    """Declaration imports go through the same tree edit path."""

    def test_successful_import(self, session):
        error = session.run_import("id: string;\ndept: string | null;")

        assert error is None
        assert [f.name for f in session.fields] == ["id", "dept"]
        assert json.loads(session.document_text)["required"] == ["id"]
        assert session.import_error is None

    def test_failed_import_changes_nothing(self, session):
        original_fields = session.fields
        original_text = session.document_text

        error = session.run_import("id: string;\n???")

        assert isinstance(error, ParseError)
        assert error.line_number == 2
        assert session.import_error is error
        assert session.fields == original_fields
        assert session.document_text == original_text


class TestLifecycleAndChanges:
    """Loading, resetting and change tracking."""

    def test_load_document_resets_visibility(self, session):
        session.visibility.set_expanded("root.address", False)

        session.load_document({"type": "object", "properties": {"x": {"type": "boolean"}}})

        assert len(session.visibility) == 0
        assert session.fields == [new_field("x", FieldType.BOOLEAN)]
        assert not session.has_unsaved_changes()

    def test_reset(self, session):
        session.visibility.toggle("root.age")

        session.reset()

        assert session.fields == []
        assert session.document_text == EMPTY_DOCUMENT_TEXT
        assert len(session.visibility) == 0

    def test_pending_changes_and_mark_saved(self, session):
        assert not session.has_unsaved_changes()

        session.apply(update_field, (0,), type="string")

        assert session.has_unsaved_changes()
        assert session.change_lines() == ["Modified: age → type ('number' → 'string')"]

        session.mark_saved()

        assert not session.has_unsaved_changes()
        assert session.baseline["properties"]["age"] == {"type": "string"}

    def test_to_document(self, session):
        assert session.to_document()["required"] == ["age"]


class TestDeeplyNestedText:
    """Text nested too deeply to parse is reported, never raised."""

    def test_deep_json_keeps_tree(self, session):
        original_fields = session.fields

        assert session.edit_document_text("[" * 100000) is False

        assert session.fields == original_fields
        assert isinstance(session.document_error, DocumentSyntaxError)
        assert session.document_error.detail == "document nesting is too deep"

    def test_deep_yaml_keeps_tree(self):
        config = get_default_config()
        config["editor"]["document_format"] = "yaml"
        session = SchemaEditorSession(config, fields=[new_field("id")])

        assert session.edit_document_text("[" * 5000 + "]" * 5000) is False

        assert session.fields == [new_field("id")]
        assert isinstance(session.document_error, DocumentSyntaxError)
