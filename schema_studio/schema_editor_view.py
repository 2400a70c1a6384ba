"""
Schema Editor View for the schema studio.
Renders the field tree form, the document text editor and the declaration
import box side by side, all driven by one SchemaEditorSession kept in
Streamlit session state.
"""

import streamlit as st
import json
import logging
from typing import Any, Dict, List, Optional

from .config_loader import get_config_value
from .field_model import (
    CHILDREN,
    EDITABLE_FIELD_TYPES,
    ITEM_FIELDS,
    FieldType,
    Location,
    SchemaField,
    add_enum_values,
    append_field,
    remove_enum_value,
    remove_field,
    update_field,
)
from .model_builder import build_sample_payload, validate_payload
from .node_visibility import ROOT_PATH, item_path, node_path
from .schema_exceptions import create_user_friendly_error_message
from .schema_validator import validate_schema_document
from .sync_controller import FIELDS_SIDE, SchemaEditorSession

logger = logging.getLogger(__name__)

SESSION_KEY = 'schema_editor_session'
DOCUMENT_TEXT_KEY = 'schema_editor_document_text'
IMPORT_TEXT_KEY = 'schema_editor_import_text'
PAYLOAD_TEXT_KEY = 'schema_editor_payload_text'

IMPORT_PLACEHOLDER = 'Paste fields like:\nid: string;\nemail: string;\nrole: "ADMIN" | "USER";\ndepartmentId: string | null;'


def get_session(config: Dict[str, Any]) -> SchemaEditorSession:
    """Return the editing session of this browser session, creating it on first use."""
    if SESSION_KEY not in st.session_state:
        st.session_state[SESSION_KEY] = SchemaEditorSession(config)
        logger.info("Schema editor session created")
    return st.session_state[SESSION_KEY]


def widget_key(session: SchemaEditorSession, location: Location, attribute: str) -> str:
    """
    Widget key for one attribute of one node.

    The session's edit counter is part of the key so widgets are rebuilt with
    fresh values whenever the tree is replaced from the document side.
    """
    steps = "_".join(str(step) for step in location)
    return f"fld_{session.edit_count}_{steps}_{attribute}"


class SchemaEditor:
    """Main controller class for the Schema Editor page."""

    @staticmethod
    def render(config: Dict[str, Any]) -> None:
        """Main entry point for rendering the Schema Editor."""
        session = get_session(config)

        st.header("📋 Schema Editor")
        SchemaEditor._render_toolbar(session)

        form_col, document_col = st.columns([3, 2])
        with form_col:
            st.subheader("Fields")
            SchemaEditor._render_field_list(session, session.fields, (), ROOT_PATH, level=0)
            with st.expander("📥 Import field declarations"):
                SchemaEditor._render_import_box(session)
        with document_col:
            SchemaEditor._render_document_editor(session)
            SchemaEditor._render_validation_report(session)
            SchemaEditor._render_payload_tester(session, config)

    @staticmethod
    def _render_toolbar(session: SchemaEditorSession) -> None:
        col1, col2, col3, col4 = st.columns([1, 1, 1, 3])
        with col1:
            if st.button("🆕 New", key="schema_editor_new", help="Start over with an empty schema"):
                session.reset()
                st.rerun()
        with col2:
            if st.button("➖ Collapse all", key="schema_editor_collapse_all"):
                session.visibility.collapse_all(session.fields)
        with col3:
            if st.button("➕ Expand all", key="schema_editor_expand_all"):
                session.visibility.expand_all()
        with col4:
            if session.has_unsaved_changes():
                st.caption("🟡 Unsaved changes")
                with st.popover("What changed?"):
                    for line in session.change_lines():
                        st.write(f"• {line}")
            else:
                st.caption("✅ No unsaved changes")

    @staticmethod
    def _render_field_list(session: SchemaEditorSession, fields: List[SchemaField],
                           parent: Location, parent_path: str, level: int) -> None:
        """Render a sibling list and its "Add Field" button, recursing into nested lists."""
        for index, field in enumerate(fields):
            location = parent + (index,)
            path = node_path(parent_path, field, index)
            SchemaEditor._render_field_row(session, field, location, path, level)

        if st.button("➕ Add Field", key=widget_key(session, parent, "add")):
            session.apply(append_field, None, parent)
            st.rerun()

    @staticmethod
    def _render_field_row(session: SchemaEditorSession, field: SchemaField,
                          location: Location, path: str, level: int) -> None:
        toggle_col, name_col, type_col, req_col, null_col, remove_col = st.columns(
            [0.5, 3, 2, 1.2, 1, 0.5]
        )

        expanded = session.visibility.is_expanded(path)
        with toggle_col:
            if field.is_container:
                icon = "▾" if expanded else "▸"
                if st.button(icon, key=widget_key(session, location, "toggle")):
                    session.visibility.toggle(path)
                    st.rerun()

        with name_col:
            st.text_input(
                "Field name",
                value=field.name,
                key=widget_key(session, location, "name"),
                placeholder="Field name",
                label_visibility="collapsed",
                on_change=SchemaEditor._on_attribute_change,
                args=(location, "name", widget_key(session, location, "name")),
            )

        with type_col:
            options = [t.value for t in EDITABLE_FIELD_TYPES]
            current = field.effective_type.value
            st.selectbox(
                "Type",
                options=options,
                index=options.index(current),
                key=widget_key(session, location, "type"),
                label_visibility="collapsed",
                on_change=SchemaEditor._on_attribute_change,
                args=(location, "type", widget_key(session, location, "type")),
            )
            if field.type == FieldType.UNKNOWN:
                st.caption(f"⚠️ unknown type '{field.original_type}'")

        with req_col:
            st.checkbox(
                "Required",
                value=field.required,
                key=widget_key(session, location, "required"),
                on_change=SchemaEditor._on_attribute_change,
                args=(location, "required", widget_key(session, location, "required")),
            )

        with null_col:
            st.checkbox(
                "Null",
                value=field.allow_null,
                key=widget_key(session, location, "allow_null"),
                on_change=SchemaEditor._on_attribute_change,
                args=(location, "allow_null", widget_key(session, location, "allow_null")),
            )

        with remove_col:
            if st.button("✕", key=widget_key(session, location, "remove"), help="Remove"):
                session.apply(remove_field, location)
                st.rerun()

        if field.type == FieldType.ENUM:
            SchemaEditor._render_enum_values(session, field, location)

        if not field.is_container or not expanded:
            return

        _, nested_col = st.columns([0.05 * (level + 1), 1])
        with nested_col:
            if field.type == FieldType.OBJECT:
                st.caption("Object Fields:")
                SchemaEditor._render_field_list(session, list(field.children),
                                                location + (CHILDREN,), path, level + 1)
            else:
                SchemaEditor._render_array_items(session, field, location, path, level)

    @staticmethod
    def _render_array_items(session: SchemaEditorSession, field: SchemaField,
                            location: Location, path: str, level: int) -> None:
        options = [t.value for t in EDITABLE_FIELD_TYPES]
        st.selectbox(
            "Array Item Type",
            options=options,
            index=options.index(field.item_type.value),
            key=widget_key(session, location, "item_type"),
            on_change=SchemaEditor._on_attribute_change,
            args=(location, "item_type", widget_key(session, location, "item_type")),
        )
        if field.item_type == FieldType.OBJECT:
            st.caption("Object Fields:")
            SchemaEditor._render_field_list(session, list(field.item_fields),
                                            location + (ITEM_FIELDS,), item_path(path), level + 2)

    @staticmethod
    def _render_enum_values(session: SchemaEditorSession, field: SchemaField, location: Location) -> None:
        input_key = widget_key(session, location, "enum_input")
        st.text_input(
            "Add enum values",
            key=input_key,
            placeholder="Add enum value (comma separated, press Enter)",
            label_visibility="collapsed",
            on_change=SchemaEditor._on_enum_input,
            args=(location, input_key),
        )
        if field.enum_values:
            value_cols = st.columns(min(len(field.enum_values), 6))
            for position, value in enumerate(field.enum_values):
                with value_cols[position % len(value_cols)]:
                    if st.button(f"{value} ✕", key=widget_key(session, location, f"enum_{position}")):
                        session.apply(remove_enum_value, location, value)
                        st.rerun()

    @staticmethod
    def _on_attribute_change(location: Location, attribute: str, key: str) -> None:
        session: SchemaEditorSession = st.session_state[SESSION_KEY]
        value = st.session_state.get(key)
        logger.debug(f"Field attribute change at {location}: {attribute}={value!r}")
        session.apply(update_field, location, **{attribute: value})

    @staticmethod
    def _on_enum_input(location: Location, key: str) -> None:
        session: SchemaEditorSession = st.session_state[SESSION_KEY]
        raw_text = st.session_state.get(key, "")
        if raw_text.strip():
            session.apply(add_enum_values, location, raw_text)

    @staticmethod
    def _render_document_editor(session: SchemaEditorSession) -> None:
        st.subheader(f"Schema document ({session.document_format.upper()})")

        # Tree edits own the text; document edits keep it exactly as typed
        if session.last_edited == FIELDS_SIDE:
            st.session_state[DOCUMENT_TEXT_KEY] = session.document_text

        st.text_area(
            "Schema document",
            key=DOCUMENT_TEXT_KEY,
            height=420,
            label_visibility="collapsed",
            on_change=SchemaEditor._on_document_change,
        )

        if session.document_error is not None:
            details = create_user_friendly_error_message(session.document_error)
            st.error(f"{details['title']}: {details['message']}")
        st.caption('Use type: ["string", "null"] for nullable fields and required: [...] for required fields.')

    @staticmethod
    def _on_document_change() -> None:
        session: SchemaEditorSession = st.session_state[SESSION_KEY]
        session.edit_document_text(st.session_state.get(DOCUMENT_TEXT_KEY, ""))

    @staticmethod
    def _render_import_box(session: SchemaEditorSession) -> None:
        st.text_area("Declarations", key=IMPORT_TEXT_KEY, height=140,
                     placeholder=IMPORT_PLACEHOLDER, label_visibility="collapsed")
        if st.button("Convert to fields", key="schema_editor_convert"):
            error = session.run_import(st.session_state.get(IMPORT_TEXT_KEY, ""))
            if error is None:
                st.rerun()
        if session.import_error is not None:
            details = create_user_friendly_error_message(session.import_error)
            st.error(f"{details['title']}: {details['message']}")
            for suggestion in details['recovery_suggestions']:
                st.caption(f"• {suggestion}")

    @staticmethod
    def _render_validation_report(session: SchemaEditorSession) -> None:
        if not st.button("✅ Validate schema", key="schema_editor_validate"):
            return
        report = validate_schema_document(session.to_document(), max_depth=session.max_depth)
        if report['valid']:
            st.success("Schema is valid")
        else:
            st.error("Schema has errors:")
            for error in report['errors']:
                st.error(f"• {error}")
        for warning in report['warnings']:
            st.warning(f"• {warning}")

    @staticmethod
    def _render_payload_tester(session: SchemaEditorSession, config: Dict[str, Any]) -> None:
        with st.expander("🧪 Try a payload"):
            document = session.to_document()
            indent = get_config_value(config, 'editor', 'indent', 2)
            reset_clicked = st.button("Reset to sample", key="schema_editor_sample")
            if PAYLOAD_TEXT_KEY not in st.session_state or reset_clicked:
                st.session_state[PAYLOAD_TEXT_KEY] = json.dumps(build_sample_payload(document), indent=indent)
            st.text_area("Payload", key=PAYLOAD_TEXT_KEY, height=200, label_visibility="collapsed")
            if st.button("Check payload", key="schema_editor_check_payload"):
                SchemaEditor._check_payload(document, st.session_state.get(PAYLOAD_TEXT_KEY, ""),
                                            session.max_depth)

    @staticmethod
    def _check_payload(document: Dict[str, Any], payload_text: str, max_depth: int) -> Optional[bool]:
        try:
            payload = json.loads(payload_text)
        except json.JSONDecodeError as e:
            st.error(f"Payload is not valid JSON: {e.msg} (line {e.lineno})")
            return None
        is_valid, errors = validate_payload(document, payload, max_depth=max_depth)
        if is_valid:
            st.success("Payload matches the schema")
        else:
            for error in errors:
                st.error(f"• {error}")
        return is_valid
