"""
Bidirectional sync between the field tree and the document text.

A SchemaEditorSession owns one field tree and one document text buffer and
propagates edits one way at a time:

* field tree edits always regenerate the document text (the encoder is total);
* document text edits replace the field tree only when the text parses to a
  non-empty object or list. A syntax error, ``{}`` or ``[]`` leaves the tree
  as it was and the text exactly as typed;
* declaration imports are field tree edits when they succeed and change
  nothing when they fail.

Sessions are plain objects owned by the caller; nothing here is global.
"""

from typing import Any, Callable, Dict, List, Optional
import copy
import logging

from .config_loader import get_config_value, get_default_config
from .declaration_importer import import_declarations
from .diff_utils import calculate_document_diff, format_changes, has_changes
from .document_codec import is_meaningful_document, parse_document_text, serialize_document
from .field_model import SchemaField
from .node_visibility import NodeVisibilityState
from .schema_decoder import decode
from .schema_encoder import encode
from .schema_exceptions import DocumentSyntaxError, ParseError, log_error_with_context

logger = logging.getLogger(__name__)

FIELDS_SIDE = "fields"
DOCUMENT_SIDE = "document"


class SchemaEditorSession:
    """State of one schema editing session."""

    def __init__(self, config: Optional[Dict[str, Any]] = None,
                 fields: Optional[List[SchemaField]] = None):
        config = config if config is not None else get_default_config()
        self.document_format = get_config_value(config, 'editor', 'document_format', 'json')
        self.indent = get_config_value(config, 'editor', 'indent', 2)
        self.max_depth = get_config_value(config, 'engine', 'max_depth', 32)

        self.visibility = NodeVisibilityState()
        self.fields: List[SchemaField] = []
        self.document_text = ""
        self.last_edited = FIELDS_SIDE
        self.document_error: Optional[DocumentSyntaxError] = None
        self.import_error: Optional[ParseError] = None
        self.edit_count = 0

        self.edit_fields(list(fields or []))
        self._baseline: Dict[str, Any] = self.to_document()

    # Tree -> document

    def edit_fields(self, new_fields: List[SchemaField]) -> str:
        """
        Replace the field tree and regenerate the document text.

        Args:
            new_fields: New root field list

        Returns:
            The regenerated document text
        """
        self.fields = list(new_fields)
        self.document_text = serialize_document(self.to_document(), self.document_format, self.indent)
        self.document_error = None
        self.last_edited = FIELDS_SIDE
        self.edit_count += 1
        return self.document_text

    def apply(self, operation: Callable[..., List[SchemaField]], *args: Any, **kwargs: Any) -> List[SchemaField]:
        """
        Run a field_model edit against the current tree.

        Example::

            session.apply(update_field, (0,), name="id")

        Returns:
            The new field list
        """
        self.edit_fields(operation(self.fields, *args, **kwargs))
        return self.fields

    # Document -> tree

    def edit_document_text(self, text: str) -> bool:
        """
        Accept document text typed by the user.

        Args:
            text: Full editor contents

        Returns:
            True when the field tree was replaced
        """
        self.document_text = text
        self.last_edited = DOCUMENT_SIDE

        try:
            parsed = parse_document_text(text, self.document_format)
        except DocumentSyntaxError as e:
            self.document_error = e
            logger.debug(f"Document text does not parse: {e}")
            return False

        self.document_error = None
        if not is_meaningful_document(parsed):
            logger.debug("Document text is empty; field tree kept")
            return False

        self.fields = decode(parsed, max_depth=self.max_depth)
        self.edit_count += 1
        return True

    # Importer

    def run_import(self, text: str) -> Optional[ParseError]:
        """
        Import declaration text as the new field tree.

        Returns:
            None on success, otherwise the ParseError (state is unchanged)
        """
        try:
            imported = import_declarations(text)
        except ParseError as e:
            self.import_error = e
            log_error_with_context(e, "declaration import")
            return e

        self.import_error = None
        self.edit_fields(imported)
        logger.info(f"Imported {len(imported)} fields into the editor")
        return None

    # Session lifecycle

    def load_document(self, document: Dict[str, Any]) -> List[SchemaField]:
        """
        Start editing a different schema.

        Resets visibility state and errors, and makes the loaded document the
        baseline for change tracking.
        """
        self.visibility.reset()
        self.import_error = None
        self.edit_fields(decode(document, max_depth=self.max_depth))
        self._baseline = self.to_document()
        logger.info(f"Loaded schema with {len(self.fields)} top-level fields")
        return self.fields

    def reset(self) -> None:
        """Clear the tree, the document, errors and visibility."""
        self.visibility.reset()
        self.import_error = None
        self.edit_fields([])
        self._baseline = self.to_document()
        logger.info("Schema editor session reset")

    def to_document(self) -> Dict[str, Any]:
        """The schema document handed to the validate/save services."""
        return encode(self.fields, max_depth=self.max_depth)

    # Change tracking

    def pending_changes(self) -> Dict[str, Any]:
        """DeepDiff of the current document against the baseline."""
        return calculate_document_diff(self._baseline, self.to_document())

    def has_unsaved_changes(self) -> bool:
        return has_changes(self.pending_changes())

    def change_lines(self) -> List[str]:
        return format_changes(self.pending_changes())

    def mark_saved(self) -> None:
        """Record the current document as saved."""
        self._baseline = copy.deepcopy(self.to_document())
        logger.info("Schema marked as saved")

    @property
    def baseline(self) -> Dict[str, Any]:
        return copy.deepcopy(self._baseline)
