"""
Text form of schema documents.

The editor shows the document as JSON by default; YAML is available through
``editor.document_format`` in config.yaml.
"""

import json
from typing import Any, Dict
import logging

import yaml

from .schema_exceptions import DocumentSyntaxError

logger = logging.getLogger(__name__)

JSON_FORMAT = 'json'
YAML_FORMAT = 'yaml'
NESTING_TOO_DEEP = "document nesting is too deep"


def serialize_document(document: Dict[str, Any], document_format: str = JSON_FORMAT, indent: int = 2) -> str:
    """
    Render a schema document as text.

    Args:
        document: Schema document dictionary
        document_format: 'json' or 'yaml'
        indent: Indentation width

    Returns:
        Document text, keys in insertion order
    """
    if document_format == YAML_FORMAT:
        return yaml.safe_dump(document, sort_keys=False, default_flow_style=False,
                              indent=indent or 2, allow_unicode=True)
    return json.dumps(document, indent=indent, ensure_ascii=False)


def parse_document_text(text: str, document_format: str = JSON_FORMAT) -> Any:
    """
    Parse document text typed by the user.

    Args:
        text: Raw editor contents
        document_format: 'json' or 'yaml'

    Returns:
        Parsed value (not necessarily a schema object)

    Raises:
        DocumentSyntaxError: If the text is not well-formed or nests too deeply to parse
    """
    if document_format == YAML_FORMAT:
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as e:
            mark = getattr(e, 'problem_mark', None)
            problem = getattr(e, 'problem', None) or str(e)
            if mark is not None:
                raise DocumentSyntaxError(YAML_FORMAT, problem, mark.line + 1, mark.column + 1) from e
            raise DocumentSyntaxError(YAML_FORMAT, problem) from e
        except RecursionError as e:
            raise DocumentSyntaxError(YAML_FORMAT, NESTING_TOO_DEEP) from e

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise DocumentSyntaxError(JSON_FORMAT, e.msg, e.lineno, e.colno) from e
    except RecursionError as e:
        raise DocumentSyntaxError(JSON_FORMAT, NESTING_TOO_DEEP) from e


def is_meaningful_document(value: Any) -> bool:
    """
    Whether a parsed value should replace the field tree.

    Non-empty objects and non-empty lists qualify; ``{}``, ``[]`` and scalars
    do not, so a half-typed or cleared editor never wipes the tree.
    """
    if isinstance(value, dict):
        return len(value) > 0
    if isinstance(value, list):
        return len(value) > 0
    return False
