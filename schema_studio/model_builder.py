"""
Dynamic Pydantic model builder for schema documents.
Creates Pydantic models from schema documents so sample request payloads can
be checked against the schema being edited, and builds default payloads for
the "try it" form.
"""

from typing import Dict, Any, Type, Optional, List, Tuple, Literal
import re
import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError, create_model

from .field_model import FieldType, SchemaField
from .schema_decoder import decode
from .schema_encoder import DEFAULT_MAX_DEPTH

logger = logging.getLogger(__name__)

_MODEL_NAME_RE = re.compile(r'[^0-9A-Za-z_]')

_SCALAR_TYPES = {
    FieldType.STRING: str,
    FieldType.NUMBER: float,
    FieldType.BOOLEAN: bool,
    FieldType.UNKNOWN: str,
}


def create_model_from_document(document: Dict[str, Any], model_name: str = "DynamicModel",
                               max_depth: int = DEFAULT_MAX_DEPTH) -> Type[BaseModel]:
    """
    Create a Pydantic model from a schema document.

    Args:
        document: Schema document dictionary
        model_name: Name for the generated model class
        max_depth: Nesting limit passed to the decoder

    Returns:
        Pydantic model class; extra keys in payloads are ignored
    """
    fields = decode(document, max_depth=max_depth)
    model = create_model_from_fields(fields, model_name)
    logger.info(f"Created dynamic model '{model_name}' with {len(fields)} fields")
    return model


def create_model_from_fields(fields: List[SchemaField], model_name: str) -> Type[BaseModel]:
    """
    Create a Pydantic model from a field list.

    Model attributes are named positionally and carry the schema property name
    as their alias, so property names need not be Python identifiers.
    """
    by_name: Dict[str, SchemaField] = {}
    for field in fields:
        by_name[field.name] = field

    model_fields: Dict[str, Any] = {}
    for index, field in enumerate(by_name.values()):
        model_fields[f"field_{index}"] = create_field_definition(field, model_name)

    return create_model(
        _MODEL_NAME_RE.sub('_', model_name) or "DynamicModel",
        __config__=ConfigDict(extra='ignore', populate_by_name=True),
        **model_fields
    )


def create_field_definition(field: SchemaField, parent_model_name: str) -> Tuple[Any, Any]:
    """
    Build the ``(annotation, FieldInfo)`` pair for one schema field.

    Required fields have no default. A required nullable field must be present
    but may be null; an optional field defaults to None.
    """
    annotation = get_field_type(field, parent_model_name)

    if field.allow_null or not field.required:
        annotation = Optional[annotation]

    if field.required:
        return annotation, Field(..., alias=field.name)
    return annotation, Field(default=None, alias=field.name)


def get_field_type(field: SchemaField, parent_model_name: str) -> Any:
    """
    Map a schema field to a Python/Pydantic type.

    Args:
        field: Schema field
        parent_model_name: Name of the enclosing model, used to name nested models

    Returns:
        Python type for the field
    """
    field_type = field.type

    if field_type in _SCALAR_TYPES:
        return _SCALAR_TYPES[field_type]

    if field_type == FieldType.ENUM:
        if not field.enum_values:
            logger.warning(f"Enum field '{field.name}' has no values, defaulting to str")
            return str
        return Literal[field.enum_values]

    if field_type == FieldType.OBJECT:
        if not field.children:
            return Dict[str, Any]
        return create_model_from_fields(list(field.children), f"{parent_model_name}_{field.name}")

    if field_type == FieldType.ARRAY:
        return List[_get_item_type(field, parent_model_name)]

    logger.warning(f"Unknown field type '{field_type}', defaulting to str")
    return str


def _get_item_type(field: SchemaField, parent_model_name: str) -> Any:
    item_type = field.item_type
    if item_type == FieldType.OBJECT:
        if not field.item_fields:
            return Dict[str, Any]
        return create_model_from_fields(list(field.item_fields), f"{parent_model_name}_{field.name}_item")
    if item_type == FieldType.ARRAY:
        return List[Any]
    if item_type == FieldType.ENUM:
        return str
    return _SCALAR_TYPES.get(item_type, str)


def validate_payload(document: Dict[str, Any], payload: Any,
                     max_depth: int = DEFAULT_MAX_DEPTH) -> Tuple[bool, List[str]]:
    """
    Validate a request payload against a schema document.

    Args:
        document: Schema document
        payload: Parsed payload
        max_depth: Nesting limit passed to the decoder

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    if not isinstance(payload, dict):
        return False, ["Payload must be a JSON object"]

    model_class = create_model_from_document(document, "PayloadModel", max_depth=max_depth)
    try:
        model_class.model_validate(payload)
        return True, []
    except ValidationError as e:
        errors = []
        for error in e.errors():
            location = ".".join(str(part) for part in error.get('loc', ())) or "payload"
            errors.append(f"{location}: {error.get('msg', 'invalid value')}")
        logger.debug(f"Payload failed validation with {len(errors)} errors")
        return False, errors


def build_sample_payload(document: Dict[str, Any], max_depth: int = DEFAULT_MAX_DEPTH) -> Dict[str, Any]:
    """
    Build a default payload for a schema document.

    Strings default to "", numbers to 0, booleans to False, enums to their
    first value, arrays to [] and objects to a nested default payload.

    Args:
        document: Schema document
        max_depth: Nesting limit passed to the decoder

    Returns:
        Payload dictionary
    """
    return sample_from_fields(decode(document, max_depth=max_depth))


def sample_from_fields(fields: List[SchemaField]) -> Dict[str, Any]:
    """Default payload for a field list."""
    return {field.name: sample_value(field) for field in fields}


def sample_value(field: SchemaField) -> Any:
    """Default value for one field."""
    field_type = field.type
    if field_type == FieldType.NUMBER:
        return 0
    if field_type == FieldType.BOOLEAN:
        return False
    if field_type == FieldType.ENUM:
        return field.enum_values[0] if field.enum_values else ""
    if field_type == FieldType.OBJECT:
        return sample_from_fields(list(field.children))
    if field_type == FieldType.ARRAY:
        return []
    return ""
