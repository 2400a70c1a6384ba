"""
Schema encoder: field tree -> schema document.

``encode`` is total. Any list of SchemaField values, including an empty list,
blank names or objects without children, produces a document of the form::

    {"type": "object", "properties": {...}, "required": [...]}

``required`` is omitted when no field is required. Nullable fields use the
two-element type form ``["number", "null"]``.
"""

from typing import Any, Dict, Iterable, List
import logging

from .field_model import FieldType, SchemaField

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 32
NULL_TYPE = "null"


def nullable_type(type_name: str, allow_null: bool) -> Any:
    """Return ``type_name`` or ``[type_name, "null"]`` when nulls are allowed."""
    if allow_null:
        return [type_name, NULL_TYPE]
    return type_name


def encode(fields: Iterable[SchemaField], max_depth: int = DEFAULT_MAX_DEPTH) -> Dict[str, Any]:
    """
    Encode a field list as an object schema document.

    Properties keep the input order. Siblings sharing a name collapse into one
    property and the last one wins.

    Args:
        fields: Root field list
        max_depth: Nesting limit; deeper objects are emitted without properties

    Returns:
        Schema document dictionary
    """
    return _encode_object(list(fields), depth=0, max_depth=max_depth)


def _encode_object(fields: List[SchemaField], depth: int, max_depth: int) -> Dict[str, Any]:
    properties: Dict[str, Any] = {}
    required: List[str] = []

    for field in fields:
        if field.name in properties:
            logger.debug(f"Duplicate property name {field.name!r}; last definition wins")
        properties[field.name] = encode_property(field, depth=depth, max_depth=max_depth)
        if field.required and field.name not in required:
            required.append(field.name)

    document: Dict[str, Any] = {
        'type': 'object',
        'properties': properties
    }
    if required:
        document['required'] = required
    return document


def _encode_nested(fields: Iterable[SchemaField], owner: str, depth: int, max_depth: int) -> Dict[str, Any]:
    if depth >= max_depth:
        logger.warning(f"Field {owner!r} exceeds maximum nesting depth {max_depth}; nested fields dropped")
        return {'type': 'object', 'properties': {}}
    return _encode_object(list(fields), depth=depth + 1, max_depth=max_depth)


def _encode_items(field: SchemaField, depth: int, max_depth: int) -> Dict[str, Any]:
    item_type = field.item_type
    if item_type == FieldType.OBJECT:
        return _encode_nested(field.item_fields, field.name, depth, max_depth)
    if item_type == FieldType.ENUM:
        return {'type': nullable_type('string', field.allow_null), 'enum': []}
    items: Dict[str, Any] = {'type': nullable_type(item_type.value, field.allow_null)}
    if item_type == FieldType.ARRAY:
        items['items'] = {'type': 'string'}
    return items


def encode_property(field: SchemaField, depth: int = 0, max_depth: int = DEFAULT_MAX_DEPTH) -> Dict[str, Any]:
    """
    Encode one field as a property schema.

    Only the payload matching the field's type is read; other payload is ignored.

    Args:
        field: Field to encode
        depth: Current nesting depth
        max_depth: Nesting limit

    Returns:
        Property schema dictionary
    """
    field_type = field.effective_type

    if field_type == FieldType.ENUM:
        return {
            'type': nullable_type('string', field.allow_null),
            'enum': list(field.enum_values)
        }

    prop: Dict[str, Any] = {'type': nullable_type(field_type.value, field.allow_null)}

    if field_type == FieldType.OBJECT:
        nested = _encode_nested(field.children, field.name, depth, max_depth)
        nested.pop('type')
        prop.update(nested)
    elif field_type == FieldType.ARRAY:
        prop['items'] = _encode_items(field, depth, max_depth)

    return prop
