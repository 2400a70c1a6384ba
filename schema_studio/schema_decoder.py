"""
Schema decoder: schema document -> field tree.

``decode`` is the best-effort inverse of ``encode``. It never raises: missing
or malformed parts of a hand-edited document degrade to the most literal
reading (a string field, an empty enum, an array of strings) instead of
producing an error.
"""

from typing import Any, Dict, List, Optional, Tuple
import logging

from .field_model import FieldType, SchemaField, merge_enum_values, parse_field_type
from .schema_encoder import DEFAULT_MAX_DEPTH, NULL_TYPE

logger = logging.getLogger(__name__)


def unwrap_nullable(type_value: Any) -> Tuple[Optional[Any], bool]:
    """
    Split a type declaration into its effective type and nullability.

    ``["number", "null"]`` -> ("number", True); ``"number"`` -> ("number", False).

    Returns:
        Tuple of (effective type or None, allow_null)
    """
    if isinstance(type_value, (list, tuple)):
        allow_null = NULL_TYPE in type_value
        effective = next((t for t in type_value if t != NULL_TYPE), None)
        return effective, allow_null
    return type_value, False


def decode(document: Any, max_depth: int = DEFAULT_MAX_DEPTH) -> List[SchemaField]:
    """
    Decode an object schema document into a field list.

    Args:
        document: Parsed schema document
        max_depth: Nesting limit; deeper properties are dropped

    Returns:
        Field list (empty when the document has no properties)
    """
    return _decode_object(document, depth=0, max_depth=max_depth)


def _decode_object(document: Any, depth: int, max_depth: int) -> List[SchemaField]:
    if not isinstance(document, dict):
        return []
    properties = document.get('properties')
    if not isinstance(properties, dict):
        return []

    required = document.get('required')
    if not isinstance(required, list):
        required = []
    required_names = {name for name in required if isinstance(name, str)}

    fields = []
    for name, prop in properties.items():
        name = '' if name is None else str(name)
        fields.append(decode_property(name, prop, name in required_names, depth, max_depth))
    return fields


def _decode_nested(owner: str, document: Any, depth: int, max_depth: int) -> List[SchemaField]:
    if depth >= max_depth:
        logger.warning(f"Property {owner!r} exceeds maximum nesting depth {max_depth}; nested properties dropped")
        return []
    return _decode_object(document, depth + 1, max_depth)


def decode_property(name: str, prop: Any, required: bool = False,
                    depth: int = 0, max_depth: int = DEFAULT_MAX_DEPTH) -> SchemaField:
    """
    Decode one property schema into a field.

    Args:
        name: Property name
        prop: Property schema
        required: Whether the enclosing document lists the name as required
        depth: Current nesting depth
        max_depth: Nesting limit

    Returns:
        SchemaField
    """
    if not isinstance(prop, dict):
        logger.debug(f"Property {name!r} is not a mapping; decoded as string")
        return SchemaField(name=name, type=FieldType.STRING, required=required)

    raw_type, allow_null = unwrap_nullable(prop.get('type'))

    if 'enum' in prop:
        values = prop.get('enum')
        values = values if isinstance(values, list) else []
        enum_values = merge_enum_values((), [v for v in values if v is not None])
        return SchemaField(name=name, type=FieldType.ENUM, required=required,
                           allow_null=allow_null, enum_values=enum_values)

    if raw_type is None:
        field_type = FieldType.STRING
    else:
        field_type = parse_field_type(raw_type)
        if field_type is None or field_type == FieldType.UNKNOWN:
            logger.debug(f"Unrecognized type {raw_type!r} for {name!r}; kept as unknown")
            return SchemaField(name=name, type=FieldType.UNKNOWN, original_type=str(raw_type),
                               required=required, allow_null=allow_null)

    if field_type == FieldType.OBJECT:
        children = _decode_nested(name, prop, depth, max_depth)
        return SchemaField(name=name, type=FieldType.OBJECT, required=required,
                           allow_null=allow_null, children=children)

    if field_type == FieldType.ARRAY:
        item_type, item_fields = _decode_items(name, prop.get('items'), depth, max_depth)
        return SchemaField(name=name, type=FieldType.ARRAY, required=required,
                           allow_null=allow_null, item_type=item_type, item_fields=item_fields)

    return SchemaField(name=name, type=field_type, required=required, allow_null=allow_null)


def _decode_items(owner: str, items: Any, depth: int, max_depth: int) -> Tuple[FieldType, List[SchemaField]]:
    if not isinstance(items, dict):
        return FieldType.STRING, []
    if 'enum' in items:
        return FieldType.ENUM, []

    raw_type, _ = unwrap_nullable(items.get('type'))
    item_type = parse_field_type(raw_type)
    if item_type is None or item_type == FieldType.UNKNOWN:
        return FieldType.STRING, []

    if item_type == FieldType.OBJECT:
        return item_type, _decode_nested(owner, items, depth, max_depth)
    return item_type, []
