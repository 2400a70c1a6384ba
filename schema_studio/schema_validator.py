"""
Local validity report for schema documents.

Checks that a document stays inside the subset the editor understands before
it is handed to the external validate/save services. The report mirrors the
service reply: ``{"valid": bool, "errors": [...], "warnings": [...]}``.
"""

from typing import Any, Dict, List, Tuple
import logging

from .schema_decoder import unwrap_nullable
from .schema_encoder import DEFAULT_MAX_DEPTH, NULL_TYPE

logger = logging.getLogger(__name__)

SUPPORTED_DOCUMENT_TYPES = {'string', 'number', 'boolean', 'object', 'array'}


def validate_schema_document(document: Any, max_depth: int = DEFAULT_MAX_DEPTH) -> Dict[str, Any]:
    """
    Validate overall document structure.

    Args:
        document: Parsed schema document
        max_depth: Nesting limit

    Returns:
        Dict with 'valid', 'errors' and 'warnings'
    """
    errors: List[str] = []
    warnings: List[str] = []

    if not isinstance(document, dict):
        errors.append("Schema must be a JSON object")
    else:
        root_type, _ = unwrap_nullable(document.get('type'))
        if root_type != 'object':
            errors.append("Root schema must have type 'object'")
        object_errors, object_warnings = validate_object_schema(document, "root", 0, max_depth)
        errors.extend(object_errors)
        warnings.extend(object_warnings)

    is_valid = len(errors) == 0
    if not is_valid:
        logger.debug(f"Schema document has {len(errors)} validation errors")
    return {'valid': is_valid, 'errors': errors, 'warnings': warnings}


def validate_object_schema(schema: Dict[str, Any], path: str, depth: int,
                           max_depth: int = DEFAULT_MAX_DEPTH) -> Tuple[List[str], List[str]]:
    """
    Validate the properties and required list of an object schema.

    Returns:
        Tuple of (errors, warnings)
    """
    errors: List[str] = []
    warnings: List[str] = []

    if depth > max_depth:
        errors.append(f"'{path}' exceeds maximum nesting depth {max_depth}")
        return errors, warnings

    properties = schema.get('properties', {})
    if not isinstance(properties, dict):
        errors.append(f"'{path}.properties' must be an object")
        return errors, warnings

    if not properties:
        warnings.append(f"'{path}' has no properties")

    for name, prop in properties.items():
        prop_path = f"{path}.{name}"
        if not isinstance(name, str) or not name.strip():
            errors.append(f"Property names under '{path}' must be non-empty strings")
        prop_errors, prop_warnings = validate_property_schema(prop, prop_path, depth, max_depth)
        errors.extend(prop_errors)
        warnings.extend(prop_warnings)

    required = schema.get('required')
    if required is not None:
        if not isinstance(required, list):
            errors.append(f"'{path}.required' must be a list of property names")
        else:
            for name in required:
                if not isinstance(name, str) or name not in properties:
                    errors.append(f"'{path}.required' lists '{name}' which is not a property")
            if len(set(map(str, required))) != len(required):
                warnings.append(f"'{path}.required' contains duplicate names")

    return errors, warnings


def validate_property_schema(prop: Any, path: str, depth: int,
                             max_depth: int = DEFAULT_MAX_DEPTH) -> Tuple[List[str], List[str]]:
    """
    Validate one property schema.

    Returns:
        Tuple of (errors, warnings)
    """
    errors: List[str] = []
    warnings: List[str] = []

    if not isinstance(prop, dict):
        errors.append(f"'{path}' must be an object")
        return errors, warnings

    type_value = prop.get('type')
    if type_value is None:
        errors.append(f"'{path}' is missing 'type'")
        return errors, warnings

    if isinstance(type_value, list):
        non_null = [t for t in type_value if t != NULL_TYPE]
        if len(type_value) != 2 or len(non_null) != 1:
            errors.append(f"'{path}' nullable type must be [T, \"null\"]")
    prop_type, _ = unwrap_nullable(type_value)

    if not isinstance(prop_type, str) or prop_type not in SUPPORTED_DOCUMENT_TYPES:
        errors.append(
            f"'{path}' has unsupported type {prop_type!r}. "
            f"Valid types: {sorted(SUPPORTED_DOCUMENT_TYPES)}"
        )
        return errors, warnings

    if 'enum' in prop:
        values = prop['enum']
        if prop_type != 'string':
            errors.append(f"'{path}' enum must have type 'string'")
        if not isinstance(values, list):
            errors.append(f"'{path}.enum' must be a list")
        elif not values:
            warnings.append(f"'{path}' enum has no values")
        elif len(set(map(str, values))) != len(values):
            warnings.append(f"'{path}' enum contains duplicate values")

    if prop_type == 'object':
        nested_errors, nested_warnings = validate_object_schema(prop, path, depth + 1, max_depth)
        errors.extend(nested_errors)
        warnings.extend(nested_warnings)
    elif prop_type == 'array':
        if 'items' not in prop:
            errors.append(f"'{path}' array must have 'items'")
        else:
            item_errors, item_warnings = validate_property_schema(
                prop['items'], f"{path}[]", depth + 1, max_depth
            )
            errors.extend(item_errors)
            warnings.extend(item_warnings)

    return errors, warnings
