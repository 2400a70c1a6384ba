"""
Field tree model for the schema studio.

A schema is edited as an ordered list of SchemaField nodes. Object fields nest
their properties in ``children``; array fields of objects nest them in
``item_fields``. Nodes are frozen pydantic models: every edit below returns a
new list with the edited node rebuilt, so encoder and decoder calls always see
a consistent snapshot.

Nodes are addressed by a *location*, a tuple of steps from the root list::

    (2,)                        third root field
    (2, "children", 0)          first property of that object
    (1, "item_fields", 3)       fourth item field of an array of objects

Edits never fail. Out-of-range indices, or steps through a node that is not an
object/array, leave the tree unchanged.
"""

from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Union
import logging

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

logger = logging.getLogger(__name__)

CHILDREN = "children"
ITEM_FIELDS = "item_fields"

Location = Tuple[Union[int, str], ...]


class FieldType(str, Enum):
    """Closed set of field types. UNKNOWN keeps unrecognized type text and acts like STRING."""
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"
    ENUM = "enum"
    UNKNOWN = "unknown"


# Types offered in the editor's type selectors
EDITABLE_FIELD_TYPES = [
    FieldType.STRING,
    FieldType.NUMBER,
    FieldType.BOOLEAN,
    FieldType.OBJECT,
    FieldType.ARRAY,
    FieldType.ENUM,
]


def parse_field_type(value: Any) -> Optional[FieldType]:
    """
    Map a type name to a FieldType.

    Args:
        value: Type name such as "string" or "Number", or a FieldType

    Returns:
        Matching FieldType, or None when the text is not a known type
    """
    if isinstance(value, FieldType):
        return value
    if not isinstance(value, str):
        return None
    try:
        return FieldType(value.strip().lower())
    except ValueError:
        return None


def merge_enum_values(existing: Iterable[Any], new_values: Iterable[Any]) -> Tuple[str, ...]:
    """
    Merge enum values as an ordered set.

    Values keep the order of their first appearance; later duplicates are dropped.

    Args:
        existing: Current enum values
        new_values: Values to append

    Returns:
        Tuple of unique values
    """
    merged: Dict[str, None] = {}
    for value in list(existing) + list(new_values):
        merged.setdefault(str(value), None)
    return tuple(merged)


class SchemaField(BaseModel):
    """A single node of the field tree."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    type: FieldType = FieldType.STRING
    required: bool = False
    allow_null: bool = False
    children: Tuple["SchemaField", ...] = ()
    item_type: FieldType = FieldType.STRING
    item_fields: Tuple["SchemaField", ...] = ()
    enum_values: Tuple[str, ...] = ()
    original_type: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _coerce_type_names(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if "type" in data and data["type"] is not None:
            raw_type = data["type"]
            field_type = parse_field_type(raw_type)
            if field_type is None:
                data["type"] = FieldType.UNKNOWN
                if not data.get("original_type"):
                    data["original_type"] = str(raw_type)
            else:
                data["type"] = field_type
        if "item_type" in data:
            item_type = parse_field_type(data["item_type"])
            if item_type is None or item_type == FieldType.UNKNOWN:
                item_type = FieldType.STRING
            data["item_type"] = item_type
        return data

    @field_validator("enum_values")
    @classmethod
    def _dedupe_enum_values(cls, values: Tuple[str, ...]) -> Tuple[str, ...]:
        return merge_enum_values((), values)

    @property
    def effective_type(self) -> FieldType:
        """Type used when encoding; UNKNOWN behaves as STRING."""
        if self.type == FieldType.UNKNOWN:
            return FieldType.STRING
        return self.type

    @property
    def is_container(self) -> bool:
        return self.type in (FieldType.OBJECT, FieldType.ARRAY)


SchemaField.model_rebuild()

_FIELD_ATTRIBUTES = set(SchemaField.model_fields)


def new_field(name: str = "", field_type: Union[FieldType, str] = FieldType.STRING,
              required: bool = False, allow_null: bool = False, **payload: Any) -> SchemaField:
    """Create a blank field; defaults match the editor's "Add Field" button."""
    return SchemaField(name=name, type=field_type, required=required,
                       allow_null=allow_null, **payload)


def replace_field(field: SchemaField, **changes: Any) -> SchemaField:
    """
    Rebuild a field with some attributes changed.

    Unlike ``model_copy(update=...)`` this re-runs validation, so type names are
    coerced, nested lists become tuples and enum values stay de-duplicated.
    Changes that fail validation return the field unchanged.
    """
    unknown = set(changes) - _FIELD_ATTRIBUTES
    if unknown:
        logger.debug(f"Ignoring unknown field attributes: {sorted(unknown)}")
        changes = {k: v for k, v in changes.items() if k in _FIELD_ATTRIBUTES}
    if "type" in changes and parse_field_type(changes["type"]) not in (None, FieldType.UNKNOWN):
        changes.setdefault("original_type", None)
    data = dict(field)
    data.update(changes)
    try:
        return SchemaField.model_validate(data)
    except ValidationError as e:
        logger.debug(f"Rejected change to field {field.name!r}: {e.error_count()} invalid values; field kept")
        return field


def _container_allowed(field: SchemaField, container: Any) -> bool:
    if container == CHILDREN:
        return field.type == FieldType.OBJECT
    if container == ITEM_FIELDS:
        return field.type == FieldType.ARRAY
    return False


def _edit_list(fields: List[SchemaField], parent: Location,
               edit: Callable[[List[SchemaField]], List[SchemaField]]) -> List[SchemaField]:
    """
    Apply ``edit`` to the sibling list addressed by ``parent``.

    Returns the input list object itself when nothing changed.
    """
    if not parent:
        return edit(fields)

    if len(parent) < 2:
        logger.debug(f"Incomplete parent location {parent!r}; edit skipped")
        return fields

    index, container, rest = parent[0], parent[1], parent[2:]
    if not isinstance(index, int) or not 0 <= index < len(fields):
        logger.debug(f"Index {index!r} out of range for {len(fields)} fields; edit skipped")
        return fields

    node = fields[index]
    if not _container_allowed(node, container):
        logger.debug(f"Field {node.name!r} ({node.type.value}) has no {container!r}; edit skipped")
        return fields

    nested = list(getattr(node, container))
    edited = _edit_list(nested, rest, edit)
    if edited is nested:
        return fields

    result = list(fields)
    result[index] = replace_field(node, **{container: edited})
    return result


def _split_location(location: Location) -> Tuple[Location, Any]:
    if not location:
        return (), None
    return tuple(location[:-1]), location[-1]


def get_field(fields: List[SchemaField], location: Location) -> Optional[SchemaField]:
    """
    Read the field at a location.

    Returns:
        The field, or None when the location does not address a node
    """
    current: Iterable[SchemaField] = fields
    node: Optional[SchemaField] = None
    steps = list(location)
    if not steps or len(steps) % 2 == 0:
        return None
    while steps:
        index = steps.pop(0)
        siblings = list(current)
        if not isinstance(index, int) or not 0 <= index < len(siblings):
            return None
        node = siblings[index]
        if steps:
            container = steps.pop(0)
            if not _container_allowed(node, container):
                return None
            current = getattr(node, container)
    return node


def append_field(fields: List[SchemaField], field: Optional[SchemaField] = None,
                 parent: Location = ()) -> List[SchemaField]:
    """
    Append a field to the sibling list at ``parent``.

    Args:
        fields: Root field list
        field: Field to append (a blank string field when omitted)
        parent: Location of the containing list; () for the root

    Returns:
        New root field list
    """
    addition = field if field is not None else new_field()
    return list(_edit_list(list(fields), tuple(parent), lambda siblings: siblings + [addition]))


def remove_field(fields: List[SchemaField], location: Location) -> List[SchemaField]:
    """Remove the field at ``location``; no-op when it does not exist."""
    parent, index = _split_location(tuple(location))

    def _remove(siblings: List[SchemaField]) -> List[SchemaField]:
        if not isinstance(index, int) or not 0 <= index < len(siblings):
            logger.debug(f"Remove index {index!r} out of range; nothing removed")
            return siblings
        return siblings[:index] + siblings[index + 1:]

    return list(_edit_list(list(fields), parent, _remove))


def update_field(fields: List[SchemaField], location: Location, **changes: Any) -> List[SchemaField]:
    """
    Change attributes of the field at ``location``.

    Args:
        fields: Root field list
        location: Location of the node to edit
        **changes: Attribute values, e.g. ``name="id"`` or ``type="enum"``

    Returns:
        New root field list
    """
    parent, index = _split_location(tuple(location))

    def _update(siblings: List[SchemaField]) -> List[SchemaField]:
        if not isinstance(index, int) or not 0 <= index < len(siblings):
            logger.debug(f"Update index {index!r} out of range; nothing changed")
            return siblings
        updated = list(siblings)
        updated[index] = replace_field(siblings[index], **changes)
        return updated

    return list(_edit_list(list(fields), parent, _update))


def set_children(fields: List[SchemaField], location: Location,
                 children: Iterable[SchemaField]) -> List[SchemaField]:
    """Replace the nested properties of an object field."""
    return update_field(fields, location, children=tuple(children))


def set_item_fields(fields: List[SchemaField], location: Location,
                    item_fields: Iterable[SchemaField]) -> List[SchemaField]:
    """Replace the item properties of an array-of-objects field."""
    return update_field(fields, location, item_fields=tuple(item_fields))


def split_enum_input(raw_text: str) -> List[str]:
    """Split comma-separated enum input into trimmed, non-empty values."""
    return [value.strip() for value in (raw_text or "").split(",") if value.strip()]


def add_enum_values(fields: List[SchemaField], location: Location, raw_text: str) -> List[SchemaField]:
    """
    Add comma-separated values to an enum field, keeping first-appearance order.

    Args:
        fields: Root field list
        location: Location of the enum field
        raw_text: Text typed or pasted by the user, e.g. "ADMIN, USER"

    Returns:
        New root field list
    """
    target = get_field(fields, location)
    if target is None:
        return list(fields)
    values = merge_enum_values(target.enum_values, split_enum_input(raw_text))
    return update_field(fields, location, enum_values=values)


def remove_enum_value(fields: List[SchemaField], location: Location, value: str) -> List[SchemaField]:
    """Remove one value from an enum field."""
    target = get_field(fields, location)
    if target is None:
        return list(fields)
    values = tuple(v for v in target.enum_values if v != value)
    return update_field(fields, location, enum_values=values)
