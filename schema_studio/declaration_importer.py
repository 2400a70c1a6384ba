"""
Declaration importer: informal type declarations -> field tree.

Turns pasted TypeScript-style declarations into fields, one declaration per
line::

    id: string;
    role: "ADMIN" | "USER";      // trailing comments are ignored
    departmentId: string | null;

A field is required unless it is nullable (``| null``) or marked optional
(``name?:``). The import is all-or-nothing: the first line that cannot be
read raises ParseError and no fields are returned.
"""

import re
from typing import List, Optional, Tuple
import logging

from .field_model import FieldType, SchemaField, merge_enum_values
from .schema_exceptions import ParseError

logger = logging.getLogger(__name__)

_DECLARATION_RE = re.compile(
    r'^(?P<name>[A-Za-z0-9_$]+)(?P<optional>\?)?\s*:\s*(?P<expr>.+?)\s*;?\s*$'
)
_QUOTED_LITERAL_RE = re.compile(r'^(?:"(?P<double>[^"]*)"|\'(?P<single>[^\']*)\')$')
_WRAPPER_LINE_RE = re.compile(
    r'^(?:export\s+)?(?:interface\s+[A-Za-z_$][\w$]*(?:\s+extends\s+[\w$.,\s]+)?'
    r'|type\s+[A-Za-z_$][\w$]*\s*=)\s*\{$'
)
_BRACE_LINE_RE = re.compile(r'^[{}]\s*;?$')

NULL_KEYWORD = 'null'

# keyword -> (field type, array item type)
TYPE_KEYWORDS = {
    'string': (FieldType.STRING, None),
    'number': (FieldType.NUMBER, None),
    'boolean': (FieldType.BOOLEAN, None),
    'Date': (FieldType.STRING, None),
    'object': (FieldType.OBJECT, None),
    'array': (FieldType.ARRAY, FieldType.STRING),
    'any[]': (FieldType.ARRAY, FieldType.STRING),
    'string[]': (FieldType.ARRAY, FieldType.STRING),
    'number[]': (FieldType.ARRAY, FieldType.NUMBER),
    'boolean[]': (FieldType.ARRAY, FieldType.BOOLEAN),
    'Date[]': (FieldType.ARRAY, FieldType.STRING),
    'object[]': (FieldType.ARRAY, FieldType.OBJECT),
}


def strip_comment(line: str) -> str:
    """Remove a trailing // comment, ignoring // inside quoted literals."""
    quote: Optional[str] = None
    for index, char in enumerate(line):
        if quote:
            if char == quote:
                quote = None
        elif char in ('"', "'"):
            quote = char
        elif line.startswith('//', index):
            return line[:index]
    return line


def split_union(expression: str) -> List[str]:
    """Split a type expression on ``|`` outside quoted literals."""
    members = []
    current = []
    quote: Optional[str] = None
    for char in expression:
        if quote:
            current.append(char)
            if char == quote:
                quote = None
        elif char in ('"', "'"):
            quote = char
            current.append(char)
        elif char == '|':
            members.append(''.join(current).strip())
            current = []
        else:
            current.append(char)
    members.append(''.join(current).strip())
    return members


def _is_skippable(line: str) -> bool:
    return not line or bool(_BRACE_LINE_RE.match(line)) or bool(_WRAPPER_LINE_RE.match(line))


def parse_type_expression(expression: str) -> Optional[Tuple[FieldType, bool, Optional[FieldType], Tuple[str, ...]]]:
    """
    Read a type expression.

    Args:
        expression: Text after the colon, e.g. ``"A" | "B" | null``

    Returns:
        Tuple of (field type, allow_null, item type, enum values),
        or None when the expression is not supported
    """
    members = split_union(expression)
    if any(not member for member in members):
        return None

    allow_null = NULL_KEYWORD in members
    members = [member for member in members if member != NULL_KEYWORD]
    if not members:
        return None

    literals = [_QUOTED_LITERAL_RE.match(member) for member in members]
    if all(literals):
        values = [m.group('double') if m.group('double') is not None else m.group('single')
                  for m in literals]
        return FieldType.ENUM, allow_null, None, merge_enum_values((), values)

    if len(members) == 1 and members[0] in TYPE_KEYWORDS:
        field_type, item_type = TYPE_KEYWORDS[members[0]]
        return field_type, allow_null, item_type, ()

    return None


def parse_declaration_line(line: str) -> Optional[SchemaField]:
    """
    Read one declaration, already stripped of comments and whitespace.

    Returns:
        SchemaField, or None when the line does not match the grammar
    """
    match = _DECLARATION_RE.match(line)
    if not match:
        return None

    parsed = parse_type_expression(match.group('expr'))
    if parsed is None:
        return None

    field_type, allow_null, item_type, enum_values = parsed
    optional = match.group('optional') is not None

    field = SchemaField(
        name=match.group('name'),
        type=field_type,
        required=not (allow_null or optional),
        allow_null=allow_null,
        enum_values=enum_values,
        item_type=item_type or FieldType.STRING,
    )
    return field


def import_declarations(text: str) -> List[SchemaField]:
    """
    Import declaration text as a field list.

    Args:
        text: Pasted declarations, one per line

    Returns:
        Field list in declaration order

    Raises:
        ParseError: For the first line that matches no supported form,
            or when the text holds no declarations at all
    """
    fields: List[SchemaField] = []

    for line_number, raw_line in enumerate((text or '').splitlines(), start=1):
        line = strip_comment(raw_line).strip()
        if _is_skippable(line):
            continue

        field = parse_declaration_line(line)
        if field is None:
            logger.info(f"Declaration import failed at line {line_number}: {raw_line!r}")
            raise ParseError(line_number, raw_line)
        fields.append(field)

    if not fields:
        raise ParseError(0, text or '', message="No field declarations found")

    logger.info(f"Imported {len(fields)} field declarations")
    return fields
