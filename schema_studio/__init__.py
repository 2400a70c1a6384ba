"""
Schema studio: field tree <-> JSON Schema document engine.
"""

from .declaration_importer import import_declarations
from .field_model import FieldType, SchemaField
from .node_visibility import node_path
from .schema_decoder import decode
from .schema_encoder import encode
from .schema_exceptions import DocumentSyntaxError, ParseError

__all__ = [
    "encode",
    "decode",
    "import_declarations",
    "node_path",
    "FieldType",
    "SchemaField",
    "DocumentSyntaxError",
    "ParseError",
]
