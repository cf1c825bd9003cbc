"""Mapping of primitive kinds to JSON-schema types and formats."""

from typing import Callable

from api_doc_builder.service.types import PRIMITIVE_KINDS

# Names that never get a definition of their own: the primitive kinds
# plus the text-serialized timestamps.
PRIMITIVE_NAMES = frozenset(PRIMITIVE_KINDS) | {"datetime", "date"}

_SCHEMA_TYPES = {
    "uint": "integer",
    "uint8": "integer",
    "uint16": "integer",
    "uint32": "integer",
    "uint64": "integer",
    "int": "integer",
    "int8": "integer",
    "int16": "integer",
    "int32": "integer",
    "int64": "integer",
    "rune": "integer",
    "byte": "string",
    "float32": "number",
    "float64": "number",
    "bool": "boolean",
    "string": "string",
    "datetime": "string",
    "date": "string",
}

_SCHEMA_FORMATS = {
    "int": "int32",
    "int8": "int8",
    "int16": "int16",
    "int32": "int32",
    "int64": "int64",
    "uint": "uint32",
    "uint8": "uint8",
    "uint16": "uint16",
    "uint32": "uint32",
    "uint64": "uint64",
    "rune": "int32",
    "byte": "byte",
    "float32": "float",
    "float64": "double",
    "datetime": "date-time",
    "date": "date",
}


def is_primitive_name(name: str) -> bool:
    return name in PRIMITIVE_NAMES


def json_schema_type(name: str) -> str:
    """Schema type keyword for a primitive name."""
    return _SCHEMA_TYPES[name]


def json_schema_format(name: str, handler: Callable[[str], str | None] | None = None) -> str | None:
    """Schema format for a type name; the handler, when set, wins."""
    if handler is not None:
        mapped = handler(name)
        if mapped:
            return mapped
    return _SCHEMA_FORMATS.get(name)
