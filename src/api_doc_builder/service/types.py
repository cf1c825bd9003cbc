"""Structural type descriptors for declared models.

Models are declared explicitly as a closed set of kinds instead of being
discovered by runtime introspection. Descriptors are plain objects compared
by identity, so a struct can refer back to itself:

    node = Struct("main.Node")
    node.add("Children", Array(node), json_name="children")
"""

from __future__ import annotations

import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from api_doc_builder.spec.errors import UnclassifiableTypeError


class Kind(str, Enum):
    PRIMITIVE = "primitive"
    STRUCT = "struct"
    ARRAY = "array"
    MAP = "map"
    POINTER = "pointer"
    ANY = "any"
    SERIALIZED = "serialized"


PRIMITIVE_KINDS = (
    "int", "int8", "int16", "int32", "int64",
    "uint", "uint8", "uint16", "uint32", "uint64",
    "float32", "float64", "bool", "string", "byte", "rune",
)

_INT_BITS = {
    "int": 32, "int8": 8, "int16": 16, "int32": 32, "int64": 64, "rune": 32,
    "uint": 32, "uint8": 8, "uint16": 16, "uint32": 32, "uint64": 64, "byte": 8,
}
_UNSIGNED = {"uint", "uint8", "uint16", "uint32", "uint64", "byte"}
_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}


class TypeDescriptor:
    """Base of all type descriptors."""

    kind: Kind
    name: str | None = None

    def type_string(self) -> str:
        """Qualified name for named types, a type expression otherwise."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.type_string()}>"


class Primitive(TypeDescriptor):
    kind = Kind.PRIMITIVE

    def __init__(self, primitive: str, name: str | None = None):
        if primitive not in PRIMITIVE_KINDS:
            raise UnclassifiableTypeError(f"unknown primitive kind {primitive!r}")
        self.primitive = primitive
        self.name = name

    def type_string(self) -> str:
        return self.name or self.primitive


class FieldMeta(BaseModel):
    """Documentation metadata attached to a struct field."""

    model_config = ConfigDict(protected_namespaces=())

    json_name: str | None = None
    skip: bool = False
    description: str = ""
    default: Any = None
    enum: list[Any] | None = None
    minimum: Any = None
    maximum: Any = None
    min_length: int | None = None
    max_length: int | None = None
    pattern: str | None = None
    type_override: str | None = None  # "[]string" means array of string
    unique: bool | None = None
    read_only: bool | None = None
    optional: bool = False
    omit_empty: bool = False
    as_string: bool = False  # numbers encoded as JSON strings
    inline: bool = False  # flatten an embedded struct even when renamed
    reserved: bool = False  # serialization metadata, never documented
    model_description: str = ""


class StructField(BaseModel):
    """A declared struct field: its declared name, type and metadata."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    type: TypeDescriptor
    meta: FieldMeta = Field(default_factory=FieldMeta)
    embedded: bool = False


class Struct(TypeDescriptor):
    kind = Kind.STRUCT

    def __init__(
        self,
        name: str | None = None,
        fields: list[StructField] | None = None,
        doc: dict[str, str] | None = None,
    ):
        self.name = name
        self.fields: list[StructField] = list(fields or [])
        # name -> description lookup; the "" key documents the model itself
        self.doc = doc

    @property
    def short_name(self) -> str:
        return (self.name or "").rsplit(".", 1)[-1]

    def add(self, name: str, type: TypeDescriptor, embedded: bool = False, **meta: Any) -> "Struct":
        self.fields.append(field(name, type, embedded=embedded, **meta))
        return self

    def embed(self, other: "Struct", **meta: Any) -> "Struct":
        return self.add(other.short_name, other, embedded=True, **meta)

    def type_string(self) -> str:
        if self.name:
            return self.name
        return "struct{" + ",".join(f.name for f in self.fields) + "}"


class Array(TypeDescriptor):
    """A slice or fixed-size array."""

    kind = Kind.ARRAY

    def __init__(self, elem: TypeDescriptor):
        self.elem = elem

    def type_string(self) -> str:
        return "[]" + self.elem.type_string()


class Map(TypeDescriptor):
    kind = Kind.MAP

    def __init__(self, value: TypeDescriptor, key: TypeDescriptor | None = None):
        self.key = key or STRING
        self.value = value

    def type_string(self) -> str:
        return f"map[{self.key.type_string()}]{self.value.type_string()}"


class Pointer(TypeDescriptor):
    kind = Kind.POINTER

    def __init__(self, elem: TypeDescriptor):
        self.elem = elem

    def type_string(self) -> str:
        return "*" + self.elem.type_string()


class AnyType(TypeDescriptor):
    """An interface value; its shape is unknown."""

    kind = Kind.ANY

    def type_string(self) -> str:
        return "interface {}"


class Serialized(TypeDescriptor):
    """A type that serializes itself to text, such as a timestamp."""

    kind = Kind.SERIALIZED

    def __init__(self, name: str):
        self.name = name

    def type_string(self) -> str:
        return self.name


INT = Primitive("int")
INT8 = Primitive("int8")
INT16 = Primitive("int16")
INT32 = Primitive("int32")
INT64 = Primitive("int64")
UINT = Primitive("uint")
UINT8 = Primitive("uint8")
UINT16 = Primitive("uint16")
UINT32 = Primitive("uint32")
UINT64 = Primitive("uint64")
FLOAT32 = Primitive("float32")
FLOAT64 = Primitive("float64")
BOOL = Primitive("bool")
STRING = Primitive("string")
BYTE = Primitive("byte")
RUNE = Primitive("rune")
ANY = AnyType()
DATETIME = Serialized("datetime")
DATE = Serialized("date")


def field(name: str, type: TypeDescriptor, embedded: bool = False, **meta: Any) -> StructField:
    """Declare a struct field; keyword arguments become its FieldMeta."""
    return StructField(name=name, type=type, meta=FieldMeta(**meta), embedded=embedded)


def unwrap_pointer(t: TypeDescriptor) -> TypeDescriptor:
    while isinstance(t, Pointer):
        t = t.elem
    return t


def is_bytes(t: TypeDescriptor) -> bool:
    """Byte sequences encode as base64 strings, not arrays."""
    return isinstance(t, Array) and isinstance(t.elem, Primitive) and t.elem.primitive in ("byte", "uint8")


def describe(sample: Any) -> TypeDescriptor:
    """Infer a type descriptor from a representative sample value."""
    if isinstance(sample, TypeDescriptor):
        return sample
    # bool is a subclass of int
    if isinstance(sample, bool):
        return BOOL
    if isinstance(sample, int):
        return INT
    if isinstance(sample, float):
        return FLOAT64
    if isinstance(sample, str):
        return STRING
    if isinstance(sample, (bytes, bytearray)):
        return Array(BYTE)
    if isinstance(sample, datetime.datetime):
        return DATETIME
    if isinstance(sample, datetime.date):
        return DATE
    if isinstance(sample, (list, tuple)):
        if not sample:
            raise UnclassifiableTypeError("cannot infer the element type of an empty sequence; declare Array(...)")
        return Array(describe(sample[0]))
    if isinstance(sample, dict):
        if not sample:
            return Map(ANY)
        return Map(describe(next(iter(sample.values()))))
    raise UnclassifiableTypeError(f"cannot derive a type from sample of {type(sample).__name__}")


def coerce_literal(t: TypeDescriptor, value: Any) -> Any:
    """Convert a textual default/bound into the Python value of the field kind.

    Non-text values pass through. Text that does not parse yields None.
    """
    if not isinstance(value, str):
        return value
    t = unwrap_pointer(t)
    if isinstance(t, Serialized):
        return value
    if not isinstance(t, Primitive):
        return None

    kind = t.primitive
    if kind == "string":
        return value
    if kind == "bool":
        if value in _TRUE:
            return True
        if value in _FALSE:
            return False
        return None
    if kind in ("float32", "float64"):
        try:
            return float(value)
        except ValueError:
            return None

    try:
        number = int(value, 0)
    except ValueError:
        return None
    bits = _INT_BITS[kind]
    if kind in _UNSIGNED:
        low, high = 0, 2**bits - 1
    else:
        low, high = -(2 ** (bits - 1)), 2 ** (bits - 1) - 1
    if not low <= number <= high:
        return None
    return number
