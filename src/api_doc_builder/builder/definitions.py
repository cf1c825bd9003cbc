"""Derive JSON-schema definitions from declared model types.

A model is registered under its key before its fields are visited, so a
model that refers to itself (directly or through a pointer, array or map)
ends up as a ``$ref`` to its own definition instead of recursing forever.
"""

import logging
from typing import Any

from api_doc_builder.builder.primitives import is_primitive_name, json_schema_format, json_schema_type
from api_doc_builder.config import Config
from api_doc_builder.service.types import (
    AnyType,
    Array,
    Map,
    Pointer,
    Primitive,
    Serialized,
    Struct,
    StructField,
    TypeDescriptor,
    coerce_literal,
    describe,
    is_bytes,
    unwrap_pointer,
)
from api_doc_builder.spec.errors import UnclassifiableTypeError
from api_doc_builder.spec.models import Items, Schema

logger = logging.getLogger(__name__)

DEFINITIONS_PREFIX = "#/definitions/"


class DefinitionBuilder:
    """Collects model definitions for one document build."""

    def __init__(
        self,
        definitions: dict[str, Schema] | None = None,
        config: Config | None = None,
        in_progress: set[str] | None = None,
    ):
        self.definitions: dict[str, Schema] = {} if definitions is None else definitions
        self.config = config or Config()
        # keys of models whose fields are being visited, across sub-builders
        self._in_progress: set[str] = set(in_progress or ())

    def key_from(self, t: TypeDescriptor) -> str:
        """The definition key for a type, honoring the naming hook."""
        key = t.type_string()
        handler = self.config.model_type_name_handler
        if handler is not None:
            name = handler(t)
            if name:
                key = name
        if not t.name:
            # [][]Foo -> ||Foo, the leading [] is implied by the array schema
            key = key.removeprefix("[]").replace("[]", "||")
        return key

    def schema_format(self, name: str) -> str | None:
        return json_schema_format(name, self.config.schema_format_handler)

    def primitive_schema(self, name: str) -> Schema:
        return Schema(type=json_schema_type(name), format=self.schema_format(name))

    def simple_type(self, t: TypeDescriptor) -> tuple[str, str | None]:
        """Type and format of a value that must be a scalar on the wire."""
        t = unwrap_pointer(t)
        if is_bytes(t):
            return "string", "byte"
        if isinstance(t, Primitive):
            return json_schema_type(t.primitive), self.schema_format(t.primitive)
        if isinstance(t, Serialized):
            return "string", self.schema_format(self.key_from(t))
        raise UnclassifiableTypeError(f"{t.type_string()} is not a primitive type")

    def simple_items(self, t: TypeDescriptor) -> Items:
        item_type, item_format = self.simple_type(t)
        return Items(type=item_type, format=item_format)

    def schema_from_type(self, t: TypeDescriptor, model_name: str = "", json_name: str = "") -> Schema:
        """Inline schema for a value of type ``t``; structs become references.

        ``model_name`` and ``json_name`` name the field being described and
        are used to key anonymous structs.
        """
        t = unwrap_pointer(t)
        if is_bytes(t):
            return Schema(type="string")
        if isinstance(t, Array):
            return Schema(type="array", items=self.schema_from_type(t.elem, model_name, json_name))
        if isinstance(t, Map):
            schema = Schema(type="object")
            if not isinstance(unwrap_pointer(t.value), AnyType):
                schema.additional_properties = self.schema_from_type(t.value, model_name, json_name)
            return schema
        if isinstance(t, AnyType):
            return Schema()
        if isinstance(t, Primitive):
            return self.primitive_schema(t.primitive)
        if isinstance(t, Serialized):
            return Schema(type="string", format=self.schema_format(self.key_from(t)))

        if t.name or not model_name:
            name = self.key_from(t)
        else:
            name = f"{model_name}.{json_name}"
        if is_primitive_name(name):
            return self.primitive_schema(name)
        return Schema(ref=self.create_ref(t, name))

    def create_ref(self, t: TypeDescriptor, name: str) -> str:
        self.add_model(t, name)
        return DEFINITIONS_PREFIX + name

    def add_model_from(self, sample: Any) -> None:
        """Register the models reachable from a sample value or descriptor."""
        self.schema_from_type(describe(sample))

    def add_model(self, t: TypeDescriptor, name: str | None = None) -> Schema | None:
        """Build and register the definition of a struct type.

        Returns None when nothing was registered: the key is taken (or being
        built), names a primitive, or the type is not a struct.
        """
        t = unwrap_pointer(t)
        model_name = name or self.key_from(t)
        if is_primitive_name(model_name) or is_bytes(t):
            return None
        if model_name in self.definitions:
            return None
        if not isinstance(t, Struct):
            return None

        schema = Schema(type="object", id=model_name, properties={}, required=[])
        self.definitions[model_name] = schema
        self._in_progress.add(model_name)
        logger.debug("building model %s", model_name)

        doc = t.doc or {}
        model_descriptions = []
        for f in t.fields:
            json_name, model_description, prop = self.build_property(f, schema, model_name)
            if model_description:
                model_descriptions.append(model_description)
            if not json_name:
                continue
            if json_name in doc:
                prop.description = doc[json_name]
            if self.is_property_required(f):
                schema.required.append(json_name)
            schema.properties[json_name] = prop

        if "" in doc:
            schema.description = doc[""]
        elif model_descriptions:
            schema.description = "\n".join(model_descriptions)

        schema.id = None
        if not schema.properties:
            schema.properties = None
        if not schema.required:
            schema.required = None
        self._in_progress.discard(model_name)
        self.definitions[model_name] = schema
        logger.debug("registered model %s", model_name)
        return schema

    @staticmethod
    def json_name_of(f: StructField) -> str:
        """The documented property name, or "" when the field is skipped."""
        if f.meta.skip:
            return ""
        return f.meta.json_name or f.name

    @staticmethod
    def is_property_required(f: StructField) -> bool:
        return not (f.meta.optional or f.meta.omit_empty)

    def build_property(self, f: StructField, model: Schema, model_name: str) -> tuple[str, str, Schema]:
        """Returns (json name, model description, property schema).

        An empty json name means the field adds no property of its own,
        either because it is skipped or because it was flattened into
        ``model``.
        """
        json_name = self.json_name_of(f)
        if not json_name or f.meta.reserved:
            return "", "", Schema()

        model_description = f.meta.model_description
        prop = Schema()
        self.set_property_metadata(prop, f)
        if prop.type is not None:
            # explicit type override
            return json_name, model_description, prop

        ft = f.type
        if isinstance(ft, Serialized):
            prop.type = "string"
            if prop.format is None:
                prop.format = self.schema_format(self.key_from(ft))
            return json_name, model_description, prop
        if f.meta.as_string:
            prop.type = "string"
            return json_name, model_description, prop

        if isinstance(ft, Struct):
            json_name, prop = self.build_struct_property(f, json_name, model, model_name)
        elif isinstance(ft, Array):
            prop = self.build_array_property(f, json_name, model_name)
        elif isinstance(ft, Pointer):
            prop = self.schema_from_type(ft.elem, model_name, json_name)
            self.set_property_metadata(prop, f)
        elif isinstance(ft, Primitive) and ft.primitive == "string":
            prop.type = "string"
        elif isinstance(ft, Map):
            prop = self.build_map_property(f, json_name, model_name)
        else:
            prop = self.schema_from_type(ft, model_name, json_name)
            self.set_property_metadata(prop, f)
        return json_name, model_description, prop

    def build_struct_property(
        self, f: StructField, json_name: str, model: Schema, model_name: str
    ) -> tuple[str, Schema]:
        ft = f.type
        flatten = f.embedded and (f.meta.json_name is None or f.meta.inline)
        if flatten and self.key_from(ft) not in self._in_progress:
            self.merge_embedded(ft, model)
            return "", Schema()

        prop = self.schema_from_type(ft, model_name, json_name)
        self.set_property_metadata(prop, f)
        return json_name, prop

    def merge_embedded(self, t: Struct, model: Schema) -> None:
        """Flatten an embedded struct's properties into ``model``.

        The struct is built in a separate registry and the models it
        references are carried over. Its own definition is dropped unless
        one of its properties refers back to it.
        """
        sub = DefinitionBuilder(config=self.config, in_progress=self._in_progress)
        sub_key = sub.key_from(t)
        sub.add_model(t, sub_key)
        sub_model = sub.definitions.get(sub_key)
        if sub_model is not None:
            required = sub_model.required or []
            for name, prop in (sub_model.properties or {}).items():
                model.properties[name] = prop
                if name in required and name not in model.required:
                    model.required.append(name)
        carried = {key: d for key, d in sub.definitions.items() if key != sub_key}
        for key, definition in carried.items():
            if key not in self.definitions:
                self.definitions[key] = definition
        if sub_model is not None and sub_key not in self.definitions:
            ref = DEFINITIONS_PREFIX + sub_key
            if any(_refers_to(s, ref) for s in [*(sub_model.properties or {}).values(), *carried.values()]):
                self.definitions[sub_key] = sub_model

    def build_array_property(self, f: StructField, json_name: str, model_name: str) -> Schema:
        prop = Schema()
        self.set_property_metadata(prop, f)
        if is_bytes(f.type):
            prop.type = "string"
            return prop
        prop.type = "array"
        prop.items = self.schema_from_type(f.type.elem, model_name, json_name)
        return prop

    def build_map_property(self, f: StructField, json_name: str, model_name: str) -> Schema:
        prop = Schema()
        self.set_property_metadata(prop, f)
        prop.type = "object"
        if not isinstance(unwrap_pointer(f.type.value), AnyType):
            prop.additional_properties = self.schema_from_type(f.type.value, model_name, json_name)
        return prop

    def set_property_metadata(self, prop: Schema, f: StructField) -> None:
        meta = f.meta
        if meta.description:
            prop.description = meta.description
        if meta.default is not None:
            prop.default = coerce_literal(f.type, meta.default)
        if meta.enum:
            prop.enum = list(meta.enum)
        if meta.minimum is not None:
            prop.minimum = coerce_literal(f.type, meta.minimum)
        if meta.maximum is not None:
            prop.maximum = coerce_literal(f.type, meta.maximum)
        if meta.min_length is not None:
            prop.min_length = meta.min_length
        if meta.max_length is not None:
            prop.max_length = meta.max_length
        if meta.pattern:
            prop.pattern = meta.pattern
        if meta.unique is not None:
            prop.unique_items = meta.unique
        if meta.read_only is not None:
            prop.read_only = meta.read_only
        if meta.type_override:
            if meta.type_override.startswith("[]"):
                prop.type = "array"
                prop.items = Schema(type=meta.type_override[2:])
            else:
                prop.type = meta.type_override


def _refers_to(schema: Schema | None, ref: str) -> bool:
    if schema is None:
        return False
    if schema.ref == ref:
        return True
    if _refers_to(schema.items, ref) or _refers_to(schema.additional_properties, ref):
        return True
    return any(_refers_to(p, ref) for p in (schema.properties or {}).values())
