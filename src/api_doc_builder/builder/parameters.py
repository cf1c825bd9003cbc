"""Turn declared parameters into Swagger parameter objects."""

import logging

from api_doc_builder.builder.definitions import DefinitionBuilder
from api_doc_builder.service.base import Param, ParamKind
from api_doc_builder.service.types import STRING, Array, TypeDescriptor, describe, is_bytes, unwrap_pointer
from api_doc_builder.spec.errors import ReferenceConflictError, UnclassifiableTypeError
from api_doc_builder.spec.models import Parameter

logger = logging.getLogger(__name__)

PARAMETERS_PREFIX = "#/parameters/"


def param_type(param: Param) -> TypeDescriptor:
    """The declared type, else the type of the sample or default, else string."""
    if param.data_type is not None:
        return param.data_type
    if param.sample is not None:
        return describe(param.sample)
    if param.default is not None:
        return describe(param.default)
    return STRING


class ParameterBuilder:
    """Builds parameter objects and tracks the shared ones by reference name."""

    def __init__(self, definitions: DefinitionBuilder):
        self.definitions = definitions
        self._shared: dict[str, Param] = {}

    def build(self, param: Param, pattern: str = "") -> Parameter:
        """A ``$ref`` for shared parameters, the full object otherwise.

        ``pattern`` is the regex taken from the route template for a path
        parameter of the same name.
        """
        if not param.ref_name:
            return self.create_parameter(param, pattern)

        existing = self._shared.get(param.ref_name)
        if existing is None:
            self._shared[param.ref_name] = param
            logger.debug("shared parameter %s", param.ref_name)
        elif existing is not param:
            raise ReferenceConflictError("parameter", param.ref_name)
        return Parameter(ref=PARAMETERS_PREFIX + param.ref_name)

    def shared(self) -> dict[str, Parameter]:
        """Entries of the document's ``parameters`` section."""
        return {name: self.create_parameter(param) for name, param in self._shared.items()}

    def create_parameter(self, param: Param, pattern: str = "") -> Parameter:
        p = Parameter(
            name=param.name,
            in_=param.location.value,
            description=param.description or None,
            required=True if param.required else None,
        )
        if param.location == ParamKind.BODY:
            if param.custom_schema is not None:
                p.schema_ = param.custom_schema.model_copy(deep=True)
            else:
                p.schema_ = self.definitions.schema_from_type(param_type(param))
            return p

        if param.custom_schema is not None:
            p.type = param.custom_schema.type
            p.format = param.custom_schema.format
        else:
            self._set_simple_type(p, param)
        if param.data_format:
            if p.items is not None:
                p.items.format = param.data_format
            else:
                p.format = param.data_format

        if param.collection_format is not None:
            p.collection_format = param.collection_format.value
        p.default = param.default
        p.minimum = param.minimum
        p.maximum = param.maximum
        p.min_length = param.min_length
        p.max_length = param.max_length
        p.enum = list(param.enum) if param.enum else None
        p.pattern = param.pattern
        if not p.pattern and pattern and param.location == ParamKind.PATH:
            p.pattern = pattern
        return p

    def _set_simple_type(self, p: Parameter, param: Param) -> None:
        t = unwrap_pointer(param_type(param))
        multi = param.allow_multiple or (isinstance(t, Array) and not is_bytes(t))
        try:
            if multi:
                elem = t.elem if isinstance(t, Array) and not is_bytes(t) else t
                p.type = "array"
                p.items = self.definitions.simple_items(elem)
            else:
                p.type, p.format = self.definitions.simple_type(t)
        except UnclassifiableTypeError as e:
            raise UnclassifiableTypeError(
                f"{param.location.value} parameter {param.name!r}: {e.message}"
            ) from e
