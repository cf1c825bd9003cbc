"""Turn declared responses into Swagger response objects."""

import logging
from http import HTTPStatus

from api_doc_builder.builder.definitions import DefinitionBuilder
from api_doc_builder.service.base import HeaderSpec, ResponseSpec
from api_doc_builder.service.types import STRING, Array, describe, is_bytes, unwrap_pointer
from api_doc_builder.spec.errors import ReferenceConflictError
from api_doc_builder.spec.models import Header, Response

logger = logging.getLogger(__name__)

RESPONSES_PREFIX = "#/responses/"


def status_text(code: int) -> str:
    try:
        return HTTPStatus(code).phrase
    except ValueError:
        return ""


class ResponseBuilder:
    """Builds response objects and tracks the shared ones by reference name."""

    def __init__(self, definitions: DefinitionBuilder):
        self.definitions = definitions
        self._shared: dict[str, ResponseSpec] = {}

    def build(self, spec: ResponseSpec) -> Response:
        if not spec.ref_name:
            return self.create_response(spec)

        existing = self._shared.get(spec.ref_name)
        if existing is None:
            self._shared[spec.ref_name] = spec
            logger.debug("shared response %s", spec.ref_name)
        elif existing is not spec:
            raise ReferenceConflictError("response", spec.ref_name)
        return Response(ref=RESPONSES_PREFIX + spec.ref_name)

    def shared(self) -> dict[str, Response]:
        """Entries of the document's ``responses`` section."""
        return {name: self.create_response(spec) for name, spec in self._shared.items()}

    def create_response(self, spec: ResponseSpec) -> Response:
        r = Response(description=spec.message or status_text(spec.code))
        if spec.model is not None:
            r.schema_ = self.definitions.schema_from_type(describe(spec.model))
        if spec.headers:
            r.headers = {name: self.create_header(h) for name, h in spec.headers.items()}
        return r

    def create_header(self, spec: HeaderSpec) -> Header:
        h = Header(description=spec.description or None)
        t = unwrap_pointer(describe(spec.sample) if spec.sample is not None else STRING)
        if isinstance(t, Array) and not is_bytes(t):
            h.type = "array"
            h.items = self.definitions.simple_items(t.elem)
        else:
            h.type, h.format = self.definitions.simple_type(t)
        return h
