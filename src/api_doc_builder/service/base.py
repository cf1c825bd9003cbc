"""Declarations of web services, routes, parameters and responses.

These are the inputs of a document build. They are authored once, when a
service is defined, and read (never modified) by the builders.
"""

from __future__ import annotations

import threading
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from api_doc_builder.builder.paths import concat_path, validate_template
from api_doc_builder.service.types import TypeDescriptor
from api_doc_builder.spec.models import Schema

# Route metadata key holding the list of tags for the operation
KEY_OPENAPI_TAGS = "openapi.tags"

MIME_JSON = "application/json"
MIME_XML = "application/xml"


class ParamKind(str, Enum):
    PATH = "path"
    QUERY = "query"
    BODY = "body"
    HEADER = "header"
    FORM = "formData"


class CollectionFormat(str, Enum):
    CSV = "csv"  # foo,bar
    SSV = "ssv"  # foo bar
    TSV = "tsv"  # foo\tbar
    PIPES = "pipes"  # foo|bar
    MULTI = "multi"  # foo=bar&foo=baz, query and form only


class Param(BaseModel):
    """A documented request parameter.

    The type comes from ``data_type`` when given, else from ``sample``,
    else it is a string. Setting ``ref_name`` shares the parameter through
    the document's ``parameters`` section.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    location: ParamKind
    description: str = ""
    required: bool = False
    data_type: TypeDescriptor | None = None
    sample: Any = None
    custom_schema: Schema | None = None
    data_format: str | None = None
    default: Any = None
    allow_multiple: bool = False
    collection_format: CollectionFormat | None = None
    minimum: Any = None
    maximum: Any = None
    min_length: int | None = None
    max_length: int | None = None
    pattern: str | None = None
    enum: list[Any] | None = None
    ref_name: str | None = None

    @classmethod
    def path(cls, name: str, description: str = "", **kwargs: Any) -> "Param":
        kwargs.setdefault("required", True)
        return cls(name=name, location=ParamKind.PATH, description=description, **kwargs)

    @classmethod
    def query(cls, name: str, description: str = "", **kwargs: Any) -> "Param":
        return cls(name=name, location=ParamKind.QUERY, description=description, **kwargs)

    @classmethod
    def header(cls, name: str, description: str = "", **kwargs: Any) -> "Param":
        return cls(name=name, location=ParamKind.HEADER, description=description, **kwargs)

    @classmethod
    def body(cls, name: str = "body", description: str = "", **kwargs: Any) -> "Param":
        kwargs.setdefault("required", True)
        return cls(name=name, location=ParamKind.BODY, description=description, **kwargs)

    @classmethod
    def form(cls, name: str, description: str = "", **kwargs: Any) -> "Param":
        return cls(name=name, location=ParamKind.FORM, description=description, **kwargs)

    def segment(self) -> str:
        """The path template segment for this parameter, e.g. ``{id:[0-9]+}``."""
        if self.pattern:
            return "{" + f"{self.name}:{self.pattern}" + "}"
        return "{" + self.name + "}"


class HeaderSpec(BaseModel):
    """A response header, typed from a representative sample."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    description: str = ""
    sample: Any = None


class ResponseSpec(BaseModel):
    """A documented response, not necessarily an error."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    code: int
    message: str = ""
    model: Any = None  # TypeDescriptor or a sample value
    headers: dict[str, HeaderSpec] = Field(default_factory=dict)
    is_default: bool = False
    ref_name: str | None = None

    def with_header(self, name: str, description: str, sample: Any) -> "ResponseSpec":
        self.headers[name] = HeaderSpec(description=description, sample=sample)
        return self


class Route(BaseModel):
    """One HTTP method bound to a path template, with its documentation."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    method: str
    path: str = ""
    operation: str = ""
    doc: str = ""
    notes: str = ""
    consumes: list[str] = Field(default_factory=list)
    produces: list[str] = Field(default_factory=list)
    params: list[Param] = Field(default_factory=list)
    responses: list[ResponseSpec] = Field(default_factory=list)
    read_sample: Any = None
    write_sample: Any = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    deprecated: bool = False
    security: list[dict[str, list[str]]] = Field(default_factory=list)

    def tags(self) -> list[str] | None:
        tags = self.metadata.get(KEY_OPENAPI_TAGS)
        if isinstance(tags, (list, tuple)):
            return list(tags)
        return None


class WebService:
    """A root path template plus an ordered collection of routes.

    The route list may be changed while documents are being built, so every
    read goes through ``routes()``, which returns a copy taken under a lock.
    """

    def __init__(
        self,
        root_path: str = "/",
        path_params: list[Param] | None = None,
        consumes: list[str] | None = None,
        produces: list[str] | None = None,
        doc: str = "",
        api_version: str = "",
        dynamic_routes: bool = False,
    ):
        validate_template(root_path or "/")
        self.root_path = root_path or "/"
        self._path_params: list[Param] = []
        self.consumes = list(consumes or [])
        self.produces = list(produces or [])
        self.doc = doc
        self.api_version = api_version
        self.dynamic_routes = dynamic_routes
        self._routes: list[Route] = []
        self._lock = threading.RLock()
        self.params(*(path_params or []))

    def params(self, *params: Param) -> "WebService":
        """Add path parameters shared by every route of this service."""
        for param in params:
            if param.location != ParamKind.PATH:
                raise ValueError(f"service parameter {param.name!r} must be a path parameter")
            self._path_params.append(param)
        return self

    def path_params(self) -> list[Param]:
        return list(self._path_params)

    def add_route(self, route: Route) -> Route:
        validate_template(route.path)
        with self._lock:
            self._routes.append(route)
        return route

    def remove_route(self, path: str, method: str) -> None:
        """Remove routes matching the full path and method."""
        if not self.dynamic_routes:
            raise RuntimeError("dynamic routes are not enabled")
        method = method.upper()
        with self._lock:
            self._routes = [
                r for r in self._routes
                if not (r.method.upper() == method and self.full_path(r) == path)
            ]

    def routes(self) -> list[Route]:
        with self._lock:
            return list(self._routes)

    def full_path(self, route: Route) -> str:
        return concat_path(self.root_path, route.path)

    def route(self, method: str, path: str = "", **kwargs: Any) -> Route:
        return self.add_route(Route(method=method.upper(), path=path, **kwargs))

    def get(self, path: str = "", **kwargs: Any) -> Route:
        return self.route("GET", path, **kwargs)

    def post(self, path: str = "", **kwargs: Any) -> Route:
        return self.route("POST", path, **kwargs)

    def put(self, path: str = "", **kwargs: Any) -> Route:
        return self.route("PUT", path, **kwargs)

    def patch(self, path: str = "", **kwargs: Any) -> Route:
        return self.route("PATCH", path, **kwargs)

    def delete(self, path: str = "", **kwargs: Any) -> Route:
        return self.route("DELETE", path, **kwargs)

    def head(self, path: str = "", **kwargs: Any) -> Route:
        return self.route("HEAD", path, **kwargs)

    def options(self, path: str = "", **kwargs: Any) -> Route:
        return self.route("OPTIONS", path, **kwargs)
