"""Build configuration: the services to document and the customization hooks."""

from typing import Callable

from pydantic import BaseModel, ConfigDict, Field

from api_doc_builder.service.base import WebService
from api_doc_builder.service.types import TypeDescriptor
from api_doc_builder.spec.models import Document

DEFAULT_API_PATH = "/apidocs.json"


class Config(BaseModel):
    """Everything a document build reads.

    model_type_name_handler: returns the definition key for a type, or None
        to keep the qualified name.
    schema_format_handler: returns the format for a type name, or None to
        fall back to the built-in table.
    post_build_handler: receives the finished document and may change it,
        e.g. to add info, tags or security definitions.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    web_services: list[WebService] = Field(default_factory=list)
    api_path: str = DEFAULT_API_PATH
    consumes: list[str] = Field(default_factory=list)
    produces: list[str] = Field(default_factory=list)
    model_type_name_handler: Callable[[TypeDescriptor], str | None] | None = None
    schema_format_handler: Callable[[str], str | None] | None = None
    post_build_handler: Callable[[Document], None] | None = None
