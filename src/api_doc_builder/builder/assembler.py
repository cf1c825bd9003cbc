"""Assemble the complete Swagger document for a configuration."""

import logging

from api_doc_builder.builder.operations import OperationMapper
from api_doc_builder.config import Config
from api_doc_builder.spec.models import Document

logger = logging.getLogger(__name__)


def build_swagger(config: Config) -> Document:
    """Build one document from every service in ``config``.

    Each service's routes are copied up front, so routes added or removed
    during the build do not show up in it. Any DocBuildError aborts the
    build and no document is returned.
    """
    snapshot = [(service, service.routes()) for service in config.web_services]

    mapper = OperationMapper(config)
    for service, routes in snapshot:
        mapper.add_routes(service, routes)

    document = Document(
        paths=mapper.paths,
        definitions=mapper.definitions.definitions,
        parameters=mapper.parameters.shared() or None,
        responses=mapper.responses.shared() or None,
    )
    if config.post_build_handler is not None:
        config.post_build_handler(document)

    logger.info(
        "built document: %d paths, %d definitions, %d shared parameters, %d shared responses",
        len(document.paths),
        len(document.definitions),
        len(document.parameters or {}),
        len(document.responses or {}),
    )
    return document
