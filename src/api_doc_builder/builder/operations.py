"""Fold the routes of web services into Swagger path items."""

import logging
from http import HTTPStatus

from api_doc_builder.builder.definitions import DefinitionBuilder
from api_doc_builder.builder.parameters import ParameterBuilder
from api_doc_builder.builder.paths import sanitize_path, strip_tags
from api_doc_builder.builder.responses import ResponseBuilder
from api_doc_builder.config import Config
from api_doc_builder.service.base import Param, ParamKind, Route, WebService
from api_doc_builder.service.types import describe
from api_doc_builder.spec.models import HTTP_METHODS, Operation, PathItem, Response

logger = logging.getLogger(__name__)


class OperationMapper:
    """Holds the per-build state: paths, definitions and shared objects.

    One mapper serves a single build. Routes from every service are folded
    into the same ``paths`` mapping, so services sharing a sanitized path
    fill the method slots of one path item.
    """

    def __init__(self, config: Config):
        self.config = config
        self.definitions = DefinitionBuilder(config=config)
        self.parameters = ParameterBuilder(self.definitions)
        self.responses = ResponseBuilder(self.definitions)
        self.paths: dict[str, PathItem] = {}

    def add_routes(self, service: WebService, routes: list[Route]) -> None:
        for route in routes:
            self.add_route(service, route)

    def add_route(self, service: WebService, route: Route) -> None:
        method = route.method.lower()
        full_path = service.full_path(route)
        if method not in HTTP_METHODS:
            logger.warning("skipping %s %s: method has no Swagger operation slot", route.method, full_path)
            return

        path, patterns = sanitize_path(full_path)
        item = self.paths.setdefault(path, PathItem())
        setattr(item, method, self.build_operation(service, route, patterns))
        logger.debug("mapped %s %s", route.method.upper(), path)

    def build_operation(self, service: WebService, route: Route, patterns: dict[str, str]) -> Operation:
        op = Operation(
            tags=route.tags(),
            summary=strip_tags(route.doc) or None,
            description=route.notes or None,
            operation_id=route.operation or None,
            consumes=route.consumes or service.consumes or self.config.consumes or None,
            produces=route.produces or service.produces or self.config.produces or None,
            deprecated=True if route.deprecated else None,
            security=route.security or None,
        )

        parameters = []
        for param in service.path_params():
            parameters.append(self.parameters.build(param, patterns.get(param.name, "")))
        if route.read_sample is not None and not any(p.location == ParamKind.BODY for p in route.params):
            body = Param.body(data_type=describe(route.read_sample))
            parameters.append(self.parameters.build(body))
        for param in route.params:
            parameters.append(self.parameters.build(param, patterns.get(param.name, "")))
        op.parameters = parameters or None

        for spec in route.responses:
            built = self.responses.build(spec)
            # code 0 marks a response that only exists as the default
            if spec.code:
                op.responses[str(spec.code)] = built
            if spec.is_default:
                op.responses["default"] = built
        if not op.responses:
            op.responses[str(HTTPStatus.OK.value)] = Response(description=HTTPStatus.OK.phrase)

        if route.write_sample is not None:
            self.definitions.add_model_from(route.write_sample)
        return op
