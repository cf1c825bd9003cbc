import pytest

from api_doc_builder.service.base import KEY_OPENAPI_TAGS, Param, ParamKind, ResponseSpec, Route, WebService
from api_doc_builder.service.types import INT
from api_doc_builder.spec.errors import InvalidPathError
from api_doc_builder.spec.models import Document, Operation, Parameter, PathItem, Response, Schema


class TestParam:
    def test_path_param_is_required(self):
        p = Param.path("id", "identifier", data_type=INT)
        assert p.location == ParamKind.PATH
        assert p.required is True
        assert p.data_type is INT

    def test_query_param_defaults(self):
        p = Param.query("q")
        assert p.required is False
        assert p.description == ""
        assert p.ref_name is None

    def test_body_param(self):
        p = Param.body()
        assert p.name == "body"
        assert p.required is True

    def test_segment(self):
        assert Param.path("id").segment() == "{id}"
        assert Param.path("id", pattern="[0-9]+").segment() == "{id:[0-9]+}"


class TestRoute:
    def test_tags_from_metadata(self):
        route = Route(method="GET", metadata={KEY_OPENAPI_TAGS: ["users"]})
        assert route.tags() == ["users"]
        assert Route(method="GET").tags() is None

    def test_response_headers(self):
        spec = ResponseSpec(code=200).with_header("X-Rate-Limit", "limit", 1)
        assert spec.headers["X-Rate-Limit"].sample == 1


class TestWebService:
    def test_routes_are_snapshots(self):
        ws = WebService("/users")
        ws.get("/")
        snapshot = ws.routes()
        ws.post("/")
        assert len(snapshot) == 1
        assert len(ws.routes()) == 2

    def test_full_path(self):
        ws = WebService("/users/")
        route = ws.get("/{id}")
        assert ws.full_path(route) == "/users/{id}"
        assert route.method == "GET"

    def test_invalid_route_template(self):
        ws = WebService("/users")
        with pytest.raises(InvalidPathError):
            ws.get("/{id")
        assert ws.routes() == []

    def test_invalid_root(self):
        with pytest.raises(InvalidPathError):
            WebService("/users/{org")

    def test_service_params_must_be_path_params(self):
        with pytest.raises(ValueError):
            WebService("/users", path_params=[Param.query("q")])


class TestDocument:
    def test_aliases(self):
        doc = Document(
            base_path="/api",
            paths={
                "/users": PathItem(
                    get=Operation(
                        operation_id="findUsers",
                        parameters=[Parameter(name="q", in_="query", type="string", collection_format="csv")],
                        responses={"200": Response(description="OK", schema_=Schema(ref="#/definitions/User"))},
                    )
                )
            },
        )
        data = doc.to_dict()
        assert data["basePath"] == "/api"
        op = data["paths"]["/users"]["get"]
        assert op["operationId"] == "findUsers"
        assert op["parameters"][0] == {"name": "q", "in": "query", "type": "string", "collectionFormat": "csv"}
        assert op["responses"]["200"]["schema"] == {"$ref": "#/definitions/User"}

    def test_vendor_extensions_are_kept(self):
        doc = Document.model_validate({"swagger": "2.0", "paths": {}, "x-generator": "api-doc-builder"})
        assert doc.to_dict()["x-generator"] == "api-doc-builder"

    def test_parses_aliased_input(self):
        schema = Schema.model_validate({"$ref": "#/definitions/User", "readOnly": True})
        assert schema.ref == "#/definitions/User"
        assert schema.read_only is True

    def test_path_item_operations(self):
        item = PathItem(post=Operation(), get=Operation())
        assert list(item.operations()) == ["get", "post"]
