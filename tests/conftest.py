import pytest

from api_doc_builder.config import Config
from api_doc_builder.service.base import KEY_OPENAPI_TAGS, MIME_JSON, MIME_XML, Param, ResponseSpec, WebService
from api_doc_builder.service.types import INT, STRING, Array, Struct


@pytest.fixture
def user_model() -> Struct:
    return (
        Struct("main.User")
        .add("ID", STRING, json_name="id", description="identifier of the user")
        .add("Name", STRING, json_name="name", description="name of the user", default="john")
        .add("Age", INT, json_name="age", description="age of the user", default="21")
    )


@pytest.fixture
def user_service(user_model) -> WebService:
    """A CRUD service for users sharing one path parameter and two responses."""
    ws = WebService("/users", consumes=[MIME_JSON, MIME_XML], produces=[MIME_JSON, MIME_XML])
    tags = {KEY_OPENAPI_TAGS: ["users"]}

    user_id = Param.path("user-id", "identifier of the user", default="1", ref_name="UID")
    not_found = ResponseSpec(code=404, message="Not Found", ref_name="UserNotFound")
    bad_id = ResponseSpec(code=400, message="Bad user id", ref_name="BadUserID")

    ws.get(
        "/",
        operation="findAllUsers",
        doc="get all users",
        metadata=tags,
        write_sample=Array(user_model),
        responses=[ResponseSpec(code=200, message="OK", model=Array(user_model))],
    )
    ws.get(
        "/{user-id}",
        operation="findUser",
        doc="get a user",
        metadata=tags,
        params=[user_id],
        write_sample=user_model,
        responses=[ResponseSpec(code=200, message="OK", model=user_model), not_found],
    )
    ws.put(
        "/{user-id}",
        operation="updateUser",
        doc="update a user",
        metadata=tags,
        params=[user_id, Param.body(data_type=user_model)],
        responses=[bad_id],
    )
    ws.put("", operation="createUser", doc="create a user", metadata=tags, read_sample=user_model)
    ws.delete(
        "/{user-id}",
        operation="removeUser",
        doc="delete a user",
        metadata=tags,
        params=[user_id],
        responses=[bad_id],
    )
    return ws


@pytest.fixture
def user_config(user_service) -> Config:
    return Config(web_services=[user_service])
