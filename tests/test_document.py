import json

import pytest

from route_swagger.document.model import (
    Document,
    Info,
    License,
    Operation,
    Parameter,
    PathItem,
    Response,
    Tag,
    join_path,
)
from route_swagger.errors import DuplicateRouteError


def _doc(path="/", method="get", definitions=None):
    item = PathItem()
    item.set_operation(method, Operation(responses={200: Response()}))
    return Document(paths={path: item}, definitions=definitions or {})


class TestJoinPath:
    def test_onto_root(self):
        assert join_path("todo", "/") == "/todo"

    def test_onto_path(self):
        assert join_path("todo", "/{id}") == "/todo/{id}"

    def test_strips_slashes(self):
        assert join_path("/api/v1/", "/users/") == "/api/v1/users"


class TestSerialization:
    def test_empty_document(self):
        assert Document().to_dict() == {"swagger": "2.0", "info": {"title": "", "version": ""}, "paths": {}}

    def test_info_fields(self):
        doc = Document(info=Info(title="User API", version="1.0", license=License(name="MIT")))
        assert doc.to_dict()["info"] == {"title": "User API", "version": "1.0", "license": {"name": "MIT"}}

    def test_status_keys_are_strings(self):
        assert list(_doc().to_dict()["paths"]["/"]["get"]["responses"]) == ["200"]

    def test_body_parameter_keeps_schema_nested(self):
        param = Parameter(name="body", location="body", required=True, param_schema={"$ref": "#/definitions/X"})
        assert param.model_dump(mode="json", by_alias=True) == {
            "name": "body",
            "in": "body",
            "required": True,
            "schema": {"$ref": "#/definitions/X"},
        }

    def test_optional_parameter_omits_required(self):
        param = Parameter(name="q", location="query", param_schema={"type": "string"})
        assert param.model_dump(mode="json", by_alias=True) == {"name": "q", "in": "query", "type": "string"}

    def test_inline_parameter_is_loaded(self):
        param = Parameter.model_validate({"name": "id", "in": "path", "required": True, "type": "integer"})
        assert param.location == "path"
        assert param.param_schema == {"type": "integer"}

    def test_to_json(self):
        data = json.loads(_doc().to_json(indent=2))
        assert data["paths"]["/"]["get"]["responses"]["200"] == {"description": ""}

    def test_round_trip_through_dict(self):
        doc = _doc(definitions={"X": {"type": "string"}})
        doc.tags.append(Tag(name="x"))
        doc.paths["/"].get.parameters.append(
            Parameter(name="id", location="path", required=True, param_schema={"type": "string"})
        )
        assert Document.from_dict(doc.to_dict()) == doc


class TestMerge:
    def test_different_paths(self):
        doc = _doc("/a").merge(_doc("/b"))
        assert set(doc.paths) == {"/a", "/b"}

    def test_same_path_different_methods(self):
        doc = _doc("/", "get").merge(_doc("/", "post"))
        assert [m for m, _ in doc.paths["/"].operations()] == ["get", "post"]

    def test_same_path_and_method(self):
        with pytest.raises(DuplicateRouteError):
            _doc("/", "get").merge(_doc("/", "get"))

    def test_definitions_later_wins(self):
        doc = _doc("/a", definitions={"X": {"type": "string"}}).merge(
            _doc("/b", definitions={"X": {"type": "integer"}, "Y": {"type": "boolean"}})
        )
        assert doc.definitions == {"X": {"type": "integer"}, "Y": {"type": "boolean"}}

    def test_empty_path_item_merges(self):
        doc = Document(paths={"/": PathItem()}).merge(_doc("/"))
        assert doc.paths["/"].get is not None


class TestOperations:
    def test_lists_every_operation(self):
        doc = _doc("/a").merge(_doc("/a", "delete")).merge(_doc("/b"))
        assert [(p, m) for p, m, _ in doc.operations()] == [("/a", "get"), ("/a", "delete"), ("/b", "get")]

    def test_prepend_path(self):
        doc = _doc("/{id}").prepend_path("items")
        assert list(doc.paths) == ["/items/{id}"]
