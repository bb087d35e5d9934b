from pathlib import Path

import pytest

from route_swagger.builder import build_swagger
from route_swagger.document.io import (
    detect_format,
    dump_document,
    dumps_document,
    format_for_path,
    load_document,
)
from route_swagger.errors import DocumentFormatError
from sample_api import hackage_api, user_api

FIXTURES = Path(__file__).parent / "fixtures"


class TestFormats:
    def test_detect_json(self):
        assert detect_format('{"swagger": "2.0"}') == "json"

    def test_detect_yaml(self):
        assert detect_format("swagger: '2.0'\npaths: {}\n") == "yaml"

    def test_detect_invalid(self):
        with pytest.raises(DocumentFormatError):
            detect_format("key: [invalid\n")

    def test_format_for_path(self):
        assert format_for_path(Path("swagger.json")) == "json"
        assert format_for_path(Path("swagger.YAML")) == "yaml"
        assert format_for_path(Path("swagger.yml")) == "yaml"
        assert format_for_path(Path("swagger.txt")) == "json"
        assert format_for_path(Path("swagger.json"), "yaml") == "yaml"

    def test_unsupported_format(self):
        with pytest.raises(DocumentFormatError):
            dumps_document(build_swagger(user_api), "xml")


class TestLoadDocument:
    def test_petstore_operations(self):
        doc = load_document(FIXTURES / "petstore.yaml")
        assert doc.info.title == "Petstore"
        assert doc.host == "petstore.example.com"
        assert [(p, m) for p, m, _ in doc.operations()] == [
            ("/pets", "get"),
            ("/pets", "post"),
            ("/pets/{petId}", "get"),
        ]

    def test_petstore_parameters(self):
        doc = load_document(FIXTURES / "petstore.yaml")
        limit = doc.paths["/pets"].get.parameters[0]
        assert limit.location == "query"
        assert limit.required is False
        assert limit.param_schema == {"type": "integer", "format": "int32"}
        body = doc.paths["/pets"].post.parameters[0]
        assert body.param_schema == {"$ref": "#/definitions/Pet"}
        assert doc.paths["/pets/{petId}"].get.responses[404].description == "`petId` not found"

    def test_default_response_key(self):
        doc = load_document(FIXTURES / "petstore.yaml")
        responses = doc.paths["/pets"].get.responses
        assert list(responses) == [200, "default"]
        assert responses["default"].description == "unexpected error"
        assert list(doc.to_dict()["paths"]["/pets"]["get"]["responses"]) == ["200", "default"]

    def test_not_swagger(self, tmp_path):
        f = tmp_path / "doc.md"
        f.write_text("# API Docs\nSome text")
        with pytest.raises(DocumentFormatError):
            load_document(f)

    def test_openapi3_rejected(self, tmp_path):
        f = tmp_path / "openapi.json"
        f.write_text('{"openapi": "3.0.3", "paths": {}}')
        with pytest.raises(DocumentFormatError):
            load_document(f)


class TestDumpDocument:
    @pytest.mark.parametrize("name", ["swagger.json", "swagger.yaml"])
    def test_dump_then_load(self, tmp_path, name):
        doc = build_swagger(hackage_api)
        target = tmp_path / "out" / name
        dump_document(doc, target)
        assert load_document(target) == doc

    def test_json_is_indented(self, tmp_path):
        target = tmp_path / "swagger.json"
        assert dump_document(build_swagger(user_api), target) == "json"
        assert target.read_text(encoding="utf-8").startswith('{\n  "swagger": "2.0"')
