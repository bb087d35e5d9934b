"""Swagger 2.0 document model.

The builder assembles these models; ``Document.to_dict()`` renders them in
Swagger field names, leaving out optional fields that are unset or empty.
"""

import json
from typing import Any, Iterator, Literal

from pydantic import BaseModel, ConfigDict, Field, model_serializer, model_validator

from route_swagger.errors import DuplicateRouteError

Schema = dict[str, Any]

PARAMETER_FIELDS = {"name", "in", "required", "description", "allowEmptyValue", "schema"}

# Schema fields are dropped only when unset; an empty schema means "any value".
SCHEMA_FIELDS = ("schema", "param_schema", "response_schema")

ResponseKey = int | Literal["default"]


def _drop_empty(data: dict, keep: tuple[str, ...] = ()) -> dict:
    return {k: v for k, v in data.items() if v is not None and (k in keep or (v != [] and v != {}))}


def join_path(piece: str, path: str) -> str:
    """Join a path fragment in front of a path: ``("todo", "/{id}") -> "/todo/{id}"``."""
    piece = piece.strip("/")
    rest = path.strip("/")
    if not rest:
        return "/" + piece
    if not piece:
        return "/" + rest
    return f"/{piece}/{rest}"


class SwaggerModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    @model_serializer(mode="wrap")
    def _serialize(self, handler):
        return _drop_empty(handler(self))


class License(SwaggerModel):
    name: str
    url: str | None = None


class Info(SwaggerModel):
    title: str = ""
    version: str = ""
    description: str | None = None
    license: License | None = None


class Tag(SwaggerModel):
    name: str
    description: str | None = None


class Parameter(SwaggerModel):
    """An operation parameter.

    Non-body parameters keep their schema in ``param_schema`` but render it
    inline, the way Swagger 2.0 expects (``{"name": ..., "in": ..., "type": ...}``).
    """

    name: str
    location: Literal["path", "query", "header", "body", "formData"] = Field(alias="in")
    required: bool = False
    description: str | None = None
    allow_empty_value: bool | None = Field(default=None, alias="allowEmptyValue")
    param_schema: Schema = Field(default_factory=dict, alias="schema")

    @model_validator(mode="before")
    @classmethod
    def _collect_inline_schema(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "schema" in data or "param_schema" in data:
            return data
        if data.get("in", data.get("location")) == "body":
            return data
        known = PARAMETER_FIELDS | {"location", "allow_empty_value"}
        schema = {k: v for k, v in data.items() if k not in known}
        rest = {k: v for k, v in data.items() if k in known}
        return {**rest, "schema": schema}

    @model_serializer(mode="wrap")
    def _serialize(self, handler):
        data = _drop_empty(handler(self), SCHEMA_FIELDS if self.location == "body" else ())
        if not self.required:
            data.pop("required", None)
        if self.location != "body":
            data.update(data.pop("schema", None) or data.pop("param_schema", None) or {})
        return data


class Response(SwaggerModel):
    description: str = ""
    response_schema: Schema | None = Field(default=None, alias="schema")
    headers: dict[str, Schema] = Field(default_factory=dict)

    @model_serializer(mode="wrap")
    def _serialize(self, handler):
        return _drop_empty(handler(self), SCHEMA_FIELDS)


class Operation(SwaggerModel):
    tags: list[str] = Field(default_factory=list)
    summary: str | None = None
    description: str | None = None
    operation_id: str | None = Field(default=None, alias="operationId")
    consumes: list[str] = Field(default_factory=list)
    produces: list[str] = Field(default_factory=list)
    parameters: list[Parameter] = Field(default_factory=list)
    responses: dict[ResponseKey, Response] = Field(default_factory=dict)


class PathItem(SwaggerModel):
    get: Operation | None = None
    put: Operation | None = None
    post: Operation | None = None
    delete: Operation | None = None
    options: Operation | None = None
    head: Operation | None = None
    patch: Operation | None = None

    def operations(self) -> Iterator[tuple[str, Operation]]:
        for method in ("get", "put", "post", "delete", "options", "head", "patch"):
            operation = getattr(self, method)
            if operation is not None:
                yield method, operation

    def operation(self, method: str) -> Operation | None:
        return getattr(self, method)

    def set_operation(self, method: str, operation: Operation) -> None:
        setattr(self, method, operation)


class Document(SwaggerModel):
    """A Swagger 2.0 document."""

    swagger: str = "2.0"
    info: Info = Field(default_factory=Info)
    host: str | None = None
    base_path: str | None = Field(default=None, alias="basePath")
    schemes: list[str] = Field(default_factory=list)
    paths: dict[str, PathItem] = Field(default_factory=dict)
    definitions: dict[str, Schema] = Field(default_factory=dict)
    tags: list[Tag] = Field(default_factory=list)

    @model_serializer(mode="wrap")
    def _serialize(self, handler):
        data = _drop_empty(handler(self))
        data.setdefault("paths", {})
        return data

    def operations(self) -> Iterator[tuple[str, str, Operation]]:
        """Yield ``(path, method, operation)`` for every operation in the document."""
        for path, item in self.paths.items():
            for method, operation in item.operations():
                yield path, method, operation

    def merge(self, other: "Document") -> "Document":
        """Union ``other`` into this document in place and return it.

        Definitions from ``other`` win on name collisions; tags are appended.
        Two operations on the same path and method raise ``DuplicateRouteError``.
        """
        for path, item in other.paths.items():
            mine = self.paths.get(path)
            if mine is None:
                self.paths[path] = item
                continue
            for method, operation in item.operations():
                if mine.operation(method) is not None:
                    raise DuplicateRouteError(path, method)
                mine.set_operation(method, operation)
        self.definitions.update(other.definitions)
        self.tags.extend(other.tags)
        return self

    def prepend_path(self, piece: str) -> "Document":
        self.paths = {join_path(piece, path): item for path, item in self.paths.items()}
        return self

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self, indent: int | None = None) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: dict) -> "Document":
        return cls.model_validate(data)
