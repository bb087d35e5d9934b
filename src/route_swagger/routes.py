"""Route tree: a runtime description of an API's shape.

A route tree is built once by the caller and never mutated. Inner nodes
(path segments, captures, query/header parameters, request bodies) wrap a
single child; ``Choice`` joins two independent sub-APIs; leaves describe one
HTTP method's request/response contract.

Example::

    api = choice(
        path("users", get([JSON], list[User])),
        path("user", capture("username", str, get([JSON], User))),
    )
"""

from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

JSON = "application/json;charset=utf-8"
PLAIN_TEXT = "text/plain;charset=utf-8"
OCTET_STREAM = "application/octet-stream"
FORM_URLENCODED = "application/x-www-form-urlencoded"

METHODS = ("get", "put", "post", "delete", "options", "head", "patch")


class _Node(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


def _normalize_method(value: str) -> str:
    method = value.lower()
    if method not in METHODS:
        raise ValueError(f"unsupported HTTP method: {value!r}")
    return method


class ResponseHeader(_Node):
    """A header returned alongside a response."""

    name: str
    value_type: Any


class StatusResponse(_Node):
    """One of the possible outcomes of a multi-status leaf."""

    status: int = Field(ge=0)
    response_type: Any = None


class Leaf(_Node):
    """A single operation: method, status, media types and payload types.

    ``response_type=None`` means "no content": the status then defaults to 204
    instead of 200 and the response carries no schema.
    """

    method: str
    content_types: tuple[str, ...] = ()
    response_type: Any = None
    status: int | None = Field(default=None, ge=0)
    response_headers: tuple[ResponseHeader, ...] = ()
    request_body_type: Any = None

    @field_validator("method")
    @classmethod
    def _check_method(cls, value: str) -> str:
        return _normalize_method(value)

    @model_validator(mode="after")
    def _check_content_types(self):
        has_body = self.response_type is not None or self.request_body_type is not None
        if has_body and not self.content_types:
            raise ValueError("a leaf with a body needs at least one content type")
        return self

    @property
    def effective_status(self) -> int:
        if self.status is not None:
            return self.status
        return 204 if self.response_type is None else 200


class MultiStatusLeaf(_Node):
    """A single operation that may answer with one of several statuses."""

    method: str
    content_types: tuple[str, ...]
    responses: tuple[StatusResponse, ...]

    @field_validator("method")
    @classmethod
    def _check_method(cls, value: str) -> str:
        return _normalize_method(value)

    @model_validator(mode="after")
    def _check_responses(self):
        if not self.responses:
            raise ValueError("a multi-status leaf needs at least one response")
        statuses = [r.status for r in self.responses]
        duplicates = sorted({s for s in statuses if statuses.count(s) > 1})
        if duplicates:
            raise ValueError(f"duplicate statuses: {duplicates}")
        return self


class RawEndpoint(_Node):
    """An opaque handler; documented as a path with no operations."""


class PathSegment(_Node):
    literal: str
    child: "Route"


class Capture(_Node):
    name: str
    value_type: Any
    child: "Route"


class QueryParam(_Node):
    """A query string parameter; ``multi`` accepts the parameter repeatedly."""

    name: str
    value_type: Any
    child: "Route"
    multi: bool = False


class QueryFlag(_Node):
    name: str
    child: "Route"


class HeaderParam(_Node):
    name: str
    value_type: Any
    child: "Route"


class RequestBody(_Node):
    content_types: tuple[str, ...] = Field(min_length=1)
    body_type: Any
    child: "Route"


class Choice(_Node):
    """Two sub-APIs served side by side under the same root."""

    left: "Route"
    right: "Route"


class PassThrough(_Node):
    """A wrapper that does not change the document (auth context, vault, ...)."""

    child: "Route"
    label: str = ""


Route = Union[
    Leaf,
    MultiStatusLeaf,
    RawEndpoint,
    PathSegment,
    Capture,
    QueryParam,
    QueryFlag,
    HeaderParam,
    RequestBody,
    Choice,
    PassThrough,
]

for _model in (PathSegment, Capture, QueryParam, QueryFlag, HeaderParam, RequestBody, Choice, PassThrough):
    _model.model_rebuild()


def _verb(method: str):
    def make(content_types, response_type=None, status: int | None = None, headers=()) -> Leaf:
        return Leaf(
            method=method,
            content_types=tuple(content_types),
            response_type=response_type,
            status=status,
            response_headers=tuple(ResponseHeader(name=n, value_type=t) for n, t in headers),
        )

    make.__name__ = method
    make.__doc__ = f"A {method.upper()} leaf. ``headers`` is a sequence of (name, type) pairs."
    return make


get = _verb("get")
put = _verb("put")
post = _verb("post")
delete = _verb("delete")
patch = _verb("patch")
head = _verb("head")
options = _verb("options")


def multi_status(method: str, content_types, responses) -> MultiStatusLeaf:
    """A leaf answering with any of ``responses``, a sequence of (status, type) pairs."""
    return MultiStatusLeaf(
        method=method,
        content_types=tuple(content_types),
        responses=tuple(StatusResponse(status=s, response_type=t) for s, t in responses),
    )


def path(literal: str, child: Route) -> PathSegment:
    return PathSegment(literal=literal, child=child)


def capture(name: str, value_type: Any, child: Route) -> Capture:
    return Capture(name=name, value_type=value_type, child=child)


def query_param(name: str, value_type: Any, child: Route) -> QueryParam:
    return QueryParam(name=name, value_type=value_type, child=child)


def query_params(name: str, value_type: Any, child: Route) -> QueryParam:
    return QueryParam(name=name, value_type=value_type, child=child, multi=True)


def query_flag(name: str, child: Route) -> QueryFlag:
    return QueryFlag(name=name, child=child)


def header(name: str, value_type: Any, child: Route) -> HeaderParam:
    return HeaderParam(name=name, value_type=value_type, child=child)


def request_body(content_types, body_type: Any, child: Route) -> RequestBody:
    return RequestBody(content_types=tuple(content_types), body_type=body_type, child=child)


def passthrough(child: Route, label: str = "") -> PassThrough:
    return PassThrough(child=child, label=label)


def raw() -> RawEndpoint:
    return RawEndpoint()


def choice(*routes: Route) -> Route:
    """Join two or more sub-APIs; ``choice(a, b, c)`` is ``Choice(a, Choice(b, c))``."""
    if len(routes) < 2:
        raise ValueError("choice() needs at least two routes")
    result = routes[-1]
    for route in reversed(routes[:-1]):
        result = Choice(left=route, right=result)
    return result
