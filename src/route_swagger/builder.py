"""Build a Swagger document from a route tree.

Every node is documented bottom-up: its child is built first, then the node
adds its own contribution (a path fragment, a parameter, a default error
response) to every operation of the child's document. ``Choice`` merges the
documents of its two branches.
"""

import logging
from typing import Any

from route_swagger.document.model import Document, Operation, Parameter, PathItem, Response
from route_swagger.operations import (
    add_consumes,
    add_default_response_400,
    add_default_response_404,
    add_parameter,
)
from route_swagger.routes import (
    Capture,
    Choice,
    HeaderParam,
    Leaf,
    MultiStatusLeaf,
    PassThrough,
    PathSegment,
    QueryFlag,
    QueryParam,
    RawEndpoint,
    RequestBody,
    Route,
)
from route_swagger.schema.oracle import PydanticSchemaOracle, SchemaOracle

logger = logging.getLogger(__name__)


def build_swagger(route: Route, oracle: SchemaOracle | None = None) -> Document:
    """Generate a Swagger document for a route tree.

    ``oracle`` derives the schemas of parameter, body and response types;
    the default uses pydantic.
    """
    doc = _build(route, oracle or PydanticSchemaOracle())
    logger.debug("built document with %d paths and %d definitions", len(doc.paths), len(doc.definitions))
    return doc


def _build(route: Route, oracle: SchemaOracle) -> Document:
    if isinstance(route, Leaf):
        return _build_leaf(route, oracle)
    elif isinstance(route, MultiStatusLeaf):
        return _build_multi_status(route, oracle)
    elif isinstance(route, RawEndpoint):
        return Document(paths={"/": PathItem()})
    elif isinstance(route, PathSegment):
        return _build(route.child, oracle).prepend_path(route.literal)
    elif isinstance(route, Capture):
        return _build_capture(route, oracle)
    elif isinstance(route, QueryParam):
        return _build_query_param(route, oracle)
    elif isinstance(route, QueryFlag):
        return _build_query_flag(route, oracle)
    elif isinstance(route, HeaderParam):
        return _build_header(route, oracle)
    elif isinstance(route, RequestBody):
        return _add_body(_build(route.child, oracle), route.content_types, route.body_type, oracle)
    elif isinstance(route, PassThrough):
        return _build(route.child, oracle)
    elif isinstance(route, Choice):
        return _build(route.left, oracle).merge(_build(route.right, oracle))
    raise TypeError(f"not a route: {route!r}")


def _response(response_type: Any, oracle: SchemaOracle) -> tuple[dict, Response]:
    if response_type is None:
        return {}, Response()
    definitions, ref = oracle.schema_of(response_type)
    return definitions, Response(schema=ref)


def _endpoint(method: str, operation: Operation, definitions: dict) -> Document:
    item = PathItem()
    item.set_operation(method, operation)
    return Document(paths={"/": item}, definitions=definitions)


def _build_leaf(leaf: Leaf, oracle: SchemaOracle) -> Document:
    definitions, response = _response(leaf.response_type, oracle)
    response.headers = {h.name: oracle.param_schema_of(h.value_type) for h in leaf.response_headers}
    operation = Operation(
        produces=list(leaf.content_types),
        responses={leaf.effective_status: response},
    )
    doc = _endpoint(leaf.method, operation, definitions)
    if leaf.request_body_type is not None:
        doc = _add_body(doc, leaf.content_types, leaf.request_body_type, oracle)
    return doc


def _build_multi_status(leaf: MultiStatusLeaf, oracle: SchemaOracle) -> Document:
    definitions: dict = {}
    responses = {}
    for alternative in leaf.responses:
        defs, response = _response(alternative.response_type, oracle)
        definitions.update(defs)
        responses[alternative.status] = response
    operation = Operation(produces=list(leaf.content_types), responses=responses)
    return _endpoint(leaf.method, operation, definitions)


def _build_capture(route: Capture, oracle: SchemaOracle) -> Document:
    param = Parameter(
        name=route.name,
        location="path",
        required=True,
        param_schema=oracle.param_schema_of(route.value_type),
    )
    doc = add_parameter(_build(route.child, oracle), param)
    doc.prepend_path("{" + route.name + "}")
    return add_default_response_404(doc, route.name)


def _build_query_param(route: QueryParam, oracle: SchemaOracle) -> Document:
    schema = oracle.param_schema_of(route.value_type)
    if route.multi:
        schema = {"type": "array", "items": schema, "collectionFormat": "multi"}
    param = Parameter(name=route.name, location="query", param_schema=schema)
    doc = add_parameter(_build(route.child, oracle), param)
    return add_default_response_400(doc, route.name)


def _build_query_flag(route: QueryFlag, oracle: SchemaOracle) -> Document:
    schema = dict(oracle.param_schema_of(bool), default=False)
    param = Parameter(name=route.name, location="query", allow_empty_value=True, param_schema=schema)
    doc = add_parameter(_build(route.child, oracle), param)
    return add_default_response_400(doc, route.name)


def _build_header(route: HeaderParam, oracle: SchemaOracle) -> Document:
    param = Parameter(
        name=route.name,
        location="header",
        param_schema=oracle.param_schema_of(route.value_type),
    )
    doc = add_parameter(_build(route.child, oracle), param)
    return add_default_response_400(doc, route.name)


def _add_body(doc: Document, content_types, body_type: Any, oracle: SchemaOracle) -> Document:
    definitions, ref = oracle.schema_of(body_type)
    param = Parameter(name="body", location="body", required=True, param_schema=ref)
    add_parameter(doc, param)
    add_consumes(doc, content_types)
    add_default_response_400(doc, "body")
    doc.definitions.update(definitions)
    return doc
