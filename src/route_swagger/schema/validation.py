"""Checks that the JSON encoding of body types matches their derived schemas.

A schema is only useful if what the server actually sends validates against
it. These helpers encode sample values with pydantic and validate the result
against the schema the oracle derives for the same type.
"""

import logging
from typing import Any, Callable, Iterable, Mapping

from jsonschema import Draft202012Validator
from pydantic import BaseModel, TypeAdapter

from route_swagger.errors import MissingSamplesError
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
from route_swagger.schema.oracle import PydanticSchemaOracle, SchemaOracle, type_name

logger = logging.getLogger(__name__)

Samples = Mapping[Any, Iterable[Any]] | Callable[[Any], Iterable[Any] | None]


class ToJsonFailure(BaseModel):
    """A sample value whose JSON encoding does not match its schema."""

    type_name: str
    value: Any
    errors: list[str]


def body_types(route: Route) -> list[Any]:
    """Every request and response body type in the tree, in order of appearance."""
    found: list[Any] = []
    _collect_body_types(route, found)
    return found


def _add_type(tp: Any, found: list[Any]) -> None:
    if tp is not None and tp not in found:
        found.append(tp)


def _collect_body_types(route: Route, found: list[Any]) -> None:
    if isinstance(route, Leaf):
        _add_type(route.request_body_type, found)
        _add_type(route.response_type, found)
    elif isinstance(route, MultiStatusLeaf):
        for alternative in route.responses:
            _add_type(alternative.response_type, found)
    elif isinstance(route, RequestBody):
        _add_type(route.body_type, found)
        _collect_body_types(route.child, found)
    elif isinstance(route, Choice):
        _collect_body_types(route.left, found)
        _collect_body_types(route.right, found)
    elif isinstance(route, (PathSegment, Capture, QueryParam, QueryFlag, HeaderParam, PassThrough)):
        _collect_body_types(route.child, found)
    elif not isinstance(route, RawEndpoint):
        raise TypeError(f"not a route: {route!r}")


def validate_to_json(
    tp: Any,
    value: Any,
    oracle: SchemaOracle | None = None,
    check_formats: bool = False,
) -> list[str]:
    """Validate the JSON encoding of ``value`` against the schema of ``tp``.

    Returns a list of error messages, empty when the encoding is valid.
    With ``check_formats`` string formats (date-time, email, ...) are checked too.
    """
    oracle = oracle or PydanticSchemaOracle()
    definitions, ref = oracle.schema_of(tp)
    schema = dict(ref, definitions=definitions)
    encoded = TypeAdapter(tp).dump_python(value, mode="json")

    format_checker = Draft202012Validator.FORMAT_CHECKER if check_formats else None
    validator = Draft202012Validator(schema, format_checker=format_checker)
    return [error.message for error in validator.iter_errors(encoded)]


def _samples_for(samples: Samples, tp: Any) -> list[Any]:
    if callable(samples):
        values = samples(tp)
    else:
        values = samples.get(tp)
    if values is None:
        raise MissingSamplesError(f"no sample values for {type_name(tp)}")
    return list(values)


def validate_every_to_json(
    route: Route,
    samples: Samples,
    oracle: SchemaOracle | None = None,
    check_formats: bool = False,
) -> list[ToJsonFailure]:
    """Validate sample values of every body type used in a route tree.

    ``samples`` maps each body type to the values to check, either as a
    mapping or as a function of the type.
    """
    oracle = oracle or PydanticSchemaOracle()
    failures = []
    for tp in body_types(route):
        values = _samples_for(samples, tp)
        logger.debug("checking %d samples of %s", len(values), type_name(tp))
        for value in values:
            errors = validate_to_json(tp, value, oracle, check_formats)
            if errors:
                failures.append(ToJsonFailure(type_name=type_name(tp), value=value, errors=errors))
    return failures
