"""Schema oracle: turns Python types into Swagger schemas.

The builder only needs two questions answered for every type it meets:
the definitions plus reference used for bodies and responses, and the flat
schema used for path, query and header parameters. ``PydanticSchemaOracle``
answers both with pydantic's JSON schema generation.
"""

from typing import Annotated, Any, Protocol, get_origin

from pydantic import Field, TypeAdapter, WithJsonSchema
from pydantic.errors import PydanticUserError

from route_swagger.errors import SchemaError

REF_TEMPLATE = "#/definitions/{model}"

INT64_MIN = -9223372036854775808
INT64_MAX = 9223372036854775807

Int64 = Annotated[
    int,
    Field(ge=INT64_MIN, le=INT64_MAX),
    WithJsonSchema({"type": "integer", "format": "int64", "minimum": INT64_MIN, "maximum": INT64_MAX}),
]


class SchemaOracle(Protocol):
    def schema_of(self, tp: Any) -> tuple[dict[str, dict], dict]:
        """Return ``(definitions, reference)`` for a body or response type."""

    def param_schema_of(self, tp: Any) -> dict:
        """Return a primitive schema for a parameter or header type."""


# Keywords holding instance values rather than subschemas.
_VALUE_KEYWORDS = frozenset({"default", "examples", "example", "const", "enum"})
# Keywords mapping names to subschemas.
_SCHEMA_MAPS = frozenset({"properties", "patternProperties", "$defs", "definitions"})


def _strip_titles(schema: Any) -> Any:
    if isinstance(schema, list):
        return [_strip_titles(v) for v in schema]
    if not isinstance(schema, dict):
        return schema
    stripped = {}
    for key, value in schema.items():
        if key == "title" and isinstance(value, str):
            continue
        if key in _VALUE_KEYWORDS:
            stripped[key] = value
        elif key in _SCHEMA_MAPS and isinstance(value, dict):
            stripped[key] = {name: _strip_titles(sub) for name, sub in value.items()}
        else:
            stripped[key] = _strip_titles(value)
    return stripped


def _has_ref(schema: Any) -> bool:
    if isinstance(schema, dict):
        return "$ref" in schema or any(_has_ref(v) for v in schema.values())
    if isinstance(schema, list):
        return any(_has_ref(v) for v in schema)
    return False


def type_name(tp: Any) -> str:
    if get_origin(tp) is None and isinstance(tp, type):
        return tp.__name__
    return repr(tp)


class PydanticSchemaOracle:
    """Schema oracle backed by pydantic ``TypeAdapter``.

    Models, dataclasses and enums become named definitions referenced with
    ``#/definitions/<Name>``; everything else is inlined.
    """

    def __init__(self, mode: str = "serialization"):
        self.mode = mode

    def _json_schema(self, tp: Any) -> dict:
        try:
            schema = TypeAdapter(tp).json_schema(ref_template=REF_TEMPLATE, mode=self.mode)
        except PydanticUserError as e:
            raise SchemaError(f"cannot derive a schema for {type_name(tp)}: {e}") from e
        return _strip_titles(schema)

    def schema_of(self, tp: Any) -> tuple[dict[str, dict], dict]:
        # Wrapping in a list forces named types out into $defs and leaves a
        # reference in "items".
        schema = self._json_schema(list[tp])
        return schema.get("$defs", {}), schema["items"]

    def param_schema_of(self, tp: Any) -> dict:
        schema = self._json_schema(tp)
        defs = schema.pop("$defs", {})
        ref = schema.get("$ref")
        if ref is not None:
            schema = dict(defs.get(ref.rsplit("/", 1)[-1], {}))
        if _has_ref(schema) or schema.get("type") == "object":
            raise SchemaError(f"{type_name(tp)} is not a primitive type and cannot be a parameter")
        for key in ("anyOf", "oneOf", "allOf"):
            if key in schema:
                raise SchemaError(f"{type_name(tp)} has a composite schema ({key}) and cannot be a parameter")
        return schema
