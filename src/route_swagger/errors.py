"""Exceptions raised while building and post-processing Swagger documents.

Every error here points at a mistake in the route description or in the
caller's inputs. None of them is transient.
"""


class RouteSwaggerError(Exception):
    """Base class for all route-swagger errors."""


class DuplicateRouteError(RouteSwaggerError):
    """Two leaves of a route tree document the same path and method."""

    def __init__(self, path: str, method: str):
        self.path = path
        self.method = method
        super().__init__(f"duplicate route: {method.upper()} {path}")


class InvalidSubsetError(RouteSwaggerError):
    """A sub-API contains operations that the full API does not."""

    def __init__(self, missing: list[tuple[str, str]]):
        self.missing = missing
        listed = ", ".join(f"{method.upper()} {path}" for path, method in missing)
        super().__init__(f"not a sub-API, missing from the full API: {listed}")


class SchemaError(RouteSwaggerError):
    """A type cannot be described by the requested kind of schema."""


class MissingSamplesError(RouteSwaggerError):
    """No sample values were supplied for a body type."""


class DocumentFormatError(RouteSwaggerError):
    """A document file could not be read or written in the requested format."""
