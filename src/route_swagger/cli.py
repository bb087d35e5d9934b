"""CLI entry point for route-swagger."""

import importlib
from inspect import Parameter, signature
from pathlib import Path

import click

from route_swagger.builder import build_swagger
from route_swagger.document.io import dump_document, load_document
from route_swagger.document.model import Info
from route_swagger.errors import RouteSwaggerError
from route_swagger.schema.validation import validate_every_to_json


def _is_factory(obj) -> bool:
    if not callable(obj) or isinstance(obj, type):
        return False
    try:
        params = signature(obj).parameters.values()
    except (TypeError, ValueError):
        return False
    return all(p.default is not Parameter.empty or p.kind in (p.VAR_POSITIONAL, p.VAR_KEYWORD) for p in params)


def _resolve(target: str):
    """Import ``module:attribute``; call the attribute if it is a zero-argument factory.

    Functions that need arguments (such as a ``type -> samples`` lookup) are
    returned as they are.
    """
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise click.BadParameter(f"expected MODULE:ATTRIBUTE, got {target!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise click.BadParameter(f"cannot import {module_name}: {e}") from e

    obj = module
    for part in attr.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise click.BadParameter(f"{module_name} has no attribute {attr}") from e
    if _is_factory(obj):
        obj = obj()
    return obj


@click.group()
def main():
    """route-swagger: generate Swagger 2.0 documents from route trees."""
    pass


@main.command()
@click.argument("target")
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output file for the document.")
@click.option("--format", "fmt", default="auto", type=click.Choice(["auto", "json", "yaml"]), help="Output format (auto uses the file extension).")
@click.option("--title", default="", envvar="ROUTE_SWAGGER_TITLE", help="API title.")
@click.option("--api-version", default="", envvar="ROUTE_SWAGGER_VERSION", help="API version.")
@click.option("--host", default=None, envvar="ROUTE_SWAGGER_HOST", help="Host serving the API.")
@click.option("--description", default=None, help="API description.")
def generate(target: str, output: Path, fmt: str, title: str, api_version: str, host: str | None, description: str | None):
    """Generate a Swagger document for the route tree TARGET (module:attribute)."""
    click.echo(f"Loading routes from {target}...")
    route = _resolve(target)

    try:
        doc = build_swagger(route)
    except RouteSwaggerError as e:
        raise click.ClickException(str(e)) from e
    doc.info = Info(title=title, version=api_version, description=description)
    doc.host = host
    click.echo(f"Documented {sum(1 for _ in doc.operations())} operations on {len(doc.paths)} paths.")

    used = dump_document(doc, output, fmt)
    click.echo(f"Swagger document ({used}) saved to {output}")


@main.command()
@click.argument("target")
@click.argument("samples")
@click.option("--check-formats", is_flag=True, help="Also enforce string formats (date-time, email, ...).")
def check(target: str, samples: str, check_formats: bool):
    """Check that sample values of every body type in TARGET match their schemas.

    SAMPLES is a module:attribute holding a mapping from type to sample values,
    a function from type to sample values, or a factory returning either.
    """
    route = _resolve(target)
    sample_values = _resolve(samples)

    try:
        failures = validate_every_to_json(route, sample_values, check_formats=check_formats)
    except RouteSwaggerError as e:
        raise click.ClickException(str(e)) from e

    for failure in failures:
        click.echo(f"FAIL {failure.type_name}: {failure.value!r}")
        for error in failure.errors:
            click.echo(f"  {error}")

    if failures:
        raise click.ClickException(f"{len(failures)} sample(s) do not match their schema")
    click.echo("All samples match their schemas.")


@main.command()
@click.argument("doc_path", type=click.Path(exists=True, path_type=Path))
def inspect(doc_path: Path):
    """List the operations of a Swagger document file."""
    try:
        doc = load_document(doc_path)
    except RouteSwaggerError as e:
        raise click.ClickException(str(e)) from e

    title = doc.info.title or "(untitled)"
    click.echo(f"{title} {doc.info.version}".rstrip())
    for path, method, operation in doc.operations():
        statuses = ", ".join(str(code) for code in sorted(operation.responses, key=str))
        tags = f" [{', '.join(operation.tags)}]" if operation.tags else ""
        click.echo(f"{method.upper():7} {path}  -> {statuses}{tags}")
    click.echo(f"Found {len(doc.definitions)} definitions.")
