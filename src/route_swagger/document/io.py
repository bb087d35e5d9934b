"""Reading and writing Swagger documents as JSON or YAML files."""

import json
import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from route_swagger.document.model import Document
from route_swagger.errors import DocumentFormatError

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = "json"
DEFAULT_INDENT = 2

YAML_SUFFIXES = (".yaml", ".yml")


def format_for_path(file_path: Path, fmt: str = "auto") -> str:
    """Pick the output format for a file: 'json' or 'yaml'."""
    if fmt != "auto":
        return fmt
    if file_path.suffix.lower() in YAML_SUFFIXES:
        return "yaml"
    return DEFAULT_FORMAT


def detect_format(text: str) -> str:
    """Detect whether document text is JSON or YAML.

    Returns: 'json' or 'yaml'.
    """
    try:
        json.loads(text)
        return "json"
    except (json.JSONDecodeError, ValueError):
        pass

    try:
        yaml.safe_load(text)
        return "yaml"
    except yaml.YAMLError:
        pass

    raise DocumentFormatError("document is neither JSON nor YAML")


def dumps_document(doc: Document, fmt: str = DEFAULT_FORMAT) -> str:
    data = doc.to_dict()
    if fmt == "json":
        return json.dumps(data, indent=DEFAULT_INDENT) + "\n"
    if fmt == "yaml":
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    raise DocumentFormatError(f"unsupported format: {fmt!r}")


def dump_document(doc: Document, file_path: Path, fmt: str = "auto") -> str:
    """Write a document to ``file_path`` and return the format used."""
    fmt = format_for_path(file_path, fmt)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(dumps_document(doc, fmt), encoding="utf-8")
    logger.debug("wrote %s document to %s", fmt, file_path)
    return fmt


def load_document(file_path: Path) -> Document:
    """Read a Swagger 2.0 document from a JSON or YAML file."""
    text = file_path.read_text(encoding="utf-8")
    if detect_format(text) == "json":
        data = json.loads(text)
    else:
        data = yaml.safe_load(text)

    if not isinstance(data, dict) or data.get("swagger") != "2.0":
        raise DocumentFormatError(f"{file_path} is not a Swagger 2.0 document")

    try:
        return Document.from_dict(data)
    except ValidationError as e:
        raise DocumentFormatError(f"{file_path}: {e}") from e
