"""Helpers for editing the operations of a built document.

The builder uses ``add_parameter``, ``add_consumes`` and the default
response helpers on every node it visits; callers use ``sub_operations`` and
``apply_tags_for`` to annotate parts of a finished document.
"""

import logging
from typing import Callable, Iterable, Iterator

from route_swagger.document.model import Document, Operation, Parameter, Response, Tag
from route_swagger.errors import InvalidSubsetError

logger = logging.getLogger(__name__)


def markdown_code(text: str) -> str:
    """Format text as inline Markdown code."""
    return f"`{text}`"


def all_operations(doc: Document) -> Iterator[Operation]:
    for _, _, operation in doc.operations():
        yield operation


class OperationsView:
    """A selection of (path, method) pairs, applied to whichever document is given.

    Changes made to the yielded operations change that document.
    """

    def __init__(self, keys: Iterable[tuple[str, str]]):
        self.keys = frozenset(keys)

    def select(self, doc: Document) -> Iterator[Operation]:
        for path, method, operation in doc.operations():
            if (path, method) in self.keys:
                yield operation

    def __len__(self) -> int:
        return len(self.keys)


def operations_of(sub_doc: Document) -> OperationsView:
    """A view over the operations whose path and method appear in ``sub_doc``."""
    return OperationsView((path, method) for path, method, _ in sub_doc.operations())


def sub_operations(sub, api, oracle=None) -> OperationsView:
    """All operations of the route tree ``api`` that belong to its part ``sub``.

    Raises ``InvalidSubsetError`` when ``sub`` documents an operation that
    ``api`` does not.
    """
    from route_swagger.builder import build_swagger

    sub_doc = build_swagger(sub, oracle)
    api_doc = build_swagger(api, oracle)
    known = {(path, method) for path, method, _ in api_doc.operations()}
    missing = [(path, method) for path, method, _ in sub_doc.operations() if (path, method) not in known]
    if missing:
        raise InvalidSubsetError(missing)
    return operations_of(sub_doc)


def apply_tags_for(doc: Document, view: OperationsView, tags: list[Tag]) -> Document:
    """Tag every operation in ``view`` and register the tags in the document.

    Tags are appended as given; applying the same tags twice lists them twice.
    """
    names = [tag.name for tag in tags]
    count = 0
    for operation in view.select(doc):
        operation.tags.extend(names)
        count += 1
    doc.tags.extend(tag.model_copy() for tag in tags)
    logger.debug("tagged %d operations with %s", count, names)
    return doc


def add_parameter(doc: Document, param: Parameter) -> Document:
    """Put ``param`` in front of the parameter list of every operation."""
    for operation in all_operations(doc):
        operation.parameters.insert(0, param.model_copy(deep=True))
    return doc


def add_consumes(doc: Document, media_types: Iterable[str]) -> Document:
    """Add accepted content types to every operation."""
    media_types = list(media_types)
    for operation in all_operations(doc):
        for media_type in media_types:
            if media_type not in operation.consumes:
                operation.consumes.append(media_type)
    return doc


def set_response_with(
    doc: Document,
    combine: Callable[[Response, Response], Response],
    code: int,
    response: Response,
) -> Document:
    """Set the response for ``code`` on every operation.

    Where the operation already has a response for ``code`` it is replaced by
    ``combine(old, new)``.
    """
    for operation in all_operations(doc):
        old = operation.responses.get(code)
        new = response.model_copy(deep=True)
        operation.responses[code] = new if old is None else combine(old, new)
    return doc


def add_default_response_404(doc: Document, name: str) -> Document:
    sname = markdown_code(name)

    def alter(old: Response, _new: Response) -> Response:
        return old.model_copy(update={"description": f"{sname} or {old.description}"})

    return set_response_with(doc, alter, 404, Response(description=f"{sname} not found"))


def add_default_response_400(doc: Document, name: str) -> Document:
    sname = markdown_code(name)

    def alter(old: Response, _new: Response) -> Response:
        return old.model_copy(update={"description": f"{old.description} or {sname}"})

    return set_response_with(doc, alter, 400, Response(description=f"Invalid {sname}"))
