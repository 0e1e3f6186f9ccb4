"""Flatten nested validation error trees into `(path, message)` pairs.

A raw error node is one of:

- a mapping of field names to nodes (the root of an error tree),
- a list of nodes, each one addressed by its zero-based index,
- a list of message strings attached to the enclosing field.

A list element is a message if and only if it is a string. Messages keep the
path of their enclosing field; nested nodes get their index appended.

    >>> normalize({"nested": {"user_id": ["not an int"]}, "items": [{"name": ["blank"]}]})
    [NormalizedError(path='nested.user_id', message='not an int'), NormalizedError(path='items.0.name', message='blank')]
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any
from typing import NamedTuple
from typing import Union

from changeset_errors.core.config import INVALID_NODE_RAISE
from changeset_errors.core.config import NormalizerSettings
from changeset_errors.core.config import get_default_settings
from changeset_errors.core.errors import InvalidErrorNodeError

logger = logging.getLogger(__name__)

ErrorNode = Union[Mapping[str, "ErrorNode"], list["ErrorNode"], list[str]]

_SEQUENCE_TYPES = (list, tuple)


class NormalizedError(NamedTuple):
    """A single flattened error: where it happened and what went wrong."""

    path: str
    message: str

    def as_dict(self) -> dict[str, str]:
        return {"path": self.path, "message": self.message}


def join_path(parent: str | None, segment: str | int, separator: str = ".") -> str:
    """Append `segment` to `parent`, or start a new path when there is no parent."""
    if not parent:
        return str(segment)
    return f"{parent}{separator}{segment}"


def escape_key(key: Any, separator: str = ".") -> str:
    """Escape backslashes and the separator inside a mapping key."""
    return str(key).replace("\\", "\\\\").replace(separator, f"\\{separator}")


def normalize(
    node: ErrorNode,
    parent_path: str | None = None,
    *,
    settings: NormalizerSettings | None = None,
) -> list[NormalizedError]:
    """Flatten `node` depth-first, in mapping and list order."""
    settings = settings or get_default_settings()

    if isinstance(node, Mapping):
        return _normalize_mapping(node, parent_path, settings)
    if isinstance(node, _SEQUENCE_TYPES):
        return _normalize_sequence(node, parent_path, settings)
    return _normalize_invalid(node, parent_path, settings)


def _normalize_mapping(
    node: Mapping[Any, ErrorNode],
    parent_path: str | None,
    settings: NormalizerSettings,
) -> list[NormalizedError]:
    errors: list[NormalizedError] = []
    for key, value in node.items():
        segment = escape_key(key, settings.separator) if settings.escape_separator else key
        path = join_path(parent_path, segment, settings.separator)
        errors.extend(normalize(value, path, settings=settings))
    return errors


def _normalize_sequence(
    node: list[Any] | tuple[Any, ...],
    parent_path: str | None,
    settings: NormalizerSettings,
) -> list[NormalizedError]:
    errors: list[NormalizedError] = []
    for index, element in enumerate(node):
        if isinstance(element, str):
            errors.append(NormalizedError(parent_path or "", element))
        elif isinstance(element, (Mapping, *_SEQUENCE_TYPES)):
            path = join_path(parent_path, index, settings.separator)
            errors.extend(normalize(element, path, settings=settings))
        else:
            errors.extend(_normalize_invalid(element, parent_path, settings))
    return errors


def _normalize_invalid(node: Any, path: str | None, settings: NormalizerSettings) -> list[NormalizedError]:
    # Messages must sit inside a list; a bare string here is malformed too.
    if settings.invalid_node_policy == INVALID_NODE_RAISE:
        raise InvalidErrorNodeError(node, path)

    logger.debug("Coercing invalid error node at path=%s type=%s", path, type(node).__name__)
    return [NormalizedError(path or "", str(node))]
