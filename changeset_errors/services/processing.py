"""Entry points composing normalization and rule dispatch."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from collections.abc import Sequence
from typing import Any

from changeset_errors.core.config import NormalizerSettings
from changeset_errors.core.config import get_default_settings
from changeset_errors.core.errors import InvalidErrorNodeError
from changeset_errors.core.errors import UnexpectedErrorsError
from changeset_errors.services.dispatcher import MatchCallback
from changeset_errors.services.dispatcher import Rule
from changeset_errors.services.dispatcher import UnexpectedErrorCallback
from changeset_errors.services.dispatcher import dispatch
from changeset_errors.services.normalizer import ErrorNode
from changeset_errors.services.normalizer import NormalizedError
from changeset_errors.services.normalizer import normalize

logger = logging.getLogger(__name__)


def process_errors(
    error_structure: Mapping[str, ErrorNode] | None,
    rules: Sequence[Rule | Mapping[str, Any]] | None,
    on_unexpected_error: UnexpectedErrorCallback,
    *,
    settings: NormalizerSettings | None = None,
) -> list[NormalizedError]:
    """Process a nested error structure such as Ecto changeset errors.

    The structure is flattened first, then every normalized error is routed to
    the `on_match` of the first rule whose `test` is truthy, or to
    `on_unexpected_error` when no rule claims it. The complete normalized list
    is returned whatever the routing outcome.

    Example::

        process_errors(
            {
                "user": ["not authenticated"],
                "type": ["must be one of public, private"],
            },
            [
                match_key_value_equal("user", "not authenticated", on_auth_error),
                match_message_pattern("type", r"must be one of (.*)", on_type_error),
            ],
            unexpected.append,
        )
    """
    if not error_structure:
        error_structure = {}
    if not isinstance(error_structure, Mapping):
        raise InvalidErrorNodeError(error_structure)

    settings = settings or get_default_settings()
    normalized_errors = normalize(error_structure, settings=settings)
    logger.debug("Normalized %d errors with settings=%s", len(normalized_errors), settings.safe_for_logging())

    def _on_unexpected(error: NormalizedError) -> None:
        logger.debug("Unexpected error at path=%s", error.path)
        on_unexpected_error(error)

    dispatch(normalized_errors, rules, _on_unexpected)
    return normalized_errors


def match_key_value_equal(key: str, value: str, on_match: MatchCallback) -> Rule:
    """Match an error when both path and message are equal, without coercion.

    ``match_key_value_equal("user", "not found", report)``
    """

    def test(error: NormalizedError) -> bool:
        return error.path == key and error.message == value

    return Rule(test=test, on_match=on_match)


def match_message_pattern(
    key: str | None,
    pattern: str | re.Pattern[str],
    on_match: MatchCallback,
) -> Rule:
    """Match an error by path and message regex, passing captured groups to `on_match`.

    A `key` of None matches any path. The test result is the tuple of groups,
    or the whole match when the pattern has no groups.
    """
    compiled = re.compile(pattern)

    def test(error: NormalizedError) -> tuple[Any, ...] | None:
        if key is not None and error.path != key:
            return None
        match = compiled.search(error.message)
        if match is None:
            return None
        return match.groups() or (match.group(0),)

    return Rule(test=test, on_match=on_match)


def collect_unexpected(
    error_structure: Mapping[str, ErrorNode] | None,
    rules: Sequence[Rule | Mapping[str, Any]] | None,
    *,
    settings: NormalizerSettings | None = None,
) -> list[NormalizedError]:
    """Process errors and raise `UnexpectedErrorsError` if any were left unclaimed."""
    unexpected: list[NormalizedError] = []
    normalized_errors = process_errors(error_structure, rules, unexpected.append, settings=settings)
    if unexpected:
        raise UnexpectedErrorsError(unexpected)
    return normalized_errors
