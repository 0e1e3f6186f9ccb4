"""Route normalized errors to the first rule that claims them."""

from __future__ import annotations

from collections.abc import Callable
from collections.abc import Iterable
from collections.abc import Mapping
from typing import Any
from typing import NamedTuple

from changeset_errors.core.errors import InvalidRuleError
from changeset_errors.services.normalizer import NormalizedError

TestCallback = Callable[[NormalizedError], Any]
MatchCallback = Callable[[NormalizedError, Any], Any]
UnexpectedErrorCallback = Callable[[NormalizedError], Any]

_ON_MATCH_KEYS = ("on_match", "onMatch")


class Rule(NamedTuple):
    """A predicate and the callback invoked with its truthy result.

    Whatever `test` returns is used both as the match decision and as the
    `test_result` handed to `on_match`, so a predicate can capture data while
    it matches.
    """

    test: TestCallback
    on_match: MatchCallback

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> Rule:
        """Build a rule from its `{"test": ..., "on_match": ...}` encoding.

        `onMatch` is accepted in place of `on_match`.
        """
        on_match_key = next((key for key in _ON_MATCH_KEYS if key in raw), None)
        missing = []
        if "test" not in raw:
            missing.append("test")
        if on_match_key is None:
            missing.append("on_match")
        if missing:
            raise InvalidRuleError(f"Rule mapping is missing {', '.join(missing)}")
        return _checked(cls(test=raw["test"], on_match=raw[on_match_key]))


def coerce_rule(raw: Rule | Mapping[str, Any]) -> Rule:
    """Accept a `Rule`, any `(test, on_match)` pair, or the mapping encoding."""
    if isinstance(raw, Rule):
        return _checked(raw)
    if isinstance(raw, Mapping):
        return Rule.from_mapping(raw)
    if isinstance(raw, tuple) and len(raw) == 2:
        return _checked(Rule(*raw))
    raise InvalidRuleError(f"Unsupported rule type {type(raw).__name__}")


def _checked(rule: Rule) -> Rule:
    for name, member in zip(rule._fields, rule):
        if not callable(member):
            raise InvalidRuleError(f"Rule {name} must be callable, got {type(member).__name__}")
    return rule


def find_match(error: NormalizedError, rules: Iterable[Rule]) -> tuple[Rule, Any] | None:
    """Return the first rule whose test is truthy for `error`, with its result."""
    for rule in rules:
        test_result = rule.test(error)
        if test_result:
            return rule, test_result
    return None


def dispatch(
    normalized_errors: Iterable[NormalizedError],
    rules: Iterable[Rule | Mapping[str, Any]] | None,
    on_unexpected_error: UnexpectedErrorCallback,
) -> None:
    """Invoke `on_match` of the first matching rule, or `on_unexpected_error`, per error.

    Rules are only checked once there is an error to route. Exceptions raised
    by tests or callbacks propagate immediately.
    """
    pending = list(normalized_errors)
    if not pending:
        return

    compiled = [coerce_rule(rule) for rule in rules or ()]

    for error in pending:
        match = find_match(error, compiled)
        if match is None:
            on_unexpected_error(error)
            continue

        rule, test_result = match
        rule.on_match(error, test_result)
