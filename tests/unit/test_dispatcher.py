"""Unit tests for first-match-wins rule dispatch."""

from __future__ import annotations

from typing import Any

import pytest

from changeset_errors.core.errors import InvalidRuleError
from changeset_errors.services.dispatcher import Rule
from changeset_errors.services.dispatcher import coerce_rule
from changeset_errors.services.dispatcher import dispatch
from changeset_errors.services.dispatcher import find_match
from changeset_errors.services.normalizer import NormalizedError

NAME_INVALID = NormalizedError("name", "invalid!")
NAME_OTHER = NormalizedError("name", "other problem!")


def _recording_rule(calls: list[tuple[str, Any]], label: str, result: Any) -> Rule:
    def test(error: NormalizedError) -> Any:
        calls.append(("test", label))
        return result

    def on_match(error: NormalizedError, test_result: Any) -> None:
        calls.append(("match", label, error, test_result))

    return Rule(test=test, on_match=on_match)


def test_first_truthy_rule_wins_and_later_rules_are_skipped() -> None:
    calls: list[tuple[Any, ...]] = []
    unexpected: list[NormalizedError] = []
    rules = [
        _recording_rule(calls, "first", None),
        _recording_rule(calls, "second", ["captured"]),
        _recording_rule(calls, "third", True),
    ]

    dispatch([NAME_INVALID], rules, unexpected.append)

    assert calls == [
        ("test", "first"),
        ("test", "second"),
        ("match", "second", NAME_INVALID, ["captured"]),
    ]
    assert unexpected == []


@pytest.mark.parametrize("falsy", [False, None, 0, "", [], ()])
def test_falsy_test_results_do_not_match(falsy: Any) -> None:
    calls: list[tuple[Any, ...]] = []
    unexpected: list[NormalizedError] = []

    dispatch([NAME_INVALID], [_recording_rule(calls, "only", falsy)], unexpected.append)

    assert calls == [("test", "only")]
    assert unexpected == [NAME_INVALID]


def test_every_error_is_routed_exactly_once_in_order() -> None:
    matched: list[NormalizedError] = []
    unexpected: list[NormalizedError] = []
    rules = [Rule(test=lambda error: error.message == "invalid!", on_match=lambda error, _: matched.append(error))]

    dispatch([NAME_INVALID, NAME_OTHER, NAME_INVALID], rules, unexpected.append)

    assert matched == [NAME_INVALID, NAME_INVALID]
    assert unexpected == [NAME_OTHER]


@pytest.mark.parametrize("rules", [[], None])
def test_without_rules_every_error_is_unexpected(rules: list[Rule] | None) -> None:
    unexpected: list[NormalizedError] = []

    dispatch([NAME_INVALID, NAME_OTHER], rules, unexpected.append)

    assert unexpected == [NAME_INVALID, NAME_OTHER]


def test_mapping_encoded_rules_are_accepted() -> None:
    matched: list[Any] = []

    dispatch(
        [NAME_INVALID],
        [{"test": lambda error: error.path == "name" and "boom", "on_match": lambda error, result: matched.append(result)}],
        lambda error: pytest.fail(f"unexpected {error}"),
    )

    assert matched == ["boom"]


def test_camel_case_on_match_key_is_accepted() -> None:
    matched: list[Any] = []

    dispatch(
        [NAME_INVALID],
        [{"test": lambda error: error.path == "name" and "boom", "onMatch": lambda error, result: matched.append(result)}],
        lambda error: pytest.fail(f"unexpected {error}"),
    )

    assert matched == ["boom"]
    assert Rule.from_mapping({"test": len, "onMatch": print}) == Rule(test=len, on_match=print)


def test_mapping_without_on_match_key_is_rejected() -> None:
    with pytest.raises(InvalidRuleError, match="missing on_match"):
        Rule.from_mapping({"test": lambda error: True, "onmatch": lambda *_: None})

    with pytest.raises(InvalidRuleError, match="missing test, on_match"):
        Rule.from_mapping({})


def test_rules_are_not_checked_when_there_is_nothing_to_route() -> None:
    unexpected: list[NormalizedError] = []

    dispatch([], [{"test": lambda error: True}], unexpected.append)

    assert unexpected == []


def test_test_exceptions_propagate_and_abort_dispatch() -> None:
    unexpected: list[NormalizedError] = []

    def explode(error: NormalizedError) -> bool:
        raise RuntimeError("bad rule")

    with pytest.raises(RuntimeError, match="bad rule"):
        dispatch([NAME_INVALID, NAME_OTHER], [Rule(test=explode, on_match=lambda *_: None)], unexpected.append)

    assert unexpected == []


def test_callback_exceptions_propagate() -> None:
    def fail(error: NormalizedError) -> None:
        raise ValueError(error.path)

    with pytest.raises(ValueError, match="name"):
        dispatch([NAME_OTHER], [], fail)


def test_find_match_returns_rule_and_result() -> None:
    rule = Rule(test=lambda error: {"field": error.path}, on_match=lambda *_: None)

    assert find_match(NAME_INVALID, [rule]) == (rule, {"field": "name"})
    assert find_match(NAME_INVALID, []) is None


def test_coerce_rule_accepts_plain_pairs() -> None:
    test = lambda error: True  # noqa: E731
    on_match = lambda error, result: None  # noqa: E731

    assert coerce_rule((test, on_match)) == Rule(test=test, on_match=on_match)


@pytest.mark.parametrize(
    "raw",
    [
        {"test": lambda error: True},
        {"test": "not callable", "on_match": lambda *_: None},
        42,
        (lambda error: True,),
    ],
)
def test_coerce_rule_rejects_malformed_rules(raw: Any) -> None:
    with pytest.raises(InvalidRuleError):
        coerce_rule(raw)
