"""Tests for the assertion evaluator.

Each predicate family is evaluated against a hand-built snapshot. The
evaluator must answer with ``passed`` plus a hint, and never raise.
"""

from __future__ import annotations

from typing import Any

import pytest

from livexray.core.assertions import (
    SUPPORTED_HINT,
    evaluate_assertion,
    get_nested_value,
    parse_value,
    status_regex,
    values_equal,
)
from livexray.core.contracts.snapshot import (
    ErrorRecord,
    NetworkEntry,
    RegisteredState,
    Snapshot,
)


def _snapshot(**overrides: Any) -> Snapshot:
    base: dict[str, Any] = {
        "route": "/dashboard",
        "registered": {
            "Counter": RegisteredState(name="Counter", state={"count": 1, "active": True}),
            "Cart": RegisteredState(
                name="Cart", state={"items": [{"sku": "A1", "qty": 2}], "owner": None}
            ),
        },
        "network": [
            NetworkEntry(id="1", url="https://api.test/a", method="GET", status=200),
            NetworkEntry(id="2", url="https://api.test/b", method="POST", status=404),
        ],
    }
    base.update(overrides)
    return Snapshot(**base)


@pytest.mark.parametrize(  # type: ignore[misc]
    ("text", "expected"),
    [
        ("true", True),
        ("false", False),
        ("null", None),
        ("undefined", None),
        ("42", 42),
        ("-1.5", -1.5),
        ("nan", "nan"),
        ("hello", "hello"),
        ("", 0),
        ("  7 ", 7),
        ("1e3", 1000.0),
        ("0x1A", 26),
        ("1_000", "1_000"),
        ("inf", "inf"),
        ("-Infinity", float("-inf")),
    ],
)
def test_parse_value(text: str, expected: Any) -> None:
    assert parse_value(text) == expected
    assert type(parse_value(text)) is type(expected)


def test_values_equal_is_type_aware() -> None:
    assert values_equal(1, 1.0)
    assert not values_equal(True, 1)
    assert not values_equal("1", 1)
    assert values_equal(None, None)


def test_get_nested_value() -> None:
    state = {"a": {"b": [10, {"c": "deep"}]}}
    assert get_nested_value(state, "a.b.1.c") == "deep"
    assert get_nested_value(state, "a.b.5") is None
    assert get_nested_value(state, "a.x.y") is None
    assert get_nested_value(state, "state") is state


def test_status_regex_wildcard() -> None:
    assert status_regex("5xx").match("503")
    assert not status_regex("5xx").match("404")
    assert status_regex("404").match("404")


def test_errors_empty() -> None:
    assert evaluate_assertion(_snapshot(), {"errors": "empty"}).passed

    failing = evaluate_assertion(
        _snapshot(errors=[ErrorRecord(message="kaboom")]), {"errors": "empty"}
    )
    assert not failing.passed
    assert failing.hint is not None and "kaboom" in failing.hint


def test_component_existence_and_state_paths() -> None:
    snap = _snapshot()
    assert evaluate_assertion(snap, {"component": "Counter"}).passed
    assert evaluate_assertion(snap, {"component": "Counter", "state.count": "1"}).passed
    assert evaluate_assertion(snap, {"component": "Counter", "state.active": "true"}).passed
    assert evaluate_assertion(snap, {"component": "Cart", "state.items.0.sku": "A1"}).passed
    assert evaluate_assertion(snap, {"component": "Cart", "state.owner": "null"}).passed

    wrong = evaluate_assertion(snap, {"component": "Counter", "state.count": "2"})
    assert not wrong.passed
    assert wrong.hint == "Counter.count is 1, expected 2"
    assert wrong.details["actual"] == 1

    # A boolean never equals a number.
    assert not evaluate_assertion(snap, {"component": "Counter", "state.active": "1"}).passed


def test_missing_component_lists_available() -> None:
    result = evaluate_assertion(_snapshot(), {"component": "Modal"})
    assert not result.passed
    assert result.hint is not None
    assert "Modal" in result.hint and "Counter" in result.hint


def test_route_equality() -> None:
    snap = _snapshot()
    assert evaluate_assertion(snap, {"route": "/dashboard"}).passed

    other = evaluate_assertion(snap, {"route": "/other"})
    assert not other.passed
    assert other.hint is not None
    assert "/dashboard" in other.hint and "/other" in other.hint


def test_network_status_patterns() -> None:
    snap = _snapshot()
    # 4xx/5xx patterns assert absence.
    assert not evaluate_assertion(snap, {"network": "", "status": "4xx"}).passed
    assert evaluate_assertion(snap, {"network": "", "status": "5xx"}).passed
    # Other patterns assert presence.
    assert evaluate_assertion(snap, {"network": "", "status": "2xx"}).passed
    assert not evaluate_assertion(snap, {"network": "", "status": "301"}).passed


def test_status_pattern_mentioning_4_or_5_anywhere_asserts_absence() -> None:
    snap = _snapshot(
        network=[NetworkEntry(id="1", url="https://api.test/a", method="GET", status=250)]
    )
    result = evaluate_assertion(snap, {"network": "", "status": "250"})
    assert result.passed is False
    assert result.details["matches"] == 1
    assert evaluate_assertion(snap, {"network": "", "status": "2xx"}).passed is True


def test_priority_order() -> None:
    """errors=empty wins over every other family present in the same call."""
    result = evaluate_assertion(_snapshot(), {"errors": "empty", "route": "/nowhere"})
    assert result.passed
    assert result.details["expected"] == "no errors"


def test_unknown_assertion_is_a_helpful_failure() -> None:
    result = evaluate_assertion(_snapshot(), {"foo": "bar"})
    assert not result.passed
    assert result.hint == SUPPORTED_HINT
    assert result.assertion == "foo=bar"
