"""Assertion evaluator over the latest snapshot.

A pure function of ``(snapshot, params)``. Exactly one predicate family is
evaluated per call, in priority order:

1. ``errors=empty``                        -> no captured errors
2. ``component=Name[&state.a.b=value]``    -> component exists / state paths match
3. ``route=/path``                         -> exact route equality
4. ``network&status=5xx``                  -> status-code pattern over network entries

Anything else returns ``passed=False`` with a hint listing the supported
forms. Evaluation never raises.

A status pattern containing a ``4`` or a ``5`` anywhere (``5xx``, ``404``, but
also ``250``) checks that *no* entry matches; every other pattern checks that
at least one entry does.
"""

from __future__ import annotations

import json
import math
import re
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlencode

from livexray.core.contracts.assertion import AssertionResult
from livexray.core.contracts.snapshot import Snapshot

SUPPORTED_HINT = (
    "Supported: errors=empty, component=Name (with optional state.path=value), "
    "route=/path, network with status (e.g. network&status=5xx)"
)

_MISSING = object()


_INTEGER_LITERAL = re.compile(r"[+-]?\d+")
_DECIMAL_LITERAL = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_PREFIXED_LITERAL = re.compile(r"0([xXoObB])([0-9a-fA-F]+)")
_PREFIX_BASES = {"x": 16, "o": 8, "b": 2}


def _number_literal(text: str) -> int | float | None:
    """Numeric value of ``text`` under JavaScript ``Number()`` rules, else None.

    Surrounding whitespace is ignored and blank text is ``0``; ``0x``/``0o``/``0b``
    prefixes and ``Infinity`` are accepted. Digit separators (``1_000``),
    ``nan`` and ``inf`` are not numbers.
    """
    stripped = text.strip()
    if not stripped:
        return 0
    if _INTEGER_LITERAL.fullmatch(stripped):
        return int(stripped)
    if _DECIMAL_LITERAL.fullmatch(stripped):
        return float(stripped)
    if stripped.lstrip("+-") == "Infinity":
        return -math.inf if stripped.startswith("-") else math.inf
    prefixed = _PREFIXED_LITERAL.fullmatch(stripped)
    if prefixed:
        try:
            return int(prefixed.group(2), _PREFIX_BASES[prefixed.group(1).lower()])
        except ValueError:
            return None
    return None


def parse_value(text: str) -> Any:
    """Parse a query-string literal into a typed value.

    ``true``/``false`` -> bool, ``null``/``undefined`` -> None, numeric text
    -> int or float (see `_number_literal`, so ``""`` -> ``0``), anything
    else stays a string.
    """
    if text == "true":
        return True
    if text == "false":
        return False
    if text in ("null", "undefined"):
        return None
    number = _number_literal(text)
    return text if number is None else number


def get_nested_value(obj: Any, path: str) -> Any:
    """Follow a dotted ``path`` through mappings; ``None`` when a hop is missing."""
    if path in ("", "state"):
        return obj
    current = obj
    for part in path.split("."):
        if isinstance(current, Mapping):
            current = current.get(part, _MISSING)
        elif isinstance(current, list) and part.isdigit():
            index = int(part)
            current = current[index] if index < len(current) else _MISSING
        else:
            return None
        if current is _MISSING:
            return None
    return current


def values_equal(actual: Any, expected: Any) -> bool:
    """Type-aware equality: booleans never equal numbers, strings never equal numbers."""
    if isinstance(actual, bool) or isinstance(expected, bool):
        return type(actual) is type(expected) and actual == expected
    if isinstance(actual, int | float) and isinstance(expected, int | float):
        return actual == expected
    if type(actual) is not type(expected):
        return False
    return bool(actual == expected)


def _dumps(value: Any) -> str:
    try:
        return json.dumps(value)
    except (TypeError, ValueError):
        return repr(value)


def _check_errors(snapshot: Snapshot, assertion: str) -> AssertionResult:
    count = len(snapshot.errors)
    hint = None
    if count:
        hint = f"Found {count} error(s): {snapshot.errors[0].message}"
    return AssertionResult(
        passed=count == 0,
        assertion=assertion,
        details={
            "expected": "no errors",
            "actual": count,
            "errors": [e.model_dump() for e in snapshot.errors],
        },
        hint=hint,
    )


def _check_component(
    snapshot: Snapshot, params: Mapping[str, str], assertion: str
) -> AssertionResult:
    name = params["component"]
    registered = snapshot.registered.get(name)
    if registered is None:
        available = list(snapshot.registered.keys())
        return AssertionResult(
            passed=False,
            assertion=assertion,
            details={
                "expected": f'component "{name}" to exist',
                "actual": "not found",
                "available": available,
            },
            hint=f'Component "{name}" is not registered. '
            f"Available: {', '.join(available) or 'none'}",
        )

    for key, raw in params.items():
        if key != "state" and not key.startswith("state."):
            continue
        path = key[len("state.") :] if key.startswith("state.") else key
        actual = get_nested_value(registered.state, path)
        expected = parse_value(raw)
        if not values_equal(actual, expected):
            return AssertionResult(
                passed=False,
                assertion=assertion,
                details={"component": name, "path": path, "expected": expected, "actual": actual},
                hint=f"{name}.{path} is {_dumps(actual)}, expected {_dumps(expected)}",
            )

    return AssertionResult(
        passed=True,
        assertion=assertion,
        details={"component": name, "state": registered.state},
    )


def _check_route(snapshot: Snapshot, expected: str, assertion: str) -> AssertionResult:
    passed = snapshot.route == expected
    return AssertionResult(
        passed=passed,
        assertion=assertion,
        details={"expected": expected, "actual": snapshot.route},
        hint=None if passed else f'Route is "{snapshot.route}", expected "{expected}"',
    )


def status_regex(pattern: str) -> re.Pattern[str]:
    """Compile a status pattern where ``xx`` stands for any two digits (``5xx``)."""
    return re.compile("^" + re.escape(pattern).replace("xx", r"\d\d") + "$")


def _check_network(snapshot: Snapshot, status: str, assertion: str) -> AssertionResult:
    regex = status_regex(status)
    matches = [
        entry.model_dump()
        for entry in snapshot.network
        if entry.status is not None and regex.match(str(entry.status))
    ]
    # Any pattern mentioning a 4 or 5 asserts absence; others assert presence.
    expect_absent = "4" in status or "5" in status
    passed = not matches if expect_absent else bool(matches)
    hint = None
    if not passed:
        hint = (
            f"Found {len(matches)} request(s) with status {status}"
            if expect_absent
            else f"No request with status {status} was captured"
        )
    return AssertionResult(
        passed=passed,
        assertion=assertion,
        details={"pattern": status, "matches": len(matches), "requests": matches},
        hint=hint,
    )


def evaluate_assertion(snapshot: Snapshot, params: Mapping[str, str]) -> AssertionResult:
    """Evaluate the first recognized predicate in ``params`` against ``snapshot``."""
    assertion = urlencode(list(params.items()))

    if params.get("errors") == "empty":
        return _check_errors(snapshot, assertion)
    if "component" in params:
        return _check_component(snapshot, params, assertion)
    if "route" in params:
        return _check_route(snapshot, params["route"], assertion)
    if "network" in params and params.get("status"):
        return _check_network(snapshot, params["status"], assertion)

    return AssertionResult(
        passed=False,
        assertion=assertion,
        details={"error": "Unknown assertion type"},
        hint=SUPPORTED_HINT,
    )


__all__ = [
    "SUPPORTED_HINT",
    "parse_value",
    "get_nested_value",
    "values_equal",
    "status_regex",
    "evaluate_assertion",
]
