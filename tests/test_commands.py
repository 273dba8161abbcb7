"""Tests for command dispatch and the default capability table."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from livexray.bridge.commands import CommandName, execute_command
from livexray.client.capabilities import NO_DOCUMENT, RuntimeCapabilities
from livexray.core.errors import UnknownCommandError


def _run(caps: Any, name: str, args: list[Any] | None = None) -> Any:
    return asyncio.run(execute_command(caps, name, args or []))


def test_ping_answers_pong() -> None:
    outcome = _run(RuntimeCapabilities(), "ping")
    assert outcome.is_ok() and outcome.unwrap() == "pong"


def test_unknown_name_is_rejected_with_typed_error() -> None:
    with pytest.raises(UnknownCommandError, match="Command not found: explode"):
        CommandName.parse("explode")

    outcome = _run(RuntimeCapabilities(), "explode")
    assert outcome.is_err()
    assert outcome.unwrap_err() == "Command not found: explode"


def test_handler_failure_becomes_error_string() -> None:
    class Broken(RuntimeCapabilities):
        def click_element(self, selector: str) -> Any:
            raise RuntimeError(f"no element matches {selector}")

    outcome = _run(Broken(), "click_element", ["#go"])
    assert outcome.unwrap_err() == "no element matches #go"


def test_default_primitives_report_no_document() -> None:
    caps = RuntimeCapabilities()
    assert _run(caps, "click_element", ["#a"]).unwrap() == NO_DOCUMENT
    assert _run(caps, "navigate", ["/x", {"replace": False}]).unwrap() == NO_DOCUMENT
    assert _run(caps, "capture_screenshot").unwrap() is None
    assert _run(caps, "query_dom", ["#a", {}]).unwrap()["found"] is False


def test_action_registry_round_trip() -> None:
    caps = RuntimeCapabilities()

    async def reset(scope: str) -> str:
        return f"reset {scope}"

    caps.register_action("reset", reset, "Reset fixtures")
    caps.register_action("fail", lambda: 1 / 0)

    assert _run(caps, "get_actions").unwrap() == [
        {"name": "reset", "description": "Reset fixtures"},
        {"name": "fail", "description": None},
    ]
    assert _run(caps, "execute_action", ["reset", ["db"]]).unwrap() == {
        "success": True,
        "result": "reset db",
    }
    assert _run(caps, "execute_action", ["fail", []]).unwrap() == {
        "success": False,
        "error": "division by zero",
    }

    caps.unregister_action("reset")
    assert _run(caps, "execute_action", ["reset"]).unwrap() == {
        "success": False,
        "error": 'Action "reset" not found',
    }
