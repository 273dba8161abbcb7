"""
Tests for the livexray command-line interface (CLI).

Scope
-----
These tests verify the interaction layer provided by Typer:
1.  **Command Registration**: `--help` lists the bridge commands.
2.  **HTTP Integration**: `httpx.get` is mocked so commands are checked for the
    URL, params and secret header they send, without a running host.
3.  **Exit Codes**: a failing assertion, an error status or an unreachable host
    all end with exit code 1.
4.  **Serve**: the uvicorn entry point is mocked and checked for its arguments.

We use `typer.testing.CliRunner` to invoke the app in-process.
"""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock, patch

import httpx
import pytest
from typer.testing import CliRunner

from livexray.cli import app

URL = "http://bridge.test/xray"


@pytest.fixture  # type: ignore[misc]
def runner() -> CliRunner:
    """Create a fresh CliRunner for each test."""
    return CliRunner()


def _answer(payload: Any, status: int = 200) -> MagicMock:
    return MagicMock(return_value=httpx.Response(status, json=payload))


def test_cli_help_shows_usage(runner: CliRunner) -> None:
    """Invoking --help should print usage instructions and exit 0."""
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0, f"Help failed: {result.output}"
    for command in ("serve", "state", "query", "assert", "clear"):
        assert command in result.output


def test_state_prints_snapshot_json(runner: CliRunner) -> None:
    get = _answer({"route": "/dashboard", "errors": []})
    with patch("livexray.cli.httpx.get", get):
        result = runner.invoke(app, ["state", "--url", URL, "--secret", "s3cret"])

    assert result.exit_code == 0, result.output
    assert "/dashboard" in result.output
    args, kwargs = get.call_args
    assert args[0] == f"{URL}/state"
    assert kwargs["headers"] == {"X-Xray-Secret": "s3cret"}


def test_query_forwards_options_as_params(runner: CliRunner) -> None:
    get = _answer({"errors": []})
    with patch("livexray.cli.httpx.get", get):
        result = runner.invoke(
            app, ["query", "--select", "errors,network", "-n", "5", "--url", URL]
        )

    assert result.exit_code == 0, result.output
    assert get.call_args.kwargs["params"] == {"select": "errors,network", "limit": 5}


def test_assert_pass_exits_zero(runner: CliRunner) -> None:
    get = _answer({"passed": True, "assertion": "route === /home", "actual": "/home"})
    with patch("livexray.cli.httpx.get", get):
        result = runner.invoke(app, ["assert", "route=/home", "--url", URL])

    assert result.exit_code == 0, result.output
    assert "PASS" in result.output
    assert get.call_args.kwargs["params"] == {"route": "/home"}


def test_assert_fail_exits_one_with_hint(runner: CliRunner) -> None:
    verdict = {
        "passed": False,
        "assertion": "errors === empty",
        "actual": 2,
        "hint": "Found 2 errors",
    }
    with patch("livexray.cli.httpx.get", _answer(verdict)):
        result = runner.invoke(app, ["assert", "errors=empty", "--url", URL])

    assert result.exit_code == 1
    assert "FAIL" in result.output
    assert "Found 2 errors" in result.output


def test_error_status_exits_one(runner: CliRunner) -> None:
    with patch("livexray.cli.httpx.get", _answer({"error": "Unauthorized"}, status=401)):
        result = runner.invoke(app, ["errors", "--url", URL])

    assert result.exit_code == 1
    assert "Unauthorized" in result.output


def test_unreachable_host_exits_one(runner: CliRunner) -> None:
    failing = MagicMock(side_effect=httpx.ConnectError("connection refused"))
    with patch("livexray.cli.httpx.get", failing):
        result = runner.invoke(app, ["clear", "--url", URL])

    assert result.exit_code == 1
    assert "Cannot reach host" in result.output


def test_serve_runs_uvicorn_entry_point(runner: CliRunner) -> None:
    with patch("livexray.api.server.main") as main:
        result = runner.invoke(app, ["serve", "--port", "9999"])

    assert result.exit_code == 0, result.output
    main.assert_called_once_with(host=None, port=9999, reload=False)
