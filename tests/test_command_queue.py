"""Tests for the host-side pending-command table.

Async code runs through `asyncio.run` inside plain test functions.
"""

from __future__ import annotations

import asyncio
import time

import pytest

from livexray.bridge.queue import CommandQueue
from livexray.core.errors import CommandFailedError, CommandTimeoutError


def test_unanswered_command_times_out_and_late_result_is_ignored() -> None:
    """ping with a 50 ms timeout and no client: rejected with "timed out"."""

    async def scenario() -> tuple[str, float, bool, int]:
        queue = CommandQueue()
        started = time.monotonic()
        future = queue.queue_command("ping", [], timeout_ms=50)
        command_id = queue.get_pending_commands()[0].id

        with pytest.raises(CommandTimeoutError) as info:
            await future
        elapsed = time.monotonic() - started

        late = queue.resolve_command(command_id, "pong")
        return str(info.value), elapsed, late, len(queue)

    message, elapsed, late, pending = asyncio.run(scenario())
    assert "timed out" in message
    assert message == 'Command "ping" timed out'
    assert elapsed < 1.0
    assert late is False
    assert pending == 0


def test_resolve_fulfills_the_caller() -> None:
    async def scenario() -> tuple[object, bool, int]:
        queue = CommandQueue()
        future = queue.queue_command("get_viewport_info")
        command_id = queue.get_pending_commands()[0].id
        resolved = queue.resolve_command(command_id, {"width": 800})
        return await future, resolved, len(queue)

    result, resolved, pending = asyncio.run(scenario())
    assert result == {"width": 800}
    assert resolved is True
    assert pending == 0


def test_reported_error_fails_the_caller() -> None:
    async def scenario() -> None:
        queue = CommandQueue()
        future = queue.queue_command("click_element", ["#missing"])
        queue.resolve_command(queue.get_pending_commands()[0].id, error="Element not found")
        await future

    with pytest.raises(CommandFailedError, match="Element not found"):
        asyncio.run(scenario())


def test_duplicate_and_unknown_results_are_noops() -> None:
    async def scenario() -> tuple[bool, bool, bool, object]:
        queue = CommandQueue()
        future = queue.queue_command("ping")
        command_id = queue.get_pending_commands()[0].id
        first = queue.resolve_command(command_id, "pong")
        second = queue.resolve_command(command_id, "again")
        unknown = queue.resolve_command("does-not-exist", "x")
        return first, second, unknown, await future

    first, second, unknown, result = asyncio.run(scenario())
    assert (first, second, unknown) == (True, False, False)
    assert result == "pong"


def test_pending_listing_shape() -> None:
    async def scenario() -> list[dict[str, object]]:
        queue = CommandQueue()
        a = queue.queue_command("click_element", ["#a"])
        b = queue.queue_command("refresh")
        listing = [c.model_dump() for c in queue.get_pending_commands()]
        for item in listing:
            queue.resolve_command(str(item["id"]))
        await asyncio.gather(a, b)
        return listing

    listing = asyncio.run(scenario())
    assert [(c["name"], c["args"]) for c in listing] == [
        ("click_element", ["#a"]),
        ("refresh", []),
    ]
    assert len({c["id"] for c in listing}) == 2
