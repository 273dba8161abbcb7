"""
Host-side pending-command table.

The host can not reach the client runtime, so every command is parked here
until the client's poll loop picks it up (`get_pending_commands`) and posts
the outcome back (`resolve_command`).

Responsibilities
----------------
- **Queue**: allocate a random id, park the command, start its timer.
- **Resolve**: settle the caller's future with the reported result or error.
- **Expire**: settle the caller's future with `CommandTimeoutError`.

Exactly one of resolve/expire wins for a given id; whichever runs first
removes the record, so a late or duplicate result is silently ignored.

Note on Persistence
-------------------
The table lives in host memory only. A host restart drops every pending
command; a client reload mid-flight loses the command and the caller sees a
timeout.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from livexray.core.contracts.command import PendingCommandView
from livexray.core.errors import CommandFailedError, CommandTimeoutError
from livexray.core.settings import get_logger

logger = get_logger("livexray.bridge")

DEFAULT_TIMEOUT_MS = 5000


@dataclass(slots=True)
class PendingCommand:
    """A command awaiting execution and result delivery."""

    id: str
    name: str
    args: list[Any]
    created_at: datetime
    future: asyncio.Future[Any]
    timeout: asyncio.TimerHandle


class CommandQueue:
    """Pending-command table owned by one host process.

    All methods must be called from the event loop thread; each mutation
    completes inside a single callback, so no locking is needed.
    """

    def __init__(self, default_timeout_ms: int = DEFAULT_TIMEOUT_MS) -> None:
        self.default_timeout_ms = default_timeout_ms
        self._pending: dict[str, PendingCommand] = {}

    def __len__(self) -> int:
        return len(self._pending)

    def queue_command(
        self,
        name: str,
        args: list[Any] | None = None,
        timeout_ms: int | None = None,
    ) -> asyncio.Future[Any]:
        """Park ``name(*args)`` for the client and return a future for its result.

        The command is visible to `get_pending_commands` as soon as this
        returns. The future fails with `CommandTimeoutError` after
        ``timeout_ms`` (default: the queue's default) or with
        `CommandFailedError` when the client reports an error.
        """
        loop = asyncio.get_running_loop()
        command_id = uuid.uuid4().hex
        delay = (timeout_ms if timeout_ms is not None else self.default_timeout_ms) / 1000
        future: asyncio.Future[Any] = loop.create_future()

        self._pending[command_id] = PendingCommand(
            id=command_id,
            name=name,
            args=list(args or []),
            created_at=datetime.now(UTC),
            future=future,
            timeout=loop.call_later(delay, self._expire, command_id),
        )
        logger.debug("Queued command %s (%s)", name, command_id)
        return future

    def resolve_command(
        self, command_id: str, result: Any = None, error: str | None = None
    ) -> bool:
        """Settle a pending command; return ``False`` for unknown or settled ids."""
        pending = self._pending.pop(command_id, None)
        if pending is None:
            logger.debug("Ignoring result for unknown command %s", command_id)
            return False

        pending.timeout.cancel()
        if pending.future.done():
            return False
        if error:
            pending.future.set_exception(CommandFailedError(pending.name, error))
        else:
            pending.future.set_result(result)
        logger.debug("Resolved command %s (%s)", pending.name, command_id)
        return True

    def get_pending_commands(self) -> list[PendingCommandView]:
        """List every outstanding command as ``{id, name, args}``."""
        return [
            PendingCommandView(id=p.id, name=p.name, args=list(p.args))
            for p in self._pending.values()
        ]

    def _expire(self, command_id: str) -> None:
        pending = self._pending.pop(command_id, None)
        if pending is None or pending.future.done():
            return
        logger.debug("Command %s (%s) timed out", pending.name, command_id)
        pending.future.set_exception(CommandTimeoutError(pending.name))


__all__ = ["DEFAULT_TIMEOUT_MS", "PendingCommand", "CommandQueue"]
