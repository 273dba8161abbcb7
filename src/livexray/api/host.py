"""
Host-side bridge state.

One `BridgeHost` exists per application instance (created by `create_app`
and stored on ``app.state``). It holds:

- **latest**: the most recently pushed `Snapshot`, replaced wholesale on
  every push and never merged, so readers see either the old or the new
  snapshot, never a mix.
- **commands**: the `CommandQueue` of pending commands.

Note on Persistence
-------------------
Volatile by design: a host restart forgets the snapshot (until the next
push) and every pending command (their callers see a timeout).
"""

from __future__ import annotations

from datetime import UTC, datetime

from livexray.bridge.queue import CommandQueue
from livexray.core.contracts.snapshot import Snapshot


class BridgeHost:
    """Latest snapshot plus pending-command table for one host process."""

    def __init__(self, command_timeout_ms: int = 5000) -> None:
        self.latest: Snapshot | None = None
        self.pushed_at: datetime | None = None
        self.commands = CommandQueue(default_timeout_ms=command_timeout_ms)

    def store(self, snapshot: Snapshot) -> None:
        """Replace the stored snapshot."""
        self.latest = snapshot
        self.pushed_at = datetime.now(UTC)

    def clear_transient(self) -> None:
        """Drop errors, warnings, console and network; keep registered state."""
        if self.latest is None:
            return
        self.latest = self.latest.model_copy(
            update={"errors": [], "warnings": [], "console": [], "network": []}
        )


__all__ = ["BridgeHost"]
