"""Pydantic contracts exchanged between the client runtime and the host."""

from __future__ import annotations

from .assertion import AssertionResult
from .command import CommandReport, PendingCommandView
from .snapshot import (
    ConsoleEntry,
    ConsoleLevel,
    ErrorRecord,
    NetworkEntry,
    RegisteredState,
    Snapshot,
    now_ms,
)

__all__ = [
    "AssertionResult",
    "CommandReport",
    "PendingCommandView",
    "ConsoleEntry",
    "ConsoleLevel",
    "ErrorRecord",
    "NetworkEntry",
    "RegisteredState",
    "Snapshot",
    "now_ms",
]
