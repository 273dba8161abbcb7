"""Command bridge: host-side queue, command table and periodic loops."""

from __future__ import annotations

from .commands import COMMAND_TABLE, Capabilities, CommandName, execute_command
from .periodic import PeriodicTask
from .queue import CommandQueue, PendingCommand

__all__ = [
    "COMMAND_TABLE",
    "Capabilities",
    "CommandName",
    "execute_command",
    "PeriodicTask",
    "CommandQueue",
    "PendingCommand",
]
