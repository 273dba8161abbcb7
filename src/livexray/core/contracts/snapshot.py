"""Snapshot contracts shared by the client runtime and the host process.

The client's `Collector` stores these models in its buffers and builds a
fresh `Snapshot` on every `get_state()`; the host validates every pushed
payload back into a `Snapshot` before replacing its stored copy.

Timestamps on entries are integer milliseconds since the epoch; the
snapshot's own `timestamp` is an ISO-8601 string frozen at capture time.
"""

from __future__ import annotations

import time
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

ConsoleLevel = Literal["log", "warn", "error", "info", "debug"]


def now_ms() -> int:
    """Current wall-clock time in integer milliseconds."""
    return int(time.time() * 1000)


class ConsoleEntry(BaseModel):
    """One captured console line."""

    level: ConsoleLevel
    message: str
    timestamp: int = Field(default_factory=now_ms)


class NetworkEntry(BaseModel):
    """One outbound call; created pending and settled in place by `id`."""

    id: str
    url: str
    method: str
    status: int | None = None
    duration: int | None = None
    timestamp: int = Field(default_factory=now_ms)
    error: str | None = None

    request_headers: dict[str, str] | None = None
    response_headers: dict[str, str] | None = None
    request_body: Any = None
    response_body: Any = None
    request_body_truncated: bool | None = None
    response_body_truncated: bool | None = None


class ErrorRecord(BaseModel):
    """An uncaught error, unhandled rejection or error-boundary report."""

    message: str
    stack: str | None = None
    timestamp: int = Field(default_factory=now_ms)
    component_stack: str | None = None


class RegisteredState(BaseModel):
    """Named opaque state registered by an adapter (last write wins)."""

    name: str
    state: Any = None
    updated_at: int = Field(default_factory=now_ms)


class Snapshot(BaseModel):
    """Point-in-time capture of every collector buffer.

    Fields
    ------
    timestamp : str
        ISO-8601 capture time.
    url, route, title : str
        Location metadata supplied by the client runtime.
    registered : dict[str, RegisteredState]
        Component name -> registered state.
    errors, warnings, console, network : list
        Bounded buffers in insertion order (oldest first).
    """

    model_config = ConfigDict(extra="ignore")

    timestamp: str = ""
    url: str = ""
    route: str = ""
    title: str = ""
    registered: dict[str, RegisteredState] = Field(default_factory=dict)
    errors: list[ErrorRecord] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    console: list[ConsoleEntry] = Field(default_factory=list)
    network: list[NetworkEntry] = Field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        """Return a plain dict for the serializer.

        Registered state stays as the raw (possibly cyclic) value; only the
        cycle-safe serializer is allowed to walk it.
        """
        data = self.model_dump(exclude={"registered"})
        data["registered"] = {
            key: {"name": entry.name, "state": entry.state, "updated_at": entry.updated_at}
            for key, entry in self.registered.items()
        }
        return data


__all__ = [
    "ConsoleLevel",
    "now_ms",
    "ConsoleEntry",
    "NetworkEntry",
    "ErrorRecord",
    "RegisteredState",
    "Snapshot",
]
