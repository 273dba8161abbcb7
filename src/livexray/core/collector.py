"""Bounded state/event collector and its explicit context holder.

Milestone
---------
Client runtime | Collector

The `Collector` owns every buffer of one client runtime instance:

- ``registered``: name -> `RegisteredState`, unbounded by key, last write wins.
- ``errors``, ``console``, ``network``, ``warnings``: FIFO buffers, each capped
  by `XrayConfig`; the oldest entries are evicted once a buffer is full.

Every mutation and every snapshot copy holds one re-entrant lock, so worker
threads making httpx calls can share a collector with the event loop, and
no buffer is ever observed above its cap.

`XrayContext` replaces a process-wide "current collector" pointer. Adapters
(framework hooks, interceptors, error boundaries) receive the context at
initialization and call through it; every call is a no-op while no collector
is installed.
"""

from __future__ import annotations

import threading
from collections import deque
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, TypeVar

from livexray.core.config import XrayConfig
from livexray.core.contracts.snapshot import (
    ConsoleEntry,
    ErrorRecord,
    NetworkEntry,
    RegisteredState,
    Snapshot,
    now_ms,
)
from livexray.core.settings import get_logger

T = TypeVar("T")

logger = get_logger("livexray.collector")


def _location_unknown() -> tuple[str, str, str]:
    return ("", "", "")


class Collector:
    """Owner of the registered-state map and the capped event buffers.

    Parameters
    ----------
    config:
        Caps and flags; defaults to `XrayConfig()` (console 100, network 50,
        errors 50, warnings = errors cap).
    location:
        Callable returning ``(url, route, title)`` for snapshot metadata.
        The client runtime supplies one; the default reports empty strings.
    """

    __slots__ = (
        "config",
        "_location",
        "_registered",
        "_errors",
        "_warnings",
        "_console",
        "_network",
        "_lock",
    )

    def __init__(
        self,
        config: XrayConfig | None = None,
        location: Callable[[], tuple[str, str, str]] | None = None,
    ) -> None:
        self.config: XrayConfig = config if config is not None else XrayConfig()
        self._location = location or _location_unknown
        self._registered: dict[str, RegisteredState] = {}
        self._errors: deque[ErrorRecord] = deque()
        self._warnings: deque[str] = deque()
        self._console: deque[ConsoleEntry] = deque()
        self._network: deque[NetworkEntry] = deque()
        self._lock = threading.RLock()

    # ------------------------------- Buffers --------------------------------

    @staticmethod
    def _append(buffer: deque[T], item: T, cap: int) -> None:
        buffer.append(item)
        while len(buffer) > cap:
            buffer.popleft()

    def register_state(self, name: str, state: Any) -> None:
        """Upsert ``state`` under ``name`` and stamp the update time."""
        record = RegisteredState(name=name, state=state, updated_at=now_ms())
        with self._lock:
            self._registered[name] = record

    def unregister_state(self, name: str) -> None:
        """Drop ``name``; unknown names are ignored."""
        with self._lock:
            self._registered.pop(name, None)

    def add_error(self, error: ErrorRecord) -> None:
        with self._lock:
            self._append(self._errors, error, self.config.max_errors)

    def add_console(self, entry: ConsoleEntry) -> None:
        """Append a console line; ``warn`` lines are mirrored into ``warnings``."""
        with self._lock:
            self._append(self._console, entry, self.config.max_console_entries)
            if entry.level == "warn":
                self._append(self._warnings, entry.message, self.config.warnings_cap)

    def add_network(self, entry: NetworkEntry) -> None:
        with self._lock:
            self._append(self._network, entry, self.config.max_network_entries)

    def update_network(self, entry_id: str, **fields: Any) -> None:
        """Merge ``fields`` into the first network entry with ``entry_id``.

        The entry may already have been evicted by the time its call settles;
        in that case nothing happens (optionally logged as a warning).
        """
        with self._lock:
            for entry in self._network:
                if entry.id == entry_id:
                    for key, value in fields.items():
                        setattr(entry, key, value)
                    return
        if self.config.warn_on_unknown_network_update:
            logger.warning("Network update for unknown entry %s ignored", entry_id)

    def clear(self) -> None:
        """Empty every buffer and the registered-state map."""
        with self._lock:
            self._registered.clear()
            self._errors.clear()
            self._warnings.clear()
            self._console.clear()
            self._network.clear()

    # ------------------------------- Snapshot -------------------------------

    def get_state(self) -> Snapshot:
        """Build a new `Snapshot` from the live buffers.

        Lists and the registered map are copied, so callers can not reach the
        collector's internals through the snapshot.
        """
        url, route, title = self._location()
        with self._lock:
            registered = dict(self._registered)
            errors = list(self._errors)
            warnings = list(self._warnings)
            console = list(self._console)
            network = [entry.model_copy() for entry in self._network]
        return Snapshot(
            timestamp=datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            url=url,
            route=route,
            title=title,
            registered=registered,
            errors=errors,
            warnings=warnings,
            console=console,
            network=network,
        )


class XrayContext:
    """Explicit holder of the active collector.

    Lifecycle: the client runtime is the single writer. It calls
    `install()` once at start-up and `teardown()` on shutdown; adapters
    only read through the helpers below.
    """

    __slots__ = ("_collector",)

    def __init__(self, collector: Collector | None = None) -> None:
        self._collector = collector

    @property
    def collector(self) -> Collector | None:
        return self._collector

    @property
    def active(self) -> bool:
        return self._collector is not None

    def install(self, collector: Collector) -> None:
        self._collector = collector

    def teardown(self) -> None:
        self._collector = None

    # Adapter-facing helpers: all no-ops without a collector.

    def register_state(self, name: str, state: Any) -> None:
        if self._collector is not None:
            self._collector.register_state(name, state)

    def unregister_state(self, name: str) -> None:
        if self._collector is not None:
            self._collector.unregister_state(name)

    def add_error(
        self,
        message: str,
        stack: str | None = None,
        component_stack: str | None = None,
    ) -> None:
        if self._collector is not None:
            self._collector.add_error(
                ErrorRecord(message=message, stack=stack, component_stack=component_stack)
            )

    def snapshot(self) -> Snapshot | None:
        return self._collector.get_state() if self._collector is not None else None


__all__ = ["Collector", "XrayContext"]
