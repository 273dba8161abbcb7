"""Tests for the Collector buffers and the XrayContext holder.

Scenarios
---------
1. Register / unregister state.
2. FIFO eviction under a cap (errors cap=3, five inserts).
3. Network entries settled in place by id; unknown ids are ignored.
4. Snapshots are copies of the live buffers.
5. Worker threads and readers share one collector without racing.
"""

from __future__ import annotations

import sys
import threading
from unittest.mock import patch

from livexray.core import collector as collector_module
from livexray.core.collector import Collector, XrayContext
from livexray.core.config import XrayConfig
from livexray.core.contracts.snapshot import ConsoleEntry, ErrorRecord, NetworkEntry


def _net(entry_id: str) -> NetworkEntry:
    return NetworkEntry(id=entry_id, url=f"https://api.test/{entry_id}", method="GET")


def test_unregistered_state_is_absent_from_next_snapshot() -> None:
    c = Collector()
    c.register_state("Counter", {"count": 0})
    assert c.get_state().registered["Counter"].state == {"count": 0}

    c.unregister_state("Counter")
    assert "Counter" not in c.get_state().registered
    # Unknown names are ignored.
    c.unregister_state("Counter")


def test_register_state_last_write_wins() -> None:
    c = Collector()
    c.register_state("Form", {"step": 1})
    c.register_state("Form", {"step": 2})
    assert c.get_state().registered["Form"].state == {"step": 2}


def test_error_buffer_keeps_last_n_in_order() -> None:
    c = Collector(XrayConfig(max_errors=3))
    for i in range(5):
        c.add_error(ErrorRecord(message=f"E{i}"))
    assert [e.message for e in c.get_state().errors] == ["E2", "E3", "E4"]


def test_console_buffer_fifo_and_warning_mirror() -> None:
    c = Collector()
    for i in range(105):
        c.add_console(ConsoleEntry(level="log", message=f"m{i}"))
    c.add_console(ConsoleEntry(level="warn", message="careful"))

    state = c.get_state()
    assert len(state.console) == 100
    assert state.console[0].message == "m6"
    assert state.console[-1].message == "careful"
    assert state.warnings == ["careful"]


def test_warnings_cap_follows_errors_cap() -> None:
    c = Collector(XrayConfig(max_errors=2))
    for i in range(4):
        c.add_console(ConsoleEntry(level="warn", message=f"w{i}"))
    assert c.get_state().warnings == ["w2", "w3"]


def test_update_network_merges_fields() -> None:
    c = Collector()
    c.add_network(_net("n1"))
    c.update_network("n1", status=201, duration=12)

    entry = c.get_state().network[0]
    assert (entry.status, entry.duration) == (201, 12)


def test_update_network_on_evicted_id_is_noop() -> None:
    c = Collector(XrayConfig(max_network_entries=2))
    for i in range(3):
        c.add_network(_net(f"n{i}"))

    c.update_network("n0", status=500)

    network = c.get_state().network
    assert [e.id for e in network] == ["n1", "n2"]
    assert all(e.status is None for e in network)


def test_unknown_network_update_warning_is_configurable() -> None:
    quiet = Collector()
    loud = Collector(XrayConfig(warn_on_unknown_network_update=True))

    with patch.object(collector_module.logger, "warning") as warn:
        quiet.update_network("ghost", status=200)
        assert warn.call_count == 0
        loud.update_network("ghost", status=200)
        assert warn.call_count == 1


def test_snapshot_is_a_copy_with_location() -> None:
    c = Collector(location=lambda: ("http://app.local/home", "/home", "Home"))
    c.add_console(ConsoleEntry(level="info", message="first"))
    snap = c.get_state()
    c.add_console(ConsoleEntry(level="info", message="second"))

    assert [e.message for e in snap.console] == ["first"]
    assert (snap.url, snap.route, snap.title) == ("http://app.local/home", "/home", "Home")
    assert snap.timestamp.endswith("Z")


def test_clear_empties_everything() -> None:
    c = Collector()
    c.register_state("A", 1)
    c.add_error(ErrorRecord(message="x"))
    c.add_console(ConsoleEntry(level="warn", message="w"))
    c.add_network(_net("n"))
    c.clear()

    state = c.get_state()
    assert not state.registered and not state.errors and not state.warnings
    assert not state.console and not state.network


def test_context_is_noop_until_installed() -> None:
    ctx = XrayContext()
    ctx.register_state("A", 1)
    ctx.add_error("ignored")
    assert not ctx.active
    assert ctx.snapshot() is None

    c = Collector()
    ctx.install(c)
    ctx.register_state("A", 1)
    ctx.add_error("render failed", component_stack="in <Widget>")
    snap = ctx.snapshot()
    assert snap is not None
    assert snap.registered["A"].state == 1
    assert snap.errors[0].component_stack == "in <Widget>"

    ctx.teardown()
    assert ctx.collector is None
    assert ctx.snapshot() is None


def test_threaded_writer_and_readers_do_not_race() -> None:
    """A worker thread appending while another settles and snapshots never raises."""
    c = Collector(XrayConfig(max_network_entries=20))
    failures: list[str] = []
    stop = threading.Event()

    def writer() -> None:
        i = 0
        while not stop.is_set():
            c.add_network(_net(f"w{i}"))
            c.add_console(ConsoleEntry(level="warn", message=f"w{i}"))
            i += 1

    interval = sys.getswitchinterval()
    sys.setswitchinterval(1e-6)
    thread = threading.Thread(target=writer)
    thread.start()
    try:
        for _ in range(2000):
            try:
                c.update_network("missing", status=200)
                c.get_state()
            except RuntimeError as exc:
                failures.append(str(exc))
    finally:
        stop.set()
        thread.join()
        sys.setswitchinterval(interval)

    assert failures == []
    state = c.get_state()
    assert len(state.network) == 20
    assert len(state.console) <= 100
