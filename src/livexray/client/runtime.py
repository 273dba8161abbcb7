"""
Client runtime: the half of the bridge that lives inside the inspected app.

The host can not open connections to the app, so the runtime drives the
whole exchange with two independent periodic tasks:

- **push** (default every 500 ms): serialize a fresh collector snapshot and
  ``POST {base}/push``. The host keeps only the latest one.
- **poll** (default every 100 ms): ``GET {base}/commands``, execute each new
  command through the capability table and ``POST {base}/result`` with
  ``{id, result, error}``.

Each task allows one cycle in flight at a time. Transport failures are
logged at debug level and otherwise ignored; the next cycle simply retries.

Usage
-----
    async with XrayClient("http://127.0.0.1:9876/xray") as xray:
        xray.context.register_state("Counter", {"count": 0})
        ...
"""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import Callable
from typing import Any

import httpx

from livexray.bridge.commands import Capabilities, execute_command
from livexray.bridge.periodic import PeriodicTask, Sleep
from livexray.client.capabilities import RuntimeCapabilities
from livexray.client.interceptors import setup_interceptors
from livexray.core.collector import Collector, XrayContext
from livexray.core.config import SECRET_HEADER, XrayConfig
from livexray.core.contracts.command import PendingCommandView
from livexray.core.serializer import serialize
from livexray.core.settings import get_logger, load_settings

logger = get_logger("livexray.client")

JSON_HEADERS = {"Content-Type": "application/json"}

# Registered state sits three levels below the snapshot root.
SNAPSHOT_MAX_DEPTH = 20
# Command ids remembered to keep execution at-most-once per id.
EXECUTED_HISTORY = 1000


class XrayClient:
    """Push/poll agent connecting one client runtime to the host.

    Parameters
    ----------
    base_url:
        Host route prefix as seen from this process, e.g.
        ``http://127.0.0.1:9876/xray``. Defaults to ``XRAY_URL``.
    config:
        Collector/interceptor options; defaults to the env settings. The
        host URL is always added to ``ignore_urls``.
    capabilities:
        Command implementations; defaults to `RuntimeCapabilities()`.
    http:
        Pre-built ``httpx.AsyncClient`` (tests pass one bound to an ASGI
        transport). A client built here is closed by `stop()`.
    intercept:
        Install console/network/error interceptors on `start()`.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        config: XrayConfig | None = None,
        capabilities: Capabilities | None = None,
        secret: str | None = None,
        push_interval_ms: int | None = None,
        poll_interval_ms: int | None = None,
        location: Callable[[], tuple[str, str, str]] | None = None,
        http: httpx.AsyncClient | None = None,
        intercept: bool = True,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        env = load_settings()
        self.base_url = (base_url or env.url).rstrip("/")

        cfg = config if config is not None else env.xray_config()
        self.config = cfg.model_copy(update={"ignore_urls": (*cfg.ignore_urls, self.base_url)})
        self.collector = Collector(self.config, location=location)
        self.context = XrayContext()
        self.capabilities: Capabilities = capabilities or RuntimeCapabilities()
        self.intercept = intercept

        secret = secret if secret is not None else env.secret
        self._headers = {SECRET_HEADER: secret} if secret else {}
        self._owns_http = http is None
        self._http = http if http is not None else httpx.AsyncClient(timeout=5.0)

        self.pusher = PeriodicTask(
            "push", push_interval_ms or env.push_interval_ms, self.push_state, sleep
        )
        self.poller = PeriodicTask(
            "poll", poll_interval_ms or env.poll_interval_ms, self.poll_commands, sleep
        )
        self._executed: deque[str] = deque(maxlen=EXECUTED_HISTORY)
        self._teardown: Callable[[], None] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    # ------------------------------- Lifecycle ------------------------------

    async def start(self) -> None:
        """Install the collector, the interceptors and both periodic tasks."""
        self._loop = asyncio.get_running_loop()
        self.context.install(self.collector)
        if self.intercept:
            self._teardown = setup_interceptors(
                self.collector, loop=self._loop, on_error=self.request_push
            )
        self.pusher.start()
        self.poller.start()
        logger.info("Client runtime connected to %s", self.base_url)

    async def stop(self) -> None:
        """Stop both tasks, restore hooks and release the collector."""
        await self.pusher.stop()
        await self.poller.stop()
        if self._teardown is not None:
            self._teardown()
            self._teardown = None
        self.context.teardown()
        if self._owns_http:
            await self._http.aclose()
        self._loop = None

    async def __aenter__(self) -> XrayClient:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()

    # ------------------------------- Cycles ---------------------------------

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path}"

    async def push_state(self) -> None:
        """Serialize the current snapshot and send it to the host."""
        snapshot = self.context.snapshot()
        if snapshot is None:
            return
        body = serialize(snapshot.to_payload(), max_depth=SNAPSHOT_MAX_DEPTH)
        response = await self._http.post(
            self._url("push"), content=body, headers={**JSON_HEADERS, **self._headers}
        )
        response.raise_for_status()

    async def poll_commands(self) -> None:
        """Fetch pending commands, execute the new ones and report results."""
        response = await self._http.get(self._url("commands"), headers=self._headers)
        response.raise_for_status()

        for item in response.json():
            command = PendingCommandView.model_validate(item)
            if command.id in self._executed:
                continue
            self._executed.append(command.id)

            outcome = await execute_command(self.capabilities, command.name, command.args)
            report = {
                "id": command.id,
                "result": outcome.get_or(None),
                "error": outcome.unwrap_err() if outcome.is_err() else None,
            }
            await self._http.post(
                self._url("result"),
                content=serialize(report, max_depth=SNAPSHOT_MAX_DEPTH),
                headers={**JSON_HEADERS, **self._headers},
            )

    def request_push(self) -> None:
        """Schedule an early push; safe to call from any thread."""
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        loop.call_soon_threadsafe(self.pusher.trigger)


__all__ = ["XrayClient", "SNAPSHOT_MAX_DEPTH"]
