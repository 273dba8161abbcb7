"""Capture hooks feeding the collector from inside the client runtime.

`setup_interceptors()` installs, once per process:

- **console**: a wrapper around ``builtins.print`` (level ``log``, or
  ``error`` when printing to stderr) and a root-logger handler mapping
  logging levels onto ``debug``/``info``/``warn``/``error``. The original
  output paths keep working. The HTTP client's request logs for
  ``ignore_urls`` are dropped.
- **network**: wrappers around ``httpx.Client.send`` and
  ``httpx.AsyncClient.send`` recording a pending entry per call, then
  settling it with status, duration, headers and (opt-in) JSON bodies, or
  with status 0 and the error message when the transport fails.
- **errors**: ``sys.excepthook``, ``threading.excepthook`` and, when an event
  loop is available, the loop's exception handler (unhandled task errors).

The returned callable restores every original hook and allows a later
re-installation. A second install while active logs a warning and returns
a callable that does nothing.
"""

from __future__ import annotations

import asyncio
import builtins
import functools
import logging
import sys
import threading
import time
import traceback
import uuid
from collections.abc import Callable
from typing import Any

import httpx

from livexray.client.redaction import capture_body, redact_headers
from livexray.core.collector import Collector
from livexray.core.config import XrayConfig
from livexray.core.contracts.snapshot import ConsoleEntry, ConsoleLevel, ErrorRecord, NetworkEntry
from livexray.core.serializer import stringify
from livexray.core.settings import get_logger

logger = get_logger("livexray.interceptors")

_is_intercepting = False
_cleanup_fns: list[Callable[[], None]] = []

ErrorCallback = Callable[[], None]


def is_intercepting() -> bool:
    return _is_intercepting


def _noop() -> None:
    return None


# --------------------------------------------------------------------------- #
# Console
# --------------------------------------------------------------------------- #


def console_level(levelno: int) -> ConsoleLevel:
    """Map a logging level number onto a console level."""
    if levelno >= logging.ERROR:
        return "error"
    if levelno >= logging.WARNING:
        return "warn"
    if levelno >= logging.INFO:
        return "info"
    return "debug"


class ConsoleCaptureHandler(logging.Handler):
    """Logging handler that copies every record into the collector."""

    def __init__(self, collector: Collector) -> None:
        super().__init__(level=logging.NOTSET)
        self._collector = collector

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self._collector.add_console(
                ConsoleEntry(
                    level=console_level(record.levelno),
                    message=record.getMessage(),
                    timestamp=int(record.created * 1000),
                )
            )
        except Exception:
            self.handleError(record)


class OwnTrafficFilter(logging.Filter):
    """Drop the HTTP client's request logs that mention an ignored URL."""

    CLIENT_LOGGERS = ("httpx", "httpcore")

    def __init__(self, ignore_urls: tuple[str, ...]) -> None:
        super().__init__()
        self._prefixes = ignore_urls

    def filter(self, record: logging.LogRecord) -> bool:
        if not self._prefixes or not record.name.startswith(self.CLIENT_LOGGERS):
            return True
        message = record.getMessage()
        return not any(prefix in message for prefix in self._prefixes)


def _install_console(collector: Collector, cfg: XrayConfig) -> Callable[[], None]:
    original_print = builtins.print

    @functools.wraps(original_print)
    def captured_print(*args: Any, sep: str | None = " ", end: str | None = "\n",
                       file: Any = None, flush: bool = False) -> None:
        stream = sys.stdout if file is None else file
        level: ConsoleLevel | None = None
        if stream is sys.stdout:
            level = "log"
        elif stream is sys.stderr:
            level = "error"
        if level is not None:
            separator = " " if sep is None else sep
            collector.add_console(
                ConsoleEntry(level=level, message=separator.join(stringify(a) for a in args))
            )
        original_print(*args, sep=sep, end=end, file=file, flush=flush)

    handler = ConsoleCaptureHandler(collector)
    handler.addFilter(OwnTrafficFilter(cfg.ignore_urls))
    root = logging.getLogger()
    builtins.print = captured_print
    root.addHandler(handler)

    def restore() -> None:
        builtins.print = original_print
        root.removeHandler(handler)

    return restore


# --------------------------------------------------------------------------- #
# Network
# --------------------------------------------------------------------------- #


def _elapsed_ms(start: float) -> int:
    return round((time.perf_counter() - start) * 1000)


def _request_text(request: httpx.Request) -> str | None:
    """Decoded request body, or None for streamed, multipart or binary bodies."""
    if request.headers.get("content-type", "").startswith("multipart/"):
        return None
    try:
        raw = request.content
    except httpx.RequestNotRead:
        return None
    if not raw:
        return None
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return None


def _record_request(collector: Collector, request: httpx.Request, cfg: XrayConfig) -> str:
    entry = NetworkEntry(
        id=uuid.uuid4().hex,
        url=str(request.url),
        method=request.method.upper(),
    )
    if cfg.capture_headers:
        entry.request_headers = redact_headers(dict(request.headers), cfg.redact_headers)
    if cfg.capture_bodies:
        text = _request_text(request)
        if text is not None:
            body, truncated = capture_body(text, cfg, request.headers.get("content-type", ""))
            entry.request_body = body
            if truncated:
                entry.request_body_truncated = True
    collector.add_network(entry)
    return entry.id


def _settled_fields(response: httpx.Response, cfg: XrayConfig, start: float) -> dict[str, Any]:
    fields: dict[str, Any] = {"status": response.status_code, "duration": _elapsed_ms(start)}
    if cfg.capture_headers:
        fields["response_headers"] = redact_headers(dict(response.headers), cfg.redact_headers)
    if cfg.capture_bodies and "application/json" in response.headers.get("content-type", ""):
        try:
            text = response.text
        except httpx.ResponseNotRead:
            return fields
        body, truncated = capture_body(text, cfg)
        fields["response_body"] = body
        if truncated:
            fields["response_body_truncated"] = True
    return fields


def _failed_fields(exc: Exception, start: float) -> dict[str, Any]:
    return {"status": 0, "duration": _elapsed_ms(start), "error": str(exc) or type(exc).__name__}


def _ignored(request: httpx.Request, cfg: XrayConfig) -> bool:
    url = str(request.url)
    return any(url.startswith(prefix) for prefix in cfg.ignore_urls)


def _safe_record(collector: Collector, request: httpx.Request, cfg: XrayConfig) -> str | None:
    """Record the pending entry; a capture failure is logged, never raised."""
    try:
        return _record_request(collector, request, cfg)
    except Exception:
        logger.exception("Failed to record %s %s", request.method, request.url)
        return None


def _safe_settle(collector: Collector, entry_id: str | None, build: Callable[[], Any]) -> None:
    """Merge ``build()`` into the entry; a capture failure is logged, never raised."""
    if entry_id is None:
        return
    try:
        collector.update_network(entry_id, **build())
    except Exception:
        logger.exception("Failed to settle network entry %s", entry_id)


def _install_network(collector: Collector, cfg: XrayConfig) -> Callable[[], None]:
    original_send = httpx.Client.send
    original_async_send = httpx.AsyncClient.send

    @functools.wraps(original_send)
    def send(self: httpx.Client, request: httpx.Request, **kwargs: Any) -> httpx.Response:
        if _ignored(request, cfg):
            return original_send(self, request, **kwargs)
        entry_id = _safe_record(collector, request, cfg)
        start = time.perf_counter()
        try:
            response = original_send(self, request, **kwargs)
        except Exception as exc:
            _safe_settle(collector, entry_id, lambda: _failed_fields(exc, start))
            raise
        _safe_settle(collector, entry_id, lambda: _settled_fields(response, cfg, start))
        return response

    @functools.wraps(original_async_send)
    async def async_send(
        self: httpx.AsyncClient, request: httpx.Request, **kwargs: Any
    ) -> httpx.Response:
        if _ignored(request, cfg):
            return await original_async_send(self, request, **kwargs)
        entry_id = _safe_record(collector, request, cfg)
        start = time.perf_counter()
        try:
            response = await original_async_send(self, request, **kwargs)
        except Exception as exc:
            _safe_settle(collector, entry_id, lambda: _failed_fields(exc, start))
            raise
        _safe_settle(collector, entry_id, lambda: _settled_fields(response, cfg, start))
        return response

    httpx.Client.send = send  # type: ignore[method-assign]
    httpx.AsyncClient.send = async_send  # type: ignore[method-assign]

    def restore() -> None:
        httpx.Client.send = original_send  # type: ignore[method-assign]
        httpx.AsyncClient.send = original_async_send  # type: ignore[method-assign]

    return restore


# --------------------------------------------------------------------------- #
# Uncaught errors
# --------------------------------------------------------------------------- #


def error_record(exc: BaseException) -> ErrorRecord:
    """Build an `ErrorRecord` (message + formatted traceback) from an exception."""
    return ErrorRecord(
        message=str(exc) or type(exc).__name__,
        stack="".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
    )


def _install_error_hooks(
    collector: Collector,
    loop: asyncio.AbstractEventLoop | None,
    on_error: ErrorCallback | None,
) -> Callable[[], None]:
    def record(error: ErrorRecord) -> None:
        collector.add_error(error)
        if on_error is not None:
            on_error()

    original_excepthook = sys.excepthook
    original_thread_hook = threading.excepthook

    def excepthook(exc_type: type[BaseException], exc: BaseException, tb: Any) -> None:
        record(error_record(exc if exc is not None else exc_type()))
        original_excepthook(exc_type, exc, tb)

    def thread_excepthook(args: threading.ExceptHookArgs) -> None:
        if args.exc_value is not None:
            record(error_record(args.exc_value))
        original_thread_hook(args)

    sys.excepthook = excepthook
    threading.excepthook = thread_excepthook

    previous_handler = None
    if loop is not None:
        previous_handler = loop.get_exception_handler()

        def loop_handler(
            event_loop: asyncio.AbstractEventLoop, context: dict[str, Any]
        ) -> None:
            exc = context.get("exception")
            if isinstance(exc, BaseException):
                record(error_record(exc))
            else:
                record(ErrorRecord(message=str(context.get("message", "Unhandled loop error"))))
            if previous_handler is not None:
                previous_handler(event_loop, context)
            else:
                event_loop.default_exception_handler(context)

        loop.set_exception_handler(loop_handler)

    def restore() -> None:
        sys.excepthook = original_excepthook
        threading.excepthook = original_thread_hook
        if loop is not None:
            loop.set_exception_handler(previous_handler)

    return restore


# --------------------------------------------------------------------------- #
# Install / teardown
# --------------------------------------------------------------------------- #


def setup_interceptors(
    collector: Collector,
    config: XrayConfig | None = None,
    *,
    loop: asyncio.AbstractEventLoop | None = None,
    on_error: ErrorCallback | None = None,
) -> Callable[[], None]:
    """Install every capture hook and return the teardown callable.

    Parameters
    ----------
    collector:
        Destination of every captured event.
    config:
        Capture options; defaults to ``collector.config``.
    loop:
        Event loop whose unhandled task errors should be captured. Defaults
        to the running loop, if any.
    on_error:
        Called after each captured uncaught error (used to push immediately).
    """
    global _is_intercepting, _cleanup_fns

    if _is_intercepting:
        logger.warning("Interceptors already set up")
        return _noop

    cfg = config if config is not None else collector.config
    if loop is None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

    _is_intercepting = True
    installed = [
        _install_console(collector, cfg),
        _install_network(collector, cfg),
        _install_error_hooks(collector, loop, on_error),
    ]
    _cleanup_fns = installed

    def teardown() -> None:
        global _is_intercepting, _cleanup_fns
        # A stale teardown must not remove a later installation.
        if _cleanup_fns is not installed:
            return
        for cleanup in reversed(installed):
            cleanup()
        _cleanup_fns = []
        _is_intercepting = False

    return teardown


__all__ = [
    "ConsoleCaptureHandler",
    "OwnTrafficFilter",
    "console_level",
    "error_record",
    "is_intercepting",
    "setup_interceptors",
]
