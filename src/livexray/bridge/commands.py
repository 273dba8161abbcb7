"""Closed set of commands the client runtime can execute.

The host queues commands by wire name; the client resolves each name
through the fixed `COMMAND_TABLE` below. Names outside `CommandName` are
rejected with `UnknownCommandError` rather than looked up dynamically.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Sequence
from enum import Enum
from typing import Any, Protocol

from livexray.core.errors import UnknownCommandError
from livexray.core.result import Result, err, ok


class CommandName(str, Enum):
    """Wire names of every supported operation."""

    PING = "ping"
    QUERY_DOM = "query_dom"
    CLICK_ELEMENT = "click_element"
    FILL_INPUT = "fill_input"
    SCROLL_TO = "scroll_to"
    NAVIGATE = "navigate"
    REFRESH = "refresh"
    GO_BACK = "go_back"
    GO_FORWARD = "go_forward"
    CAPTURE_SCREENSHOT = "capture_screenshot"
    GET_VIEWPORT_INFO = "get_viewport_info"
    GET_PERFORMANCE_METRICS = "get_performance_metrics"
    GET_STORAGE_INFO = "get_storage_info"
    GET_FOCUS_INFO = "get_focus_info"
    GET_ACCESSIBILITY_INFO = "get_accessibility_info"
    GET_ACTIONS = "get_actions"
    EXECUTE_ACTION = "execute_action"

    @classmethod
    def parse(cls, name: str) -> CommandName:
        """Return the member for ``name`` or raise `UnknownCommandError`."""
        try:
            return cls(name)
        except ValueError:
            raise UnknownCommandError(name) from None


class Capabilities(Protocol):
    """Operations the client runtime exposes to the host."""

    def query_dom(self, selector: str, options: dict[str, Any] | None = None) -> Any: ...
    def click_element(self, selector: str) -> Any: ...
    def fill_input(self, selector: str, value: str) -> Any: ...
    def scroll_to(self, target: Any) -> Any: ...
    def navigate(self, url: str, options: dict[str, Any] | None = None) -> Any: ...
    def refresh(self, options: dict[str, Any] | None = None) -> Any: ...
    def go_back(self) -> Any: ...
    def go_forward(self) -> Any: ...
    def capture_screenshot(self) -> Any: ...
    def get_viewport_info(self) -> Any: ...
    def get_performance_metrics(self) -> Any: ...
    def get_storage_info(self) -> Any: ...
    def get_focus_info(self) -> Any: ...
    def get_accessibility_info(self, selector: str | None = None) -> Any: ...
    def get_actions(self) -> Any: ...
    def execute_action(self, name: str, args: Sequence[Any] | None = None) -> Any: ...


Handler = Callable[..., Any]


def _ping(*_: Any) -> str:
    return "pong"


COMMAND_TABLE: dict[CommandName, Callable[[Capabilities], Handler]] = {
    CommandName.PING: lambda caps: _ping,
    CommandName.QUERY_DOM: lambda caps: caps.query_dom,
    CommandName.CLICK_ELEMENT: lambda caps: caps.click_element,
    CommandName.FILL_INPUT: lambda caps: caps.fill_input,
    CommandName.SCROLL_TO: lambda caps: caps.scroll_to,
    CommandName.NAVIGATE: lambda caps: caps.navigate,
    CommandName.REFRESH: lambda caps: caps.refresh,
    CommandName.GO_BACK: lambda caps: caps.go_back,
    CommandName.GO_FORWARD: lambda caps: caps.go_forward,
    CommandName.CAPTURE_SCREENSHOT: lambda caps: caps.capture_screenshot,
    CommandName.GET_VIEWPORT_INFO: lambda caps: caps.get_viewport_info,
    CommandName.GET_PERFORMANCE_METRICS: lambda caps: caps.get_performance_metrics,
    CommandName.GET_STORAGE_INFO: lambda caps: caps.get_storage_info,
    CommandName.GET_FOCUS_INFO: lambda caps: caps.get_focus_info,
    CommandName.GET_ACCESSIBILITY_INFO: lambda caps: caps.get_accessibility_info,
    CommandName.GET_ACTIONS: lambda caps: caps.get_actions,
    CommandName.EXECUTE_ACTION: lambda caps: caps.execute_action,
}


async def execute_command(
    capabilities: Capabilities, name: str, args: Sequence[Any] = ()
) -> Result[Any, str]:
    """Run one command and capture its outcome.

    Returns ``Ok(result)`` or ``Err(message)``; nothing raised by the handler
    (nor an unknown name) escapes.
    """
    try:
        handler = COMMAND_TABLE[CommandName.parse(name)](capabilities)
        result = handler(*args)
        if inspect.isawaitable(result):
            result = await result
    except Exception as exc:
        return err(str(exc) or type(exc).__name__)
    return ok(result)


__all__ = ["CommandName", "Capabilities", "COMMAND_TABLE", "execute_command"]
