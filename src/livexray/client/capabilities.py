"""Operations the client runtime exposes to the host, plus the action registry.

`RuntimeCapabilities` is the default implementation of the `Capabilities`
protocol. Page-level primitives (DOM queries, clicks, navigation,
screenshots) belong to the embedding application: subclass and override
them. Out of the box they report ``{"success": False, "error": "No document"}``
or empty diagnostics, which is what a runtime without a page can honestly say.

Actions are the application's own named operations (e.g. "login as admin",
"reset fixtures") that external callers can list and run through the bridge.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any

NO_DOCUMENT: dict[str, Any] = {"success": False, "error": "No document"}


@dataclass(slots=True)
class Action:
    """A named, externally triggerable operation."""

    name: str
    handler: Callable[..., Any | Awaitable[Any]]
    description: str | None = None


class RuntimeCapabilities:
    """Default capability table with a working action registry."""

    def __init__(self) -> None:
        self._actions: dict[str, Action] = {}

    # ------------------------------- Actions --------------------------------

    def register_action(
        self,
        name: str,
        handler: Callable[..., Any],
        description: str | None = None,
    ) -> None:
        self._actions[name] = Action(name=name, handler=handler, description=description)

    def unregister_action(self, name: str) -> None:
        self._actions.pop(name, None)

    def get_actions(self) -> list[dict[str, Any]]:
        return [{"name": a.name, "description": a.description} for a in self._actions.values()]

    async def execute_action(self, name: str, args: Sequence[Any] | None = None) -> dict[str, Any]:
        """Run a registered action; failures are reported, never raised."""
        action = self._actions.get(name)
        if action is None:
            return {"success": False, "error": f'Action "{name}" not found'}
        try:
            result = action.handler(*(args or []))
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:
            return {"success": False, "error": str(exc)}
        return {"success": True, "result": result}

    # --------------------------- Page primitives ----------------------------

    def query_dom(self, selector: str, options: dict[str, Any] | None = None) -> Any:
        return {
            "found": False,
            "count": 0,
            "html": None,
            "text": None,
            "attributes": None,
            "bounding_rect": None,
            "visible": False,
        }

    def click_element(self, selector: str) -> Any:
        return dict(NO_DOCUMENT)

    def fill_input(self, selector: str, value: str) -> Any:
        return dict(NO_DOCUMENT)

    def scroll_to(self, target: Any) -> Any:
        return dict(NO_DOCUMENT)

    def navigate(self, url: str, options: dict[str, Any] | None = None) -> Any:
        return dict(NO_DOCUMENT)

    def refresh(self, options: dict[str, Any] | None = None) -> Any:
        return dict(NO_DOCUMENT)

    def go_back(self) -> Any:
        return dict(NO_DOCUMENT)

    def go_forward(self) -> Any:
        return dict(NO_DOCUMENT)

    def capture_screenshot(self) -> Any:
        return None

    # ----------------------------- Diagnostics ------------------------------

    def get_viewport_info(self) -> Any:
        return {"width": 0, "height": 0, "scroll_x": 0, "scroll_y": 0, "device_pixel_ratio": 1}

    def get_performance_metrics(self) -> Any:
        return {
            "dom_content_loaded": None,
            "load_complete": None,
            "used_heap_size": None,
            "total_heap_size": None,
            "render_count": 0,
        }

    def get_storage_info(self) -> Any:
        return {"local_storage": {}, "session_storage": {}}

    def get_focus_info(self) -> Any:
        return {"active_element": None, "active_element_id": None, "active_element_classes": []}

    def get_accessibility_info(self, selector: str | None = None) -> Any:
        return {}


__all__ = ["NO_DOCUMENT", "Action", "RuntimeCapabilities"]
