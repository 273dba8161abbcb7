"""
Interaction, navigation and diagnostics routes.

Each endpoint is a thin wrapper: validate the query parameters, queue one
fixed command for the client runtime and return its settled result. A
command that is never picked up fails with 504; one the client reports as
failed fails with 502 (see the handlers in `livexray.api.app`).

Endpoints
---------
- `GET /dom?selector=&styles=&all=`         -> query_dom
- `GET /click?selector=`                    -> click_element
- `GET|POST /fill`                          -> fill_input
- `GET /scroll?selector=` or `?x=&y=`       -> scroll_to
- `GET /navigate?url=&replace=`             -> navigate
- `GET /refresh`, `/back`, `/forward`       -> refresh / go_back / go_forward
- `GET /diagnostics`                        -> five info commands, concurrently
- `GET /a11y?selector=`                     -> get_accessibility_info
- `GET /screenshot`                         -> capture_screenshot
- `GET /actions`, `POST /action`            -> get_actions / execute_action
"""

from __future__ import annotations

import asyncio
from typing import Any

from fastapi import APIRouter, Depends

from livexray.api.deps import get_host, get_settings, read_json_body
from livexray.api.host import BridgeHost
from livexray.bridge.commands import CommandName
from livexray.core.errors import ProtocolError
from livexray.core.settings import Settings

router = APIRouter(tags=["Interaction"])

SCREENSHOT_HINT = (
    "The client runtime has no screenshot support. Override "
    "RuntimeCapabilities.capture_screenshot to return an image data URL."
)


async def run_command(
    host: BridgeHost,
    name: CommandName,
    args: list[Any] | None = None,
    timeout_ms: int | None = None,
) -> Any:
    """Queue ``name`` for the client runtime and wait for its result."""
    return await host.commands.queue_command(name.value, args, timeout_ms)


def _flag(raw: str | None) -> bool:
    return raw == "true"


def _require(value: Any, message: str) -> Any:
    if value is None or value == "":
        raise ProtocolError(message)
    return value


@router.get("/dom", summary="Query DOM elements")
async def query_dom(
    selector: str | None = None,
    styles: str | None = None,
    all: str | None = None,
    host: BridgeHost = Depends(get_host),
) -> Any:
    _require(selector, "Missing selector parameter")
    options = {"include_styles": _flag(styles), "all": _flag(all)}
    return await run_command(host, CommandName.QUERY_DOM, [selector, options])


@router.get("/click", summary="Click an element")
async def click(selector: str | None = None, host: BridgeHost = Depends(get_host)) -> Any:
    _require(selector, "Missing selector parameter")
    return await run_command(host, CommandName.CLICK_ELEMENT, [selector])


@router.get("/fill", summary="Fill an input (query parameters)")
async def fill_get(
    selector: str | None = None,
    value: str | None = None,
    host: BridgeHost = Depends(get_host),
) -> Any:
    if not selector or value is None:
        raise ProtocolError("Missing selector or value parameter")
    return await run_command(host, CommandName.FILL_INPUT, [selector, value])


@router.post("/fill", summary="Fill an input (JSON body)")
async def fill_post(
    payload: Any = Depends(read_json_body),
    host: BridgeHost = Depends(get_host),
) -> Any:
    body = payload if isinstance(payload, dict) else {}
    selector, value = body.get("selector"), body.get("value")
    if not selector or value is None:
        raise ProtocolError("Missing selector or value")
    return await run_command(host, CommandName.FILL_INPUT, [selector, value])


@router.get("/scroll", summary="Scroll to an element or a position")
async def scroll(
    selector: str | None = None,
    x: str | None = None,
    y: str | None = None,
    host: BridgeHost = Depends(get_host),
) -> Any:
    target: Any
    if selector:
        target = selector
    elif x is not None and y is not None:
        try:
            target = {"x": int(x), "y": int(y)}
        except ValueError:
            raise ProtocolError("x and y must be integers") from None
    else:
        raise ProtocolError("Missing selector or x,y parameters")
    return await run_command(host, CommandName.SCROLL_TO, [target])


@router.get("/navigate", summary="Navigate to a URL")
async def navigate(
    url: str | None = None,
    replace: str | None = None,
    host: BridgeHost = Depends(get_host),
) -> Any:
    _require(url, "Missing url parameter")
    return await run_command(host, CommandName.NAVIGATE, [url, {"replace": _flag(replace)}])


@router.get("/refresh", summary="Reload the current page")
async def refresh(host: BridgeHost = Depends(get_host)) -> Any:
    return await run_command(host, CommandName.REFRESH)


@router.get("/back", summary="Go back in history")
async def back(host: BridgeHost = Depends(get_host)) -> Any:
    return await run_command(host, CommandName.GO_BACK)


@router.get("/forward", summary="Go forward in history")
async def forward(host: BridgeHost = Depends(get_host)) -> Any:
    return await run_command(host, CommandName.GO_FORWARD)


@router.get("/diagnostics", summary="Viewport, performance, storage, focus and a11y")
async def diagnostics(host: BridgeHost = Depends(get_host)) -> dict[str, Any]:
    """Queue the five info commands together; the slowest one bounds the call."""
    viewport, performance, storage, focus, accessibility = await asyncio.gather(
        run_command(host, CommandName.GET_VIEWPORT_INFO),
        run_command(host, CommandName.GET_PERFORMANCE_METRICS),
        run_command(host, CommandName.GET_STORAGE_INFO),
        run_command(host, CommandName.GET_FOCUS_INFO),
        run_command(host, CommandName.GET_ACCESSIBILITY_INFO),
    )
    return {
        "viewport": viewport,
        "performance": performance,
        "storage": storage,
        "focus": focus,
        "accessibility": accessibility,
    }


@router.get("/a11y", summary="Accessibility info")
async def accessibility(
    selector: str | None = None, host: BridgeHost = Depends(get_host)
) -> Any:
    return await run_command(host, CommandName.GET_ACCESSIBILITY_INFO, [selector or None])


@router.get("/screenshot", summary="Capture a screenshot")
async def screenshot(
    host: BridgeHost = Depends(get_host),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    result = await run_command(
        host, CommandName.CAPTURE_SCREENSHOT, timeout_ms=settings.screenshot_timeout_ms
    )
    if result is None:
        return {"error": "Screenshot capture is not available", "hint": SCREENSHOT_HINT}
    return {"screenshot": result}


@router.get("/actions", summary="List registered actions")
async def list_actions(host: BridgeHost = Depends(get_host)) -> Any:
    return await run_command(host, CommandName.GET_ACTIONS)


@router.post("/action", summary="Execute a registered action")
async def execute_action(
    payload: Any = Depends(read_json_body),
    host: BridgeHost = Depends(get_host),
) -> Any:
    body = payload if isinstance(payload, dict) else {}
    name = _require(body.get("name"), "Missing action name")
    args = body.get("args") or []
    if not isinstance(args, list):
        raise ProtocolError("'args' must be a list")
    return await run_command(host, CommandName.EXECUTE_ACTION, [name, args])


__all__ = ["router", "run_command", "SCREENSHOT_HINT"]
