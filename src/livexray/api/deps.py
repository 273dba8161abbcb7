"""FastAPI dependencies shared by the bridge routers.

- `get_host` / `get_settings`: per-app state created by `create_app`.
- `require_secret`: optional shared-secret check (header or query param).
- `read_json_body`: size-guarded JSON body reader for POST endpoints.
"""

from __future__ import annotations

import hmac
import json
from typing import Any

from fastapi import Request

from livexray.api.host import BridgeHost
from livexray.core.config import SECRET_HEADER
from livexray.core.errors import ProtocolError
from livexray.core.settings import Settings

SECRET_PARAM = "secret"


def get_host(request: Request) -> BridgeHost:
    return request.app.state.host


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def require_secret(request: Request) -> None:
    """Reject the request with 401 unless it carries the configured secret.

    No check happens when no secret is configured.
    """
    expected = get_settings(request).secret
    if not expected:
        return
    provided = request.headers.get(SECRET_HEADER) or request.query_params.get(SECRET_PARAM)
    if not provided or not hmac.compare_digest(provided.encode(), expected.encode()):
        raise ProtocolError("Unauthorized", status_code=401)


async def read_json_body(request: Request) -> Any:
    """Read and parse the JSON body, aborting early on oversized payloads.

    The declared ``Content-Length`` is checked first; the streamed size is
    checked chunk by chunk, so an oversized body is never fully buffered.
    """
    limit = get_settings(request).max_request_body
    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > limit:
        raise ProtocolError("Payload too large", status_code=413)

    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > limit:
            raise ProtocolError("Payload too large", status_code=413)

    try:
        return json.loads(body)
    except ValueError:
        raise ProtocolError("Invalid JSON") from None


__all__ = [
    "SECRET_HEADER",
    "SECRET_PARAM",
    "get_host",
    "get_settings",
    "require_secret",
    "read_json_body",
]
