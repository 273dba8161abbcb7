"""
Transport routes used by the client runtime.

Endpoints
---------
- `POST /push`: replace the stored snapshot with the pushed one.
- `GET /commands`: list outstanding commands for the poll loop.
- `POST /result`: settle a pending command with ``{id, result, error}``.

The client never sees host state other than the command listing; everything
else flows app -> host.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import ValidationError

from livexray.api.deps import get_host, read_json_body
from livexray.api.host import BridgeHost
from livexray.core.contracts.command import CommandReport, PendingCommandView
from livexray.core.contracts.snapshot import Snapshot
from livexray.core.errors import ProtocolError

router = APIRouter(tags=["Bridge"])


@router.post("/push", summary="Receive a snapshot from the client runtime")
async def push_state(
    payload: Any = Depends(read_json_body),
    host: BridgeHost = Depends(get_host),
) -> dict[str, bool]:
    if not isinstance(payload, dict):
        raise ProtocolError("Snapshot must be a JSON object")
    try:
        snapshot = Snapshot.model_validate(payload)
    except ValidationError as exc:
        raise ProtocolError(f"Invalid snapshot: {exc.error_count()} field error(s)") from None

    host.store(snapshot)
    return {"ok": True}


@router.get(
    "/commands",
    response_model=list[PendingCommandView],
    summary="List pending commands",
)
async def list_commands(host: BridgeHost = Depends(get_host)) -> list[PendingCommandView]:
    return host.commands.get_pending_commands()


@router.post("/result", summary="Report the outcome of a command")
async def report_result(
    payload: Any = Depends(read_json_body),
    host: BridgeHost = Depends(get_host),
) -> dict[str, bool]:
    """
    Settle a pending command.

    Late or duplicate reports (unknown ids) are accepted and ignored, so the
    response is ``{"ok": true}`` either way.
    """
    try:
        report = CommandReport.model_validate(payload)
    except ValidationError:
        raise ProtocolError("Result must be an object with an 'id' field") from None

    host.commands.resolve_command(report.id, report.result, report.error)
    return {"ok": True}


__all__ = ["router"]
