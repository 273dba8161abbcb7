"""
Read routes over the latest pushed snapshot.

Endpoints
---------
- `GET /state`: full snapshot dump.
- `GET /query`: component lookup, field selection or a per-buffer summary.
- `GET /errors`: quick error check.
- `GET /clear`: drop transient buffers (registered state survives).
- `GET /assert`: evaluate one predicate over the snapshot.

Until the client runtime has pushed at least once, every read answers with
an ``{"error": ...}`` object (status 200) instead of failing.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request

from livexray.api.deps import SECRET_PARAM, get_host
from livexray.api.host import BridgeHost
from livexray.core.assertions import evaluate_assertion

router = APIRouter(tags=["State"])

NO_STATE = "No state available. Is the client runtime connected?"


def _limit(raw: str | None) -> int:
    try:
        return int(raw) if raw is not None else 0
    except ValueError:
        return 0


@router.get("/state", summary="Full snapshot dump")
async def get_state(host: BridgeHost = Depends(get_host)) -> dict[str, Any]:
    if host.latest is None:
        return {"error": NO_STATE}
    return host.latest.model_dump()


@router.get("/query", summary="Filtered snapshot query")
async def query_state(
    component: str | None = None,
    select: str | None = None,
    limit: str | None = None,
    host: BridgeHost = Depends(get_host),
) -> dict[str, Any]:
    """
    Three mutually exclusive forms, checked in this order:

    - ``component=Name``: the registered entry, or an error object.
    - ``select=a,b[&limit=N]``: only the named snapshot fields that exist;
      list fields keep their last ``N`` items when ``N > 0``.
    - no parameter: counts per buffer.
    """
    snapshot = host.latest
    if snapshot is None:
        return {"error": NO_STATE}

    if component:
        registered = snapshot.registered.get(component)
        if registered is None:
            return {"error": f'Component "{component}" not found'}
        return {component: registered.model_dump()}

    if select:
        data = snapshot.model_dump()
        tail = _limit(limit)
        result: dict[str, Any] = {}
        for field in (f.strip() for f in select.split(",")):
            if field not in data:
                continue
            value = data[field]
            if tail > 0 and isinstance(value, list):
                value = value[-tail:]
            result[field] = value
        return result

    return {
        "url": snapshot.url,
        "route": snapshot.route,
        "registered_count": len(snapshot.registered),
        "error_count": len(snapshot.errors),
        "warning_count": len(snapshot.warnings),
        "console_count": len(snapshot.console),
        "network_count": len(snapshot.network),
    }


@router.get("/errors", summary="Quick error check")
async def get_errors(host: BridgeHost = Depends(get_host)) -> dict[str, Any]:
    snapshot = host.latest
    if snapshot is None:
        return {"error": NO_STATE}
    return {
        "has_errors": bool(snapshot.errors),
        "count": len(snapshot.errors),
        "errors": [e.model_dump() for e in snapshot.errors],
    }


@router.get("/clear", summary="Clear transient buffers")
async def clear_state(host: BridgeHost = Depends(get_host)) -> dict[str, Any]:
    host.clear_transient()
    return {"ok": True, "message": "State cleared"}


@router.get("/assert", summary="Evaluate one assertion")
async def assert_state(request: Request, host: BridgeHost = Depends(get_host)) -> dict[str, Any]:
    """
    Evaluate the predicate named by the query string, e.g.
    ``?errors=empty``, ``?component=Counter&state.count=1``,
    ``?route=/dashboard`` or ``?network=/api&status=5xx``.
    """
    snapshot = host.latest
    if snapshot is None:
        return {"error": NO_STATE}

    params = {k: v for k, v in request.query_params.items() if k != SECRET_PARAM}
    result = evaluate_assertion(snapshot, params).model_dump()
    if result["hint"] is None:
        del result["hint"]
    return result


__all__ = ["router", "NO_STATE"]
