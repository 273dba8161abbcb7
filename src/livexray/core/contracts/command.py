"""Wire shapes of the command protocol (host queue <-> client poll loop)."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class PendingCommandView(BaseModel):
    """Read-only listing entry returned by `GET /commands`."""

    id: str
    name: str
    args: list[Any] = Field(default_factory=list)


class CommandReport(BaseModel):
    """Result posted back by the client runtime to `POST /result`."""

    id: str
    result: Any = None
    error: str | None = None


__all__ = ["PendingCommandView", "CommandReport"]
