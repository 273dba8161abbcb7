"""Bridge host: FastAPI application factory, per-app state and routers."""

from __future__ import annotations

from .app import create_app
from .host import BridgeHost

__all__ = ["create_app", "BridgeHost"]
