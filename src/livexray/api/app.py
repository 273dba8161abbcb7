"""
FastAPI application factory for the bridge host.

This module builds the host process. It is responsible for:
1.  **Middleware Setup**: CORS, so browser tools and agents on other origins can read.
2.  **Exception Handling**: every failure becomes a JSON ``{"error": ...}`` body.
3.  **Routing**: mounting the bridge, state and interaction routers under the prefix.
4.  **Lifecycle**: logging the endpoint list on startup.

Design Pattern
--------------
An **Application Factory** (`create_app`): each app instance owns its own
`BridgeHost`, so tests can spin up isolated hosts with distinct settings.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from livexray import __version__
from livexray.api.deps import require_secret
from livexray.api.host import BridgeHost
from livexray.api.routers import bridge, interact, state
from livexray.core.errors import CommandFailedError, CommandTimeoutError, ProtocolError
from livexray.core.settings import Settings, get_logger, load_settings

logger = get_logger("livexray.api")

ENDPOINTS: tuple[tuple[str, str, str], ...] = (
    ("GET", "/state", "Full state dump"),
    ("GET", "/query", "Filtered queries (component=, select=, limit=)"),
    ("GET", "/errors", "Quick error check"),
    ("GET", "/clear", "Clear transient buffers"),
    ("GET", "/assert", "Assertions (errors=empty, component=, route=, network&status=)"),
    ("GET", "/dom", "Query DOM (selector=)"),
    ("GET", "/click", "Click element (selector=)"),
    ("POST", "/fill", "Fill input (selector=, value=)"),
    ("GET", "/scroll", "Scroll (selector= or x=,y=)"),
    ("GET", "/navigate", "Navigate (url=, replace=)"),
    ("GET", "/refresh", "Reload page"),
    ("GET", "/back", "History back"),
    ("GET", "/forward", "History forward"),
    ("GET", "/diagnostics", "Viewport, performance, storage, focus, a11y"),
    ("GET", "/a11y", "Accessibility info (selector=)"),
    ("GET", "/screenshot", "Capture screenshot"),
    ("GET", "/actions", "List registered actions"),
    ("POST", "/action", "Execute action ({name, args})"),
)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Construct and configure the bridge host application.

    Parameters
    ----------
    settings:
        Explicit settings (tests pass their own); defaults to `load_settings()`.

    Returns
    -------
    FastAPI
        The configured ASGI application ready to be served by Uvicorn.
    """
    cfg = settings or load_settings()
    prefix = cfg.prefix.rstrip("/")

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Bridge host starting (%s)", cfg.environment)
        for method, path, description in ENDPOINTS:
            logger.info("  %-4s %s%s - %s", method, prefix, path, description)
        yield
        logger.info("Bridge host shutting down (%d pending command(s))", len(host.commands))

    app = FastAPI(
        title="livexray host",
        description="Live runtime state bridge: snapshots, assertions and commands",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    host = BridgeHost(command_timeout_ms=cfg.command_timeout_ms)
    app.state.host = host
    app.state.settings = cfg

    # -----------------------------------------------------------------------
    # Middleware
    # -----------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -----------------------------------------------------------------------
    # Exception Handlers
    # -----------------------------------------------------------------------
    @app.exception_handler(ProtocolError)
    async def protocol_error_handler(request: Request, exc: ProtocolError) -> JSONResponse:
        return _error(exc.status_code, exc.message)

    @app.exception_handler(CommandTimeoutError)
    async def timeout_handler(request: Request, exc: CommandTimeoutError) -> JSONResponse:
        """The client runtime never picked the command up (or never answered)."""
        return _error(504, str(exc))

    @app.exception_handler(CommandFailedError)
    async def failed_handler(request: Request, exc: CommandFailedError) -> JSONResponse:
        """The client runtime ran the command and reported an error string."""
        return _error(502, exc.error)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Routing errors (404, 405 wrong method) keep the ``{"error": ...}`` shape."""
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        """Map Python ValueErrors to HTTP 400 Bad Request."""
        return _error(400, str(exc))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all: an unexpected failure answers 500 and the host keeps serving."""
        logger.exception("Unhandled error on %s", request.url.path)
        return _error(500, f"Internal Server Error: {exc}")

    # -----------------------------------------------------------------------
    # Routes
    # -----------------------------------------------------------------------
    guarded = [Depends(require_secret)]
    app.include_router(bridge.router, prefix=prefix, dependencies=guarded)
    app.include_router(state.router, prefix=prefix, dependencies=guarded)
    app.include_router(interact.router, prefix=prefix, dependencies=guarded)

    @app.get("/health", tags=["System"])
    async def health_check() -> dict[str, str]:
        """Simple liveness probe."""
        return {"status": "ok", "environment": cfg.environment, "version": __version__}

    return app


__all__ = ["create_app", "ENDPOINTS"]
