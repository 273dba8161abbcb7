"""
ASGI entry point for the bridge host.

This module exposes the `app` object required by ASGI servers (Uvicorn).
It loads `.env` into the process environment so values that are not
settings fields (and child processes started by `--reload`) see them too.

Usage
-----
Run via the module entry point:
    $ python -m livexray.api.server

Or via uvicorn directly:
    $ uvicorn livexray.api.server:app --port 9876
"""

from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from livexray.api.app import create_app
from livexray.core.settings import load_settings

load_dotenv(dotenv_path=Path(".env"))

# Factory invocation
app = create_app()


def main(host: str | None = None, port: int | None = None, reload: bool = False) -> None:
    """Serve the host with uvicorn (bind address defaults to the settings)."""
    cfg = load_settings()
    uvicorn.run(
        "livexray.api.server:app",
        host=host or cfg.host,
        port=port or cfg.port,
        reload=reload,
        log_level=cfg.log_level.lower(),
    )


if __name__ == "__main__":
    main()
