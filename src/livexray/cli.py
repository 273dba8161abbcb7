"""
livexray Command Line Interface (CLI).

This module implements the terminal interface using `typer` and `rich`.
It serves the bridge host and talks to a running one over HTTP.

Features
--------
- **serve**: run the host with uvicorn.
- **state / query / errors**: read the latest snapshot, pretty-printed as JSON.
- **assert**: evaluate one assertion; exits with code 1 when it fails.
- **clear**: drop transient buffers on the host.

Usage
-----
    $ livexray serve --port 9876
    $ livexray query --select errors,network --limit 5
    $ livexray assert route=/dashboard
    $ livexray assert component=Counter state.count=3
"""

from __future__ import annotations

from typing import Annotated, Any

import httpx
import typer
from rich.console import Console
from rich.panel import Panel

from livexray.core.config import SECRET_HEADER
from livexray.core.settings import load_settings

app = typer.Typer(
    help="livexray: inspect and drive a running app through its state bridge.",
    rich_markup_mode="markdown",
)
console = Console()

UrlOption = Annotated[
    str | None,
    typer.Option("--url", "-u", help="Host route prefix (default: XRAY_URL)."),
]
SecretOption = Annotated[
    str | None,
    typer.Option("--secret", help="Shared secret (default: XRAY_SECRET)."),
]


# --------------------------------------------------------------------------- #
# Helpers: HTTP & Rendering
# --------------------------------------------------------------------------- #


def _fetch(
    path: str,
    url: str | None,
    secret: str | None,
    params: dict[str, Any] | None = None,
) -> Any:
    """
    Helper: GET ``{url}/{path}`` and return the decoded JSON body.

    Connection failures and non-JSON answers end the command with exit code 1.
    """
    cfg = load_settings()
    base = (url or cfg.url).rstrip("/")
    token = secret if secret is not None else cfg.secret
    headers = {SECRET_HEADER: token} if token else {}

    try:
        response = httpx.get(f"{base}/{path}", params=params, headers=headers, timeout=15.0)
        data = response.json()
    except httpx.HTTPError as e:
        console.print(f"[bold red]❌ Cannot reach host at {base}:[/bold red] {e}")
        raise typer.Exit(code=1) from e
    except ValueError as e:
        console.print(f"[bold red]❌ Unexpected response from {base}/{path}[/bold red]")
        raise typer.Exit(code=1) from e

    if response.is_error:
        message = data.get("error") if isinstance(data, dict) else data
        console.print(f"[bold red]❌ {response.status_code}:[/bold red] {message}")
        raise typer.Exit(code=1)
    return data


def _render(data: Any) -> None:
    console.print_json(data=data)


# --------------------------------------------------------------------------- #
# Commands
# --------------------------------------------------------------------------- #


@app.command()  # type: ignore[misc]
def serve(
    host: Annotated[
        str | None, typer.Option("--host", help="Bind address (default: XRAY_HOST).")
    ] = None,
    port: Annotated[
        int | None, typer.Option("--port", "-p", help="Bind port (default: XRAY_PORT).")
    ] = None,
    reload: Annotated[bool, typer.Option("--reload", help="Auto-reload on code changes.")] = False,
) -> None:
    """Run the bridge host."""
    from livexray.api.server import main

    cfg = load_settings()
    console.print(
        Panel.fit(
            f"[bold cyan]livexray host[/bold cyan]\n"
            f"http://{host or cfg.host}:{port or cfg.port}{cfg.prefix}",
            border_style="cyan",
        )
    )
    main(host=host, port=port, reload=reload)


@app.command()  # type: ignore[misc]
def state(url: UrlOption = None, secret: SecretOption = None) -> None:
    """Print the full latest snapshot."""
    _render(_fetch("state", url, secret))


@app.command()  # type: ignore[misc]
def query(
    component: Annotated[
        str | None, typer.Option("--component", "-c", help="Registered component name.")
    ] = None,
    select: Annotated[
        str | None, typer.Option("--select", "-s", help="Comma-separated snapshot fields.")
    ] = None,
    limit: Annotated[
        int, typer.Option("--limit", "-n", help="Keep the last N items of list fields.")
    ] = 0,
    url: UrlOption = None,
    secret: SecretOption = None,
) -> None:
    """Query one component, selected fields, or a summary."""
    params: dict[str, Any] = {}
    if component:
        params["component"] = component
    if select:
        params["select"] = select
    if limit:
        params["limit"] = limit
    _render(_fetch("query", url, secret, params))


@app.command()  # type: ignore[misc]
def errors(url: UrlOption = None, secret: SecretOption = None) -> None:
    """Print captured errors."""
    _render(_fetch("errors", url, secret))


@app.command("assert")  # type: ignore[misc]
def assert_(
    predicates: Annotated[
        list[str],
        typer.Argument(help="KEY=VALUE pairs, e.g. `route=/home` or `errors=empty`."),
    ],
    url: UrlOption = None,
    secret: SecretOption = None,
) -> None:
    """
    Evaluate one assertion on the latest snapshot.

    A bare KEY (e.g. `network`) is sent with an empty value.
    """
    params = dict(p.split("=", 1) if "=" in p else (p, "") for p in predicates)
    result = _fetch("assert", url, secret, params)

    if not isinstance(result, dict) or "passed" not in result:
        _render(result)
        raise typer.Exit(code=1)

    if result["passed"]:
        console.print(f"[bold green]✅ PASS[/bold green] {result.get('assertion', '')}")
        return

    console.print(f"[bold red]❌ FAIL[/bold red] {result.get('assertion', '')}")
    if result.get("hint"):
        console.print(f"[yellow]{result['hint']}[/yellow]")
    raise typer.Exit(code=1)


@app.command()  # type: ignore[misc]
def clear(url: UrlOption = None, secret: SecretOption = None) -> None:
    """Clear errors, warnings, console and network on the host."""
    result = _fetch("clear", url, secret)
    console.print(f"[green]{result.get('message', 'ok')}[/green]")


if __name__ == "__main__":
    app()
