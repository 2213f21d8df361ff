"""Click CLI for running and inspecting the chat relay."""

from __future__ import annotations

import json
import os

import click
import httpx
import uvicorn


@click.group()
def cli() -> None:
    """Chat relay with live dashboard."""


@cli.command()
@click.option("--host", default=None, help="Bind address (default: $HOST or 0.0.0.0).")
@click.option("--port", default=None, type=int, help="Dashboard port (default: $PORT or 3000).")
def serve(host: str | None, port: int | None) -> None:
    """Run the relay and its dashboard."""
    if not os.environ.get("WEBHOOK_URL"):
        raise click.UsageError("WEBHOOK_URL must be set")
    uvicorn.run(
        "src.dashboard.app:create_app_from_env",
        factory=True,
        host=host if host is not None else os.environ.get("HOST", "0.0.0.0"),
        port=port if port is not None else int(os.environ.get("PORT", "3000")),
    )


@cli.command()
@click.option("--url", default="http://localhost:3000", help="Base URL of a running relay.")
@click.option("--logs/--no-logs", default=False, help="Include recent log lines.")
def stats(url: str, logs: bool) -> None:
    """Print the counters of a running relay as JSON."""
    try:
        resp = httpx.get(f"{url.rstrip('/')}/api/stats", timeout=10.0)
        resp.raise_for_status()
    except httpx.HTTPError as exc:
        raise click.ClickException(f"Could not reach relay: {exc}") from exc
    data = resp.json()
    if not logs:
        data.pop("logs", None)
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    cli()
