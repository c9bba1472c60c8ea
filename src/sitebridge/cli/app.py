"""Unified CLI entry point for sitebridge.

Config precedence: settings.default.toml -> settings.local.toml -> env vars (SITEBRIDGE_* with double underscores) -> CLI flags.
"""

from __future__ import annotations

from typing import Optional

import typer

from sitebridge.cli.session_cmd import request_command, snapshot_command
from sitebridge.cli.settings_cmd import settings_app

try:
    from importlib.metadata import version

    VERSION = version("sitebridge")
except Exception:
    VERSION = "unknown"

APP_HELP = (
    "sitebridge — turn any website into a programmable API. "
    "Serve cookie-aware proxy sessions or run one-off snapshots and requests. "
    "Config precedence: settings.default.toml -> settings.local.toml -> env vars (SITEBRIDGE_* with __) -> CLI flags."
)

app = typer.Typer(add_completion=True, help=APP_HELP)

app.add_typer(settings_app, name="settings")
app.command("snapshot")(snapshot_command)
app.command("request")(request_command)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override settings.logging.level."),
) -> None:
    """Show help when no subcommand is provided."""
    if version:
        typer.echo(f"sitebridge {VERSION}")
        raise typer.Exit()
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()

    from sitebridge.logging_setup import configure_logging

    configure_logging(level=log_level)


@app.command("serve")
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (default: settings.api.host)."),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port (default: settings.api.port)."),
    reload: bool = typer.Option(False, "--reload", help="Restart on code changes."),
) -> None:
    """Run the session API server."""
    import uvicorn

    from sitebridge.settings import get_settings

    settings = get_settings()
    uvicorn.run(
        "sitebridge.api.app:create_app",
        factory=True,
        host=host or settings.api.host,
        port=port or settings.api.port,
        reload=reload,
        log_config=None,
    )


if __name__ == "__main__":
    app()
