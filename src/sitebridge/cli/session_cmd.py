"""One-shot CLI commands: open a throwaway session, run one operation, close it."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Awaitable, Callable, Optional

import typer
from rich.console import Console
from rich.table import Table

from sitebridge.exceptions import SiteBridgeError
from sitebridge.models import SnapshotResult
from sitebridge.store import Session, SessionStore

console = Console()


async def _with_session(base_url: str, operation: Callable[[Session], Awaitable[Any]]) -> Any:
    store = SessionStore()
    try:
        session = store.create(base_url)
        return await operation(session)
    finally:
        await store.aclose()


def _run(base_url: str, operation: Callable[[Session], Awaitable[Any]]) -> Any:
    try:
        return asyncio.run(_with_session(base_url, operation))
    except SiteBridgeError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1)


def _parse_header_options(values: list[str]) -> dict[str, list[str]]:
    headers: dict[str, list[str]] = {}
    for item in values:
        name, sep, value = item.partition(":")
        if not sep or not name.strip():
            raise typer.BadParameter(f"Expected NAME:VALUE, got {item!r}", param_hint="--header")
        headers.setdefault(name.strip(), []).append(value.strip())
    return headers


def _print_snapshot(result: SnapshotResult) -> None:
    console.print(f"[bold]{result.status} {result.status_text}[/bold] {result.url}")
    console.print(f"Title: {result.title or '[dim](none)[/dim]'}")

    for form in result.forms:
        table = Table(title=f"Form {form.id}: {form.method} {form.action}")
        table.add_column("Name", style="cyan")
        table.add_column("Type")
        table.add_column("Label")
        table.add_column("Value")
        for field in form.fields:
            table.add_row(field.name, field.type, field.label or "", field.value or "")
        console.print(table)

    links = Table(title=f"Links ({len(result.links)})")
    links.add_column("Text")
    links.add_column("Href", style="blue")
    for link in result.links:
        links.add_row(link.text, link.href)
    console.print(links)


def snapshot_command(
    base_url: str = typer.Argument(..., help="Base URL of the throwaway session."),
    url: Optional[str] = typer.Option(None, "--url", "-u", help="Page to snapshot, relative to the base URL."),
    as_json: bool = typer.Option(False, "--json", help="Print the raw snapshot as JSON."),
    include_html: bool = typer.Option(False, "--html", help="Keep the page markup in JSON output."),
) -> None:
    """Fetch a page and list its title, forms and links."""
    from sitebridge.browser.snapshot import take_snapshot

    result: SnapshotResult = _run(base_url, lambda session: take_snapshot(session, url))
    if as_json:
        exclude = None if include_html else {"html"}
        console.print_json(result.model_dump_json(by_alias=True, exclude=exclude))
    else:
        _print_snapshot(result)


def request_command(
    base_url: str = typer.Argument(..., help="Base URL of the throwaway session."),
    method: str = typer.Option("GET", "--method", "-X", help="HTTP method."),
    url: Optional[str] = typer.Option(None, "--url", "-u", help="Target URL, relative to the base URL."),
    header: list[str] = typer.Option([], "--header", "-H", help="Request header as NAME:VALUE (repeatable)."),
    data: Optional[str] = typer.Option(None, "--data", "-d", help="Request body; JSON is sent as JSON."),
) -> None:
    """Send one request through a session and print the response envelope."""
    from sitebridge.browser.proxy import proxy_request

    headers = _parse_header_options(header)
    result = _run(base_url, lambda session: proxy_request(session, method, url, headers, data))
    console.print_json(json.dumps(result.model_dump(mode="json", by_alias=True), default=str))
