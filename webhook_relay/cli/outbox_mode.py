"""Outbox mode: inspect messages written by `serve --outbox`."""

import json
from pathlib import Path

import typer
from rich.table import Table

from webhook_relay.queue.outbox import OutboxPublisher

from .shared import console, logger


def outbox_show(
    path: Path = typer.Argument(..., help="Outbox JSONL file written by serve --outbox"),
    limit: int = typer.Option(20, "--limit", "-n", help="Show only the last N messages (0 = all)"),
    raw: bool = typer.Option(False, "--raw", help="Print message bodies as JSON instead of a table"),
) -> None:
    """List messages captured in a local outbox file."""
    log = logger.bind(command="outbox-show", path=str(path))
    messages = OutboxPublisher(path).read_all()
    log.info("outbox_show.loaded", count=len(messages))
    if not messages:
        console.print(f"[yellow]No messages in {path}[/yellow]")
        return

    shown = messages[-limit:] if limit > 0 else messages
    if raw:
        for message in shown:
            console.print_json(json.dumps(message.body))
        return

    table = Table(title=f"Outbox ({len(shown)} of {len(messages)})")
    table.add_column("#", justify="right")
    table.add_column("Subscription", style="cyan")
    table.add_column("Change type", style="green")
    table.add_column("Resource")
    table.add_column("Site")
    offset = len(messages) - len(shown)
    for i, message in enumerate(shown, start=offset + 1):
        body = message.body
        change_type = body.get("changeType")
        table.add_row(
            str(i),
            str(body.get("subscriptionId", "")),
            "(absent)" if change_type is None else str(change_type),
            str(body.get("resource", "")),
            str(body.get("siteUrl", "")),
        )
    console.print(table)
