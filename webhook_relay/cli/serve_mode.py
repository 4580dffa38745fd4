"""Serve mode: run the FastAPI listener for SharePoint webhook notifications."""

import sys
from pathlib import Path

import typer
import uvicorn

from webhook_relay.config import WEBHOOK_HOST, WEBHOOK_PORT, load_service_bus_settings
from webhook_relay.queue.outbox import OutboxPublisher
from webhook_relay.utils.logger import configure_logging
from webhook_relay.webhook.server import NOTIFICATION_PATHS, PROBE_PATH, create_app

from .shared import console, logger


def serve(
    port: int = typer.Option(WEBHOOK_PORT, "--port", "-p", help="Port for the webhook server"),
    host: str = typer.Option(WEBHOOK_HOST, "--host", "-h", help="Bind host"),
    outbox: Path | None = typer.Option(
        None,
        "--outbox",
        "-o",
        help="Write messages to this JSONL file instead of Service Bus (local development)",
    ),
    log_level: str | None = typer.Option(None, "--log-level", "-l", help="Override LOG_LEVEL (debug, info, ...)"),
    log_file: Path | None = typer.Option(None, "--log-file", help="Also write JSON log lines to this file"),
    json_logs: bool = typer.Option(False, "--json-logs", help="Render console logs as JSON"),
) -> None:
    """Start the webhook listener and forward notifications to the queue."""
    configure_logging(level=log_level, log_file=log_file, json_console=json_logs)
    log = logger.bind(command="serve", port=port)
    log.info("serve.start")

    if outbox is not None:
        console.print(f"[yellow]Outbox mode: messages are appended to {outbox}[/yellow]")
        app = create_app(publisher=OutboxPublisher(outbox))
    else:
        settings = load_service_bus_settings()
        if not settings.is_configured:
            console.print(
                "[yellow]SERVICE_BUS_CONNECTION_STRING / SERVICE_BUS_QUEUE_NAME not set: "
                "notifications will be acknowledged but not forwarded.[/yellow]"
            )
            log.warning("serve.queue_not_configured")
        app = create_app(settings=settings)

    console.print(f"[green]Starting webhook server on http://{host}:{port}[/green]")
    paths = ", ".join(NOTIFICATION_PATHS)
    console.print(f"[dim]Endpoints: GET/POST {paths}, GET {PROBE_PATH}, GET /health[/dim]")
    try:
        uvicorn.run(
            app,
            host=host,
            port=port,
            log_level="info",
            log_config=None,
            timeout_graceful_shutdown=15,
        )
    except KeyboardInterrupt:
        console.print("\n[dim]Shutting down...[/dim]")
        sys.exit(0)
