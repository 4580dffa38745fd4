"""Validate queue config: check destination coordinates, print summary table."""

from rich.table import Table

from webhook_relay.config import (
    LOG_NOTIFICATION_PAYLOADS,
    WEBHOOK_PORT,
    load_service_bus_settings,
)
from webhook_relay.errors import ConfigurationError
from webhook_relay.queue.service_bus import ServiceBusPublisher

from .shared import console, logger


def validate_config() -> None:
    """Load Service Bus settings from the environment and fail if they are incomplete."""
    log = logger.bind(command="validate-config")
    log.info("validate_config.start")

    settings = load_service_bus_settings()

    table = Table(title="Relay config")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("SERVICE_BUS_CONNECTION_STRING", settings.redacted_connection_string() or "(not set)")
    table.add_row("SERVICE_BUS_QUEUE_NAME", settings.queue_name or "(not set)")
    table.add_row("WEBHOOK_PORT", str(WEBHOOK_PORT))
    table.add_row("LOG_NOTIFICATION_PAYLOADS", str(LOG_NOTIFICATION_PAYLOADS))
    console.print(table)

    try:
        ServiceBusPublisher(settings)
    except ConfigurationError as e:
        console.print(f"[red]Config error: {e}[/red]")
        log.error("validate_config.fail", error=str(e))
        raise SystemExit(1) from e

    console.print(f"[green]Config valid. Publishing to queue {settings.queue_name!r}.[/green]")
    log.info("validate_config.ok", queue=settings.queue_name)
