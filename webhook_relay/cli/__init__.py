"""CLI commands: one module per mode (serve, validate-config, outbox-show)."""

from typer import Typer

from webhook_relay.cli import outbox_mode, serve_mode, validate_config as validate_config_module

app = Typer(help="SharePoint webhook to Service Bus relay")


def register_commands() -> None:
    """Register all CLI commands on the global app."""
    app.command()(serve_mode.serve)
    app.command(name="validate-config")(validate_config_module.validate_config)
    app.command(name="outbox-show")(outbox_mode.outbox_show)


register_commands()
