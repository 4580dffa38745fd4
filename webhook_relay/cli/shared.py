"""Shared CLI helpers: console and logger."""

from rich.console import Console

from webhook_relay.utils.logger import get_logger

console = Console()
logger = get_logger("webhook_relay.cli")
