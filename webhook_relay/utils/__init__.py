"""Utility modules."""

from webhook_relay.utils.logger import configure_logging, get_logger, request_context, truncate_for_log

__all__ = [
    "configure_logging",
    "get_logger",
    "request_context",
    "truncate_for_log",
]
