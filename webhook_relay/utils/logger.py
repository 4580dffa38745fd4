"""Structured logging for the relay (structlog rendered through stdlib logging).

Loggers are created lazily with default settings taken from config. The serve
command calls configure_logging() again with its CLI overrides before the app starts.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

import structlog

from webhook_relay.config import LOG_FILE, LOG_LEVEL, LOG_TO_FILE, VERBOSE_LOGGING

BoundLogger = structlog.stdlib.BoundLogger

# Third-party loggers that emit per-frame/per-request INFO lines
QUIET_LOGGERS = ("azure", "uamqp", "httpx", "httpcore", "uvicorn.access")

_configured = False
_installed_handlers: list[logging.Handler] = []


def resolve_level(level: str | int | None) -> int:
    """'debug', 'INFO', '10' or 10 -> logging level; None -> the configured default."""
    if level is None:
        return logging.DEBUG if VERBOSE_LOGGING else resolve_level(LOG_LEVEL)
    if isinstance(level, int):
        return level
    text = level.strip()
    if text.isdigit():
        return int(text)
    value = logging.getLevelName(text.upper())
    return value if isinstance(value, int) else logging.INFO


def _shared_processors() -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]


def _make_handler(handler: logging.Handler, renderer: Any, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=_shared_processors())
    )
    return handler


def configure_logging(
    level: str | int | None = None,
    log_file: Path | None = None,
    json_console: bool = False,
) -> None:
    """(Re)configure root logging and structlog.

    Console output is colored key=value unless json_console is set (container logs).
    When log_file is given (or LOG_TO_FILE is on), events are also written there as JSON lines.
    """
    global _configured, _installed_handlers

    effective_level = resolve_level(level)
    if log_file is None and LOG_TO_FILE:
        log_file = LOG_FILE

    console_renderer = (
        structlog.processors.JSONRenderer() if json_console else structlog.dev.ConsoleRenderer(colors=True)
    )
    handlers = [_make_handler(logging.StreamHandler(), console_renderer, effective_level)]
    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            _make_handler(
                logging.FileHandler(log_file, encoding="utf-8"),
                structlog.processors.JSONRenderer(),
                effective_level,
            )
        )

    root_logger = logging.getLogger()
    for old in _installed_handlers:
        root_logger.removeHandler(old)
        old.close()
    root_logger.setLevel(effective_level)
    _installed_handlers = handlers
    for handler in handlers:
        root_logger.addHandler(handler)
    logging.captureWarnings(True)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, effective_level))

    # Not cached: loggers created at import time must pick up a later reconfigure.
    structlog.configure(
        processors=[
            *_shared_processors(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(effective_level),
        cache_logger_on_first_use=False,
    )
    _configured = True


def get_logger(name: str = "webhook_relay", **bindings: Any) -> BoundLogger:
    """Return the structured logger, optionally bound with context."""
    if not _configured:
        configure_logging()
    logger = structlog.get_logger(name)
    if bindings:
        logger = logger.bind(**bindings)
    return logger


@contextmanager
def request_context(**context: Any) -> Iterator[None]:
    """Bind context vars (method, path, ...) for the duration of one request."""
    tokens = structlog.contextvars.bind_contextvars(**context)
    try:
        yield
    finally:
        structlog.contextvars.reset_contextvars(**tokens)


def truncate_for_log(text: str, max_chars: int) -> str:
    """Cut text to max_chars, marking how much was dropped."""
    if max_chars <= 0 or len(text) <= max_chars:
        return text
    return f"{text[:max_chars]}...[{len(text) - max_chars} more chars]"
