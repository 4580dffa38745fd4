"""Local outbox publisher: appends messages to a JSONL file instead of Service Bus."""

import asyncio
import json
from pathlib import Path
from typing import Sequence

from webhook_relay.errors import PublishFailure
from webhook_relay.utils.logger import get_logger
from webhook_relay.webhook.models import QueueMessage

logger = get_logger("webhook_relay.queue.outbox")


class OutboxPublisher:
    """Writes each message as one JSON line. For running the relay without a queue."""

    def __init__(self, path: Path):
        self._path = Path(path)
        self._lock = asyncio.Lock()
        logger.info("queue.outbox.init", path=str(self._path))

    @property
    def path(self) -> Path:
        return self._path

    def _append(self, lines: list[str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("a", encoding="utf-8") as f:
            for line in lines:
                f.write(line + "\n")

    async def publish(self, messages: Sequence[QueueMessage]) -> None:
        if not messages:
            raise ValueError("publish() requires at least one message")
        lines = [json.dumps(m.model_dump()) for m in messages]
        async with self._lock:
            try:
                self._append(lines)
            except OSError as e:
                logger.error(
                    "queue.outbox.write_failed",
                    path=str(self._path),
                    count=len(lines),
                    error=str(e),
                )
                raise PublishFailure(
                    f"Failed to write {len(lines)} message(s) to {self._path}: {e}",
                    queue_name=str(self._path),
                    message_count=len(lines),
                ) from e
        logger.info("queue.outbox.written", path=str(self._path), count=len(lines))

    def read_all(self) -> list[QueueMessage]:
        """Load every message written so far (missing file -> empty list)."""
        if not self._path.exists():
            return []
        with self._path.open("r", encoding="utf-8") as f:
            return [QueueMessage.model_validate_json(line) for line in f if line.strip()]
