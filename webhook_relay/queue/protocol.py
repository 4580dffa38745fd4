"""Queue publisher protocol."""

from typing import Protocol, Sequence

from webhook_relay.webhook.models import QueueMessage


class QueuePublisher(Protocol):
    """Publishes a batch of messages to one destination queue."""

    async def publish(self, messages: Sequence[QueueMessage]) -> None:
        """Send every message as one logical send. Raises PublishFailure on error."""
        ...
