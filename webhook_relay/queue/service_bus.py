"""Azure Service Bus queue publisher (async)."""

import json
from typing import Callable, Sequence

from azure.servicebus import ServiceBusMessage
from azure.servicebus.aio import ServiceBusClient

from webhook_relay.config import ServiceBusSettings
from webhook_relay.errors import ConfigurationError, PublishFailure
from webhook_relay.utils.logger import get_logger
from webhook_relay.webhook.models import QueueMessage

logger = get_logger("webhook_relay.queue.service_bus")


def to_service_bus_message(message: QueueMessage) -> ServiceBusMessage:
    """Convert our envelope to the SDK message (body serialized as JSON text)."""
    return ServiceBusMessage(
        json.dumps(message.body),
        content_type=message.content_type,
        application_properties=dict(message.application_properties) or None,
    )


class ServiceBusPublisher:
    """Publishes to a Service Bus queue, one client per batch.

    The client and sender are opened for each publish call and closed afterwards on
    every exit path. Nothing is shared between concurrent requests.
    """

    def __init__(
        self,
        settings: ServiceBusSettings,
        client_factory: Callable[[str], ServiceBusClient] = ServiceBusClient.from_connection_string,
    ):
        if not settings.connection_string.strip():
            raise ConfigurationError("Service Bus connection string is required.")
        if not settings.queue_name.strip():
            raise ConfigurationError("Service Bus queue name is required.")
        self._settings = settings
        self._client_factory = client_factory
        logger.info("queue.publisher.init", queue=settings.queue_name)

    @property
    def queue_name(self) -> str:
        return self._settings.queue_name

    async def publish(self, messages: Sequence[QueueMessage]) -> None:
        if not messages:
            raise ValueError("publish() requires at least one message")
        count = len(messages)
        queue = self._settings.queue_name
        client = None
        sender = None
        try:
            client = self._client_factory(self._settings.connection_string)
            sender = client.get_queue_sender(queue_name=queue)
            logger.info("queue.publish.attempt", queue=queue, count=count)
            await sender.send_messages([to_service_bus_message(m) for m in messages])
            logger.info("queue.publish.sent", queue=queue, count=count)
        except Exception as e:
            logger.error(
                "queue.publish.failed",
                queue=queue,
                count=count,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise PublishFailure(
                f"Failed to send {count} message(s) to queue {queue!r}: {e}",
                queue_name=queue,
                message_count=count,
            ) from e
        finally:
            await self._close(sender, client)

    async def _close(self, sender, client: ServiceBusClient | None) -> None:
        """Close sender then client. Errors are logged only; they never replace the send outcome."""
        for name, resource in (("sender", sender), ("client", client)):
            if resource is None:
                continue
            try:
                await resource.close()
            except Exception as e:
                logger.error(
                    "queue.publish.close_error",
                    queue=self._settings.queue_name,
                    resource=name,
                    error=str(e),
                )
        logger.debug("queue.publish.closed", queue=self._settings.queue_name)
