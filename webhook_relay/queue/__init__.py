"""Queue publishers: protocol, Azure Service Bus and local outbox implementations."""

from webhook_relay.queue.outbox import OutboxPublisher
from webhook_relay.queue.protocol import QueuePublisher
from webhook_relay.queue.service_bus import ServiceBusPublisher, to_service_bus_message

__all__ = [
    "OutboxPublisher",
    "QueuePublisher",
    "ServiceBusPublisher",
    "to_service_bus_message",
]
