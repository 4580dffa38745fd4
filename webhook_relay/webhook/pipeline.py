"""Notification intake: parse the POST body, wrap each notification, publish the batch.

Delivery is best-effort. Any publish error is logged and the caller still gets
Acknowledged (HTTP 202): SharePoint expects a fast 2xx and would otherwise retry
or drop the subscription. This trades guaranteed delivery for responsiveness;
change it here if downstream delivery must surface to the notifier.
"""

from webhook_relay.config import LOG_NOTIFICATION_PAYLOADS, LOG_PAYLOAD_MAX_CHARS
from webhook_relay.errors import MalformedPayload, PublishFailure
from webhook_relay.queue.protocol import QueuePublisher
from webhook_relay.utils.logger import get_logger, truncate_for_log
from webhook_relay.webhook.models import NotificationBatch, QueueMessage
from webhook_relay.webhook.outcomes import Acknowledged, BadRequest, DispatchOutcome
from webhook_relay.webhook.parser import parse_notification_batch

logger = get_logger("webhook_relay.webhook.pipeline")

INVALID_JSON_REASON = "invalid JSON payload"
EMPTY_OR_MALFORMED_REASON = "payload empty or malformed"


def build_queue_messages(batch: NotificationBatch) -> list[QueueMessage]:
    """One QueueMessage per notification, in batch order."""
    messages = []
    for notification in batch.value:
        if notification.change_type is None:
            logger.debug(
                "webhook.intake.no_change_type",
                subscription_id=notification.subscription_id,
                resource=notification.resource,
            )
        messages.append(QueueMessage.from_notification(notification))
    return messages


class IntakePipeline:
    """Turns a notification POST body into an outcome, forwarding to the queue publisher.

    publisher is None when destination coordinates are not configured; notifications
    are then acknowledged and dropped with a warning.
    """

    def __init__(
        self,
        publisher: QueuePublisher | None,
        log_payloads: bool = LOG_NOTIFICATION_PAYLOADS,
        payload_max_chars: int = LOG_PAYLOAD_MAX_CHARS,
    ):
        self._publisher = publisher
        self._log_payloads = log_payloads
        self._payload_max_chars = payload_max_chars

    @property
    def publisher(self) -> QueuePublisher | None:
        return self._publisher

    async def handle(self, body: bytes | str) -> DispatchOutcome:
        if self._log_payloads:
            text = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body
            logger.debug("webhook.intake.payload", body=truncate_for_log(text, self._payload_max_chars))

        try:
            batch = parse_notification_batch(body)
        except MalformedPayload as e:
            reason = INVALID_JSON_REASON if e.is_invalid_json else EMPTY_OR_MALFORMED_REASON
            logger.warning("webhook.intake.bad_request", reason=reason, error=str(e))
            return BadRequest(reason=reason)

        if self._publisher is None:
            logger.warning("webhook.intake.publisher_not_configured", dropped=len(batch))
            return Acknowledged()

        messages = build_queue_messages(batch)
        if not messages:
            logger.info("webhook.intake.empty_batch")
            return Acknowledged()

        try:
            await self._publisher.publish(messages)
        except PublishFailure as e:
            # Already logged by the publisher; swallowed so the notifier still gets 202.
            logger.warning(
                "webhook.intake.forward_failed",
                count=len(messages),
                error=str(e),
            )
            return Acknowledged()
        except Exception as e:
            # Publisher broke its contract (raw transport error); same policy applies.
            logger.exception(
                "webhook.intake.forward_error",
                count=len(messages),
                error=str(e),
                error_type=type(e).__name__,
            )
            return Acknowledged()

        logger.info("webhook.intake.forwarded", count=len(messages))
        return Acknowledged()
