"""Decode SharePoint notification POST bodies into a NotificationBatch."""

import json
from typing import Any

from pydantic import ValidationError

from webhook_relay.config import LOG_PAYLOAD_MAX_CHARS
from webhook_relay.errors import MalformedPayload
from webhook_relay.utils.logger import get_logger, truncate_for_log
from webhook_relay.webhook.models import NotificationBatch

logger = get_logger("webhook_relay.webhook.parser")


def _capture_raw_body(raw: bytes | str) -> None:
    """Log the rejected body for diagnostics. Never raises."""
    try:
        text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else str(raw)
        logger.warning(
            "webhook.parser.rejected_body",
            body=truncate_for_log(text, LOG_PAYLOAD_MAX_CHARS),
            length=len(text),
        )
    except Exception as e:
        logger.debug("webhook.parser.capture_failed", error=str(e))


def _reject(raw: bytes | str, message: str, cause: str) -> MalformedPayload:
    _capture_raw_body(raw)
    return MalformedPayload(message, cause=cause)


def parse_notification_batch(raw: bytes | str) -> NotificationBatch:
    """Parse a webhook POST body of the form {"value": [<notification>, ...]}.

    Individual notifications are decoded permissively: missing fields (including
    subscriptionId/resource) are accepted. Raises MalformedPayload when the body is
    empty, is not JSON, or has no top-level 'value' array of objects.
    """
    if not raw or not raw.strip():
        raise _reject(raw, "Notification body is missing or empty.", MalformedPayload.EMPTY_OR_MALFORMED)

    try:
        data: Any = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise _reject(raw, f"Body is not valid JSON: {e}", MalformedPayload.INVALID_JSON) from e

    if not isinstance(data, dict) or "value" not in data:
        raise _reject(raw, "Body has no top-level 'value' collection.", MalformedPayload.EMPTY_OR_MALFORMED)
    if not isinstance(data["value"], list):
        raise _reject(raw, "'value' is not an array.", MalformedPayload.EMPTY_OR_MALFORMED)

    try:
        batch = NotificationBatch.model_validate({"value": data["value"]})
    except ValidationError as e:
        raise _reject(
            raw,
            f"Notification items are malformed: {e.error_count()} error(s)",
            MalformedPayload.EMPTY_OR_MALFORMED,
        ) from e

    logger.debug("webhook.parser.parsed", count=len(batch))
    return batch
