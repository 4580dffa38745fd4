"""Webhook service for SharePoint change notifications."""

from webhook_relay.webhook.models import (
    Notification,
    NotificationBatch,
    QueueMessage,
)

__all__ = [
    "Notification",
    "NotificationBatch",
    "QueueMessage",
]
