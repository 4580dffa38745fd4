"""Pydantic models for SharePoint webhook payloads and the queue envelope."""

from typing import Any

from pydantic import BaseModel, Field, JsonValue

JSON_CONTENT_TYPE = "application/json"


class Notification(BaseModel):
    """Single SharePoint change notification (one item of the POST body's 'value').

    Fields accept any JSON value so an unexpected type upstream is forwarded as sent
    rather than failing the whole batch. Keys are matched by their camelCase names only;
    anything else (including snake_case spellings) is kept as an extra field.
    """

    subscription_id: JsonValue = Field(None, alias="subscriptionId")
    resource: JsonValue = None
    site_url: JsonValue = Field(None, alias="siteUrl")
    tenant_id: JsonValue = Field(None, alias="tenantId")
    web_id: JsonValue = Field(None, alias="webId")
    expiration_date_time: JsonValue = Field(None, alias="expirationDateTime")
    client_state: JsonValue = Field(None, alias="clientState")
    # Not every SharePoint payload carries it; None means absent, not "updated".
    change_type: JsonValue = Field(None, alias="changeType")

    model_config = {"extra": "allow", "frozen": True}

    def to_payload(self) -> dict[str, Any]:
        """Return the notification as sent upstream: camelCase keys, absent fields left out."""
        payload = self.model_dump(by_alias=True, exclude_unset=True)
        if self.model_extra:
            payload.update(self.model_extra)
        return payload


class NotificationBatch(BaseModel):
    """Request body of a SharePoint webhook POST: notifications in 'value'."""

    value: list[Notification]

    model_config = {"frozen": True}

    def __len__(self) -> int:
        return len(self.value)


class QueueMessage(BaseModel):
    """Publish-ready envelope wrapping one notification."""

    body: dict[str, Any]
    content_type: str = JSON_CONTENT_TYPE
    application_properties: dict[str, str] = Field(default_factory=dict)

    model_config = {"frozen": True}

    @classmethod
    def from_notification(cls, notification: Notification) -> "QueueMessage":
        properties: dict[str, str] = {}
        if notification.subscription_id is not None:
            properties["subscriptionId"] = str(notification.subscription_id)
        if notification.change_type is not None:
            properties["changeType"] = str(notification.change_type)
        return cls(body=notification.to_payload(), application_properties=properties)
