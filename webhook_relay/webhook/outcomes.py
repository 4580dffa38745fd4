"""Dispatch outcomes: what the webhook endpoint decided for one request."""

from typing import Union

from pydantic import BaseModel

ACKNOWLEDGED_BODY = "Notification acknowledged"
INTERNAL_ERROR_BODY = "An internal error occurred while processing the request."


class ValidationEcho(BaseModel):
    """Subscription validation handshake; token must be returned byte-for-byte."""

    token: str

    model_config = {"frozen": True}


class Acknowledged(BaseModel):
    """Notification accepted (whether or not forwarding succeeded)."""

    model_config = {"frozen": True}


class BadRequest(BaseModel):
    reason: str

    model_config = {"frozen": True}


class MethodNotAllowed(BaseModel):
    method: str
    message: str

    model_config = {"frozen": True}


class InternalError(BaseModel):
    """Unexpected fault. reason is logged, never returned to the caller."""

    reason: str

    model_config = {"frozen": True}


DispatchOutcome = Union[ValidationEcho, Acknowledged, BadRequest, MethodNotAllowed, InternalError]
