"""Webhook dispatch: route each request to validation echo, intake, or rejection."""

from dataclasses import dataclass
from typing import Awaitable, Callable, Mapping

from fastapi import Response
from fastapi.responses import PlainTextResponse

from webhook_relay.utils.logger import get_logger
from webhook_relay.webhook.outcomes import (
    ACKNOWLEDGED_BODY,
    INTERNAL_ERROR_BODY,
    Acknowledged,
    BadRequest,
    DispatchOutcome,
    InternalError,
    MethodNotAllowed,
    ValidationEcho,
)
from webhook_relay.webhook.pipeline import IntakePipeline

logger = get_logger("webhook_relay.webhook.dispatcher")

VALIDATION_TOKEN_PARAM = "validationtoken"

GET_NOT_ALLOWED_MESSAGE = (
    "SharePoint webhooks use POST. Validation: POST with 'validationtoken' in query. "
    "Notifications: POST with payload in body."
)


@dataclass(frozen=True)
class InboundRequest:
    """What the dispatcher needs from an HTTP request."""

    method: str
    query: Mapping[str, str]
    read_body: Callable[[], Awaitable[bytes]]
    url: str = ""


def get_validation_token(query: Mapping[str, str]) -> str | None:
    """Return the validation token, or None when absent or empty.

    The exact 'validationtoken' key wins; otherwise a key differing only in case
    is accepted. The value is returned untouched.
    """
    token = query.get(VALIDATION_TOKEN_PARAM)
    if token is None:
        for key in query.keys():
            if key.lower() == VALIDATION_TOKEN_PARAM:
                token = query[key]
                break
    return token or None


class WebhookDispatcher:
    def __init__(self, pipeline: IntakePipeline):
        self._pipeline = pipeline

    async def dispatch(self, request: InboundRequest) -> DispatchOutcome:
        """Produce exactly one outcome. Never raises."""
        method = request.method.upper()
        try:
            token = get_validation_token(request.query)
            if method == "POST":
                if token:
                    logger.info("webhook.dispatch.validation_echo", method=method, url=request.url)
                    return ValidationEcho(token=token)
                logger.info("webhook.dispatch.notification", url=request.url)
                body = await request.read_body()
                return await self._pipeline.handle(body)

            if method == "GET":
                if token:
                    # Handshake uses POST; answered on GET too for manual testing.
                    logger.info("webhook.dispatch.validation_echo", method=method, url=request.url)
                    return ValidationEcho(token=token)
                logger.info("webhook.dispatch.get_without_token", url=request.url)
                return MethodNotAllowed(method=method, message=GET_NOT_ALLOWED_MESSAGE)

            logger.info("webhook.dispatch.unsupported_method", method=method, url=request.url)
            return MethodNotAllowed(
                method=method,
                message=f"Method {method} not allowed or not handled.",
            )
        except Exception as e:
            logger.exception("webhook.dispatch.internal_error", method=method, error=str(e))
            return InternalError(reason=str(e))


def to_response(outcome: DispatchOutcome) -> Response:
    """Map an outcome to its fixed HTTP status, body and content type."""
    if isinstance(outcome, ValidationEcho):
        return PlainTextResponse(content=outcome.token, status_code=200, media_type="text/plain")
    if isinstance(outcome, Acknowledged):
        return PlainTextResponse(content=ACKNOWLEDGED_BODY, status_code=202)
    if isinstance(outcome, BadRequest):
        return PlainTextResponse(content=outcome.reason, status_code=400)
    if isinstance(outcome, MethodNotAllowed):
        return PlainTextResponse(content=outcome.message, status_code=405, headers={"Allow": "GET, POST"})
    return PlainTextResponse(content=INTERNAL_ERROR_BODY, status_code=500)
