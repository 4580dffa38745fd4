"""FastAPI webhook server for SharePoint change notifications."""

from fastapi import FastAPI, Request, Response
from fastapi.responses import PlainTextResponse

from webhook_relay.config import ServiceBusSettings, load_service_bus_settings
from webhook_relay.errors import ConfigurationError
from webhook_relay.queue.protocol import QueuePublisher
from webhook_relay.queue.service_bus import ServiceBusPublisher
from webhook_relay.utils.logger import get_logger, request_context
from webhook_relay.webhook.dispatcher import InboundRequest, WebhookDispatcher, to_response
from webhook_relay.webhook.pipeline import IntakePipeline

logger = get_logger("webhook_relay.webhook.server")

NOTIFICATION_PATHS = ("/api/tokenEndpoint", "/webhook/notifications")
PROBE_PATH = "/api/httpTriggerWebhook"
DISPATCHED_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


def _build_publisher(settings: ServiceBusSettings | None) -> QueuePublisher | None:
    """Service Bus publisher from settings, or None (with a warning) when coordinates are missing."""
    settings = settings or load_service_bus_settings()
    try:
        return ServiceBusPublisher(settings)
    except ConfigurationError as e:
        logger.warning("webhook.app.publisher_not_configured", error=str(e))
        return None


def create_app(
    publisher: QueuePublisher | None = None,
    settings: ServiceBusSettings | None = None,
) -> FastAPI:
    """
    Create the FastAPI app. When publisher is given it is used as-is (tests, local outbox);
    otherwise a ServiceBusPublisher is built from settings (default: environment).

    Notifications are acknowledged with 202 even if forwarding to the queue fails;
    see webhook_relay.webhook.pipeline.
    """
    if publisher is None:
        publisher = _build_publisher(settings)

    app = FastAPI(title="SharePoint Webhook Relay", version="0.1.0")
    app.state.pipeline = IntakePipeline(publisher)
    app.state.dispatcher = WebhookDispatcher(app.state.pipeline)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get(PROBE_PATH, response_class=PlainTextResponse)
    async def hello(request: Request, name: str | None = None) -> str:
        """Liveness/echo probe: Hello, {name}! (query, then body text, then 'world')."""
        logger.info("webhook.probe", url=str(request.url))
        if not name:
            name = (await request.body()).decode("utf-8", errors="replace")
        return f"Hello, {name or 'world'}!"

    async def notifications(request: Request) -> Response:
        with request_context(method=request.method, path=request.url.path):
            inbound = InboundRequest(
                method=request.method,
                query=request.query_params,
                read_body=request.body,
                url=str(request.url),
            )
            outcome = await app.state.dispatcher.dispatch(inbound)
            return to_response(outcome)

    for path in NOTIFICATION_PATHS:
        app.add_api_route(path, notifications, methods=DISPATCHED_METHODS, response_model=None)

    return app
