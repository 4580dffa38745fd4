"""Tests for the webhook HTTP endpoint: validation echo, intake, rejection."""

import asyncio
import json
import sys
import unittest
from pathlib import Path
from unittest import mock

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from fastapi.testclient import TestClient

import webhook_relay.queue.service_bus as service_bus
from webhook_relay.config import ServiceBusSettings
from webhook_relay.queue.service_bus import ServiceBusPublisher
from webhook_relay.webhook.dispatcher import InboundRequest, WebhookDispatcher, to_response
from webhook_relay.webhook.outcomes import ACKNOWLEDGED_BODY, INTERNAL_ERROR_BODY, InternalError
from webhook_relay.webhook.pipeline import IntakePipeline
from webhook_relay.webhook.server import create_app

from tests.fakes import (
    FailingPublisher,
    FakeSender,
    FakeServiceBusClient,
    RecordingPublisher,
    client_factory_for,
)

ENDPOINT = "/api/tokenEndpoint"

NOTIFICATION = {
    "subscriptionId": "s1",
    "resource": "r1",
    "expirationDateTime": "2030-01-01T00:00:00Z",
    "tenantId": "t1",
    "siteUrl": "/sites/x",
    "webId": "w1",
    "changeType": "added",
}

TOKENS = [
    "abc123",
    "a b+c&d=e",
    "token/with?slashes#and%percent",
    "üñíçødé-✓",
    "  padded  ",
]


class TestValidationHandshake(unittest.TestCase):
    def setUp(self):
        self.publisher = RecordingPublisher()
        self.client = TestClient(create_app(publisher=self.publisher))

    def test_post_echoes_token_verbatim(self):
        for token in TOKENS:
            with self.subTest(token=token):
                r = self.client.post(ENDPOINT, params={"validationtoken": token})
                self.assertEqual(r.status_code, 200)
                self.assertEqual(r.text, token)
                self.assertTrue(r.headers["content-type"].startswith("text/plain"))

    def test_get_echoes_token_verbatim(self):
        for token in TOKENS:
            with self.subTest(token=token):
                r = self.client.get(ENDPOINT, params={"validationtoken": token})
                self.assertEqual(r.status_code, 200)
                self.assertEqual(r.text, token)

    def test_post_with_token_ignores_body(self):
        r = self.client.post(ENDPOINT, params={"validationtoken": "t"}, content=b"not-json")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.text, "t")
        self.assertEqual(self.publisher.batches, [])

    def test_mixed_case_parameter_accepted(self):
        r = self.client.post(ENDPOINT, params={"validationToken": "xyz"})
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.text, "xyz")

    def test_alias_path(self):
        r = self.client.post("/webhook/notifications", params={"validationtoken": "alias"})
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.text, "alias")


class TestNotificationIntake(unittest.TestCase):
    def test_empty_batch_no_publish(self):
        publisher = RecordingPublisher()
        r = TestClient(create_app(publisher=publisher)).post(ENDPOINT, content=b'{"value":[]}')
        self.assertEqual(r.status_code, 202)
        self.assertEqual(r.text, ACKNOWLEDGED_BODY)
        self.assertEqual(publisher.batches, [])

    def test_invalid_json_400(self):
        publisher = RecordingPublisher()
        r = TestClient(create_app(publisher=publisher)).post(ENDPOINT, content=b"not-json")
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.text, "invalid JSON payload")
        self.assertEqual(publisher.batches, [])

    def test_empty_body_400(self):
        r = TestClient(create_app(publisher=RecordingPublisher())).post(ENDPOINT)
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.text, "payload empty or malformed")

    def test_notification_forwarded_verbatim(self):
        publisher = RecordingPublisher()
        body = json.dumps({"value": [NOTIFICATION]})
        r = TestClient(create_app(publisher=publisher)).post(ENDPOINT, content=body)
        self.assertEqual(r.status_code, 202)
        self.assertEqual(len(publisher.batches), 1)
        self.assertEqual(len(publisher.batches[0]), 1)
        self.assertEqual(publisher.batches[0][0].body, NOTIFICATION)

    def test_non_string_field_forwarded_202(self):
        publisher = RecordingPublisher()
        item = {"subscriptionId": "s1", "resource": "r1", "changeType": "added", "clientState": 123}
        r = TestClient(create_app(publisher=publisher)).post(ENDPOINT, content=json.dumps({"value": [item]}))
        self.assertEqual(r.status_code, 202)
        self.assertEqual(len(publisher.batches), 1)
        self.assertEqual(publisher.batches[0][0].body, item)

    def test_publish_failure_still_202(self):
        publisher = FailingPublisher()
        body = json.dumps({"value": [NOTIFICATION]})
        r = TestClient(create_app(publisher=publisher)).post(ENDPOINT, content=body)
        self.assertEqual(r.status_code, 202)
        self.assertEqual(publisher.calls, 1)

    def test_service_bus_failure_still_202_and_logged(self):
        settings = ServiceBusSettings(connection_string="Endpoint=sb://x/", queue_name="q1")
        fake = FakeServiceBusClient(sender=FakeSender(send_error=ConnectionError("service unavailable")))
        publisher = ServiceBusPublisher(settings, client_factory=client_factory_for(fake))
        body = json.dumps({"value": [NOTIFICATION]})

        with mock.patch.object(service_bus, "logger") as log:
            r = TestClient(create_app(publisher=publisher)).post(ENDPOINT, content=body)

        self.assertEqual(r.status_code, 202)
        self.assertTrue(fake.closed)
        events = [c.args[0] for c in log.error.call_args_list]
        self.assertIn("queue.publish.failed", events)

    def test_unconfigured_queue_still_202(self):
        app = create_app(settings=ServiceBusSettings(connection_string="", queue_name=""))
        self.assertIsNone(app.state.pipeline.publisher)
        r = TestClient(app).post(ENDPOINT, content=json.dumps({"value": [NOTIFICATION]}))
        self.assertEqual(r.status_code, 202)

    def test_raw_publisher_error_still_202(self):
        publisher = FailingPublisher(error=ConnectionError("secret internal detail"))
        r = TestClient(create_app(publisher=publisher)).post(
            ENDPOINT, content=json.dumps({"value": [NOTIFICATION]})
        )
        self.assertEqual(r.status_code, 202)
        self.assertEqual(publisher.calls, 1)

    def test_unexpected_error_500_without_detail(self):
        app = create_app(publisher=RecordingPublisher())
        with mock.patch.object(app.state.pipeline, "handle", side_effect=RuntimeError("secret internal detail")):
            r = TestClient(app).post(ENDPOINT, content=json.dumps({"value": [NOTIFICATION]}))
        self.assertEqual(r.status_code, 500)
        self.assertEqual(r.text, INTERNAL_ERROR_BODY)
        self.assertNotIn("secret", r.text)


class TestRejection(unittest.TestCase):
    def setUp(self):
        self.client = TestClient(create_app(publisher=RecordingPublisher()))

    def test_get_without_token_405(self):
        r = self.client.get(ENDPOINT)
        self.assertEqual(r.status_code, 405)
        self.assertIn("SharePoint webhooks use POST", r.text)

    def test_get_with_empty_token_405(self):
        r = self.client.get(ENDPOINT, params={"validationtoken": ""})
        self.assertEqual(r.status_code, 405)

    def test_delete_405(self):
        r = self.client.delete(ENDPOINT)
        self.assertEqual(r.status_code, 405)
        self.assertEqual(r.text, "Method DELETE not allowed or not handled.")

    def test_put_405(self):
        r = self.client.put(ENDPOINT, content=json.dumps({"value": [NOTIFICATION]}))
        self.assertEqual(r.status_code, 405)


class TestProbeAndHealth(unittest.TestCase):
    def setUp(self):
        self.client = TestClient(create_app(publisher=RecordingPublisher()))

    def test_hello_with_name(self):
        r = self.client.get("/api/httpTriggerWebhook", params={"name": "Ada"})
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.text, "Hello, Ada!")

    def test_hello_default(self):
        r = self.client.get("/api/httpTriggerWebhook")
        self.assertEqual(r.text, "Hello, world!")

    def test_health(self):
        r = self.client.get("/health")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json(), {"status": "ok"})


class TestDispatcherBoundary(unittest.TestCase):
    """Faults outside publish become InternalError; the reason is never sent to the caller."""

    def test_body_read_failure_is_internal_error(self):
        async def broken_body():
            raise OSError("client disconnected")

        dispatcher = WebhookDispatcher(IntakePipeline(RecordingPublisher()))
        outcome = asyncio.run(dispatcher.dispatch(InboundRequest(method="POST", query={}, read_body=broken_body)))

        self.assertIsInstance(outcome, InternalError)
        self.assertEqual(outcome.reason, "client disconnected")
        response = to_response(outcome)
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.body.decode("utf-8"), INTERNAL_ERROR_BODY)


if __name__ == "__main__":
    unittest.main()
