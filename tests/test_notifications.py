# tests/test_notifications.py
"""
Test alert payloads and webhook delivery.
"""

import json

import httpx

from flightwatch.notifications import SAFETY_ALERT, WebhookAlertDispatcher, build_alert_payload
from flightwatch.safety import PathVerdict, SafetyColor, SafetyStatus
from flightwatch.settings import Settings

from conftest import make_checkpoint, make_flight

RED = PathVerdict(SafetyStatus.DANGEROUS, 0.0, SafetyColor.RED)


def checkpoints():
    return [
        make_checkpoint(SafetyStatus.SAFE, 100),
        make_checkpoint(SafetyStatus.DANGEROUS, 0, "Thunderstorms present"),
        make_checkpoint(SafetyStatus.DANGEROUS, 0, "Thunderstorms present"),
        make_checkpoint(SafetyStatus.MARGINAL, 70, "Low visibility: 2.0 mi (need 5 mi)"),
    ]


def dispatcher_with(handler, url="https://hooks.example.test/alerts"):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return WebhookAlertDispatcher(url=url, settings=Settings(alert_webhook_url=None), client=client)


class TestAlertPayload:

    def test_payload_fields(self):
        payload = build_alert_payload(make_flight("f1"), RED, checkpoints())

        assert payload.event_type == SAFETY_ALERT
        assert payload.flight_id == "f1"
        assert payload.data["departure"] == "BOS"
        assert payload.data["arrival"] == "JFK"
        assert payload.data["color"] == "RED"
        assert payload.data["safety_status"] == "dangerous"
        assert payload.data["student_name"] == "Sam Student"

    def test_issues_are_unique_without_acceptable(self):
        payload = build_alert_payload(make_flight(), RED, checkpoints())
        assert payload.data["issues"] == [
            "Thunderstorms present",
            "Low visibility: 2.0 mi (need 5 mi)",
        ]


class TestWebhookAlertDispatcher:

    def test_delivers_json(self):
        received = []

        def handler(request):
            received.append(request)
            return httpx.Response(200)

        assert dispatcher_with(handler).send_safety_alert(make_flight("f1"), RED, checkpoints())

        request = received[0]
        body = json.loads(request.content)
        assert request.method == "POST"
        assert request.headers["X-Webhook-Event"] == SAFETY_ALERT
        assert body["flight_id"] == "f1"
        assert body["data"]["issues"][0] == "Thunderstorms present"

    def test_non_2xx_is_failure(self):
        dispatcher = dispatcher_with(lambda request: httpx.Response(500))
        assert dispatcher.send_safety_alert(make_flight(), RED, checkpoints()) is False

    def test_connection_error_is_failure(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        assert dispatcher_with(handler).send_safety_alert(make_flight(), RED, checkpoints()) is False

    def test_unconfigured_sends_nothing(self):
        received = []

        def handler(request):
            received.append(request)
            return httpx.Response(200)

        dispatcher = dispatcher_with(handler, url=None)
        assert dispatcher.send_safety_alert(make_flight(), RED, checkpoints()) is False
        assert received == []
