"""Unit tests for the SMS gateway client and result messages."""

import json

import httpx
import pytest

from report_engine.core.exceptions import NotificationError
from report_engine.services.notification import SmsGateway, build_result_message, get_sms_gateway


def gateway_with(handler) -> SmsGateway:
    return SmsGateway(
        url="https://sms.example.org/send",
        sender_id="STMARYS",
        client=httpx.Client(transport=httpx.MockTransport(handler)),
    )


class TestSmsGateway:
    def test_posts_json_message(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["payload"] = json.loads(request.content)
            return httpx.Response(200, json={"status": "queued"})

        gateway_with(handler).send("+256700000001", "Results are out")

        assert captured["url"] == "https://sms.example.org/send"
        assert captured["payload"] == {
            "sender": "STMARYS",
            "recipient": "+256700000001",
            "message": "Results are out",
        }

    def test_error_status_raises(self):
        gateway = gateway_with(lambda request: httpx.Response(401, text="bad key"))

        with pytest.raises(NotificationError) as exc_info:
            gateway.send("+256700000001", "hello")
        assert exc_info.value.recipient == "+256700000001"
        assert "HTTP 401" in exc_info.value.reason

    def test_transport_error_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(NotificationError) as exc_info:
            gateway_with(handler).send("+256700000001", "hello")
        assert "unreachable" in exc_info.value.reason

    def test_api_key_sent_as_bearer_token(self):
        gateway = SmsGateway(url="https://sms.example.org/send", api_key="secret")
        try:
            assert gateway.client.headers["Authorization"] == "Bearer secret"
        finally:
            gateway.close()

    def test_not_configured(self):
        assert get_sms_gateway() is None


class TestResultMessage:
    def test_classified_student(self):
        message = build_result_message(
            student_name="Alice Akello",
            reg_no="REG0001",
            division="Division 1",
            aggregate=4,
            viewer_base_url="https://portal.example.org",
        )
        assert message == (
            "Hello, results for Alice Akello are out. Division: Division 1, Aggregate: 4. "
            "More details at https://portal.example.org/report-viewer. RegNo: REG0001."
        )

    def test_excluded_student(self):
        message = build_result_message("Dina Drani", "REG0004", None, None, "https://portal.example.org")
        assert "Division: N/A, Aggregate: N/A." in message
