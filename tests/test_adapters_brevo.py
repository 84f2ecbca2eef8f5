import logging

import httpx
import pytest

from adapters import BrevoAdapter, EmailSender, HttpxJSONClient
from adapters.brevo_adapter import INVITE_SUBJECT, NOT_CONFIGURED, signup_link
from apps.core.errors import GatewayError


class FakeHTTP:
    def __init__(self, response=None, error=None) -> None:
        self.calls: list[tuple[str, str, dict]] = []
        self.response = response if response is not None else {"messageId": "<m1@brevo>"}
        self.error = error

    def get(self, url, *, headers=None, params=None):
        self.calls.append(("GET", url, {"headers": headers or {}, "params": params or {}}))
        return {}

    def post(self, url, *, headers=None, json=None):
        self.calls.append(("POST", url, {"headers": headers or {}, "json": json or {}}))
        if self.error is not None:
            raise self.error
        return self.response


def make_adapter(http=None, api_key="k-123", dry_run=False):
    return BrevoAdapter(
        api_key,
        sender=EmailSender(name="Love&Pixels", email="hello@example.com"),
        app_url="https://cms.example.com/",
        http_client=http,
        dry_run=dry_run,
    )


def test_signup_link_encodes_email():
    link = signup_link("https://cms.example.com/", "a+b@example.com")
    assert link == "https://cms.example.com/auth/signup?email=a%2Bb%40example.com"


def test_payload_shape():
    payload = make_adapter().build_payload("jane@example.com", "editor")
    assert payload["sender"] == {"name": "Love&Pixels", "email": "hello@example.com"}
    assert payload["to"] == [{"email": "jane@example.com", "name": "jane"}]
    assert payload["subject"] == INVITE_SUBJECT
    assert "as a editor" in payload["htmlContent"]
    assert "/auth/signup?email=jane%40example.com" in payload["htmlContent"]


def test_send_invite_posts_with_api_key_header():
    http = FakeHTTP()
    result = make_adapter(http).send_invite("jane@example.com", "editor")
    assert result.success is True
    assert result.message_id == "<m1@brevo>"
    method, url, kwargs = http.calls[0]
    assert method == "POST"
    assert url == "https://api.brevo.com/v3/smtp/email"
    assert kwargs["headers"]["api-key"] == "k-123"
    assert kwargs["json"]["to"][0]["email"] == "jane@example.com"


def test_missing_api_key_is_not_configured():
    http = FakeHTTP()
    result = make_adapter(http, api_key=None).send_invite("jane@example.com", "editor")
    assert result.success is False
    assert result.error == NOT_CONFIGURED
    assert http.calls == []


def test_provider_failure_is_reported_not_raised():
    http = FakeHTTP(error=GatewayError("invalid sender", status_code=400))
    result = make_adapter(http).send_invite("jane@example.com", "editor")
    assert result.success is False
    assert result.error == "invalid sender"


def test_failure_log_omits_api_key():
    records = []

    class ListHandler(logging.Handler):
        def emit(self, record):
            records.append(record)

    logger = logging.getLogger("adapters.brevo")
    handler = ListHandler()
    logger.addHandler(handler)
    try:
        http = FakeHTTP(error=GatewayError("invalid sender", status_code=400))
        make_adapter(http, api_key="k-secret").send_invite("jane@example.com", "editor")
    finally:
        logger.removeHandler(handler)
    failures = [r for r in records if r.getMessage() == "brevo.send_failed"]
    assert failures
    assert "k-secret" not in str(failures[0].data)


def test_dry_run_is_deterministic_and_offline():
    http = FakeHTTP()
    adapter = make_adapter(http, api_key=None, dry_run=True)
    first = adapter.send_invite("jane@example.com", "editor")
    second = adapter.send_invite("jane@example.com", "editor")
    assert first.success and first.message_id == second.message_id
    assert first.message_id.startswith("dry-run-")
    assert http.calls == []


def _httpx_client(handler):
    return HttpxJSONClient(client=httpx.Client(transport=httpx.MockTransport(handler)))


def test_httpx_client_decodes_json():
    client = _httpx_client(lambda request: httpx.Response(201, json={"messageId": "x"}))
    assert client.post("https://api.example.com/send", json={"a": 1}) == {"messageId": "x"}


def test_httpx_client_wraps_error_status():
    client = _httpx_client(lambda request: httpx.Response(401, json={"message": "Key not found"}))
    with pytest.raises(GatewayError) as excinfo:
        client.post("https://api.example.com/send", json={})
    assert excinfo.value.status_code == 401
    assert str(excinfo.value) == "Key not found"


def test_httpx_client_wraps_transport_errors():
    def boom(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(GatewayError):
        _httpx_client(boom).get("https://api.example.com/ping")


def test_httpx_client_empty_body():
    client = _httpx_client(lambda request: httpx.Response(204))
    assert client.get("https://api.example.com/ping") == {}
