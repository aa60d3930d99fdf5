"""
Test for Phase 8: AI chat proxy and the /api/chat route
"""

import sys

# CRITICAL: Set Windows event loop policy FIRST, before other imports
if sys.platform == "win32":
    import asyncio

    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from finserv.config.settings import (
    CHAT_MAX_MESSAGE_LENGTH,
    CHATBOT_ERROR_MESSAGE,
    FALLBACK_REPLY,
)
from finserv.exceptions.errors import UpstreamFailure
from finserv.main import create_app
from finserv.services.chat_proxy import ChatProxy, build_envelope, extract_reply
from tests.helpers import (
    TEST_GEMINI_KEY,
    TEST_REPLY,
    auth_header,
    gemini_payload,
    make_services,
    make_settings,
    register_user,
)


class RecordingTransport:
    """Mock transport handler that answers from a script of responses."""

    def __init__(self, *script):
        self.script = list(script)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        step = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if isinstance(step, Exception):
            raise step
        return step


def make_proxy(handler, api_key=TEST_GEMINI_KEY, max_retries=1) -> ChatProxy:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ChatProxy(
        client,
        api_key=api_key,
        model="gemini-2.5-flash",
        api_base="https://gemini.test/v1beta/",
        timeout_seconds=1.0,
        max_retries=max_retries,
    )


# ==============================================================================
# REPLY EXTRACTION
# ==============================================================================


def test_envelope_shape():
    assert build_envelope("hi") == {"contents": [{"role": "user", "parts": [{"text": "hi"}]}]}


def test_extract_reply_strips_text():
    assert extract_reply(gemini_payload("  Budget 50/30/20.\n")) == "Budget 50/30/20."


@pytest.mark.parametrize(
    "data",
    [{}, {"candidates": []}, {"candidates": [{"content": {"parts": []}}]}, ["nope"], None],
)
def test_extract_reply_unexpected_shape(data):
    with pytest.raises(UpstreamFailure) as exc_info:
        extract_reply(data)
    assert exc_info.value.reason == "unexpected_shape"


def test_extract_reply_blank_text():
    with pytest.raises(UpstreamFailure) as exc_info:
        extract_reply(gemini_payload("   "))
    assert exc_info.value.reason == "empty_reply"


# ==============================================================================
# PROXY
# ==============================================================================


@pytest.mark.asyncio
async def test_relay_success_sends_key_header_and_envelope():
    transport = RecordingTransport(httpx.Response(200, json=gemini_payload()))
    proxy = make_proxy(transport)

    outcome = await proxy.relay("How big should my emergency fund be?")

    assert outcome.ok is True
    assert outcome.reply == TEST_REPLY
    sent = transport.requests[0]
    assert str(sent.url) == "https://gemini.test/v1beta/models/gemini-2.5-flash:generateContent"
    assert sent.headers["x-goog-api-key"] == TEST_GEMINI_KEY
    assert "key=" not in str(sent.url)
    assert json.loads(sent.content) == build_envelope("How big should my emergency fund be?")


@pytest.mark.asyncio
async def test_http_error_is_fallback_without_retry():
    transport = RecordingTransport(httpx.Response(503, text="overloaded"))
    outcome = await make_proxy(transport).relay("hi")

    assert outcome.ok is False
    assert outcome.reply == FALLBACK_REPLY
    assert outcome.failure_reason == "http_503"
    assert len(transport.requests) == 1


@pytest.mark.asyncio
async def test_invalid_json_is_fallback():
    transport = RecordingTransport(httpx.Response(200, text="<html>oops</html>"))
    outcome = await make_proxy(transport).relay("hi")
    assert outcome.failure_reason == "invalid_json"
    assert outcome.reply == FALLBACK_REPLY


@pytest.mark.asyncio
async def test_unexpected_shape_is_fallback():
    transport = RecordingTransport(httpx.Response(200, json={"promptFeedback": {"blockReason": "SAFETY"}}))
    outcome = await make_proxy(transport).relay("hi")
    assert outcome.failure_reason == "unexpected_shape"


@pytest.mark.asyncio
async def test_timeout_is_retried_once():
    transport = RecordingTransport(
        httpx.ReadTimeout("slow"),
        httpx.Response(200, json=gemini_payload()),
    )
    outcome = await make_proxy(transport).relay("hi")

    assert outcome.ok is True
    assert len(transport.requests) == 2


@pytest.mark.asyncio
async def test_repeated_timeout_gives_up():
    transport = RecordingTransport(httpx.ReadTimeout("slow"))
    outcome = await make_proxy(transport, max_retries=1).relay("hi")

    assert outcome.ok is False
    assert outcome.failure_reason == "timeout"
    assert len(transport.requests) == 2


@pytest.mark.asyncio
async def test_connection_error_without_retries():
    transport = RecordingTransport(httpx.ConnectError("refused"))
    outcome = await make_proxy(transport, max_retries=0).relay("hi")

    assert outcome.failure_reason == "transport_error"
    assert len(transport.requests) == 1


def corrupt_gzip_response(request: httpx.Request = None) -> httpx.Response:
    return httpx.Response(
        200, headers={"Content-Encoding": "gzip"}, content=b"definitely not gzip"
    )


@pytest.mark.asyncio
async def test_undecodable_body_is_fallback_without_retry():
    transport = RecordingTransport(corrupt_gzip_response())
    outcome = await make_proxy(transport).relay("hi")

    assert outcome.ok is False
    assert outcome.reply == FALLBACK_REPLY
    assert outcome.failure_reason == "request_error"
    assert len(transport.requests) == 1


@pytest.mark.asyncio
async def test_missing_key_never_calls_upstream():
    transport = RecordingTransport(httpx.Response(200, json=gemini_payload()))
    outcome = await make_proxy(transport, api_key="").relay("hi")

    assert outcome.failure_reason == "missing_api_key"
    assert outcome.reply == FALLBACK_REPLY
    assert transport.requests == []


# ==============================================================================
# ROUTE
# ==============================================================================


def test_chat_route_returns_reply(client):
    response = client.post("/api/chat", json={"message": "What is an index fund?"})
    assert response.status_code == 200
    assert response.json() == {"reply": TEST_REPLY}


def test_chat_route_failure_is_fallback_with_generic_error():
    def handler(request):
        return httpx.Response(500, text="internal quota project=secret-project-42")

    with TestClient(create_app(make_services(handler=handler)), raise_server_exceptions=False) as client:
        response = client.post("/api/chat", json={"message": "hi"})

    assert response.status_code == 500
    assert response.json() == {"reply": FALLBACK_REPLY, "error": CHATBOT_ERROR_MESSAGE}
    assert "secret-project-42" not in response.text


def test_chat_route_undecodable_body_is_fallback():
    with TestClient(
        create_app(make_services(handler=corrupt_gzip_response)),
        raise_server_exceptions=False,
    ) as client:
        response = client.post("/api/chat", json={"message": "hi"})

    assert response.status_code == 500
    assert response.json() == {"reply": FALLBACK_REPLY, "error": CHATBOT_ERROR_MESSAGE}


@pytest.mark.parametrize(
    "body",
    [{}, {"message": ""}, {"message": "   "}, {"message": "x" * (CHAT_MAX_MESSAGE_LENGTH + 1)}],
)
def test_chat_route_rejects_bad_message(client, body):
    response = client.post("/api/chat", json=body)
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid request"


def test_chat_is_open_by_default(client):
    assert client.post("/api/chat", json={"message": "hi"}).status_code == 200


def test_chat_requires_session_when_configured():
    services = make_services(make_settings(chat_require_auth=True))
    with TestClient(create_app(services), raise_server_exceptions=False) as client:
        anonymous = client.post("/api/chat", json={"message": "hi"})
        token = register_user(client).json()["token"]
        signed_in = client.post(
            "/api/chat", json={"message": "hi"}, headers=auth_header(token)
        )

    assert anonymous.status_code == 401
    assert anonymous.json() == {"message": "Missing token"}
    assert signed_in.status_code == 200
