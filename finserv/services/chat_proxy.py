"""
MODULE_DESCRIPTION: AI Chat Proxy - Gemini generateContent relay

===================================================================================
PURPOSE AND OVERVIEW
===================================================================================

Relays a single user message to Google Gemini and returns the first text
candidate. The provider key stays on the server; the client only ever sees
the reply text or the fixed fallback.

Request:
    POST {GEMINI_API_BASE}/models/{GEMINI_MODEL}:generateContent
    x-goog-api-key: <GEMINI_API_KEY>
    {"contents": [{"role": "user", "parts": [{"text": message}]}]}

Reply extraction:
    candidates[0].content.parts[0].text, stripped, must be non-empty

===================================================================================
FAILURE HANDLING
===================================================================================

Every failure becomes an ``UpstreamFailure`` internally and a
``ChatOutcome(ok=False, reply=FALLBACK_REPLY)`` externally; ``relay`` never
raises for provider problems.

    missing_api_key     GEMINI_API_KEY not configured
    timeout             no answer within CHAT_TIMEOUT_SECONDS (after retries)
    transport_error     connection refused/reset, DNS failure (after retries)
    request_error       any other httpx failure: undecodable body, redirect
                        loop, malformed GEMINI_API_BASE (not retried)
    http_<status>       non-2xx response
    invalid_json        body is not JSON
    unexpected_shape    no text at candidates[0].content.parts[0].text
    empty_reply         text present but blank

Only transport-level errors (including timeouts) are retried, at most
CHAT_MAX_RETRIES times. An HTTP error status is an answer, not a transient
failure, and is not retried.
"""

from dataclasses import dataclass
from typing import Optional

import httpx

from finserv.config.settings import FALLBACK_REPLY
from finserv.exceptions.errors import UpstreamFailure
from finserv.utils.debug import print__chat_debug, print__upstream_error

# Raw provider bodies are clipped to this many characters in logs
MAX_LOGGED_BODY = 500


@dataclass(frozen=True)
class ChatOutcome:
    reply: str
    ok: bool
    failure_reason: Optional[str] = None


def build_envelope(message: str) -> dict:
    return {"contents": [{"role": "user", "parts": [{"text": message}]}]}


def extract_reply(data) -> str:
    """Return ``candidates[0].content.parts[0].text`` stripped.

    Raises:
        UpstreamFailure: the shape is unexpected or the text is blank.
    """
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as exc:
        raise UpstreamFailure("unexpected_shape", str(data)[:MAX_LOGGED_BODY]) from exc

    if not isinstance(text, str):
        raise UpstreamFailure("unexpected_shape", f"text is {type(text).__name__}")
    text = text.strip()
    if not text:
        raise UpstreamFailure("empty_reply")
    return text


class ChatProxy:
    """Stateless relay to the Gemini generateContent endpoint."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        model: str = "gemini-2.5-flash",
        api_base: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout_seconds: float = 8.0,
        max_retries: int = 1,
    ):
        self.http_client = http_client
        self._api_key = api_key
        self.model = model
        self.api_base = api_base.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries

    @classmethod
    def from_settings(cls, settings, http_client: httpx.AsyncClient) -> "ChatProxy":
        return cls(
            http_client,
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            api_base=settings.gemini_api_base,
            timeout_seconds=settings.chat_timeout_seconds,
            max_retries=settings.chat_max_retries,
        )

    @property
    def endpoint(self) -> str:
        return f"{self.api_base}/models/{self.model}:generateContent"

    async def relay(self, message: str) -> ChatOutcome:
        """Send ``message`` upstream; always returns, never raises for
        provider failures."""
        try:
            reply = await self._generate(message)
        except UpstreamFailure as failure:
            print__upstream_error(f"Gemini relay failed: {failure}")
            return ChatOutcome(reply=FALLBACK_REPLY, ok=False, failure_reason=failure.reason)

        print__chat_debug(f"💬 CHAT RELAY OK: reply length {len(reply)}")
        return ChatOutcome(reply=reply, ok=True)

    async def _generate(self, message: str) -> str:
        if not self._api_key:
            raise UpstreamFailure("missing_api_key", "GEMINI_API_KEY is not configured")

        response = await self._post_with_retry(build_envelope(message))

        if response.status_code < 200 or response.status_code >= 300:
            raise UpstreamFailure(
                f"http_{response.status_code}", response.text[:MAX_LOGGED_BODY]
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamFailure("invalid_json", response.text[:MAX_LOGGED_BODY]) from exc

        return extract_reply(data)

    async def _post_with_retry(self, payload: dict) -> httpx.Response:
        attempts = max(self.max_retries, 0) + 1
        for attempt in range(attempts):
            print__chat_debug(f"💬 CHAT RELAY: attempt {attempt + 1}/{attempts} to {self.model}")
            try:
                return await self.http_client.post(
                    self.endpoint,
                    json=payload,
                    headers={
                        "Content-Type": "application/json",
                        "x-goog-api-key": self._api_key,
                    },
                    timeout=httpx.Timeout(self.timeout_seconds),
                )
            except httpx.TimeoutException as exc:
                if attempt + 1 >= attempts:
                    raise UpstreamFailure("timeout", f"{type(exc).__name__}") from exc
                print__chat_debug(f"⏳ CHAT RELAY: timeout on attempt {attempt + 1}, retrying")
            except httpx.TransportError as exc:
                if attempt + 1 >= attempts:
                    raise UpstreamFailure("transport_error", f"{type(exc).__name__}: {exc}") from exc
                print__chat_debug(f"⏳ CHAT RELAY: {type(exc).__name__} on attempt {attempt + 1}, retrying")
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                raise UpstreamFailure("request_error", f"{type(exc).__name__}: {exc}") from exc
