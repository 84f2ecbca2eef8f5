"""
JSON HTTP client used by adapters in live mode.

Adapters depend on the small HTTPClientProtocol below so tests can inject a
fake; HttpxJSONClient is the real implementation on top of httpx.
"""
from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable

import httpx

from apps.core.errors import GatewayError

DEFAULT_TIMEOUT_SECONDS = 10.0


@runtime_checkable
class HTTPClientProtocol(Protocol):
    """get/post returning decoded JSON; failures raise GatewayError."""

    def get(
        self,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> Mapping[str, Any]:
        ...

    def post(
        self,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        json: Mapping[str, Any] | None = None,
    ) -> Mapping[str, Any]:
        ...


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        if message:
            return str(message)
    return f"HTTP {response.status_code} from {response.request.url}"


class HttpxJSONClient:
    def __init__(self, *, timeout: float = DEFAULT_TIMEOUT_SECONDS, client: httpx.Client | None = None) -> None:
        self.timeout = timeout
        self._client = client or httpx.Client(timeout=timeout)

    def _send(self, method: str, url: str, **kwargs: Any) -> Mapping[str, Any]:
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise GatewayError(f"{method} {url} failed: {exc}") from exc
        if response.is_error:
            raise GatewayError(_error_message(response), status_code=response.status_code)
        if not response.content:
            return {}
        try:
            payload = response.json()
        except ValueError as exc:
            raise GatewayError(f"Non-JSON response from {url}", status_code=response.status_code) from exc
        return payload if isinstance(payload, dict) else {"result": payload}

    def get(self, url, *, headers=None, params=None):
        return self._send("GET", url, headers=headers, params=params)

    def post(self, url, *, headers=None, json=None):
        return self._send("POST", url, headers=headers, json=json)

    def close(self) -> None:
        self._client.close()
