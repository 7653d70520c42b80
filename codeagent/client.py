"""Configuration and a small streaming client for the messages API."""

from __future__ import annotations

import json
import os
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

import httpx

DEFAULT_BASE_URL = "https://api.anthropic.com"
API_VERSION = "2023-06-01"
DEFAULT_TIMEOUT = 600.0


class ApiError(Exception):
    """Raised when the messages API answers with an error or cannot be reached."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        error_type: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_type = error_type


@dataclass(frozen=True)
class ServerSentEvent:
    """One event of a server-sent event stream."""

    event: str
    data: str


def iter_sse_events(lines: Iterable[str]) -> Iterator[ServerSentEvent]:
    """Group the lines of an event stream into events.

    Comment lines are skipped, multiple data lines are joined with newlines and
    events without data are dropped.
    """
    event = ""
    data: list[str] = []
    for raw in lines:
        line = raw.rstrip("\r\n")
        if not line:
            if data:
                yield ServerSentEvent(event or "message", "\n".join(data))
            event = ""
            data = []
            continue
        if line.startswith(":"):
            continue
        name, separator, value = line.partition(":")
        if separator and value.startswith(" "):
            value = value[1:]
        if name == "event":
            event = value
        elif name == "data":
            data.append(value)
    if data:
        yield ServerSentEvent(event or "message", "\n".join(data))


def _error_details(body: Any) -> tuple[str | None, str | None]:
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            return error.get("type"), error.get("message")
    return None, None


def _status_error(response: httpx.Response) -> ApiError:
    try:
        body = response.json()
    except ValueError:
        body = None
    error_type, detail = _error_details(body)
    detail = detail or response.text or response.reason_phrase
    return ApiError(
        f"status {response.status_code}: {detail}",
        status_code=response.status_code,
        error_type=error_type,
    )


class AnthropicClient:
    """Sends message requests and streams back the decoded events."""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        auth_token: str | None = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url
        headers = {"anthropic-version": API_VERSION, "content-type": "application/json"}
        if api_key:
            headers["x-api-key"] = api_key
        if auth_token:
            headers["authorization"] = f"Bearer {auth_token}"
        self._http = httpx.Client(
            base_url=base_url, headers=headers, timeout=timeout, transport=transport
        )

    def stream_messages(self, request: Mapping[str, Any]) -> Iterator[dict[str, Any]]:
        """Post a message request with streaming on and yield each decoded event."""
        body = {**request, "stream": True}
        try:
            with self._http.stream("POST", "/v1/messages", json=body) as response:
                if response.status_code >= 400:
                    response.read()
                    raise _status_error(response)
                for sse in iter_sse_events(response.iter_lines()):
                    yield self._decode(sse)
        except httpx.HTTPError as exc:
            raise ApiError(f"request failed: {exc}") from exc

    @staticmethod
    def _decode(sse: ServerSentEvent) -> dict[str, Any]:
        try:
            payload = json.loads(sse.data)
        except ValueError as exc:
            raise ApiError(f"malformed event data: {exc}") from exc
        if not isinstance(payload, dict):
            raise ApiError("malformed event data: expected a JSON object")
        if sse.event == "error" or payload.get("type") == "error":
            error_type, detail = _error_details(payload)
            raise ApiError(detail or sse.data, error_type=error_type)
        return payload

    def close(self) -> None:
        """Release the underlying connection pool."""
        self._http.close()

    def __enter__(self) -> AnthropicClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


@dataclass
class Config:
    """Application configuration: the API client the agent talks through."""

    client: AnthropicClient

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> Config:
        """Build the configuration from environment variables."""
        env = os.environ if env is None else env
        return cls(
            client=AnthropicClient(
                api_key=env.get("ANTHROPIC_API_KEY") or None,
                auth_token=env.get("ANTHROPIC_AUTH_TOKEN") or None,
                base_url=env.get("ANTHROPIC_BASE_URL") or DEFAULT_BASE_URL,
            )
        )