"""Shared fixtures: a fake Ollama backend served through httpx.MockTransport."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest
from fastapi.testclient import TestClient

from backend.app import create_app
from backend.config import GatewayConfig
from story_gateway import OllamaClient


class FakeBody(httpx.AsyncByteStream):
    """Response body yielding pre-set chunks; exceptions in the list are raised.

    With `hang=True` the body never ends after the last chunk, like a model
    that is still thinking.
    """

    def __init__(self, chunks: list[bytes | Exception], hang: bool = False) -> None:
        self._chunks = chunks
        self._hang = hang
        self.closed = False

    async def __aiter__(self):
        for chunk in self._chunks:
            if isinstance(chunk, Exception):
                raise chunk
            yield chunk
        if self._hang:
            await asyncio.Event().wait()

    async def aclose(self) -> None:
        self.closed = True


class FakeOllama:
    """Programmable stand-in for POST /api/generate."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.bodies: list[FakeBody] = []
        self._status = 200
        self._headers: dict[str, str] = {}
        self._chunks: list[bytes | Exception] = []
        self._hang = False
        self._error: Exception | None = None
        self._delay = 0.0

    # -- programming ---------------------------------------------------------

    def reply(
        self,
        *chunks: str | dict | Exception,
        status: int = 200,
        hang: bool = False,
        headers: dict[str, str] | None = None,
    ) -> None:
        """Next responses send `chunks` as the body.

        dicts become one JSON line each; strings are sent as-is.
        """
        self._status = status
        self._headers = headers or {}
        self._hang = hang
        self._error = None
        self._chunks = [
            c if isinstance(c, Exception)
            else (json.dumps(c) + "\n").encode() if isinstance(c, dict)
            else c.encode()
            for c in chunks
        ]

    def refuse(self, error: Exception | None = None) -> None:
        self._error = error or httpx.ConnectError("Connection refused")

    def slow(self, seconds: float) -> None:
        self._delay = seconds

    # -- transport -----------------------------------------------------------

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._error is not None:
            raise self._error
        body = FakeBody(list(self._chunks), hang=self._hang)
        self.bodies.append(body)
        return httpx.Response(self._status, headers=self._headers, stream=body)

    def http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handle))

    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)


def _parse_sse(text: str) -> list[tuple[str, str]]:
    """Split an SSE body into (event, data) pairs; multi-line data is rejoined."""
    events = []
    for block in text.split("\n\n"):
        if not block:
            continue
        event, data = "message", []
        for line in block.split("\n"):
            if line.startswith("event: "):
                event = line[len("event: "):]
            elif line.startswith("data: "):
                data.append(line[len("data: "):])
        events.append((event, "\n".join(data)))
    return events


@pytest.fixture
def parse_sse():
    return _parse_sse


@pytest.fixture
def fake_ollama() -> FakeOllama:
    return FakeOllama()


@pytest.fixture
def llm(fake_ollama: FakeOllama) -> OllamaClient:
    return OllamaClient(
        base_url="http://ollama.test",
        model="test-model",
        http_client=fake_ollama.http_client(),
    )


@pytest.fixture
def api(fake_ollama: FakeOllama):
    config = GatewayConfig(ollama_model="test-model", ollama_url="http://ollama.test")
    app = create_app(config, http_client=fake_ollama.http_client())
    with TestClient(app) as client:
        yield client
