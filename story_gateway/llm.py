"""Ollama client — HTTP connection to the local text-generation backend.

Both call styles go to POST {base_url}/api/generate:

    generate()     — stream=false, returns the raw body for decode_reply()
    open_stream()  — stream=true, returns the open response; iterate its
                     body with iter_lines() and close it with aclose()

Timeouts:
    connect_timeout  — establishing the TCP connection
    socket_timeout   — idle time between reads/writes on the socket
    request_timeout  — whole non-streaming call, or time until a streaming
                       call has its response headers

Failures are raised as BackendUnavailable (transport) or BackendError (HTTP
status). Nothing is retried.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator

import httpx

from .models import BackendRequest

logger = logging.getLogger(__name__)

GENERATE_PATH = "/api/generate"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class BackendFailure(RuntimeError):
    """Base class for every failure talking to the backend."""


class BackendUnavailable(BackendFailure):
    """The backend could not be reached, timed out, or dropped the connection."""


class BackendError(BackendFailure):
    """The backend answered with a non-success HTTP status."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"Ollama backend returned HTTP {status_code}")
        self.status_code = status_code


# ---------------------------------------------------------------------------
# OllamaClient
# ---------------------------------------------------------------------------

class OllamaClient:
    """Async client for Ollama's /api/generate endpoint.

    Args:
        base_url:         Base URL of the backend, e.g. "http://localhost:11434".
        model:            Model name sent with every request.
        connect_timeout:  Seconds allowed to establish a connection.
        request_timeout:  Seconds allowed for a whole non-streaming call.
        socket_timeout:   Seconds a socket may sit idle.
        http_client:      Optional pre-built httpx.AsyncClient. When given, the
                          caller keeps ownership and aclose() leaves it open.
    """

    def __init__(
        self,
        base_url: str,
        model: str,
        connect_timeout: float = 30.0,
        request_timeout: float = 300.0,
        socket_timeout: float = 300.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self.model = model
        self._request_timeout = request_timeout
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(socket_timeout, connect=connect_timeout),
        )

    @property
    def url(self) -> str:
        return f"{self._base_url}{GENERATE_PATH}"

    def build_request(self, prompt: str, stream: bool) -> BackendRequest:
        return BackendRequest(model=self.model, prompt=prompt, stream=stream)

    async def generate(self, request: BackendRequest) -> str:
        """Run a non-streaming generation and return the raw response body."""
        logger.debug(
            "llm call url=%s model=%s stream=%s prompt_len=%d",
            self.url, request.model, request.stream, len(request.prompt),
        )
        try:
            resp = await asyncio.wait_for(
                self._client.post(self.url, json=request.model_dump()),
                timeout=self._request_timeout,
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise BackendError(e.response.status_code) from e
        except httpx.TimeoutException as e:
            raise BackendUnavailable("Ollama backend timed out") from e
        except asyncio.TimeoutError as e:
            raise BackendUnavailable(
                f"Ollama backend timed out after {self._request_timeout}s"
            ) from e
        except httpx.TransportError as e:
            raise BackendUnavailable(
                f"Cannot connect to Ollama backend at {self._base_url}: {e}"
            ) from e
        except httpx.RequestError as e:
            raise BackendUnavailable(f"Ollama request failed: {e}") from e

        logger.debug("llm response len=%d", len(resp.text))
        return resp.text

    async def open_stream(self, request: BackendRequest) -> httpx.Response:
        """Send a streaming request and return the response once headers arrive.

        The caller must close the returned response.
        """
        logger.debug(
            "llm stream url=%s model=%s prompt_len=%d",
            self.url, request.model, len(request.prompt),
        )
        http_request = self._client.build_request("POST", self.url, json=request.model_dump())
        try:
            resp = await asyncio.wait_for(
                self._client.send(http_request, stream=True),
                timeout=self._request_timeout,
            )
        except httpx.TimeoutException as e:
            raise BackendUnavailable("Ollama backend timed out") from e
        except asyncio.TimeoutError as e:
            raise BackendUnavailable(
                f"Ollama backend timed out after {self._request_timeout}s"
            ) from e
        except httpx.TransportError as e:
            raise BackendUnavailable(
                f"Cannot connect to Ollama backend at {self._base_url}: {e}"
            ) from e
        except httpx.RequestError as e:
            raise BackendUnavailable(f"Ollama request failed: {e}") from e

        if resp.is_error:
            await resp.aclose()
            raise BackendError(resp.status_code)
        return resp

    async def iter_lines(self, response: httpx.Response) -> AsyncIterator[str]:
        """Yield body lines of a streaming response in arrival order."""
        try:
            async for line in response.aiter_lines():
                yield line
        except httpx.TimeoutException as e:
            raise BackendUnavailable("Ollama backend stopped sending data") from e
        except (httpx.RequestError, httpx.StreamError) as e:
            raise BackendUnavailable(f"Ollama stream interrupted: {e}") from e

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> OllamaClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
