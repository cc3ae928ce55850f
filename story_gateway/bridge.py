"""Stream bridge: Ollama line-delimited JSON in, Server-Sent Events out.

States:

    CONNECTING  open the backend stream; emit `connected` on success
    RELAYING    one event per decoded chunk, in arrival order
    DRAINING    emit the terminal `done` event
    CLOSED      backend response and pump task released
    ERRORED     backend failure (followed by the terminal `done`) or the
                client went away (nothing more is emitted)

Two tasks cooperate: a pump task reads backend lines into a bounded queue,
and the consumer of `events()` (the response writer) decodes and emits
them. When the consumer stops early, the pump is cancelled and the backend
response closed.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import AsyncIterator

import httpx

from .llm import BackendFailure, BackendUnavailable, OllamaClient
from .models import BackendRequest, decode_chunk
from .sse import (
    CONNECTED,
    CONNECTED_PAYLOAD,
    DONE,
    ERROR,
    MESSAGE,
    STREAM_COMPLETE,
    SSEEvent,
)

logger = logging.getLogger(__name__)

_EOF = object()


class BridgeState(enum.Enum):
    CONNECTING = "connecting"
    RELAYING = "relaying"
    DRAINING = "draining"
    CLOSED = "closed"
    ERRORED = "errored"


class StreamBridge:
    """Relay one streaming generation to one SSE client.

    A bridge is single-use: iterate `events()` (or `stream()`) once.
    `aclose()` may be called at any time to release the backend side.
    """

    def __init__(
        self,
        client: OllamaClient,
        request: BackendRequest,
        queue_size: int = 64,
    ) -> None:
        self._client = client
        self._request = request.model_copy(update={"stream": True})
        self._queue: asyncio.Queue[object] = asyncio.Queue(maxsize=queue_size)
        self._response: httpx.Response | None = None
        self._pump_task: asyncio.Task[None] | None = None
        self.state = BridgeState.CONNECTING

    async def events(self) -> AsyncIterator[SSEEvent]:
        finished = False
        try:
            try:
                self._response = await self._client.open_stream(self._request)
            except BackendFailure as e:
                logger.error("Backend stream failed to open: %s", e)
                self.state = BridgeState.ERRORED
                yield SSEEvent(ERROR, str(e))
                yield SSEEvent(DONE, STREAM_COMPLETE)
                finished = True
                return

            yield SSEEvent(CONNECTED, CONNECTED_PAYLOAD)
            self.state = BridgeState.RELAYING
            self._pump_task = asyncio.create_task(self._pump(self._response))

            try:
                async for event in self._relay():
                    yield event
            except BackendFailure as e:
                logger.error("Backend stream failed mid-relay: %s", e)
                self.state = BridgeState.ERRORED
                yield SSEEvent(ERROR, str(e))
            else:
                self.state = BridgeState.DRAINING

            yield SSEEvent(DONE, STREAM_COMPLETE)
            finished = True
        finally:
            if not finished:
                logger.info("Client disconnected, abandoning stream")
                self.state = BridgeState.ERRORED
            await self._release()
            if finished:
                self.state = BridgeState.CLOSED

    async def stream(self) -> AsyncIterator[str]:
        """`events()` rendered as wire text for a StreamingResponse."""
        events = self.events()
        try:
            async for event in events:
                yield event.encode()
        finally:
            await events.aclose()

    async def aclose(self) -> None:
        """Release the backend response and pump task. Idempotent."""
        await self._release()
        if self.state is not BridgeState.CLOSED:
            self.state = BridgeState.ERRORED

    async def _relay(self) -> AsyncIterator[SSEEvent]:
        while True:
            item = await self._queue.get()
            if item is _EOF:
                logger.debug("Backend stream ended without a final chunk")
                return
            if isinstance(item, BackendFailure):
                raise item
            chunk = decode_chunk(item)
            if chunk is None:
                continue
            yield SSEEvent(DONE if chunk.done else MESSAGE, chunk.response)
            if chunk.done:
                return

    async def _pump(self, response: httpx.Response) -> None:
        try:
            async for line in self._client.iter_lines(response):
                await self._queue.put(line)
        except BackendFailure as e:
            await self._queue.put(e)
        except Exception as e:
            logger.exception("Unexpected failure reading backend stream")
            await self._queue.put(BackendUnavailable(f"Ollama stream failed: {e}"))
        else:
            await self._queue.put(_EOF)

    async def _release(self) -> None:
        task, self._pump_task = self._pump_task, None
        if task is not None:
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
        response, self._response = self._response, None
        if response is not None:
            await response.aclose()
