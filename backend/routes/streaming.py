"""Server-Sent Events endpoints backed by the stream bridge."""

import logging

from fastapi import APIRouter, Depends, Header
from fastapi.responses import StreamingResponse

from backend.config import GatewayConfig
from story_gateway import (
    OllamaClient,
    SessionStore,
    StreamBridge,
    build_action_prompt,
    build_opening_prompt,
)
from story_gateway.sse import SSE_HEADERS

from .deps import get_config, get_llm, get_sessions
from .models import ActionBody

logger = logging.getLogger(__name__)

router = APIRouter()


class BridgeResponse(StreamingResponse):
    """StreamingResponse that releases its bridge once the response ends.

    Covers the case where the client disconnects while the bridge generator
    is suspended between events.
    """

    def __init__(self, bridge: StreamBridge) -> None:
        super().__init__(bridge.stream(), media_type="text/event-stream", headers=SSE_HEADERS)
        self.bridge = bridge

    async def __call__(self, scope, receive, send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            await self.bridge.aclose()


def _bridge(llm: OllamaClient, config: GatewayConfig, prompt: str) -> BridgeResponse:
    request = llm.build_request(prompt, stream=True)
    return BridgeResponse(StreamBridge(llm, request, queue_size=config.stream_queue_size))


@router.get("/stream-adventure")
async def stream_adventure(
    x_session_id: str | None = Header(default=None),
    sessions: SessionStore = Depends(get_sessions),
    llm: OllamaClient = Depends(get_llm),
    config: GatewayConfig = Depends(get_config),
):
    """Stream the opening scene for the session's settings (defaults if unknown)."""
    settings = sessions.get(x_session_id)
    logger.info("Starting streaming adventure with settings: %s", settings)
    return _bridge(llm, config, build_opening_prompt(settings))


@router.post("/stream-action")
async def stream_action(
    body: ActionBody,
    llm: OllamaClient = Depends(get_llm),
    config: GatewayConfig = Depends(get_config),
):
    """Stream the outcome of a player action."""
    logger.info("Received streaming action request: %s", body.action)
    return _bridge(llm, config, build_action_prompt(body.action))
