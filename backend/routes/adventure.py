"""Session settings and one-shot (non-streaming) generation endpoints."""

import logging

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse

from story_gateway import (
    AdventureSettings,
    BackendFailure,
    OllamaClient,
    SessionStore,
    build_action_prompt,
    build_opening_prompt,
    decode_reply,
)

from .deps import get_llm, get_sessions
from .models import ActionBody, ApiResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _error(message: str, status_code: int = 500) -> JSONResponse:
    body = ApiResponse(success=False, error=message)
    return JSONResponse(body.model_dump(), status_code=status_code)


async def _generate(llm: OllamaClient, prompt: str, route: str):
    request = llm.build_request(prompt, stream=False)
    try:
        body = await llm.generate(request)
    except BackendFailure as e:
        logger.error("Error in %s: %s", route, e)
        return _error(str(e))
    logger.debug("Ollama raw response for %s: %s", route, body)
    return ApiResponse(success=True, data=decode_reply(body))


@router.post("/set-adventure-settings")
async def set_adventure_settings(
    settings: AdventureSettings,
    response: Response,
    sessions: SessionStore = Depends(get_sessions),
):
    """Store settings under a new session id, returned in X-Session-ID."""
    logger.info("Received adventure settings: %s", settings)
    session_id = sessions.put(settings)
    response.headers["X-Session-ID"] = session_id
    return ApiResponse(success=True, data="Settings configured successfully")


@router.post("/start-adventure")
async def start_adventure(
    settings: AdventureSettings,
    llm: OllamaClient = Depends(get_llm),
):
    """Generate the opening scene in one response."""
    logger.info("Starting adventure with settings: %s", settings)
    return await _generate(llm, build_opening_prompt(settings), "/start-adventure")


@router.post("/action")
async def perform_action(body: ActionBody, llm: OllamaClient = Depends(get_llm)):
    """Generate the outcome of a player action in one response."""
    logger.info("Received action request: %s", body.action)
    return await _generate(llm, build_action_prompt(body.action), "/action")
