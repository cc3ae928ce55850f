"""Core domain models.

Two wire shapes come back from Ollama's /api/generate and are decoded on
separate paths:

    BackendReply  — a non-streaming body (one object per line, usually one)
    BackendChunk  — one line of a streaming body

Pydantic is used for validation and serialisation at every data boundary.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


class AdventureSettings(BaseModel):
    """Configuration for one adventure; JSON keys are camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    setting: str = "medieval fantasy"
    genre: str = "fantasy"
    player_character: str = "adventurer"
    theme: str = "heroic"
    tone_style: str = "classic fantasy"
    additional_details: str = ""


class BackendRequest(BaseModel):
    """Body of POST /api/generate."""

    model: str
    prompt: str
    stream: bool = False


class BackendChunk(BaseModel):
    """One decoded line of a streaming response.

    Ollama also sends model, created_at and timing counters; they are ignored.
    """

    response: str
    done: bool = False


class BackendReply(BaseModel):
    """A complete non-streaming response object."""

    model: str = ""
    created_at: str = ""
    response: str
    done: bool = False
    context: list[int] = Field(default_factory=list)
    total_duration: int = 0
    load_duration: int = 0
    prompt_eval_count: int = 0
    eval_count: int = 0
    eval_duration: int = 0


def decode_chunk(line: str) -> BackendChunk | None:
    """Decode one streaming line, or return None if it should be skipped."""
    if not line.strip():
        return None
    try:
        return BackendChunk.model_validate_json(line)
    except ValidationError as e:
        logger.warning("Skipping undecodable stream line %r: %s", line[:200], e)
        return None


def decode_reply(body: str) -> str:
    """Join the `response` fragments of every decodable line in `body`.

    Lines that are blank or fail validation are skipped.
    """
    parts: list[str] = []
    for line in body.split("\n"):
        if not line.strip():
            continue
        try:
            reply = BackendReply.model_validate_json(line)
        except ValidationError:
            logger.warning("Skipping undecodable reply line %r", line[:200])
            continue
        parts.append(reply.response)
    return "".join(parts)
