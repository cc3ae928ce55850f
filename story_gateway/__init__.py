"""Streaming bridge and session-scoped prompt pipeline for the adventure gateway."""

from .bridge import BridgeState, StreamBridge  # noqa: F401
from .llm import BackendError, BackendFailure, BackendUnavailable, OllamaClient  # noqa: F401
from .models import (  # noqa: F401
    AdventureSettings,
    BackendChunk,
    BackendReply,
    BackendRequest,
    decode_chunk,
    decode_reply,
)
from .prompts import PromptError, build_action_prompt, build_opening_prompt  # noqa: F401
from .sessions import SessionStore  # noqa: F401
