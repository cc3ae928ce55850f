"""FastAPI dependencies resolving the app-owned session store and LLM client."""

from fastapi import Request

from backend.config import GatewayConfig
from story_gateway import OllamaClient, SessionStore


def get_sessions(request: Request) -> SessionStore:
    return request.app.state.sessions


def get_llm(request: Request) -> OllamaClient:
    return request.app.state.llm


def get_config(request: Request) -> GatewayConfig:
    return request.app.state.config
