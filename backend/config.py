"""Process configuration read from the environment (and .env)."""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field

ENV_FILE = Path(__file__).parent.parent / ".env"


class GatewayConfig(BaseModel):
    ollama_model: str = "deepseek-r1:14b"
    ollama_url: str = "http://localhost:11434"
    host: str = "0.0.0.0"
    port: int = 8080
    connect_timeout: float = Field(30.0, gt=0)
    request_timeout: float = Field(300.0, gt=0)
    socket_timeout: float = Field(300.0, gt=0)
    stream_queue_size: int = Field(64, ge=1)
    log_level: str = "INFO"


_ENV_KEYS = {
    "OLLAMA_MODEL": "ollama_model",
    "OLLAMA_URL": "ollama_url",
    "HOST": "host",
    "PORT": "port",
    "OLLAMA_CONNECT_TIMEOUT": "connect_timeout",
    "OLLAMA_REQUEST_TIMEOUT": "request_timeout",
    "OLLAMA_SOCKET_TIMEOUT": "socket_timeout",
    "STREAM_QUEUE_SIZE": "stream_queue_size",
    "LOG_LEVEL": "log_level",
}


def load_config(env_file: Path | None = ENV_FILE, **overrides) -> GatewayConfig:
    """Build config from .env, then the process environment, then overrides.

    Unset or None overrides are ignored; empty env values count as unset.
    """
    if env_file is not None:
        load_dotenv(env_file)
    fields = {
        field: os.environ[key]
        for key, field in _ENV_KEYS.items()
        if os.environ.get(key)
    }
    fields.update({k: v for k, v in overrides.items() if v is not None})
    return GatewayConfig(**fields)


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str) -> None:
    """Give the gateway's loggers a handler and level.

    Runs inside the app factory, so uvicorn reload workers are covered too.
    """
    logging.basicConfig(format=LOG_FORMAT)
    for name in ("backend", "story_gateway"):
        logging.getLogger(name).setLevel(level.upper())
