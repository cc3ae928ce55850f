import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.config import GatewayConfig, configure_logging, load_config
from backend.routes import router
from backend.routes.models import ApiResponse
from story_gateway import OllamaClient, SessionStore

logger = logging.getLogger(__name__)

SESSION_HEADER = "X-Session-ID"


def create_app(
    config: GatewayConfig | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """Build the gateway app.

    The session store and Ollama client are owned by the app and live on
    `app.state` for the lifetime of the process. Pass `http_client` to route
    backend traffic through a custom transport (tests do).
    """
    config = config or load_config()
    configure_logging(config.log_level)
    llm = OllamaClient(
        base_url=config.ollama_url,
        model=config.ollama_model,
        connect_timeout=config.connect_timeout,
        request_timeout=config.request_timeout,
        socket_timeout=config.socket_timeout,
        http_client=http_client,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Gateway ready: model=%s backend=%s", config.ollama_model, config.ollama_url)
        yield
        await llm.aclose()

    app = FastAPI(title="Adventure Gateway", lifespan=lifespan)
    app.state.config = config
    app.state.sessions = SessionStore()
    app.state.llm = llm

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", SESSION_HEADER, "Cache-Control"],
        expose_headers=["Content-Type", SESSION_HEADER],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        logger.warning("Invalid request body for %s: %s", request.url.path, exc.errors())
        body = ApiResponse(success=False, error=f"Invalid request: {exc.errors()}")
        return JSONResponse(body.model_dump(), status_code=422)

    app.include_router(router)
    return app
