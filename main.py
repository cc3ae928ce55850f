"""Adventure Gateway launcher. Serves the API with uvicorn."""

import argparse
import os

import uvicorn

from backend.app import create_app
from backend.config import load_config


def main():
    parser = argparse.ArgumentParser(description="Adventure Gateway server")
    parser.add_argument("--host", default=None, help="Bind address (default: HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, default=None, help="Port (default: PORT or 8080)")
    parser.add_argument("--model", default=None, help="Ollama model (default: OLLAMA_MODEL)")
    parser.add_argument("--ollama-url", default=None,
                        help="Ollama base URL (default: OLLAMA_URL or http://localhost:11434)")
    parser.add_argument("--reload", action="store_true", help="Restart on code changes")
    args = parser.parse_args()

    config = load_config(
        host=args.host,
        port=args.port,
        ollama_model=args.model,
        ollama_url=args.ollama_url,
    )

    print(f"Starting Adventure Gateway on http://{config.host}:{config.port} (model {config.ollama_model}) ...")
    if not args.reload:
        uvicorn.run(
            create_app(config),
            host=config.host,
            port=config.port,
            log_level=config.log_level.lower(),
        )
        return

    # Reload workers import the factory by name and rebuild config from the
    # environment, so CLI overrides have to travel that way.
    if args.model:
        os.environ["OLLAMA_MODEL"] = config.ollama_model
    if args.ollama_url:
        os.environ["OLLAMA_URL"] = config.ollama_url
    uvicorn.run(
        "backend.app:create_app",
        factory=True,
        host=config.host,
        port=config.port,
        reload=True,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
