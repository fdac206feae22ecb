from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI

from config import ServerSettings
from jokes_client import JokeApiClient
from log_config import get_logger, setup_logging
from mcp_server import create_registry
from middleware import JsonRpcErrorMiddleware
from protocol import McpProtocolHandler
from routes import MCP_PATH, create_mcp_router

logger = get_logger(__name__)


def create_app(
    settings: ServerSettings, joke_client: Optional[JokeApiClient] = None
) -> FastAPI:
    """Build the MCP HTTP app around one immutable tool registry."""
    registry = create_registry(joke_client or JokeApiClient(settings))
    handler = McpProtocolHandler(
        registry,
        server_name=settings.server_name,
        server_version=settings.server_version,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "MCP Streamable HTTP Server running",
            host=settings.host,
            port=settings.port,
            tools=len(registry),
        )
        yield

    app = FastAPI(title=settings.server_name, version=settings.server_version, lifespan=lifespan)
    app.include_router(create_mcp_router(handler))
    app.add_middleware(JsonRpcErrorMiddleware, path=MCP_PATH)
    return app


def run(settings: ServerSettings) -> None:
    """Serve until stopped; exit with status 1 if startup fails."""
    try:
        app = create_app(settings)
        server = uvicorn.Server(
            uvicorn.Config(
                app,
                host=settings.host,
                port=settings.port,
                log_level=settings.log_level.lower(),
            )
        )
        server.run()
    except Exception as e:
        logger.error("Failed to start MCP server", error=str(e), exc_info=True)
        raise SystemExit(1) from e

    if not server.started:
        logger.error("Failed to start MCP server", port=settings.port)
        raise SystemExit(1)


def main() -> None:
    settings = ServerSettings()
    setup_logging(settings.log_level)
    run(settings)


if __name__ == "__main__":
    main()
