"""
ASGI middleware turning unhandled MCP endpoint failures into a JSON-RPC
internal error.

Implemented as a pure ASGI middleware rather than Starlette's
BaseHTTPMiddleware so it can see whether ``http.response.start`` has already
gone out: a response is sent at most once, so failures after that point are
only logged.
"""

import json

from log_config import get_logger
from protocol import INTERNAL_ERROR_RESPONSE

logger = get_logger(__name__)


class JsonRpcErrorMiddleware:
    def __init__(self, app, path: str = "/mcp"):
        self.app = app
        self.path = path

    async def __call__(self, scope, receive, send):
        if scope.get("type") != "http" or scope.get("path") != self.path:
            return await self.app(scope, receive, send)

        response_started = False

        async def send_wrapper(message):
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception:
            logger.error(
                "Error handling MCP request",
                method=scope.get("method"),
                path=scope.get("path"),
                response_started=response_started,
                exc_info=True,
            )
            if response_started:
                return
            body = json.dumps(INTERNAL_ERROR_RESPONSE, separators=(",", ":")).encode("utf-8")
            await send(
                {
                    "type": "http.response.start",
                    "status": 500,
                    "headers": [
                        [b"content-type", b"application/json"],
                        [b"content-length", str(len(body)).encode("latin-1")],
                    ],
                }
            )
            await send({"type": "http.response.body", "body": body})
