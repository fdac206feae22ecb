from fastapi import APIRouter, Request, Response, status as http_status
from fastapi.responses import JSONResponse, PlainTextResponse

from log_config import get_logger
from protocol import METHOD_NOT_ALLOWED_RESPONSE, McpProtocolHandler

logger = get_logger(__name__)

MCP_PATH = "/mcp"
# Streamable HTTP GET (server stream) and DELETE (session end) need sessions
REJECTED_METHODS = ("GET", "DELETE", "PUT")
ROOT_MESSAGE = "MCPjokes server is running."


def create_mcp_router(handler: McpProtocolHandler) -> APIRouter:
    if handler is None:
        raise ValueError("handler is required")

    router = APIRouter()

    # Liveness probe, not part of the MCP surface
    @router.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        return ROOT_MESSAGE

    @router.post(MCP_PATH)
    async def handle_mcp_request(request: Request) -> Response:
        # Malformed JSON and handler failures propagate to JsonRpcErrorMiddleware
        payload = await request.json()
        logger.info(
            "Received MCP request",
            method=payload.get("method") if isinstance(payload, dict) else None,
            id=payload.get("id") if isinstance(payload, dict) else None,
            body=payload,
        )

        response = await handler.handle_message(payload)
        if response is None:
            return Response(status_code=http_status.HTTP_202_ACCEPTED)
        return JSONResponse(response)

    async def reject_mcp_method(request: Request) -> JSONResponse:
        logger.info("Received rejected MCP request", method=request.method)
        return JSONResponse(
            METHOD_NOT_ALLOWED_RESPONSE,
            status_code=http_status.HTTP_405_METHOD_NOT_ALLOWED,
        )

    router.add_api_route(
        MCP_PATH,
        reject_mcp_method,
        methods=list(REJECTED_METHODS),
        include_in_schema=False,
    )

    return router
