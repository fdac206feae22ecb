"""JSON-RPC dispatch for the stateless MCP endpoint."""

from __future__ import annotations

from typing import Any, Dict, Optional

import mcp.types as types
from mcp.shared.version import SUPPORTED_PROTOCOL_VERSIONS
from pydantic import BaseModel, ValidationError

from log_config import get_logger
from registry import ToolNotFoundError, ToolRegistry, ToolValidationError

logger = get_logger(__name__)

METHOD_NOT_ALLOWED = -32000


def jsonrpc_error(
    code: int, message: str, request_id: Optional[types.RequestId] = None
) -> Dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "error": {"code": code, "message": message},
        "id": request_id,
    }


def jsonrpc_result(request_id: types.RequestId, result: BaseModel) -> Dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "result": result.model_dump(by_alias=True, mode="json", exclude_none=True),
    }


INTERNAL_ERROR_RESPONSE = jsonrpc_error(types.INTERNAL_ERROR, "Internal server error")
METHOD_NOT_ALLOWED_RESPONSE = jsonrpc_error(METHOD_NOT_ALLOWED, "Method not allowed.")


class McpProtocolHandler:
    """Answers MCP requests from an immutable tool registry.

    No session is issued or tracked, so every message is handled on its own.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        server_name: str = "mcp-streamable-http",
        server_version: str = "1.0.0",
    ) -> None:
        self.registry = registry
        self.server_info = types.Implementation(name=server_name, version=server_version)

    async def handle_message(self, payload: Any) -> Optional[Dict[str, Any]]:
        """Handle one decoded JSON-RPC message.

        Returns the response envelope, or None for notifications and client
        responses. Raises ValueError (or a pydantic ValidationError) when the
        payload is not a JSON-RPC message at all.
        """
        if not isinstance(payload, dict):
            raise ValueError("JSON-RPC message must be an object")

        if "method" not in payload:
            # Client responses only answer server-initiated requests, which
            # a stateless server never sends.
            types.JSONRPCMessage.model_validate(payload)
            return None

        if "id" not in payload:
            notification = types.JSONRPCNotification.model_validate(payload)
            logger.debug("Ignoring MCP notification", method=notification.method)
            return None

        request = types.JSONRPCRequest.model_validate(payload)
        return await self._dispatch(request)

    async def _dispatch(self, request: types.JSONRPCRequest) -> Dict[str, Any]:
        params = request.params or {}

        if request.method == "initialize":
            return jsonrpc_result(request.id, self._initialize(params))
        if request.method == "ping":
            return jsonrpc_result(request.id, types.EmptyResult())
        if request.method == "tools/list":
            return jsonrpc_result(
                request.id, types.ListToolsResult(tools=self.registry.list_tools())
            )
        if request.method == "tools/call":
            return await self._call_tool(request.id, params)

        return jsonrpc_error(
            types.METHOD_NOT_FOUND, f"Method not found: {request.method}", request.id
        )

    def _initialize(self, params: Dict[str, Any]) -> types.InitializeResult:
        requested = params.get("protocolVersion")
        if requested in SUPPORTED_PROTOCOL_VERSIONS:
            protocol_version = requested
        else:
            protocol_version = types.LATEST_PROTOCOL_VERSION
        return types.InitializeResult(
            protocolVersion=protocol_version,
            capabilities=types.ServerCapabilities(
                tools=types.ToolsCapability(listChanged=False)
            ),
            serverInfo=self.server_info,
        )

    async def _call_tool(
        self, request_id: types.RequestId, params: Dict[str, Any]
    ) -> Dict[str, Any]:
        try:
            call = types.CallToolRequestParams.model_validate(params)
        except ValidationError as exc:
            return jsonrpc_error(
                types.INVALID_PARAMS, f"Invalid tools/call params: {exc}", request_id
            )

        try:
            result = await self.registry.invoke(call.name, call.arguments)
        except ToolNotFoundError as exc:
            logger.warning("Requested MCP tool not found", tool=call.name)
            return jsonrpc_error(types.INVALID_PARAMS, str(exc), request_id)
        except ToolValidationError as exc:
            logger.warning("Invalid MCP tool arguments", tool=call.name, error=str(exc))
            return jsonrpc_error(types.INVALID_PARAMS, str(exc), request_id)

        return jsonrpc_result(request_id, result)
