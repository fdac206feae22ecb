"""Tests for JSON-RPC dispatch in McpProtocolHandler."""

import mcp.types as types
import pytest
from pydantic import ValidationError

from jokes_client import UpstreamError
from mcp_server import create_registry
from protocol import McpProtocolHandler


@pytest.fixture
def handler(registry):
    return McpProtocolHandler(registry, server_name="jokes-test", server_version="9.9.9")


@pytest.mark.asyncio
async def test_initialize_reports_tools_capability(handler):
    response = await handler.handle_message(
        {
            "jsonrpc": "2.0",
            "id": 0,
            "method": "initialize",
            "params": {
                "protocolVersion": types.LATEST_PROTOCOL_VERSION,
                "capabilities": {},
                "clientInfo": {"name": "pytest", "version": "0"},
            },
        }
    )

    result = response["result"]
    assert response["id"] == 0
    assert result["protocolVersion"] == types.LATEST_PROTOCOL_VERSION
    assert result["capabilities"] == {"tools": {"listChanged": False}}
    assert result["serverInfo"]["name"] == "jokes-test"
    assert result["serverInfo"]["version"] == "9.9.9"


@pytest.mark.asyncio
async def test_initialize_with_unknown_version_falls_back_to_latest(handler):
    response = await handler.handle_message(
        {"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": {"protocolVersion": "1999-01-01"}}
    )
    assert response["result"]["protocolVersion"] == types.LATEST_PROTOCOL_VERSION


@pytest.mark.asyncio
async def test_ping_returns_empty_result(handler):
    response = await handler.handle_message({"jsonrpc": "2.0", "id": "p", "method": "ping"})
    assert response == {"jsonrpc": "2.0", "id": "p", "result": {}}


@pytest.mark.asyncio
async def test_tools_list(handler):
    response = await handler.handle_message({"jsonrpc": "2.0", "id": 2, "method": "tools/list"})

    tools = response["result"]["tools"]
    assert [tool["name"] for tool in tools] == [
        "get-chuck-joke",
        "get-chuck-joke-by-category",
        "get-chuck-categories",
        "get-dad-joke",
    ]
    assert tools[0]["description"] == "Get a random Chuck Norris joke"
    assert "inputSchema" in tools[1]


@pytest.mark.asyncio
async def test_tools_call_returns_content_envelope(handler, call_tool_request):
    response = await handler.handle_message(call_tool_request("get-chuck-categories"))

    assert response == {
        "jsonrpc": "2.0",
        "id": 1,
        "result": {
            "content": [{"type": "text", "text": "animal, career, dev"}],
            "isError": False,
        },
    }


@pytest.mark.asyncio
async def test_unknown_tool_is_invalid_params(handler, call_tool_request):
    response = await handler.handle_message(call_tool_request("get-knock-knock-joke", request_id=7))

    assert response == {
        "jsonrpc": "2.0",
        "error": {"code": types.INVALID_PARAMS, "message": "Unknown tool: get-knock-knock-joke"},
        "id": 7,
    }


@pytest.mark.asyncio
async def test_invalid_arguments_are_reported(handler, call_tool_request, fake_client):
    response = await handler.handle_message(
        call_tool_request("get-chuck-joke-by-category", {"category": None})
    )

    assert response["error"]["code"] == types.INVALID_PARAMS
    assert "category" in response["error"]["message"]
    assert fake_client.calls == []


@pytest.mark.asyncio
async def test_tools_call_without_name(handler):
    response = await handler.handle_message(
        {"jsonrpc": "2.0", "id": 3, "method": "tools/call", "params": {}}
    )
    assert response["error"]["code"] == types.INVALID_PARAMS


@pytest.mark.asyncio
async def test_unknown_method(handler):
    response = await handler.handle_message({"jsonrpc": "2.0", "id": 4, "method": "resources/list"})

    assert response["error"] == {
        "code": types.METHOD_NOT_FOUND,
        "message": "Method not found: resources/list",
    }


@pytest.mark.asyncio
async def test_notifications_get_no_response(handler):
    response = await handler.handle_message(
        {"jsonrpc": "2.0", "method": "notifications/initialized"}
    )
    assert response is None


@pytest.mark.asyncio
async def test_client_responses_get_no_response(handler):
    assert await handler.handle_message({"jsonrpc": "2.0", "id": 5, "result": {}}) is None


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [[], "tools/list", {"jsonrpc": "2.0"}, {"jsonrpc": "1.0", "id": 1, "method": "ping"}])
async def test_malformed_messages_raise(handler, payload):
    with pytest.raises((ValueError, ValidationError)):
        await handler.handle_message(payload)


@pytest.mark.asyncio
async def test_upstream_error_propagates(failing_client, call_tool_request):
    handler = McpProtocolHandler(create_registry(failing_client))
    with pytest.raises(UpstreamError):
        await handler.handle_message(call_tool_request("get-chuck-joke"))
