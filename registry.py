"""Immutable tool registry with validated async invocation."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Type

import mcp.types as types
from pydantic import BaseModel, ValidationError

from log_config import get_logger

logger = get_logger(__name__)

ToolHandler = Callable[[BaseModel], Awaitable[types.CallToolResult]]


class ToolNotFoundError(LookupError):
    """Raised when the requested tool is not registered."""


class ToolValidationError(ValueError):
    """Raised when tool arguments do not match the declared schema."""


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str
    arguments_model: Type[BaseModel]
    handler: ToolHandler

    def to_tool(self) -> types.Tool:
        """Return the MCP tool description used for discovery."""
        return types.Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.arguments_model.model_json_schema(),
        )


class ToolRegistry:
    """Read-only mapping of tool name to definition, fixed at construction."""

    def __init__(self, definitions: Iterable[ToolDefinition]) -> None:
        tools: Dict[str, ToolDefinition] = {}
        for definition in definitions:
            if definition.name in tools:
                raise ValueError(f"Tool '{definition.name}' is already registered")
            tools[definition.name] = definition
            logger.info(
                "Registered MCP tool",
                tool=definition.name,
                arguments=list(definition.arguments_model.model_fields),
            )
        self._tools = MappingProxyType(tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def list_tools(self) -> List[types.Tool]:
        """Return tool descriptions in registration order."""
        return [definition.to_tool() for definition in self._tools.values()]

    def resolve(self, name: str) -> ToolDefinition:
        """Return a tool definition or raise ToolNotFoundError."""
        try:
            return self._tools[name]
        except KeyError:
            raise ToolNotFoundError(f"Unknown tool: {name}") from None

    async def invoke(
        self, name: str, arguments: Optional[Dict[str, Any]] = None
    ) -> types.CallToolResult:
        """Validate arguments against the tool schema and run its handler.

        Handler exceptions are not caught here; the HTTP boundary turns
        them into an internal error response.
        """
        definition = self.resolve(name)
        try:
            parsed = definition.arguments_model.model_validate(arguments or {})
        except ValidationError as exc:
            details = "; ".join(
                f"{'.'.join(str(part) for part in error['loc']) or 'arguments'}: {error['msg']}"
                for error in exc.errors()
            )
            raise ToolValidationError(
                f"Invalid arguments for tool {name}: {details}"
            ) from exc
        return await definition.handler(parsed)
