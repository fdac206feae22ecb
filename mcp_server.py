from functools import partial
from typing import Callable, List, Tuple, Type

import mcp.types as types
from pydantic import BaseModel

from jokes_client import JokeApiClient
from models import CategoryArguments, NoArguments
from registry import ToolDefinition, ToolRegistry

# (name, description, arguments model, handler) in advertised order; frozen
# into TOOL_DECLARATIONS once every tool below is declared
_declared: List[Tuple[str, str, Type[BaseModel], Callable]] = []


def _tool(name: str, description: str, arguments: Type[BaseModel] = NoArguments):
    def decorator(func):
        _declared.append((name, description, arguments, func))
        return func

    return decorator


def _text_result(text: str) -> types.CallToolResult:
    return types.CallToolResult(content=[types.TextContent(type="text", text=text)])


# --- Chuck Norris Tools ---


@_tool(name="get-chuck-joke", description="Get a random Chuck Norris joke")
async def get_chuck_joke_tool(
    client: JokeApiClient, arguments: NoArguments
) -> types.CallToolResult:
    """
    Fetches a random Chuck Norris joke.
    Returns:
        A single text content item holding the joke.
    """
    return _text_result(await client.fetch_random_joke())


@_tool(
    name="get-chuck-joke-by-category",
    description="Get a random Chuck Norris joke by category",
    arguments=CategoryArguments,
)
async def get_chuck_joke_by_category_tool(
    client: JokeApiClient, arguments: CategoryArguments
) -> types.CallToolResult:
    """
    Fetches a random Chuck Norris joke from the given category.
    Args:
        category: Passed to the provider as-is; it decides what is valid.
    Returns:
        A single text content item holding the joke.
    """
    return _text_result(await client.fetch_joke_by_category(arguments.category))


@_tool(name="get-chuck-categories", description="List Chuck Norris joke categories")
async def get_chuck_categories_tool(
    client: JokeApiClient, arguments: NoArguments
) -> types.CallToolResult:
    """
    Lists the Chuck Norris joke categories.
    Returns:
        A single text content item with the categories joined by ", ".
    """
    return _text_result(await client.fetch_categories())


# --- Dad Joke Tools ---


@_tool(name="get-dad-joke", description="Get a random dad joke")
async def get_dad_joke_tool(
    client: JokeApiClient, arguments: NoArguments
) -> types.CallToolResult:
    """
    Fetches a random dad joke.
    Returns:
        A single text content item holding the joke.
    """
    return _text_result(await client.fetch_dad_joke())


TOOL_DECLARATIONS: Tuple[Tuple[str, str, Type[BaseModel], Callable], ...] = tuple(
    _declared
)


def create_registry(client: JokeApiClient) -> ToolRegistry:
    """Bind every declared tool to ``client`` and freeze them into a registry."""
    return ToolRegistry(
        ToolDefinition(
            name=name,
            description=description,
            arguments_model=arguments,
            handler=partial(handler, client),
        )
        for name, description, arguments, handler in TOOL_DECLARATIONS
    )
