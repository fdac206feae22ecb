import pytest
from fastapi.testclient import TestClient

from config import ServerSettings
from jokes_client import UpstreamError
from main import create_app
from mcp_server import create_registry


class FakeJokeClient:
    """Deterministic stand-in for JokeApiClient."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls = []

    async def _answer(self, name, value):
        self.calls.append(name)
        if self.fail:
            raise UpstreamError(f"{name} upstream unavailable")
        return value

    async def fetch_random_joke(self):
        return await self._answer(
            "fetch_random_joke", "Chuck Norris counted to infinity. Twice."
        )

    async def fetch_joke_by_category(self, category):
        return await self._answer(
            "fetch_joke_by_category",
            f"Chuck Norris writes {category} code that optimizes itself.",
        )

    async def fetch_categories(self):
        return await self._answer("fetch_categories", "animal, career, dev")

    async def fetch_dad_joke(self):
        return await self._answer(
            "fetch_dad_joke", "I'm reading a book about anti-gravity. It's impossible to put down!"
        )


@pytest.fixture
def settings():
    return ServerSettings(
        chuck_api_base_url="https://chuck.test",
        dad_joke_api_url="https://dad.test",
    )


@pytest.fixture
def fake_client():
    return FakeJokeClient()


@pytest.fixture
def failing_client():
    return FakeJokeClient(fail=True)


@pytest.fixture
def registry(fake_client):
    return create_registry(fake_client)


@pytest.fixture
def client(settings, fake_client):
    with TestClient(create_app(settings, joke_client=fake_client)) as test_client:
        yield test_client


@pytest.fixture
def failing_http_client(settings, failing_client):
    with TestClient(create_app(settings, joke_client=failing_client)) as test_client:
        yield test_client


@pytest.fixture
def call_tool_request():
    """Build a tools/call JSON-RPC request."""

    def _build(name, arguments=None, request_id=1):
        params = {"name": name}
        if arguments is not None:
            params["arguments"] = arguments
        return {
            "jsonrpc": "2.0",
            "id": request_id,
            "method": "tools/call",
            "params": params,
        }

    return _build
