import httpx
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from config import ServerSettings
from log_config import get_logger
from models import ChuckJoke, DadJoke

logger = get_logger(__name__)


class UpstreamError(RuntimeError):
    """Raised when a joke provider cannot be reached or returns an unusable body."""

    def __init__(self, message: str, *, url: Optional[str] = None) -> None:
        super().__init__(message)
        self.url = url


class JokeApiClient:
    """Thin async client over api.chucknorris.io and icanhazdadjoke.com.

    A fresh ``httpx.AsyncClient`` is opened per call; ``transport`` lets
    tests swap in an ``httpx.MockTransport``.
    """

    def __init__(
        self,
        settings: ServerSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.chuck_base_url = str(settings.chuck_api_base_url)
        self.dad_joke_url = str(settings.dad_joke_api_url)
        self._transport = transport

    async def _get_json(
        self,
        base_url: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        async with httpx.AsyncClient(
            base_url=base_url, transport=self._transport
        ) as client:
            try:
                response = await client.get(endpoint, params=params, headers=headers)
            except httpx.HTTPError as e:
                logger.warning(
                    "Upstream request failed",
                    base_url=base_url,
                    endpoint=endpoint,
                    error=str(e),
                )
                raise UpstreamError(
                    f"Request to {base_url} failed: {e}", url=base_url
                ) from e

        logger.debug(
            "Upstream responded",
            url=str(response.url),
            status_code=response.status_code,
        )
        # The status code is not checked: error bodies are parsed like jokes
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(
                f"Response from {response.url} is not valid JSON", url=str(response.url)
            ) from e

    async def fetch_random_joke(self) -> str:
        data = await self._get_json(self.chuck_base_url, "/jokes/random")
        return _parse_chuck_joke(data)

    async def fetch_joke_by_category(self, category: str) -> str:
        data = await self._get_json(
            self.chuck_base_url, "/jokes/random", params={"category": category}
        )
        return _parse_chuck_joke(data)

    async def fetch_categories(self) -> str:
        data = await self._get_json(self.chuck_base_url, "/jokes/categories")
        if not isinstance(data, list) or not all(isinstance(c, str) for c in data):
            raise UpstreamError("Expected a list of category names from upstream")
        categories: List[str] = data
        return ", ".join(categories)

    async def fetch_dad_joke(self) -> str:
        data = await self._get_json(
            self.dad_joke_url, "/", headers={"Accept": "application/json"}
        )
        try:
            return DadJoke.model_validate(data).joke
        except ValidationError as e:
            raise UpstreamError("Dad joke response has no 'joke' field") from e


def _parse_chuck_joke(data: Any) -> str:
    try:
        return ChuckJoke.model_validate(data).value
    except ValidationError as e:
        raise UpstreamError("Chuck Norris joke response has no 'value' field") from e
