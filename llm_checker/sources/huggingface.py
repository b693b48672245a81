"""Hugging Face model source: newest listings from the public Hub API."""

import logging

import httpx

from llm_checker.config import HF_API_URL, HF_POLL_LIMIT, HF_POLL_TASK, HF_TIMEOUT, HF_TOKEN
from llm_checker.errors import ProviderError

logger = logging.getLogger(__name__)


class HuggingFaceProvider:
    """Fetch the newest models for one task from ``/api/models``.

    Args:
        limit: Number of listings to request.
        task: Pipeline tag used as the ``filter`` query parameter.
        client: Optional shared ``httpx.AsyncClient``; one is created per
            call otherwise.
    """

    name = "huggingface"

    def __init__(
        self,
        api_url: str = HF_API_URL,
        limit: int = HF_POLL_LIMIT,
        task: str = HF_POLL_TASK,
        token: str | None = HF_TOKEN,
        timeout: float = HF_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_url = api_url
        self.limit = limit
        self.task = task
        self.token = token
        self.timeout = timeout
        self._client = client

    @property
    def params(self) -> dict[str, str | int]:
        return {
            "sort": "createdAt",
            "direction": -1,
            "limit": self.limit,
            "filter": self.task,
            "full": "true",
        }

    @property
    def source(self) -> str:
        return f"GET {self.api_url}?sort=createdAt&limit={self.limit}&filter={self.task}"

    async def discover(self) -> list[dict]:
        """Return raw listing items, newest first.

        Raises:
            ProviderError: On transport errors, non-2xx responses, or a
                payload that is not a list of objects with a ``modelId``.
        """
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        try:
            if self._client is not None:
                response = await self._client.get(self.api_url, params=self.params, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                    response = await client.get(self.api_url, params=self.params, headers=headers)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise ProviderError(
                self.name,
                f"HF API Error: {e.response.status_code} {e.response.reason_phrase}",
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(self.name, f"Connection failed: {e}") from e
        except ValueError as e:
            raise ProviderError(self.name, f"Response is not valid JSON: {e}") from e

        logger.info("Fetched %s listings from %s", len(data) if isinstance(data, list) else "?", self.api_url)
        return _validate_listing(data, self.name)


def _validate_listing(data, source: str) -> list[dict]:
    """Check the listing shape; detect breaking API changes early."""
    if not isinstance(data, list):
        raise ProviderError(
            source, f"Expected a JSON list of models, got {type(data).__name__}"
        )
    for i, item in enumerate(data):
        if not isinstance(item, dict) or "modelId" not in item:
            raise ProviderError(source, f"Listing item {i} has no 'modelId'")
    return data
