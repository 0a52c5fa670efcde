"""Shared request handling for provider REST APIs."""

import logging
from typing import Any

import httpx

from repocache.domain.shared.error import NotFoundError, RateLimitedError, UpstreamError

logger = logging.getLogger(__name__)


def _retry_after(response: httpx.Response) -> int | None:
    value = response.headers.get("retry-after")
    if value is not None and value.isdigit():
        return int(value)
    return None


def is_rate_limited(response: httpx.Response) -> bool:
    """Whether the provider refused the request because of a rate limit.

    GitHub signals exhaustion with 403 and ``x-ratelimit-remaining: 0``;
    both providers use 429 for secondary limits.
    """
    if response.status_code == 429:
        return True
    return (
        response.status_code == 403
        and response.headers.get("x-ratelimit-remaining") == "0"
    )


class ProviderApi:
    """Thin JSON GET wrapper that maps HTTP outcomes onto domain errors."""

    name: str = "provider"

    def __init__(self, client: httpx.AsyncClient, api_url: str) -> None:
        self._client = client
        self._api_url = api_url.rstrip("/")

    async def get_json(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        not_found: str,
    ) -> Any:
        url = f"{self._api_url}{path}"
        try:
            response = await self._client.get(url, params=params)
        except httpx.HTTPError as e:
            raise UpstreamError(f"{self.name} request failed: {e}") from e

        if response.status_code == 404:
            raise NotFoundError(not_found)
        if is_rate_limited(response):
            logger.warning("%s rate limit hit for %s", self.name, path)
            raise RateLimitedError(
                f"{self.name} rate limit exceeded", retry_after=_retry_after(response)
            )
        if response.is_error:
            raise UpstreamError(f"{self.name} returned HTTP {response.status_code} for {path}")

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(f"{self.name} returned a malformed response: {e}") from e
