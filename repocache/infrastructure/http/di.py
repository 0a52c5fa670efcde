"""DI provider for HTTP infrastructure."""

from typing import AsyncIterable, NewType

import httpx
from dishka import provide

from repocache.config import Config
from repocache.domain.repository.model.value import Provider as GitProvider
from repocache.domain.repository.port.upstream import UpstreamSource
from repocache.infrastructure.http.github import GitHubSource
from repocache.infrastructure.http.gitlab import GitLabSource
from repocache.infrastructure.http.router import ProviderRouter
from repocache.util.di.base import Provider
from repocache.util.di.scope import Scope

UpstreamHttpClient = NewType("UpstreamHttpClient", httpx.AsyncClient)


class HttpProvider(Provider):
    """DI provider for upstream provider adapters."""

    @provide(scope=Scope.APP)
    async def get_upstream_http_client(
        self, config: Config
    ) -> AsyncIterable[UpstreamHttpClient]:
        """One pooled client for every provider API, closed with the container."""
        providers = config.providers
        timeout = httpx.Timeout(
            providers.read_timeout,
            connect=providers.connect_timeout,
        )
        async with httpx.AsyncClient(
            timeout=timeout,
            headers={"User-Agent": providers.user_agent},
            follow_redirects=True,
        ) as client:
            yield UpstreamHttpClient(client)

    @provide(scope=Scope.APP)
    def get_upstream(self, client: UpstreamHttpClient, config: Config) -> UpstreamSource:
        providers = config.providers
        return ProviderRouter(
            {
                GitProvider.GITHUB: GitHubSource(
                    client,
                    providers.github.api_url,
                    artifact_path=providers.artifact_path,
                    collection_key=providers.collection_key,
                ),
                GitProvider.GITLAB: GitLabSource(
                    client,
                    providers.gitlab.api_url,
                    artifact_path=providers.artifact_path,
                    collection_key=providers.collection_key,
                ),
            }
        )
