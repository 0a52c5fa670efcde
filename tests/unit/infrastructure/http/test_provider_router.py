"""Tests for ProviderRouter."""

from unittest.mock import AsyncMock

import pytest

from repocache.domain.repository.model.value import Provider, RepositoryKey, VersionId
from repocache.domain.shared.error import ConfigurationError
from repocache.infrastructure.http.router import ProviderRouter


def key(provider: Provider) -> RepositoryKey:
    return RepositoryKey(provider=provider, organization="acme", repository="docs")


class TestProviderRouter:
    @pytest.mark.asyncio
    async def test_dispatches_by_provider(self):
        github, gitlab = AsyncMock(), AsyncMock()
        github.resolve_latest_version.return_value = VersionId("abc123")
        router = ProviderRouter({Provider.GITHUB: github, Provider.GITLAB: gitlab})

        assert await router.resolve_latest_version(key(Provider.GITHUB)) == "abc123"
        await router.fetch_content(key(Provider.GITLAB), VersionId("def456"))

        gitlab.fetch_content.assert_awaited_once_with(key(Provider.GITLAB), "def456")
        gitlab.resolve_latest_version.assert_not_awaited()
        github.fetch_content.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unconfigured_provider_is_configuration_error(self):
        router = ProviderRouter({Provider.GITHUB: AsyncMock()})

        with pytest.raises(ConfigurationError):
            await router.resolve_latest_version(key(Provider.GITLAB))
