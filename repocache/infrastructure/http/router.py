"""Dispatches upstream calls to the adapter for each provider."""

import logging
from collections.abc import Mapping

from repocache.domain.repository.model.value import (
    FetchedContent,
    Provider,
    RepositoryKey,
    VersionId,
)
from repocache.domain.repository.port.upstream import UpstreamSource
from repocache.domain.shared.error import ConfigurationError

logger = logging.getLogger(__name__)


class ProviderRouter(UpstreamSource):
    def __init__(self, sources: Mapping[Provider, UpstreamSource]) -> None:
        self._sources = dict(sources)

    def _source_for(self, key: RepositoryKey) -> UpstreamSource:
        try:
            return self._sources[key.provider]
        except KeyError:
            raise ConfigurationError(f"No upstream configured for provider {key.provider}")

    async def resolve_latest_version(self, key: RepositoryKey) -> VersionId:
        logger.debug("Getting latest commit SHA from %s", key)
        return await self._source_for(key).resolve_latest_version(key)

    async def fetch_content(
        self, key: RepositoryKey, version: VersionId | None = None
    ) -> FetchedContent:
        logger.debug("Fetching artifact from %s", key)
        return await self._source_for(key).fetch_content(key, version)
