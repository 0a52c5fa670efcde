"""Port for the remote provider that resolves and serves artifacts."""

from abc import abstractmethod
from typing import Protocol

from repocache.domain.repository.model.value import FetchedContent, RepositoryKey, VersionId
from repocache.domain.shared.port import Port


class UpstreamSource(Port, Protocol):
    """Resolves the latest version of an artifact and fetches its content.

    Raises NotFoundError when the artifact has no history or is absent at the
    requested version, InvalidFormatError when the content fails structural
    validation, and UpstreamError (or RateLimitedError) for transient failures.
    A single attempt is made per call.
    """

    @abstractmethod
    async def resolve_latest_version(self, key: RepositoryKey) -> VersionId: ...

    @abstractmethod
    async def fetch_content(
        self, key: RepositoryKey, version: VersionId | None = None
    ) -> FetchedContent:
        """Fetch content at version, or at the current default when version is None."""
        ...
