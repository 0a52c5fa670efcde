"""GitHub REST v3 adapter for the UpstreamSource port."""

import logging
from urllib.parse import quote

import httpx

from repocache.domain.repository.model.value import (
    FetchedContent,
    RepositoryKey,
    VersionId,
    short_version,
)
from repocache.domain.repository.port.upstream import UpstreamSource
from repocache.domain.shared.error import NotFoundError, UpstreamError
from repocache.infrastructure.http.artifact import decode_base64_file, parse_artifact
from repocache.infrastructure.http.client import ProviderApi

logger = logging.getLogger(__name__)


class GitHubSource(ProviderApi, UpstreamSource):
    """Reads the artifact file from public GitHub repositories.

    The version of an artifact is the SHA of the most recent commit that
    touched its path.
    """

    name = "GitHub"

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_url: str,
        *,
        artifact_path: str,
        collection_key: str,
    ) -> None:
        super().__init__(client, api_url)
        self._artifact_path = artifact_path
        self._collection_key = collection_key

    def _repo_path(self, key: RepositoryKey) -> str:
        return f"/repos/{quote(key.organization, safe='')}/{quote(key.repository, safe='')}"

    async def resolve_latest_version(self, key: RepositoryKey) -> VersionId:
        logger.debug("Getting latest commit SHA for %s", key)
        commits = await self.get_json(
            f"{self._repo_path(key)}/commits",
            params={"path": self._artifact_path, "per_page": 1},
            not_found=f"Repository {key.organization}/{key.repository} not found on GitHub",
        )
        if not isinstance(commits, list):
            raise UpstreamError("GitHub returned a malformed commit list")
        if not commits:
            raise NotFoundError(
                f"No commits found for {self._artifact_path} in "
                f"{key.organization}/{key.repository}"
            )

        sha = commits[0].get("sha") if isinstance(commits[0], dict) else None
        if not sha:
            raise UpstreamError("GitHub commit has no SHA")
        return VersionId(sha)

    async def _default_branch(self, key: RepositoryKey) -> str:
        data = await self.get_json(
            self._repo_path(key),
            not_found=f"Repository {key.organization}/{key.repository} not found on GitHub",
        )
        branch = data.get("default_branch") if isinstance(data, dict) else None
        if not branch:
            raise UpstreamError("GitHub repository has no default branch")
        return branch

    async def fetch_content(
        self, key: RepositoryKey, version: VersionId | None = None
    ) -> FetchedContent:
        logger.debug(
            "Fetching %s from GitHub %s%s",
            self._artifact_path,
            key,
            f" @ {short_version(version)}" if version else "",
        )
        ref = version or await self._default_branch(key)
        location = f"{self._artifact_path} in {key.organization}/{key.repository}"

        data = await self.get_json(
            f"{self._repo_path(key)}/contents/{quote(self._artifact_path)}",
            params={"ref": ref},
            not_found=f"{location} not found at {ref}",
        )
        if not isinstance(data, dict) or data.get("type") != "file" or "content" not in data:
            raise NotFoundError(f"{location} is not a file")

        content = parse_artifact(
            decode_base64_file(data["content"], location=location),
            collection_key=self._collection_key,
            location=location,
        )
        resolved = version or await self.resolve_latest_version(key)
        return FetchedContent(content=content, version=resolved)
