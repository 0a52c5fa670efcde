"""GitLab REST v4 adapter for the UpstreamSource port."""

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


class GitLabSource(ProviderApi, UpstreamSource):
    """Reads the artifact file from public GitLab projects."""

    name = "GitLab"

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

    def _project_path(self, key: RepositoryKey) -> str:
        # GitLab addresses projects by URL-encoded "namespace/name"
        return f"/projects/{quote(f'{key.organization}/{key.repository}', safe='')}"

    async def resolve_latest_version(self, key: RepositoryKey) -> VersionId:
        logger.debug("Getting latest commit SHA for %s", key)
        commits = await self.get_json(
            f"{self._project_path(key)}/repository/commits",
            params={"path": self._artifact_path, "per_page": 1},
            not_found=f"Project {key.organization}/{key.repository} not found on GitLab",
        )
        if not isinstance(commits, list):
            raise UpstreamError("GitLab returned a malformed commit list")
        if not commits:
            raise NotFoundError(
                f"No commits found for {self._artifact_path} in "
                f"{key.organization}/{key.repository}"
            )

        commit_id = commits[0].get("id") if isinstance(commits[0], dict) else None
        if not commit_id:
            raise NotFoundError("Commit has no ID")
        return VersionId(commit_id)

    async def fetch_content(
        self, key: RepositoryKey, version: VersionId | None = None
    ) -> FetchedContent:
        logger.debug(
            "Fetching %s from GitLab %s%s",
            self._artifact_path,
            key,
            f" @ {short_version(version)}" if version else "",
        )
        ref = version or "HEAD"
        location = f"{self._artifact_path} in {key.organization}/{key.repository}"

        data = await self.get_json(
            f"{self._project_path(key)}/repository/files/{quote(self._artifact_path, safe='')}",
            params={"ref": ref},
            not_found=f"{location} not found at {ref}",
        )
        if not isinstance(data, dict) or "content" not in data:
            raise UpstreamError(f"GitLab returned a malformed file response for {location}")

        content = parse_artifact(
            decode_base64_file(data["content"], location=location),
            collection_key=self._collection_key,
            location=location,
        )
        resolved = version or await self.resolve_latest_version(key)
        return FetchedContent(content=content, version=resolved)
