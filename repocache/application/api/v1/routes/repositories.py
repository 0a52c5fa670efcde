"""Repository artifact REST routes."""

from typing import Annotated

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Path

from repocache.domain.repository.command.invalidate_freshness import (
    FreshnessInvalidated,
    InvalidateFreshness,
    InvalidateFreshnessHandler,
)
from repocache.domain.repository.model.value import Provider, RepositoryKey
from repocache.domain.repository.query.get_by_version import GetByVersion, GetByVersionHandler
from repocache.domain.repository.query.get_latest_version import (
    GetLatestVersion,
    GetLatestVersionHandler,
    LatestVersion,
)
from repocache.domain.repository.query.get_repository import (
    GetRepository,
    GetRepositoryHandler,
    RepositoryContent,
)
from repocache.domain.repository.query.list_versions import (
    ListVersions,
    ListVersionsHandler,
    VersionList,
)

router = APIRouter(prefix="/repositories", tags=["Repositories"], route_class=DishkaRoute)

Organization = Annotated[str, Path(min_length=1)]
Repository = Annotated[str, Path(min_length=1)]
Version = Annotated[str, Path(min_length=7, max_length=40)]


@router.delete("/freshness", response_model=FreshnessInvalidated)
async def clear_freshness(
    handler: FromDishka[InvalidateFreshnessHandler],
) -> FreshnessInvalidated:
    """Forget every latest-version hint."""
    return await handler.run(InvalidateFreshness())


@router.get("/{provider}/{organization}/{repository}", response_model=RepositoryContent)
async def get_repository(
    provider: Provider,
    organization: Organization,
    repository: Repository,
    handler: FromDishka[GetRepositoryHandler],
) -> RepositoryContent:
    """Latest artifact content, served from cache when possible."""
    key = RepositoryKey(provider=provider, organization=organization, repository=repository)
    return await handler.run(GetRepository(key=key))


@router.get(
    "/{provider}/{organization}/{repository}/commits/{version}",
    response_model=RepositoryContent,
)
async def get_by_version(
    provider: Provider,
    organization: Organization,
    repository: Repository,
    version: Version,
    handler: FromDishka[GetByVersionHandler],
) -> RepositoryContent:
    """Artifact content pinned to one version."""
    key = RepositoryKey(provider=provider, organization=organization, repository=repository)
    return await handler.run(GetByVersion(key=key, version=version))


@router.get("/{provider}/{organization}/{repository}/versions", response_model=VersionList)
async def list_versions(
    provider: Provider,
    organization: Organization,
    repository: Repository,
    handler: FromDishka[ListVersionsHandler],
) -> VersionList:
    """Cached versions, newest first."""
    key = RepositoryKey(provider=provider, organization=organization, repository=repository)
    return await handler.run(ListVersions(key=key))


@router.get("/{provider}/{organization}/{repository}/latest", response_model=LatestVersion)
async def get_latest_version(
    provider: Provider,
    organization: Organization,
    repository: Repository,
    handler: FromDishka[GetLatestVersionHandler],
) -> LatestVersion:
    """Latest version only, for cheap update checks."""
    key = RepositoryKey(provider=provider, organization=organization, repository=repository)
    return await handler.run(GetLatestVersion(key=key))


@router.delete(
    "/{provider}/{organization}/{repository}/freshness",
    response_model=FreshnessInvalidated,
)
async def invalidate_freshness(
    provider: Provider,
    organization: Organization,
    repository: Repository,
    handler: FromDishka[InvalidateFreshnessHandler],
) -> FreshnessInvalidated:
    """Forget the latest-version hint so the next read asks upstream again."""
    key = RepositoryKey(provider=provider, organization=organization, repository=repository)
    return await handler.run(InvalidateFreshness(key=key))
