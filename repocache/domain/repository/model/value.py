"""Value objects for cached repository artifacts."""

from datetime import datetime
from enum import StrEnum
from typing import Any, NewType

from pydantic import Field

from repocache.domain.shared.model.value import ValueObject

VersionId = NewType("VersionId", str)
"""Opaque revision marker (e.g. a commit SHA) scoped to a RepositoryKey."""

Content = dict[str, Any]


class Provider(StrEnum):
    """Remote source-hosting provider."""

    GITHUB = "github"
    GITLAB = "gitlab"


class RepositoryKey(ValueObject):
    """Identifies a logical content source. Compared by value."""

    provider: Provider
    organization: str = Field(min_length=1)
    repository: str = Field(min_length=1)

    def __str__(self) -> str:
        return f"{self.provider}:{self.organization}/{self.repository}"


class ContentSnapshot(ValueObject):
    """Immutable content of a repository artifact at one version."""

    key: RepositoryKey
    version: VersionId
    content: Content
    created_at: datetime


class VersionInfo(ValueObject):
    """A stored version of an artifact, as listed newest first."""

    version: VersionId
    created_at: datetime


class FreshnessRecord(ValueObject):
    """Last observed latest version for a key, and when it was checked.

    ``checked_at`` is a reading of the tracker's clock, not wall time.
    """

    key: RepositoryKey
    version: VersionId
    checked_at: float


class FetchedContent(ValueObject):
    """Content returned by an upstream fetch with the version it resolved to."""

    content: Content
    version: VersionId


class CacheResult(ValueObject):
    """Answer to a content request, flagged with whether it came from cache."""

    key: RepositoryKey
    version: VersionId
    content: Content
    cached: bool

    @classmethod
    def from_snapshot(cls, snapshot: ContentSnapshot, *, cached: bool) -> "CacheResult":
        return cls(
            key=snapshot.key,
            version=snapshot.version,
            content=snapshot.content,
            cached=cached,
        )


def short_version(version: str) -> str:
    """Abbreviate a version for log lines."""
    return version[:7]
