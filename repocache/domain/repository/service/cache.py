"""Cache orchestration for repository artifacts.

Two tiers sit in front of the upstream provider:

- the FreshnessTracker, a short-TTL hint of the latest version per repository,
  which bounds how often we ask the upstream "what is the latest version?"
- the SnapshotStore, durable content keyed by exact version, which answers
  "do we already have that version's content?"

Every public read is routed through the RequestCoalescer so concurrent
identical requests share one upstream round trip.
"""

import logging
from datetime import UTC, datetime

import logfire

from repocache.domain.repository.model.value import (
    CacheResult,
    ContentSnapshot,
    FetchedContent,
    RepositoryKey,
    VersionId,
    VersionInfo,
    short_version,
)
from repocache.domain.repository.port.snapshot_store import SnapshotStore
from repocache.domain.repository.port.upstream import UpstreamSource
from repocache.domain.repository.service.coalescer import RequestCoalescer, pending_key
from repocache.domain.repository.service.freshness import FreshnessTracker
from repocache.domain.shared.error import StorageUnavailableError, UpstreamError
from repocache.domain.shared.service import Service

logger = logging.getLogger(__name__)

_LATEST_VERSION_NAMESPACE = "latest-version"


class RepositoryCacheService(Service):
    store: SnapshotStore
    upstream: UpstreamSource
    freshness: FreshnessTracker
    coalescer: RequestCoalescer

    async def get_latest(self, key: RepositoryKey) -> CacheResult:
        """Content for the most recent version of key.

        Serves a stale snapshot (``cached=True``) when the upstream cannot
        resolve the latest version; raises the upstream error only when the
        store has nothing for key.
        """
        return await self.coalescer.coalesce(
            pending_key(key), lambda: self._get_latest(key)
        )

    async def get_exact(self, key: RepositoryKey, version: VersionId) -> CacheResult:
        """Content for one exact version of key. Store first, never stale."""
        return await self.coalescer.coalesce(
            pending_key(key, version), lambda: self._get_exact(key, version)
        )

    async def get_latest_version_id(self, key: RepositoryKey) -> VersionId:
        """Latest version of key, from the freshness hint when one is live."""
        fresh = self.freshness.lookup(key)
        if fresh is not None:
            return fresh

        return await self.coalescer.coalesce(
            pending_key(key, namespace=_LATEST_VERSION_NAMESPACE),
            lambda: self._resolve_and_record(key),
        )

    async def list_versions(self, key: RepositoryKey) -> list[VersionInfo]:
        """Stored versions of key, newest first."""
        return await self.store.list_versions(key)

    def invalidate(self, key: RepositoryKey) -> None:
        """Forget the freshness hint for key so the next read re-resolves."""
        self.freshness.invalidate(key)

    def clear(self) -> None:
        self.freshness.clear()

    # -------------------------------------------------------------------------
    # Coalesced operations
    # -------------------------------------------------------------------------

    async def _get_latest(self, key: RepositoryKey) -> CacheResult:
        logger.info("Getting latest artifact for %s", key)

        fresh = self.freshness.lookup(key)
        if fresh is not None:
            snapshot = await self._find_exact(key, fresh)
            if snapshot is not None:
                logger.debug("Cache hit (fresh) for %s", key)
                return CacheResult.from_snapshot(snapshot, cached=True)
            # Live hint without a snapshot: an earlier save was lost. Re-resolve.
            logger.debug("Fresh version %s of %s missing from store", short_version(fresh), key)

        try:
            with logfire.span("resolve latest version", key=str(key)):
                latest = await self.upstream.resolve_latest_version(key)
        except UpstreamError as e:
            self.freshness.invalidate(key)
            logger.warning(
                "Failed to resolve latest version for %s (%s), trying cache fallback",
                key,
                e.message,
            )
            stale = await self._find_latest(key)
            if stale is None:
                raise
            logger.info(
                "Returning stale snapshot %s for %s", short_version(stale.version), key
            )
            return CacheResult.from_snapshot(stale, cached=True)

        self.freshness.record(key, latest)

        snapshot = await self._find_exact(key, latest)
        if snapshot is not None:
            logger.debug("Cache hit for %s @ %s", key, short_version(latest))
            return CacheResult.from_snapshot(snapshot, cached=True)

        logger.debug("Cache miss for %s, fetching from %s", key, key.provider)
        return await self._fetch_and_save(key, latest)

    async def _get_exact(self, key: RepositoryKey, version: VersionId) -> CacheResult:
        logger.info("Getting artifact for %s @ %s", key, short_version(version))

        snapshot = await self._find_exact(key, version)
        if snapshot is not None:
            logger.debug("Cache hit for %s @ %s", key, short_version(version))
            return CacheResult.from_snapshot(snapshot, cached=True)

        logger.debug(
            "Cache miss for %s @ %s, fetching from %s", key, short_version(version), key.provider
        )
        return await self._fetch_and_save(key, version)

    async def _resolve_and_record(self, key: RepositoryKey) -> VersionId:
        with logfire.span("resolve latest version", key=str(key)):
            latest = await self.upstream.resolve_latest_version(key)
        self.freshness.record(key, latest)
        return latest

    # -------------------------------------------------------------------------
    # Store and upstream helpers
    # -------------------------------------------------------------------------

    async def _fetch_and_save(self, key: RepositoryKey, version: VersionId) -> CacheResult:
        with logfire.span("fetch content", key=str(key), version=version):
            fetched: FetchedContent = await self.upstream.fetch_content(key, version)

        snapshot = ContentSnapshot(
            key=key,
            version=fetched.version,
            content=fetched.content,
            created_at=datetime.now(UTC),
        )
        await self._save(snapshot)
        return CacheResult.from_snapshot(snapshot, cached=False)

    async def _find_exact(self, key: RepositoryKey, version: VersionId) -> ContentSnapshot | None:
        try:
            return await self.store.find_exact(key, version)
        except StorageUnavailableError as e:
            logger.warning("Store read failed for %s, treating as miss: %s", key, e.message)
            return None

    async def _find_latest(self, key: RepositoryKey) -> ContentSnapshot | None:
        try:
            return await self.store.find_latest(key)
        except StorageUnavailableError as e:
            logger.warning("Store read failed for %s, treating as miss: %s", key, e.message)
            return None

    async def _save(self, snapshot: ContentSnapshot) -> None:
        try:
            await self.store.save(snapshot)
        except StorageUnavailableError as e:
            logger.error(
                "Failed to cache %s @ %s: %s",
                snapshot.key,
                short_version(snapshot.version),
                e.message,
            )
            return
        logger.debug("Cached %s @ %s", snapshot.key, short_version(snapshot.version))
