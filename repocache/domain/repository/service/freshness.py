"""In-memory record of the last latest-version seen per repository."""

import logging
import threading
import time
from collections.abc import Callable

from repocache.domain.repository.model.value import (
    FreshnessRecord,
    RepositoryKey,
    VersionId,
    short_version,
)

logger = logging.getLogger(__name__)


class FreshnessTracker:
    """Short-lived hints of "the latest version of key was V as of t".

    Exists to avoid asking the upstream for the latest version on every request.
    Entries expire lazily: a lookup past the TTL evicts the entry and reports a
    miss. There is no background sweep, so entries that are never read again
    stay in memory until their key is queried, ``clear()`` is called, or the
    process restarts. Nothing here is persisted.
    """

    def __init__(
        self,
        ttl_seconds: float,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[RepositoryKey, FreshnessRecord] = {}
        self._lock = threading.Lock()
        logger.info("Freshness TTL: %ss", ttl_seconds)

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def record(self, key: RepositoryKey, version: VersionId) -> None:
        """Overwrite the hint for key with (version, now)."""
        entry = FreshnessRecord(key=key, version=version, checked_at=self._clock())
        with self._lock:
            self._entries[key] = entry
        logger.debug("Freshness set for %s: %s", key, short_version(version))

    def lookup(self, key: RepositoryKey) -> VersionId | None:
        """Return the hinted version if still within the TTL, else None."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            age = self._clock() - entry.checked_at
            if age > self._ttl:
                del self._entries[key]
                logger.debug("Freshness expired for %s", key)
                return None

        logger.debug("Freshness hit for %s (age: %.3fs)", key, age)
        return entry.version

    def invalidate(self, key: RepositoryKey) -> None:
        """Drop the hint for key, if any."""
        with self._lock:
            self._entries.pop(key, None)
        logger.debug("Freshness invalidated for %s", key)

    def clear(self) -> None:
        """Drop every hint."""
        with self._lock:
            self._entries.clear()
        logger.debug("Freshness cleared")

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
