"""Single-flight execution of concurrent identical requests."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Hashable
from typing import Any, TypeVar

from repocache.domain.repository.model.value import RepositoryKey, VersionId

logger = logging.getLogger(__name__)

T = TypeVar("T")

PendingKey = tuple[str, str, str, str | None, str | None]


def pending_key(
    key: RepositoryKey,
    version: VersionId | None = None,
    *,
    namespace: str | None = None,
) -> PendingKey:
    """Build the coalescing key for a request.

    Latest-version requests and exact-version requests for the same repository
    get different keys, as do requests in different namespaces. Parts are kept
    apart, so names containing `@` or `/` cannot collide.
    """
    return (key.provider.value, key.organization, key.repository, version, namespace)


class RequestCoalescer:
    """Shares one in-flight operation among all concurrent callers of a key.

    The first caller for a key starts the operation as a task; later callers
    await the same task. The registration is removed inside the task before
    its outcome is delivered, so the next call after settlement always starts
    a fresh attempt. A caller that is cancelled stops waiting but does not
    cancel the shared operation.
    """

    def __init__(self) -> None:
        self._pending: dict[Hashable, asyncio.Task[Any]] = {}

    async def coalesce(self, key: Hashable, operation: Callable[[], Awaitable[T]]) -> T:
        task = self._pending.get(key)
        if task is None:
            # No await between the lookup and the insert: the event loop cannot
            # interleave another caller here.
            task = asyncio.ensure_future(self._run(key, operation))
            task.add_done_callback(_retrieve_exception)
            self._pending[key] = task
            logger.debug("Starting new request for %s", key)
        else:
            logger.debug("Deduplicating request for %s", key)

        return await asyncio.shield(task)

    async def _run(self, key: Hashable, operation: Callable[[], Awaitable[T]]) -> T:
        try:
            return await operation()
        finally:
            self._pending.pop(key, None)

    def has_pending(self, key: Hashable) -> bool:
        return key in self._pending

    def pending_count(self) -> int:
        return len(self._pending)


def _retrieve_exception(task: asyncio.Task[Any]) -> None:
    # Marks the exception as retrieved when every waiter has gone away.
    if not task.cancelled():
        task.exception()
