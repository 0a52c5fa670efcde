"""Custom Dishka scopes for repocache."""

from dishka import BaseScope, new_scope


class Scope(BaseScope):  # type: ignore[misc]  # BaseScope is designed to be subclassed
    """Dependency injection scopes.

    Hierarchy: APP -> UOW

    - APP: Application lifetime (tracker, coalescer, store, HTTP client)
    - UOW: Unit of Work (one HTTP request)
    """

    APP = new_scope("APP")
    UOW = new_scope("UOW")
