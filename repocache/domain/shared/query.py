"""Query and QueryHandler base classes with tracing."""

from __future__ import annotations

from abc import ABCMeta, abstractmethod
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from functools import wraps
from typing import Any, Generic, TypeVar, dataclass_transform

import logfire
from pydantic import BaseModel


class Query(BaseModel): ...


class Result(BaseModel): ...


Q = TypeVar("Q", bound=Query)
R = TypeVar("R", bound=Result)

# Unbound async handler method: (self, query) -> Coroutine -> Result
_HandlerMethod = Callable[..., Coroutine[Any, Any, Any]]


def _wrap_run_with_span(cls: type, original_run: _HandlerMethod) -> _HandlerMethod:
    """Wrap the run() method in a logfire span named after the handler."""

    @wraps(original_run)
    async def traced_run(self: Any, query: Any) -> Any:
        with logfire.span(cls.__name__, query=query.model_dump(mode="json")):
            return await original_run(self, query)

    return traced_run


@dataclass_transform()
class _QueryHandlerMeta(ABCMeta):
    """Metaclass that combines ABC with auto-dataclass and tracing for subclasses."""

    def __new__(mcs, name: str, bases: tuple[type, ...], namespace: dict[str, Any]):
        cls = super().__new__(mcs, name, bases, namespace)
        if any(isinstance(b, mcs) for b in bases):
            cls = dataclass(cls)

            original_run = cls.__dict__.get("run")
            if original_run is not None:
                cls.run = _wrap_run_with_span(cls, original_run)

        return cls


class QueryHandler(Generic[Q, R], metaclass=_QueryHandlerMeta):
    """Base class for query handlers. Subclasses are automatically dataclasses."""

    @abstractmethod
    async def run(self, query: Q) -> R: ...
