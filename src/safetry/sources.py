"""Where each attempt's awaitable comes from.

A *restartable* source re-invokes a callable for fresh work on every attempt
after the first. A *fixed* source wraps one awaitable the caller already
created; it cannot be restarted, so every attempt observes the same outcome.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, Generic, NamedTuple, TypeVar

from safetry.cancellation import CancelToken

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

T = TypeVar("T")


class Work(NamedTuple):
    """What one attempt runs."""

    awaitable: Any
    token: CancelToken
    #: True when safetry created the task, so it may cancel it.
    owned: bool


class RestartableSource(Generic[T]):
    """Produces fresh work per attempt from a factory.

    ``catch()`` invokes the factory once to classify it; that first awaitable
    is *primed* and consumed by the first ``take()``. Sibling handles share the
    source, so a primed coroutine is never awaited twice.
    """

    restartable = True

    def __init__(
        self,
        factory: Callable[..., Awaitable[T] | T],
        *,
        primed: Awaitable[T] | None = None,
        primed_token: CancelToken | None = None,
        pass_token: bool = False,
    ) -> None:
        self._factory = factory
        self._pass_token = pass_token
        self._primed = primed
        self._primed_token = primed_token

    def take(self) -> Work:
        """Return work for the next attempt and the token that governs it.

        Exceptions raised by the factory propagate to the caller, which
        records them as that attempt's failure.
        """
        if self._primed is not None:
            work, token = self._primed, self._primed_token or CancelToken()
            self._primed = None
            self._primed_token = None
        else:
            token = CancelToken()
            work = self._factory(token) if self._pass_token else self._factory()
        return Work(work, token, owned=not asyncio.isfuture(work))

    def __repr__(self) -> str:
        name = getattr(self._factory, "__qualname__", repr(self._factory))
        return f"RestartableSource({name})"


class FixedSource(Generic[T]):
    """Wraps a single awaitable in one future shared by sibling handles."""

    restartable = False

    def __init__(self, awaitable: Awaitable[T]) -> None:
        self._awaitable = awaitable
        self._future: asyncio.Future[T] | None = None
        self._token = CancelToken()

    def take(self) -> Work:
        # Needs a running loop; only the executor calls this.
        if self._future is None:
            self._future = asyncio.ensure_future(self._awaitable)
        # Every handle derived from the same catch() shares this future, so
        # no single handle may cancel it.
        return Work(self._future, self._token, owned=False)

    def __repr__(self) -> str:
        return f"FixedSource({self._awaitable!r})"


WorkSource = RestartableSource[Any] | FixedSource[Any]
