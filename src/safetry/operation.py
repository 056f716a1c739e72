"""Operation wrapper and the configurable async handle.

    result = catch(lambda: json.loads(raw))          # sync: Result now
    result = await catch(fetch_user).with_retry(3)    # async: deferred handle
"""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any, Generic, TypeVar, overload

from safetry.cancellation import CancelToken
from safetry.config import ExecutionConfig
from safetry.errors import InvalidInputError
from safetry.executor import execute
from safetry.result import Result
from safetry.sources import FixedSource, RestartableSource

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Generator

    from safetry.sources import WorkSource

T = TypeVar("T")
E = TypeVar("E")


class AsyncOperation(Generic[T, E]):
    """Immutable, chainable handle around deferred async work.

    Each ``with_*`` call returns a new handle sharing the same work source
    with a merged ``ExecutionConfig``. Nothing runs until the handle is
    awaited, and awaiting always yields a ``Result``.
    """

    __slots__ = ("_config", "_source")

    def __init__(
        self, source: WorkSource, config: ExecutionConfig | None = None
    ) -> None:
        self._source = source
        self._config = config if config is not None else ExecutionConfig()

    @property
    def config(self) -> ExecutionConfig:
        return self._config

    @property
    def source(self) -> WorkSource:
        return self._source

    def _derive(self, **changes: Any) -> AsyncOperation[T, E]:
        return AsyncOperation(self._source, self._config.merge(**changes))

    def with_timeout(self, ms: float, error: E | None = None) -> AsyncOperation[T, E]:
        """Fail an attempt that has not settled after *ms* milliseconds.

        The attempt's error is *error* when given, otherwise an
        ``OperationTimeoutError`` reading "Operation timed out after {ms}ms".
        A zero *ms* waits without a deadline.
        """
        return self._derive(timeout_ms=ms, timeout_error=error)

    def with_retry(self, max_attempts: int) -> AsyncOperation[T, E]:
        """Allow *max_attempts* additional attempts after the first failure."""
        return self._derive(max_retries=max_attempts)

    def with_backoff(
        self,
        base_delay_ms: float,
        *,
        exponential: bool = False,
        max_delay_ms: float | None = None,
        jitter: bool = False,
        rng: Callable[[], float] | None = None,
    ) -> AsyncOperation[T, E]:
        """Pause between retries: linear by default, exponential on request.

        Only meaningful together with ``with_retry()``. *rng* replaces the
        jitter source, e.g. ``random.Random(7).random`` in tests.
        """
        changes: dict[str, Any] = {
            "base_delay_ms": base_delay_ms,
            "exponential": exponential,
            "max_delay_ms": max_delay_ms,
            "jitter": jitter,
        }
        if rng is not None:
            changes["rng"] = rng
        return self._derive(**changes)

    def with_config(self, config: ExecutionConfig) -> AsyncOperation[T, E]:
        """Replace the whole configuration snapshot."""
        return AsyncOperation(self._source, config)

    async def execute(self) -> Result[T, E]:
        return await execute(self._source, self._config)

    def __await__(self) -> Generator[Any, None, Result[T, E]]:
        return self.execute().__await__()

    def __repr__(self) -> str:
        return f"AsyncOperation({self._source!r}, {self._config!r})"


@overload
def catch(fn: Awaitable[T]) -> AsyncOperation[T, Exception]: ...


@overload
def catch(fn: Callable[[], Awaitable[T]]) -> AsyncOperation[T, Exception]: ...


@overload
def catch(fn: Callable[[], T]) -> Result[T, Exception]: ...


def catch(fn: Any) -> AsyncOperation[Any, Any] | Result[Any, Any]:
    """Run *fn* without letting its exceptions escape.

    - awaitable: returns an ``AsyncOperation`` around it (single attempt only;
      an awaitable that already exists cannot be restarted for retries)
    - callable: invoked once, right away. An exception becomes a failed
      ``Result``; an awaitable return value becomes an ``AsyncOperation``
      that re-invokes *fn* for every retry; any other value becomes a
      successful ``Result``.
    - anything else: a failed ``Result`` carrying ``InvalidInputError``
    """
    if inspect.isawaitable(fn):
        return AsyncOperation(FixedSource(fn))

    if not callable(fn):
        return Result.failure(
            InvalidInputError(
                "Invalid input: expected awaitable or callable",
                hint="Pass a coroutine, or a zero-argument function such as "
                "lambda: fetch(url).",
            )
        )

    try:
        value = fn()
    except Exception as exc:
        return Result.failure(exc)

    if inspect.isawaitable(value):
        return AsyncOperation(RestartableSource(fn, primed=value))
    return Result.success(value)


def catch_cancellable(
    fn: Callable[[CancelToken], Awaitable[T] | T],
) -> AsyncOperation[T, Exception] | Result[T, Exception]:
    """Like ``catch()``, but *fn* receives a ``CancelToken`` per attempt.

    The token is cancelled when its attempt times out, so *fn* can stop
    work nobody is waiting for::

        async def download(token: CancelToken) -> bytes:
            chunks = []
            async for chunk in stream():
                token.raise_if_cancelled()
                chunks.append(chunk)
            return b"".join(chunks)

        result = await catch_cancellable(download).with_timeout(5_000)
    """
    if not callable(fn):
        return Result.failure(
            InvalidInputError(
                "Invalid input: expected a callable accepting a CancelToken",
                hint="Pass a function such as lambda token: fetch(url, token).",
            )
        )

    token = CancelToken()
    try:
        value = fn(token)
    except Exception as exc:
        return Result.failure(exc)

    if inspect.isawaitable(value):
        return AsyncOperation(
            RestartableSource(
                fn, primed=value, primed_token=token, pass_token=True
            )
        )
    return Result.success(value)
