"""Attempt loop: timeout race, retries and backoff around a work source.

``execute()`` is a plain async function over a work source and a frozen
``ExecutionConfig``; ``AsyncOperation`` is only a fluent way to build the
config. Every failure path ends in ``Result.error``; nothing raises except
cancellation of the awaiting task itself.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import TYPE_CHECKING, Any

from safetry.backoff import compute_delay
from safetry.errors import (
    ConfigurationError,
    OperationTimeoutError,
    RetryExhaustedError,
    format_ms,
)
from safetry.result import Result
from safetry.settings import resolve_settings

if TYPE_CHECKING:
    from safetry.config import ExecutionConfig
    from safetry.settings import Settings
    from safetry.sources import WorkSource

log = logging.getLogger(__name__)


async def sleep(ms: float) -> None:
    """Suspend the current task for *ms* milliseconds."""
    await asyncio.sleep(max(0.0, ms) / 1000)


def consume_future_exception(fut: asyncio.Future[Any]) -> None:
    """Avoid 'Future exception was never retrieved' for abandoned work."""
    if fut.cancelled():
        return
    exc = fut.exception()
    if exc is not None:
        log.debug("Abandoned work failed after its timeout: %r", exc)


def _settle(fut: asyncio.Future[Any]) -> Result[Any, Any]:
    if fut.cancelled():
        return Result.failure(asyncio.CancelledError())
    exc = fut.exception()
    if exc is not None:
        return Result.failure(exc)
    return Result.success(fut.result())


def _timeout_error(config: ExecutionConfig, timeout_ms: float) -> Any:
    if config.timeout_error is not None:
        return config.timeout_error
    return OperationTimeoutError(timeout_ms)


async def run_attempt(
    source: WorkSource,
    config: ExecutionConfig,
    *,
    cancel_on_timeout: bool = False,
) -> Result[Any, Any]:
    """Run one attempt, racing it against the configured timeout.

    A zero or unset ``timeout_ms`` waits without a deadline. When the timer
    wins, the attempt's token is cancelled and the work keeps running
    unobserved; tasks safetry created for this attempt alone are also
    cancelled when *cancel_on_timeout* is set. Shared or caller-supplied
    futures are never cancelled; only their late exception is retrieved.
    """
    try:
        work, token, owned = source.take()
    except Exception as exc:
        return Result.failure(exc)

    if not inspect.isawaitable(work):
        return Result.success(work)

    fut = asyncio.ensure_future(work)
    timeout_ms = config.timeout_ms
    timeout_s = timeout_ms / 1000 if timeout_ms else None

    try:
        # asyncio.wait releases its timer handle on every exit path.
        done, _ = await asyncio.wait({fut}, timeout=timeout_s)
    except asyncio.CancelledError:
        if owned:
            fut.cancel()
        raise

    if fut in done or not timeout_ms:
        return _settle(fut)

    reason = f"timed out after {format_ms(timeout_ms)}ms"
    token.cancel(reason)
    if owned and cancel_on_timeout:
        fut.cancel()
    else:
        fut.add_done_callback(consume_future_exception)
    log.debug("Attempt %s", reason)
    return Result.failure(_timeout_error(config, timeout_ms))


async def execute(
    source: WorkSource,
    config: ExecutionConfig,
    *,
    settings: Settings | None = None,
) -> Result[Any, Any]:
    """Run attempts until one succeeds or ``config.max_attempts`` is reached.

    Attempts are strictly sequential: the next one starts only after the
    previous one settled (or timed out) and its backoff pause elapsed. The
    final failure carries the last attempt's error verbatim.
    """
    if settings is None:
        try:
            settings = resolve_settings()
        except ConfigurationError as exc:
            log.error("Cannot run operation: %s", exc)
            return Result.failure(exc)
    max_attempts = config.max_attempts
    if max_attempts > 1 and not source.restartable:
        log.warning(
            "Ignoring %d retries for %r: an awaitable that is already created "
            "cannot be restarted. Pass a callable to catch() to retry.",
            config.max_retries,
            source,
        )
        max_attempts = 1

    error: Any = None
    for attempt in range(1, max_attempts + 1):
        result = await run_attempt(
            source, config, cancel_on_timeout=settings.cancel_on_timeout
        )
        if result.ok:
            if attempt > 1:
                log.debug("Succeeded on attempt %d/%d", attempt, max_attempts)
            return result

        error = result.error
        log.debug("Attempt %d/%d failed: %r", attempt, max_attempts, error)
        if attempt >= max_attempts:
            break

        delay = compute_delay(
            config,
            attempt,
            rng=config.rng,
            default_max_delay_ms=settings.max_delay_ms,
            jitter_ms=settings.jitter_ms,
        )
        if delay > 0:
            log.debug("Backing off %.1fms before attempt %d", delay, attempt + 1)
            await sleep(delay)

    # Defensive: the loop always records an error before falling through.
    if error is None:  # pragma: no cover
        error = RetryExhaustedError(attempts=max_attempts)
    return Result.failure(error)
