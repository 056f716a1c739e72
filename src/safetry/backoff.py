"""Delay computation between retry attempts."""

from __future__ import annotations

import random
from typing import TYPE_CHECKING

from safetry.settings import DEFAULT_JITTER_MS, DEFAULT_MAX_DELAY_MS

if TYPE_CHECKING:
    from collections.abc import Callable

    from safetry.config import BackoffConfig


def compute_delay(
    config: BackoffConfig,
    attempt: int,
    *,
    rng: Callable[[], float] | None = None,
    default_max_delay_ms: float = DEFAULT_MAX_DELAY_MS,
    jitter_ms: float = DEFAULT_JITTER_MS,
) -> float:
    """Return the pause in milliseconds after failed attempt number *attempt*.

    - linear: ``base * attempt`` (b, 2b, 3b, ...)
    - exponential: ``base * 2 ** (attempt - 1)`` (b, 2b, 4b, ...)
    - capped at ``max_delay_ms`` (``default_max_delay_ms`` when unset)
    - jitter adds ``rng() * jitter_ms`` after the cap, so the actual pause
      may exceed the cap by up to ``jitter_ms``.

    Returns ``0.0`` when no base delay is configured.
    """
    # attempt starts at 1 for the pause after the first failure.
    if not config.base_delay_ms:
        return 0.0
    if config.exponential:
        delay = config.base_delay_ms * 2 ** max(0, attempt - 1)
    else:
        delay = config.base_delay_ms * max(1, attempt)

    cap = config.max_delay_ms if config.max_delay_ms is not None else default_max_delay_ms
    delay = min(float(delay), float(cap))

    if config.jitter:
        draw = (rng or random.random)()  # noqa: S311
        delay += draw * jitter_ms
    return delay
