"""Configuration: frozen value objects describing how an operation runs."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from safetry.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Callable


def _check_non_negative(name: str, value: float | None) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(
            f"{name} must be a number, got {type(value).__name__}",
            hint=f"Pass {name} in milliseconds, e.g. {name}=200.",
        )
    if value < 0:
        raise ConfigurationError(
            f"{name} must be >= 0, got {value}",
            hint="Delays are measured in milliseconds and cannot be negative.",
        )


@dataclass(frozen=True)
class BackoffConfig:
    """How the delay between retry attempts is computed.

    Has no effect unless retries are configured.
    """

    base_delay_ms: float | None = None
    #: Linear (``base * attempt``) when False, ``base * 2**(attempt-1)`` when True.
    exponential: bool = False
    #: Resolved from settings (30000 by default) when *None*.
    max_delay_ms: float | None = None
    #: Adds up to ``Settings.jitter_ms`` after the cap.
    jitter: bool = False

    def __post_init__(self) -> None:
        """Validate delays early for clear errors."""
        _check_non_negative("base_delay_ms", self.base_delay_ms)
        _check_non_negative("max_delay_ms", self.max_delay_ms)


@dataclass(frozen=True)
class ExecutionConfig(BackoffConfig):
    """Immutable snapshot of timeout, retry and backoff settings.

    Owned by one ``AsyncOperation``. ``merge()`` produces a new snapshot;
    nothing mutates an existing one, so sibling handles never interfere.
    """

    #: *None* or 0 waits without a deadline.
    timeout_ms: float | None = None
    #: Returned as the attempt's error when the timeout fires.
    timeout_error: Any = None
    #: Additional attempts after the first failure.
    max_retries: int = 0
    #: Source of jitter in ``[0, 1)``; ``random.random`` when *None*.
    rng: Callable[[], float] | None = None

    def __post_init__(self) -> None:
        """Validate invariants to keep execution predictable."""
        super().__post_init__()
        _check_non_negative("timeout_ms", self.timeout_ms)
        if isinstance(self.max_retries, bool) or not isinstance(
            self.max_retries, int
        ):
            raise ConfigurationError(
                f"max_retries must be an int, got {type(self.max_retries).__name__}",
                hint="Pass the number of retries after the first attempt, e.g. 3.",
            )
        if self.max_retries < 0:
            raise ConfigurationError(
                f"max_retries must be >= 0, got {self.max_retries}",
                hint="Use 0 to run the operation exactly once.",
            )
        if self.rng is not None and not callable(self.rng):
            raise ConfigurationError(
                "rng must be a zero-argument callable returning a float in [0, 1)",
                hint="Pass random.Random(seed).random for deterministic jitter.",
            )

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def merge(self, **changes: Any) -> ExecutionConfig:
        """Return a copy with *changes* applied; later values win."""
        return replace(self, **changes)
