"""Exception hierarchy for safetry."""

from __future__ import annotations


class SafeTryError(Exception):
    """Base exception for all safetry errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ConfigurationError(SafeTryError):
    """Configuration validation or resolution failed."""


class InvalidInputError(SafeTryError):
    """``catch()`` received something that is neither awaitable nor callable."""


class InternalError(SafeTryError):
    """A safetry internal error (bug) or invariant violation."""


class OperationTimeoutError(SafeTryError, TimeoutError):
    """An attempt did not settle before its timeout elapsed.

    Subclasses ``TimeoutError`` so callers can branch on the builtin type
    without importing safetry.
    """

    def __init__(self, timeout_ms: float, *, hint: str | None = None) -> None:
        super().__init__(
            f"Operation timed out after {format_ms(timeout_ms)}ms", hint=hint
        )
        self.timeout_ms = timeout_ms


class RetryExhaustedError(SafeTryError):
    """Every attempt failed and no attempt recorded an error."""

    def __init__(
        self,
        message: str = "Operation failed after all retry attempts",
        *,
        hint: str | None = None,
        attempts: int | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.attempts = attempts


class UnwrapError(SafeTryError):
    """``Result.unwrap()`` was called on a failure whose error is not an exception."""

    def __init__(self, error: object) -> None:
        super().__init__(
            f"Called unwrap() on a failed Result: {error!r}",
            hint="Check result.error (or use unwrap_or) before unwrapping.",
        )
        self.error = error


def format_ms(ms: float) -> str:
    """Render milliseconds without a trailing ``.0`` for integral values."""
    if isinstance(ms, float) and ms.is_integer():
        return str(int(ms))
    return str(ms)
