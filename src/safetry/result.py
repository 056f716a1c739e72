"""Discriminated success/failure value returned by every safetry entry point."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar, cast

from safetry.errors import InternalError, UnwrapError

if TYPE_CHECKING:
    from collections.abc import Iterator

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Result(Generic[T, E]):
    """Outcome of one operation: either ``data`` or ``error``, never both.

    ``error`` is the discriminator. A success may carry ``data=None`` because
    Python callables legitimately return ``None``; a failure always carries a
    non-None ``error``.

    Results unpack like a pair, so both styles work::

        result = await catch(fetch_user)
        if result.error is not None:
            ...

        data, error = await catch(fetch_user)
    """

    data: T | None = None
    error: E | None = None

    def __post_init__(self) -> None:
        """Reject results that populate both branches."""
        if self.data is not None and self.error is not None:
            raise InternalError(
                "Result cannot carry both data and error",
                hint="Use Result.success(value) or Result.failure(error).",
            )

    @classmethod
    def success(cls, value: T) -> Result[T, E]:
        return cls(data=value, error=None)

    @classmethod
    def failure(cls, error: E) -> Result[T, E]:
        if error is None:
            raise InternalError("Result.failure() requires a non-None error")
        return cls(data=None, error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def failed(self) -> bool:
        return self.error is not None

    def unwrap(self) -> T:
        """Return ``data``, or raise the stored error.

        Non-exception error values are wrapped in ``UnwrapError``.
        """
        if self.error is None:
            return cast("T", self.data)
        if isinstance(self.error, BaseException):
            raise self.error
        raise UnwrapError(self.error)

    def unwrap_or(self, default: Any) -> Any:
        return cast("T", self.data) if self.error is None else default

    def __iter__(self) -> Iterator[Any]:
        yield self.data
        yield self.error
