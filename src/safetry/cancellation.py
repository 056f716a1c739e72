"""Cooperative cancellation for work abandoned after a timeout."""

from __future__ import annotations

import asyncio


class CancelToken:
    """One-way flag a unit of work can poll or await.

    The executor hands a fresh token to every attempt started through
    ``catch_cancellable()`` and cancels it when that attempt times out, so the
    abandoned work can stop instead of finishing unobserved in the background.
    """

    __slots__ = ("_event", "_reason")

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        return self._reason

    def cancel(self, reason: str | None = None) -> None:
        """Mark the token cancelled; the first reason sticks."""
        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise asyncio.CancelledError(self._reason)

    async def wait(self) -> None:
        await self._event.wait()

    def __repr__(self) -> str:
        state = f"cancelled reason={self._reason!r}" if self.cancelled else "active"
        return f"CancelToken({state})"
