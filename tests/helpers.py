"""Test helpers (small, reusable doubles).

Keep this file tiny and purpose-built: it exists to prevent test suites from
growing lots of one-off flaky functions as coverage expands.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any


@dataclass
class ScriptedOperation:
    """Async zero-argument callable that replays a script of outcomes.

    Each call pops the next item: exceptions are raised, anything else is
    returned. An empty script returns ``default``.
    """

    script: list[Any] = field(default_factory=list)
    default: Any = "ok"
    delay_s: float = 0.0
    calls: int = 0

    def __call__(self) -> Any:
        self.calls += 1
        item = self.script.pop(0) if self.script else self.default
        return self._run(item)

    async def _run(self, item: Any) -> Any:
        if self.delay_s:
            await asyncio.sleep(self.delay_s)
        if isinstance(item, BaseException):
            raise item
        return item


@dataclass
class AlwaysFails:
    """Async callable that raises a numbered error on every call."""

    calls: int = 0

    def __call__(self) -> Any:
        self.calls += 1
        return self._fail(self.calls)

    async def _fail(self, n: int) -> Any:
        raise RuntimeError(f"failure {n}")


@dataclass
class SlowOperation:
    """Async callable that records whether it ran to completion or was cancelled."""

    delay_s: float = 1.0
    value: Any = "slow"
    calls: int = 0
    finished: int = 0
    cancelled: int = 0

    def __call__(self) -> Any:
        self.calls += 1
        return self._run()

    async def _run(self) -> Any:
        try:
            await asyncio.sleep(self.delay_s)
        except asyncio.CancelledError:
            self.cancelled += 1
            raise
        self.finished += 1
        return self.value
