"""Concurrency limiter for outbound commerce calls.

A counting semaphore with an explicit FIFO queue of waiters:

- at most ``width`` callables run at once;
- excess callers wait in arrival order;
- a waiter is released only when a running task completes (its slot is
  handed over directly, so ``running`` never exceeds ``width``);
- a failing task releases its slot like any other and does not affect the
  other callers.

Usage:
    limiter = ConcurrencyLimiter(5)
    product = await limiter.run(connector.get_product, "abc")
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections import deque
from typing import Any, Awaitable, Callable, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


class ConcurrencyLimiter:
    def __init__(self, width: int) -> None:
        if width < 1:
            raise ValueError(f"Concurrency width must be >= 1, got {width}")
        self._width = width
        self._running = 0
        self._waiters: deque[asyncio.Future[None]] = deque()

    @property
    def width(self) -> int:
        return self._width

    @property
    def running(self) -> int:
        return self._running

    @property
    def pending(self) -> int:
        return len(self._waiters)

    async def run(self, fn: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """Run ``fn(*args, **kwargs)`` once a slot is free and return its result."""
        await self._acquire()
        try:
            return await fn(*args, **kwargs)
        finally:
            self._release()

    async def _acquire(self) -> None:
        # Newcomers never overtake queued waiters.
        if self._running < self._width and not self._waiters:
            self._running += 1
            return

        fut: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.append(fut)
        try:
            await fut
        except asyncio.CancelledError:
            if fut.done() and not fut.cancelled():
                # Slot was handed to us just before cancellation; pass it on.
                self._release()
            else:
                with contextlib.suppress(ValueError):
                    self._waiters.remove(fut)
            raise

    def _release(self) -> None:
        while self._waiters:
            fut = self._waiters.popleft()
            if not fut.done():
                # Hand the slot over; ``running`` stays the same.
                fut.set_result(None)
                return
        self._running -= 1


def create_limit(width: int) -> Callable[..., Awaitable[Any]]:
    """Return the bound ``run`` of a fresh limiter of the given width."""
    return ConcurrencyLimiter(width).run


__all__ = ["ConcurrencyLimiter", "create_limit"]
