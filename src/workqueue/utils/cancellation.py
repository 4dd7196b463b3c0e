"""
Module: cancellation.py
Description: Cooperative cancellation for long-running pulls.

A CancellationToken is threaded through every iteration of a pull cycle.
Cancelling it interrupts the in-flight long-poll and the backoff delay,
and the pull raises PullCancelledError.
"""

import asyncio
from typing import Awaitable, Optional, TypeVar

from workqueue.utils.errors import PullCancelledError

T = TypeVar('T')


class CancellationToken:
    """
    One-shot cancellation signal shared between a caller and a pull.

    Example:
        >>> token = CancellationToken()
        >>> task = asyncio.create_task(client.pull(cancel_token=token))
        >>> token.cancel("shutting down")
        >>> await task  # raises PullCancelledError
    """

    def __init__(self):
        self._event = asyncio.Event()
        self.reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: Optional[str] = None) -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise PullCancelledError(self.reason or "Pull was cancelled")

    async def sleep(self, seconds: float) -> None:
        """Sleep for seconds, returning early if the token fires."""
        try:
            await asyncio.wait_for(self._event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return

    async def guard(self, awaitable: Awaitable[T]) -> T:
        """
        Await awaitable unless the token fires first.

        Raises:
            PullCancelledError: If the token fires before awaitable completes;
                the awaitable's task is cancelled
        """
        self.raise_if_cancelled()
        work = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
            finished = work.done()
            if not finished:
                work.cancel()
        if finished:
            return work.result()
        raise PullCancelledError(self.reason or "Pull was cancelled")
