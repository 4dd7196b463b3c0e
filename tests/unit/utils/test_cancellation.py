"""
Module: test_cancellation.py
Description: Unit tests for CancellationToken.
"""

import asyncio

import pytest

from workqueue.utils.cancellation import CancellationToken
from workqueue.utils.errors import PullCancelledError


class TestCancellationToken:
    """Test cases for CancellationToken."""

    def test_cancel_is_one_shot(self):
        """Test the first reason is kept."""
        token = CancellationToken()
        assert token.cancelled is False

        token.cancel("first")
        token.cancel("second")

        assert token.cancelled is True
        assert token.reason == "first"

    def test_raise_if_cancelled(self):
        """Test raise_if_cancelled only raises after cancel."""
        token = CancellationToken()
        token.raise_if_cancelled()

        token.cancel("stop")
        with pytest.raises(PullCancelledError, match="stop"):
            token.raise_if_cancelled()

    @pytest.mark.asyncio
    async def test_sleep_returns_early_on_cancel(self):
        """Test sleep wakes up as soon as the token fires."""
        token = CancellationToken()
        loop = asyncio.get_running_loop()
        loop.call_later(0.01, token.cancel)

        started = loop.time()
        await token.sleep(5)

        assert loop.time() - started < 1

    @pytest.mark.asyncio
    async def test_sleep_times_out(self):
        """Test sleep returns after the delay when not cancelled."""
        token = CancellationToken()
        await token.sleep(0.01)
        assert token.cancelled is False

    @pytest.mark.asyncio
    async def test_guard_returns_result(self):
        """Test guard passes through the awaited result."""
        token = CancellationToken()

        async def work():
            return 42

        assert await token.guard(work()) == 42

    @pytest.mark.asyncio
    async def test_guard_cancels_inflight_work(self):
        """Test guard aborts a pending awaitable when the token fires."""
        token = CancellationToken()
        started = asyncio.Event()
        finished = []

        async def long_poll():
            started.set()
            await asyncio.sleep(10)
            finished.append(True)

        async def cancel_later():
            await started.wait()
            token.cancel("shutdown")

        canceller = asyncio.ensure_future(cancel_later())
        with pytest.raises(PullCancelledError, match="shutdown"):
            await token.guard(long_poll())
        await canceller

        assert finished == []

    @pytest.mark.asyncio
    async def test_guard_already_cancelled(self):
        """Test guard refuses to start work once cancelled."""
        token = CancellationToken()
        token.cancel()

        async def work():
            return 1

        coro = work()
        with pytest.raises(PullCancelledError):
            await token.guard(coro)
        coro.close()
