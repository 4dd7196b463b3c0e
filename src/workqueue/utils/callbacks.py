"""
Module: callbacks.py
Description: Callback-style adapter over coroutine operations.

Client operations are written once as coroutines. Decorating them with
supports_callback lets callers pass callback=fn(error, result) instead of
awaiting: the coroutine is scheduled as a task and fn is invoked when it
completes.
"""

import asyncio
import functools
from typing import Any, Callable, Optional

from workqueue.utils.logger import get_logger

logger = get_logger(__name__)

Callback = Callable[[Optional[BaseException], Any], None]


def _deliver(callback: Callback, task: asyncio.Task) -> None:
    if task.cancelled():
        callback(asyncio.CancelledError(), None)
        return
    error = task.exception()
    try:
        if error is not None:
            callback(error, None)
        else:
            callback(None, task.result())
    except Exception as e:
        logger.error(
            "Operation callback raised",
            callback=getattr(callback, "__qualname__", repr(callback)),
            error=str(e),
            error_type=type(e).__name__
        )


def supports_callback(fn):
    """
    Allow an async method to be called with a trailing callback keyword.

    Without callback the decorated method returns its coroutine, so
    ``await client.push(x)`` works as usual. With callback the coroutine
    is scheduled on the running loop and the resulting task is returned.

    Example:
        >>> client.push({"a": 1}, callback=lambda err, msg_id: print(err, msg_id))
    """
    @functools.wraps(fn)
    def wrapper(*args, callback: Optional[Callback] = None, **kwargs):
        coro = fn(*args, **kwargs)
        if callback is None:
            return coro
        if not callable(callback):
            coro.close()
            raise ValueError("callback must be callable")
        task = asyncio.ensure_future(coro)
        task.add_done_callback(functools.partial(_deliver, callback))
        return task

    return wrapper
