"""
Module: purger.py
Description: Empty the queue.

Purging removes every pending message and is never retried.
"""

from typing import Optional

from workqueue.models.options import ClientOptions
from workqueue.transport.base import QueueTransport
from workqueue.utils.errors import mapped_errors
from workqueue.utils.logger import get_logger

logger = get_logger(__name__)


class Purger:
    """Purges the queue of a QueueClient."""

    def __init__(self, options: ClientOptions, transport: QueueTransport):
        self.options = options
        self.transport = transport
        self.logger = logger.bind(queue=options.logger)

    async def purge(self, url: Optional[str] = None) -> None:
        """
        Remove every message from the queue with a single request.

        Raises:
            ValueError: If no queue url is configured or given
            TransportError: If the purge request fails
        """
        target = url or self.options.url
        if not target or not isinstance(target, str):
            raise ValueError("queue url must be a non-empty string")

        with mapped_errors("purge", queue_url=target):
            await self.transport.purge(target)

        self.logger.warning("Queue purged", queue_url=target)
