"""
Module: client.py
Description: QueueClient, the public surface over one queue.

A QueueClient owns immutable ClientOptions and a transport handle scoped
to its own lifetime. pull/push/bulk_push/purge are coroutines; each also
accepts callback=fn(error, result) for callback-style callers.
"""

import secrets
import string
from typing import Any, Dict, List, Optional, Sequence

from workqueue.models.entries import FailedEntry
from workqueue.models.options import ClientOptions
from workqueue.queue.puller import PullResult, Puller
from workqueue.queue.purger import Purger
from workqueue.queue.pusher import Pusher
from workqueue.transport.base import QueueTransport
from workqueue.utils.callbacks import supports_callback
from workqueue.utils.cancellation import CancellationToken
from workqueue.utils.logger import get_logger

logger = get_logger(__name__)

_ID_ALPHABET = string.ascii_letters + string.digits


def random_id(length: int) -> str:
    return ''.join(secrets.choice(_ID_ALPHABET) for _ in range(length))


class QueueClient:
    """
    Client for a single queue.

    Attributes:
        id: Short random identifier of this client instance
        options: Immutable client options
        transport: Queue transport shared with derived clients

    Example:
        >>> client = create_client(url="https://sqs.us-east-1.amazonaws.com/123/jobs")
        >>> await client.push({"job": 1}, attributes={"kind": "resize"})
        >>> message = await client.pull()
        >>> await message.destroy()
    """

    def __init__(self, options: ClientOptions, transport: QueueTransport, client_id: Optional[str] = None):
        if not isinstance(options, ClientOptions):
            raise ValueError("options must be a ClientOptions instance")

        self.id = client_id or random_id(5)
        self.options = options
        self.transport = transport
        self._puller = Puller(options, transport)
        self._pusher = Pusher(options, transport)
        self._purger = Purger(options, transport)

        logger.debug(
            "Queue client initialized",
            client_id=self.id,
            queue=options.logger,
            queue_url=options.url
        )

    @supports_callback
    async def pull(
        self,
        max_messages: Optional[int] = None,
        wait: Optional[int] = None,
        visibility: Optional[int] = None,
        url: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
        cancel_token: Optional[CancellationToken] = None
    ) -> PullResult:
        """
        Wait for the next message(s).

        Blocks until at least one valid message arrives. Returns a single
        QueueMessage when the effective max_messages is 1, else a list.

        Raises:
            TransportError: If a receive request fails
            PullCancelledError: If cancel_token fires
        """
        return await self._puller.pull(
            params,
            cancel_token=cancel_token,
            url=url,
            max_messages=max_messages,
            wait=wait,
            visibility=visibility
        )

    @supports_callback
    async def push(
        self,
        payload: Any,
        attributes: Optional[Dict[str, Any]] = None,
        delay: Optional[int] = None,
        url: Optional[str] = None
    ) -> Optional[str]:
        """Send one payload and return its message id."""
        return await self._pusher.push(payload, attributes=attributes, delay=delay, url=url)

    @supports_callback
    async def bulk_push(
        self,
        items: Sequence[Any],
        attributes: Optional[Dict[str, Any]] = None,
        delay: Optional[int] = None,
        url: Optional[str] = None
    ) -> List[FailedEntry]:
        """Send many payloads and return the rejected entries."""
        return await self._pusher.bulk_push(items, attributes=attributes, delay=delay, url=url)

    @supports_callback
    async def purge(self, url: Optional[str] = None) -> None:
        """Remove every message from the queue."""
        await self._purger.purge(url=url)

    def create(self, **overrides: Any) -> "QueueClient":
        """
        Derive a client with overridden options.

        The derived client reuses this client's transport unless aws
        credentials are overridden. This client is left unchanged.
        """
        from workqueue.queue.factory import derive_client

        return derive_client(self, **overrides)

    async def drain(self) -> None:
        """Wait for background cleanup of invalid messages to finish."""
        await self._puller.drain()

    def __repr__(self) -> str:
        return f"QueueClient(id={self.id!r}, url={self.options.url!r})"
