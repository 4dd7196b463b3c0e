"""
Module: base.py
Description: Transport protocol the queue client talks to.

Any object implementing these coroutines can back a QueueClient. Raw
entries and batch failures use the SQS wire shapes.
"""

from typing import Any, Dict, List, Optional, Protocol, Sequence

RawEntry = Dict[str, Any]
MessageAttributes = Dict[str, Dict[str, Any]]


class QueueTransport(Protocol):
    """Remote queue operations."""

    async def receive(
        self,
        url: str,
        max_messages: int,
        visibility: int,
        wait: int,
        attribute_names: Sequence[str] = ("All",),
        **extra: Any
    ) -> List[RawEntry]:
        """Long-poll for up to max_messages raw entries."""
        ...

    async def send(
        self,
        url: str,
        body: str,
        delay: int,
        attributes: MessageAttributes
    ) -> Optional[str]:
        """Send one message and return its id."""
        ...

    async def send_batch(self, url: str, entries: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Send a batch and return the entries the service rejected."""
        ...

    async def delete(self, url: str, receipt: str) -> None:
        """Delete a message by receipt handle."""
        ...

    async def purge(self, url: str) -> None:
        """Remove every message from the queue."""
        ...
