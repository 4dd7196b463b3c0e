"""
Module: message.py
Description: A single message received from the queue.

QueueMessage objects are created only by the Puller, one per raw entry
returned from a receive call. Identity fields are read-only; the only
state change is destroy(), which deletes the message from the queue
and clears its receipt and payload.

Raw entry fields consumed:
- MessageId: transport message id
- ReceiptHandle: deletion token
- Body: string body, JSON-decoded when possible
- MessageAttributes: {name: {DataType, StringValue | BinaryValue}}

Dependencies: json, typing, errors, logger
"""

import json
import re
from typing import Any, Dict, Optional

from workqueue.transport.base import QueueTransport
from workqueue.utils.callbacks import supports_callback
from workqueue.utils.errors import mapped_errors
from workqueue.utils.logger import get_logger

logger = get_logger(__name__)

TIMESTAMP_ATTRIBUTE = "_Timestamp"

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _parse_timestamp(value: Any) -> Optional[int]:
    """Leading integer of value, so "1700000000000.0" reads as 1700000000000."""
    if not isinstance(value, str):
        return None
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


def _decode_body(body: Any) -> Any:
    if not isinstance(body, str) or not body:
        return None
    try:
        return json.loads(body)
    except ValueError:
        return body


def _attribute_value(item: Dict[str, Any]) -> Any:
    data_type = item.get("DataType") or "String"
    if data_type.startswith("Binary"):
        return item.get("BinaryValue")
    return item.get("StringValue")


class QueueMessage:
    """
    A message received from the queue.

    Attributes:
        id: Transport message id (None if the entry had none)
        receipt: Receipt handle used for deletion; None once destroyed
        payload: Decoded body; None once destroyed or if the body was empty
        timestamp: Producer send time in epoch ms, from _Timestamp
        attributes: Application attributes, excluding _Timestamp
        destroyed: Whether destroy() completed

    Example:
        >>> message = await client.pull()
        >>> handle(message.payload)
        >>> await message.destroy()
    """

    def __init__(self, data: Dict[str, Any], queue_url: Optional[str], transport: QueueTransport):
        self._transport = transport
        self._queue_url = queue_url
        self._id: Optional[str] = None
        self._receipt: Optional[str] = None
        self._payload: Any = None
        self._timestamp: Optional[int] = None
        self._attributes: Dict[str, Any] = {}
        self._destroyed = False

        if not isinstance(data, dict):
            return

        if isinstance(data.get("MessageId"), str):
            self._id = data["MessageId"]
        if isinstance(data.get("ReceiptHandle"), str):
            self._receipt = data["ReceiptHandle"]

        attributes = data.get("MessageAttributes")
        if isinstance(attributes, dict):
            for name, item in attributes.items():
                if not isinstance(item, dict):
                    continue
                if name == TIMESTAMP_ATTRIBUTE:
                    self._timestamp = _parse_timestamp(item.get("StringValue"))
                    continue
                value = _attribute_value(item)
                if value is None or value == "" or value == b"":
                    continue
                self._attributes[name] = value

        self._payload = _decode_body(data.get("Body"))

    @property
    def id(self) -> Optional[str]:
        return self._id

    @property
    def receipt(self) -> Optional[str]:
        return self._receipt

    @property
    def payload(self) -> Any:
        return self._payload

    @property
    def timestamp(self) -> Optional[int]:
        return self._timestamp

    @property
    def attributes(self) -> Dict[str, Any]:
        return dict(self._attributes)

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    @property
    def queue_url(self) -> Optional[str]:
        """Queue the message was received from."""
        return self._queue_url

    @property
    def valid(self) -> bool:
        """True when the message has an id, a receipt and a payload."""
        return bool(self._id) and bool(self._receipt) and self._payload is not None

    @supports_callback
    async def destroy(self) -> None:
        """
        Delete the message from the queue it was received from.

        Idempotent: once destroyed, further calls return without contacting
        the transport. On failure the message stays undestroyed so the
        caller may retry.

        Raises:
            TransportError: If the delete request fails
        """
        if self._destroyed:
            return

        with mapped_errors("delete", queue_url=self._queue_url, message_id=self._id):
            await self._transport.delete(self._queue_url, self._receipt)

        self._destroyed = True
        self._receipt = None
        self._payload = None

        logger.debug(
            "Message destroyed",
            message_id=self._id,
            queue_url=self._queue_url
        )

    def __repr__(self) -> str:
        state = "destroyed" if self._destroyed else ("valid" if self.valid else "invalid")
        return f"QueueMessage(id={self._id!r}, {state})"
