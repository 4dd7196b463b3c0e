"""
Module: pusher.py
Description: Serialize payloads and send them to the queue.

push() sends one message; bulk_push() sends many through the batch
endpoint, at most BATCH_SIZE entries per request. Larger inputs are split
into consecutive chunks sent one after another, and the rejected entries
of every chunk are concatenated in chunk order.

Every message carries a reserved _Timestamp attribute with the producer
send time in epoch milliseconds.

Dependencies: json, time, errors, batch_helpers, logger
"""

import json
import time
from typing import Any, Dict, List, Optional, Sequence

from workqueue.models.entries import FailedEntry
from workqueue.models.message import TIMESTAMP_ATTRIBUTE
from workqueue.models.options import ClientOptions
from workqueue.transport.base import QueueTransport
from workqueue.utils.batch_helpers import batch_entry_id, chunk_list, merge_params
from workqueue.utils.errors import InvalidPayloadError, mapped_errors
from workqueue.utils.logger import get_logger

logger = get_logger(__name__)

# One below the SQS limit of 10 entries per batch.
BATCH_SIZE = 9


def _now_ms() -> int:
    return int(time.time() * 1000)


def is_serializable(payload: Any) -> bool:
    try:
        serialize_payload(payload)
    except InvalidPayloadError:
        return False
    return True


def serialize_payload(payload: Any) -> str:
    """
    Serialize a payload to a JSON string.

    Raises:
        InvalidPayloadError: If payload is None or not JSON serializable
    """
    if payload is None:
        raise InvalidPayloadError("Payload is not valid")
    try:
        return json.dumps(payload)
    except (TypeError, ValueError) as e:
        raise InvalidPayloadError("Payload cannot be converted to string") from e


def build_attributes(attributes: Optional[Dict[str, Any]] = None) -> Dict[str, Dict[str, Any]]:
    """
    Build transport message attributes, starting with _Timestamp.

    str values become String, int/float become Number and bytes become
    Binary. Values of any other type (including bool) are dropped.
    """
    result = {
        TIMESTAMP_ATTRIBUTE: {
            'DataType': 'String',
            'StringValue': str(_now_ms())
        }
    }
    for key, value in (attributes or {}).items():
        if key == TIMESTAMP_ATTRIBUTE:
            continue
        if isinstance(value, str):
            item = {'DataType': 'String', 'StringValue': value}
        elif isinstance(value, (int, float)) and not isinstance(value, bool):
            item = {'DataType': 'Number', 'StringValue': str(value)}
        elif isinstance(value, (bytes, bytearray)):
            item = {'DataType': 'Binary', 'BinaryValue': bytes(value)}
        else:
            logger.debug("Dropped unsupported message attribute", attribute=key, type=type(value).__name__)
            continue
        result[key] = item
    return result


class Pusher:
    """
    Sends messages for a QueueClient.

    Attributes:
        options: Client options supplying url and delay defaults
        transport: Queue transport
    """

    def __init__(self, options: ClientOptions, transport: QueueTransport):
        self.options = options
        self.transport = transport
        self.logger = logger.bind(queue=options.logger)

    def _target(self, url: Optional[str], delay: Optional[int]) -> Dict[str, Any]:
        target = merge_params({"url": self.options.url, "delay": self.options.delay}, {"url": url, "delay": delay})
        if not target.get("url") or not isinstance(target["url"], str):
            raise ValueError("queue url must be a non-empty string")
        return target

    async def push(
        self,
        payload: Any,
        attributes: Optional[Dict[str, Any]] = None,
        delay: Optional[int] = None,
        url: Optional[str] = None
    ) -> Optional[str]:
        """
        Send a single message.

        Args:
            payload: Any JSON serializable value except None
            attributes: Optional key-value message attributes
            delay: Delay seconds, overriding the client default
            url: Queue URL, overriding the client default

        Returns:
            Transport-assigned message id

        Raises:
            InvalidPayloadError: If payload is None or not serializable
            TransportError: If the send fails
        """
        body = serialize_payload(payload)
        target = self._target(url, delay)

        with mapped_errors("send", queue_url=target["url"]):
            message_id = await self.transport.send(
                target["url"],
                body,
                target["delay"],
                build_attributes(attributes)
            )

        self.logger.debug("Message pushed", message_id=message_id, queue_url=target["url"])
        return message_id

    async def bulk_push(
        self,
        items: Sequence[Any],
        attributes: Optional[Dict[str, Any]] = None,
        delay: Optional[int] = None,
        url: Optional[str] = None
    ) -> List[FailedEntry]:
        """
        Send many payloads through the batch endpoint.

        Inputs larger than BATCH_SIZE are split into chunks sent serially.
        Payloads that fail to serialize are skipped, not reported.

        Args:
            items: List or tuple of JSON serializable payloads
            attributes: Optional attributes applied to every entry
            delay: Delay seconds, overriding the client default
            url: Queue URL, overriding the client default

        Returns:
            Entries the transport rejected, in chunk order

        Raises:
            InvalidPayloadError: If items is empty, not a list/tuple, or
                no item could be serialized
            TransportError: If a batch request fails; chunks sent before
                the failure are not rolled back
        """
        if not isinstance(items, (list, tuple)) or len(items) == 0:
            raise InvalidPayloadError("Push items are not present")
        target = self._target(url, delay)

        if len(items) <= BATCH_SIZE:
            return await self._send_chunk(items, attributes, target, split=False)

        if not any(is_serializable(item) for item in items):
            raise InvalidPayloadError("Push items are empty")

        chunks = chunk_list(items, BATCH_SIZE)
        failed: List[FailedEntry] = []
        for chunk in chunks:
            failed.extend(await self._send_chunk(chunk, attributes, target, split=True))

        self.logger.info(
            "Bulk push completed",
            queue_url=target["url"],
            items=len(items),
            chunks=len(chunks),
            failed=len(failed)
        )
        return failed

    async def _send_chunk(
        self,
        items: Sequence[Any],
        attributes: Optional[Dict[str, Any]],
        target: Dict[str, Any],
        split: bool
    ) -> List[FailedEntry]:
        """Send one batch request; split chunks never raise for empty input."""
        if len(items) == 0:
            if split:
                return []
            raise InvalidPayloadError("Push items are not present")

        bodies = []
        for item in items:
            try:
                bodies.append(serialize_payload(item))
            except InvalidPayloadError:
                continue

        if not bodies:
            if split:
                self.logger.warning("Skipped batch chunk with no serializable items", queue_url=target["url"])
                return []
            raise InvalidPayloadError("Push items are empty")

        call_ms = _now_ms()
        entries = [
            {
                'Id': batch_entry_id(call_ms, index),
                'MessageBody': body,
                'DelaySeconds': target["delay"],
                'MessageAttributes': build_attributes(attributes),
            }
            for index, body in enumerate(bodies)
        ]

        with mapped_errors("send_batch", queue_url=target["url"], entries=len(entries)):
            failed = await self.transport.send_batch(target["url"], entries)

        return [FailedEntry.from_transport(item) for item in failed or []]
