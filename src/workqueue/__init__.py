"""
Package: workqueue
Description: Asyncio client over an at-least-once SQS queue.

Exposes a blocking pull interface with long polling and invalid-message
cleanup, single and batched pushes, and purge.

Logging is left to the host application; call configure_logging() to
use the JSON structlog setup shipped here.

Example:
    >>> from workqueue import configure_logging, create_client
    >>> configure_logging("INFO")
    >>> client = create_client(url="https://sqs.us-east-1.amazonaws.com/123/jobs")
    >>> await client.push({"job": 1})
    >>> message = await client.pull()
    >>> await message.destroy()
"""

from workqueue.config.settings import QueueSettings
from workqueue.models.entries import FailedEntry
from workqueue.models.message import QueueMessage
from workqueue.models.options import AwsCredentials, ClientOptions
from workqueue.queue.client import QueueClient
from workqueue.queue.factory import create_client
from workqueue.utils.cancellation import CancellationToken
from workqueue.utils.errors import (
    InvalidPayloadError,
    PullCancelledError,
    QueueError,
    TransportError,
)
from workqueue.utils.logger import configure_logging

__all__ = [
    "AwsCredentials",
    "CancellationToken",
    "ClientOptions",
    "FailedEntry",
    "InvalidPayloadError",
    "PullCancelledError",
    "QueueClient",
    "QueueError",
    "QueueMessage",
    "QueueSettings",
    "TransportError",
    "configure_logging",
    "create_client",
]
