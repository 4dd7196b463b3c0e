"""
Module: errors.py
Description: Error taxonomy and transport error mapping.

Every failure surfaced by the queue client is a QueueError. Local
validation failures raise InvalidPayloadError before any transport call;
failures returned by the queue service are normalized by
map_transport_error() into a TransportError carrying the same fields
regardless of which transport produced them.

Key Components:
- QueueError: Base error with kind/namespace/status metadata
- InvalidPayloadError, TransportError, PullCancelledError
- map_transport_error(): Normalize botocore and foreign exceptions
- mapped_errors(): Context manager that logs, maps and re-raises

Dependencies: botocore, typing, contextlib, logger
"""

from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionError as BotoConnectionError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ReadTimeoutError,
)

from workqueue.utils.logger import get_logger

logger = get_logger(__name__)

NAMESPACE = "QUEUE"
GENERIC_KIND = "SQS.ERROR"
GENERIC_MESSAGE = "An unexpected error occurred"

RETRYABLE_ERROR_CODES = {
    "Throttling",
    "ThrottlingException",
    "RequestThrottled",
    "ServiceUnavailable",
    "InternalError",
    "InternalFailure",
    "RequestTimeout",
    "KMS.ThrottlingException",
}


class QueueError(Exception):
    """
    Base class for every error raised by the queue client.

    Attributes:
        kind: Error code (transport code or a client-side kind)
        message: Human readable description
        namespace: Always "QUEUE"
        status_code: HTTP status reported by the transport, if any
        request_id: Transport request id, if any
        retryable: Whether the transport considers the failure transient
        retry_delay: Suggested delay before retrying, in seconds
    """

    default_kind = GENERIC_KIND

    def __init__(
        self,
        message: str,
        kind: Optional[str] = None,
        status_code: Optional[int] = None,
        request_id: Optional[str] = None,
        retryable: Optional[bool] = None,
        retry_delay: Optional[float] = None,
    ):
        super().__init__(message)
        self.kind = kind or self.default_kind
        self.message = message
        self.namespace = NAMESPACE
        self.status_code = status_code
        self.request_id = request_id
        self.retryable = retryable
        self.retry_delay = retry_delay

    def to_dict(self) -> Dict[str, Any]:
        """Return the populated error fields, omitting unset optionals."""
        data = {
            "kind": self.kind,
            "message": self.message,
            "namespace": self.namespace,
            "status_code": self.status_code,
            "request_id": self.request_id,
            "retryable": self.retryable,
            "retry_delay": self.retry_delay,
        }
        return {k: v for k, v in data.items() if v is not None}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind!r}, message={self.message!r})"


class InvalidPayloadError(QueueError):
    """Payload or batch rejected locally before reaching the transport."""

    default_kind = "SQS.INVALID"


class TransportError(QueueError):
    """Failure returned by the queue service."""


class PullCancelledError(QueueError):
    """A pull was aborted through its cancellation token."""

    default_kind = "QUEUE.CANCELLED"


def _from_client_error(e: ClientError) -> TransportError:
    error = e.response.get("Error", {})
    metadata = e.response.get("ResponseMetadata", {})
    code = error.get("Code") or GENERIC_KIND
    status_code = metadata.get("HTTPStatusCode")

    retry_delay = None
    retry_after = metadata.get("HTTPHeaders", {}).get("retry-after")
    if retry_after is not None:
        try:
            retry_delay = float(retry_after)
        except ValueError:
            retry_delay = None

    retryable = code in RETRYABLE_ERROR_CODES or (
        isinstance(status_code, int) and status_code >= 500
    )

    return TransportError(
        error.get("Message") or GENERIC_MESSAGE,
        kind=code,
        status_code=status_code,
        request_id=metadata.get("RequestId"),
        retryable=retryable,
        retry_delay=retry_delay,
    )


def map_transport_error(e: BaseException) -> TransportError:
    """
    Normalize a raw transport failure into a TransportError.

    Args:
        e: Exception raised by the transport

    Returns:
        TransportError with kind, message, namespace and whatever
        status/request/retry metadata the source exception exposes

    Example:
        >>> err = map_transport_error(ClientError(
        ...     {'Error': {'Code': 'AWS.SimpleQueueService.NonExistentQueue',
        ...                'Message': 'no queue'}}, 'ReceiveMessage'))
        >>> err.kind, err.namespace
        ('AWS.SimpleQueueService.NonExistentQueue', 'QUEUE')
    """
    if isinstance(e, TransportError):
        return e

    if isinstance(e, ClientError):
        return _from_client_error(e)

    if isinstance(e, BotoCoreError):
        transient = isinstance(e, (
            BotoConnectionError,
            EndpointConnectionError,
            ConnectTimeoutError,
            ReadTimeoutError,
        ))
        return TransportError(
            str(e) or GENERIC_MESSAGE,
            kind=GENERIC_KIND,
            retryable=transient,
        )

    # Foreign transports: read whatever error fields they expose.
    retryable = getattr(e, "retryable", None)
    return TransportError(
        str(e) or GENERIC_MESSAGE,
        kind=getattr(e, "code", None) or GENERIC_KIND,
        status_code=getattr(e, "status_code", None),
        request_id=getattr(e, "request_id", None),
        retryable=retryable if isinstance(retryable, bool) else None,
        retry_delay=getattr(e, "retry_delay", None),
    )


@contextmanager
def mapped_errors(operation: str, **context: Any) -> Iterator[None]:
    """
    Log and re-raise transport failures as TransportError.

    QueueError instances pass through untouched.

    Args:
        operation: Short operation name used in the log event
        **context: Extra log context (queue_url, message_id, ...)

    Raises:
        TransportError: Mapped from any non-QueueError exception
    """
    try:
        yield
    except QueueError:
        raise
    except Exception as e:
        err = map_transport_error(e)
        logger.error(
            f"Queue {operation} failed",
            error_code=err.kind,
            error_message=err.message,
            status_code=err.status_code,
            request_id=err.request_id,
            **context
        )
        raise err from e
