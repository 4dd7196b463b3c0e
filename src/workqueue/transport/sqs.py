"""
Module: sqs.py
Description: SQS transport for queue operations.

Implements the QueueTransport protocol on aioboto3. Each operation opens
a short-lived SQS client from the session owned by this transport; the
session itself lives as long as the QueueClient that created it.

Errors are logged with their code and message and re-raised unchanged;
the queue components map them into TransportError.
"""

from typing import Any, Dict, List, Optional, Sequence

from aioboto3 import Session
from botocore.config import Config
from botocore.exceptions import ClientError

from workqueue.models.options import AwsCredentials
from workqueue.transport.base import MessageAttributes, RawEntry
from workqueue.utils.logger import get_logger

logger = get_logger(__name__)

# Long polls hold the connection for up to 20 seconds.
READ_TIMEOUT_SECONDS = 30


class SQSTransport:
    """
    SQS client for queue operations.

    Attributes:
        credentials: AWS credentials the session was built from
        session: aioboto3 session scoped to this transport

    Example:
        >>> transport = SQSTransport(AwsCredentials(region="us-east-1"))
        >>> entries = await transport.receive(url, 1, 30, 20)
    """

    def __init__(self, credentials: Optional[AwsCredentials] = None, endpoint_url: Optional[str] = None):
        """
        Initialize SQS transport.

        Args:
            credentials: AWS key/secret/region; None falls back to the
                default boto credential chain
            endpoint_url: Optional endpoint override (local SQS emulators)
        """
        self.credentials = credentials or AwsCredentials()
        self.endpoint_url = endpoint_url
        self.session = Session(
            aws_access_key_id=self.credentials.key,
            aws_secret_access_key=self.credentials.secret,
            region_name=self.credentials.region,
        )
        self.config = Config(
            signature_version=self.credentials.signature_version,
            read_timeout=READ_TIMEOUT_SECONDS,
        )

        logger.info(
            "SQS transport initialized",
            region=self.credentials.region,
            endpoint_url=endpoint_url
        )

    def _client(self):
        return self.session.client('sqs', config=self.config, endpoint_url=self.endpoint_url)

    async def receive(
        self,
        url: str,
        max_messages: int,
        visibility: int,
        wait: int,
        attribute_names: Sequence[str] = ("All",),
        **extra: Any
    ) -> List[RawEntry]:
        """
        Long-poll the queue.

        Args:
            url: Queue URL
            max_messages: Max entries to return (1-10)
            visibility: Visibility timeout for received entries
            wait: Long-poll seconds
            attribute_names: Message attribute names to return
            **extra: Additional ReceiveMessage parameters

        Returns:
            Raw message entries; empty when the poll timed out

        Raises:
            ClientError: If SQS operation fails
        """
        request = {
            'QueueUrl': url,
            'MaxNumberOfMessages': max_messages,
            'VisibilityTimeout': visibility,
            'WaitTimeSeconds': wait,
            'MessageAttributeNames': list(attribute_names),
        }
        request.update(extra)

        try:
            async with self._client() as sqs:
                response = await sqs.receive_message(**request)
        except ClientError as e:
            self._log_client_error("receive", url, e)
            raise

        messages = response.get('Messages') if isinstance(response, dict) else None
        return messages if isinstance(messages, list) else []

    async def send(
        self,
        url: str,
        body: str,
        delay: int,
        attributes: MessageAttributes
    ) -> Optional[str]:
        """
        Send one message.

        Returns:
            Message ID from SQS

        Raises:
            ClientError: If SQS operation fails
        """
        try:
            async with self._client() as sqs:
                response = await sqs.send_message(
                    QueueUrl=url,
                    MessageBody=body,
                    DelaySeconds=delay,
                    MessageAttributes=attributes
                )
        except ClientError as e:
            self._log_client_error("send", url, e)
            raise

        message_id = response.get('MessageId')
        logger.debug("Message sent to SQS", message_id=message_id, queue_url=url)
        return message_id

    async def send_batch(self, url: str, entries: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Send up to 10 entries in one request.

        Returns:
            The Failed items of the response

        Raises:
            ClientError: If SQS operation fails
        """
        try:
            async with self._client() as sqs:
                response = await sqs.send_message_batch(QueueUrl=url, Entries=entries)
        except ClientError as e:
            self._log_client_error("send_batch", url, e)
            raise

        failed = response.get('Failed') or []
        logger.debug(
            "Message batch sent to SQS",
            queue_url=url,
            entries=len(entries),
            failed=len(failed)
        )
        return failed

    async def delete(self, url: str, receipt: str) -> None:
        """
        Delete a message by receipt handle.

        Raises:
            ClientError: If SQS operation fails
        """
        try:
            async with self._client() as sqs:
                await sqs.delete_message(QueueUrl=url, ReceiptHandle=receipt)
        except ClientError as e:
            self._log_client_error("delete", url, e)
            raise

    async def purge(self, url: str) -> None:
        """
        Purge every message in the queue.

        Raises:
            ClientError: If SQS operation fails
        """
        try:
            async with self._client() as sqs:
                await sqs.purge_queue(QueueUrl=url)
        except ClientError as e:
            self._log_client_error("purge", url, e)
            raise

        logger.info("SQS queue purged", queue_url=url)

    @staticmethod
    def _log_client_error(operation: str, url: str, e: ClientError) -> None:
        logger.debug(
            "SQS request failed",
            operation=operation,
            queue_url=url,
            error_code=e.response.get('Error', {}).get('Code'),
            error_message=e.response.get('Error', {}).get('Message')
        )
