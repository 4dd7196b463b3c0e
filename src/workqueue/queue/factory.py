"""
Module: factory.py
Description: Build configured QueueClient instances.

create_client() assembles options from settings, explicit options and
keyword overrides, warns about missing credentials and builds the SQS
transport. derive_client() backs QueueClient.create().
"""

from typing import Any, Optional

from workqueue.config.settings import QueueSettings
from workqueue.models.options import ClientOptions
from workqueue.queue.client import QueueClient, random_id
from workqueue.transport.base import QueueTransport
from workqueue.transport.sqs import SQSTransport
from workqueue.utils.logger import get_logger

logger = get_logger(__name__)


def _warn_missing_credentials(options: ClientOptions) -> None:
    if not options.aws.key:
        logger.warning("No AWS Access key found", queue=options.logger)
    if not options.aws.secret:
        logger.warning("No AWS Secret Key found", queue=options.logger)


def create_client(
    options: Optional[ClientOptions] = None,
    *,
    settings: Optional[QueueSettings] = None,
    transport: Optional[QueueTransport] = None,
    **overrides: Any
) -> QueueClient:
    """
    Build a QueueClient.

    Args:
        options: Base options; defaults to settings.to_options()
        settings: Settings to read defaults from; defaults to QueueSettings()
        transport: Prebuilt transport; defaults to an SQSTransport built
            from the resolved credentials
        **overrides: Option overrides (url, messages, wait, visibility, ...)

    Returns:
        Configured QueueClient

    Raises:
        pydantic.ValidationError: If an option is out of range

    Example:
        >>> client = create_client(url="https://sqs.eu-west-1.amazonaws.com/1/jobs", messages=5)
    """
    if options is None:
        options = (settings or QueueSettings()).to_options()
    if overrides:
        options = options.derive(**overrides)

    if transport is None:
        _warn_missing_credentials(options)
        transport = SQSTransport(options.aws)

    return QueueClient(options, transport)


def derive_client(parent: QueueClient, **overrides: Any) -> QueueClient:
    """
    Build a client from parent's options with overrides applied.

    The transport is shared unless overrides change aws credentials.
    """
    options = parent.options.derive(**overrides)
    transport = parent.transport
    if options.aws != parent.options.aws:
        _warn_missing_credentials(options)
        transport = SQSTransport(options.aws)

    client = QueueClient(options, transport, client_id=random_id(4))
    logger.debug(
        "Derived queue client",
        parent_id=parent.id,
        client_id=client.id,
        queue_url=options.url
    )
    return client
