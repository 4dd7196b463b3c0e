"""
Module: conftest.py
Description: Shared pytest fixtures for queue client tests.

Provides client options, an AsyncMock-backed fake transport, raw
receive entries and ready-made clients. No test talks to AWS.
"""

import json
from unittest.mock import AsyncMock

import pytest

from workqueue.config.settings import QueueSettings
from workqueue.models.options import ClientOptions
from workqueue.queue.client import QueueClient
from workqueue.queue.puller import Puller

QUEUE_URL = "https://sqs.us-east-1.amazonaws.com/123456789012/test-queue"


class TestSettings(QueueSettings):
    """Settings that ignore .env files for predictable tests."""

    model_config = {**QueueSettings.model_config, "env_file": None}


@pytest.fixture
def queue_url():
    """Provide the test queue url."""
    return QUEUE_URL


@pytest.fixture
def settings_cls():
    """Provide the settings class used by tests."""
    return TestSettings


@pytest.fixture
def test_settings():
    """Provide settings with a queue url and test credentials."""
    return TestSettings(
        url=QUEUE_URL,
        wait=0,
        aws_access_key="test-key",
        aws_access_secret="test-secret",
        aws_region="us-east-1",
    )


@pytest.fixture
def client_options():
    """Provide options pointing at the test queue with a zero wait."""
    return ClientOptions(url=QUEUE_URL, wait=0, visibility=30)


@pytest.fixture
def fake_transport():
    """
    Provide a transport whose coroutines are AsyncMocks.

    receive returns no messages by default; tests set side_effect or
    return_value for the scenario they exercise.
    """
    transport = AsyncMock()
    transport.receive.return_value = []
    transport.send.return_value = "msg-0001"
    transport.send_batch.return_value = []
    transport.delete.return_value = None
    transport.purge.return_value = None
    return transport


@pytest.fixture
def fake_sleep():
    """Provide a backoff coroutine that records delays without sleeping."""
    return AsyncMock()


@pytest.fixture
def raw_entry():
    """Build raw receive entries in the SQS wire shape."""
    def build(message_id="msg-1", receipt="rcpt-1", body=None, attributes=None, timestamp="1700000000000"):
        entry = {}
        if message_id is not None:
            entry["MessageId"] = message_id
        if receipt is not None:
            entry["ReceiptHandle"] = receipt
        entry["Body"] = json.dumps({"job": message_id}) if body is None else body
        message_attributes = dict(attributes or {})
        if timestamp is not None:
            message_attributes["_Timestamp"] = {"DataType": "String", "StringValue": timestamp}
        if message_attributes:
            entry["MessageAttributes"] = message_attributes
        return entry

    return build


@pytest.fixture
def puller(client_options, fake_transport, fake_sleep):
    """Provide a Puller wired to the fake transport and fake sleep."""
    return Puller(client_options, fake_transport, sleep=fake_sleep)


@pytest.fixture
def client(client_options, fake_transport, fake_sleep):
    """Provide a QueueClient on the fake transport with instant backoff."""
    queue_client = QueueClient(client_options, fake_transport)
    queue_client._puller.sleep = fake_sleep
    return queue_client
