"""
Module: test_message.py
Description: Unit tests for QueueMessage parsing, validity and destroy.

Covers envelope parsing from raw receive entries, the validity rule,
attribute decoding and the idempotent destroy lifecycle.
"""

import pytest
from botocore.exceptions import ClientError

from workqueue.models.message import QueueMessage
from workqueue.utils.errors import TransportError

URL = "https://sqs.us-east-1.amazonaws.com/123456789012/origin-queue"


class TestQueueMessageParsing:
    """Test cases for building a QueueMessage from a raw entry."""

    def test_valid_message(self, raw_entry, fake_transport):
        """Test a complete entry yields a valid message."""
        message = QueueMessage(raw_entry(body='{"order": 7}'), URL, fake_transport)

        assert message.id == "msg-1"
        assert message.receipt == "rcpt-1"
        assert message.payload == {"order": 7}
        assert message.timestamp == 1700000000000
        assert message.attributes == {}
        assert message.destroyed is False
        assert message.valid is True
        assert message.queue_url == URL

    def test_non_json_body_kept_raw(self, raw_entry, fake_transport):
        """Test bodies that are not JSON become the payload as-is."""
        message = QueueMessage(raw_entry(body="plain text"), URL, fake_transport)

        assert message.payload == "plain text"
        assert message.valid is True

    @pytest.mark.parametrize("overrides", [
        {"message_id": None},
        {"receipt": None},
        {"body": ""},
        {"message_id": ""},
        {"body": "null"},
    ])
    def test_invalid_envelopes(self, raw_entry, fake_transport, overrides):
        """Test missing id, receipt or payload make the message invalid."""
        message = QueueMessage(raw_entry(**overrides), URL, fake_transport)
        assert message.valid is False

    def test_non_dict_entry(self, fake_transport):
        """Test garbage entries produce an empty invalid message."""
        message = QueueMessage("garbage", URL, fake_transport)

        assert message.id is None
        assert message.receipt is None
        assert message.payload is None
        assert message.valid is False

    def test_attributes(self, raw_entry, fake_transport):
        """Test String, Number and Binary attributes are decoded."""
        message = QueueMessage(raw_entry(attributes={
            "kind": {"DataType": "String", "StringValue": "resize"},
            "priority": {"DataType": "Number", "StringValue": "3"},
            "blob": {"DataType": "Binary", "BinaryValue": b"\x00\x01"},
            "empty": {"DataType": "String", "StringValue": ""},
        }), URL, fake_transport)

        assert message.attributes == {
            "kind": "resize",
            "priority": "3",
            "blob": b"\x00\x01",
        }
        assert "_Timestamp" not in message.attributes

    def test_missing_or_bad_timestamp(self, raw_entry, fake_transport):
        """Test timestamp is None when absent or unparseable."""
        assert QueueMessage(raw_entry(timestamp=None), URL, fake_transport).timestamp is None
        assert QueueMessage(raw_entry(timestamp="soon"), URL, fake_transport).timestamp is None

    @pytest.mark.parametrize("value,expected", [
        ("1700000000000.0", 1700000000000),
        ("1700000000000ms", 1700000000000),
        (" 42", 42),
    ])
    def test_timestamp_leading_digits(self, raw_entry, fake_transport, value, expected):
        """Test timestamps with trailing text keep their leading integer."""
        assert QueueMessage(raw_entry(timestamp=value), URL, fake_transport).timestamp == expected

    def test_fields_are_read_only(self, raw_entry, fake_transport):
        """Test identity fields cannot be reassigned."""
        message = QueueMessage(raw_entry(), URL, fake_transport)

        with pytest.raises(AttributeError):
            message.id = "other"
        with pytest.raises(AttributeError):
            message.receipt = "other"

    def test_attributes_copy(self, raw_entry, fake_transport):
        """Test mutating the returned attributes does not affect the message."""
        message = QueueMessage(raw_entry(attributes={
            "kind": {"DataType": "String", "StringValue": "a"},
        }), URL, fake_transport)

        message.attributes["kind"] = "b"
        assert message.attributes["kind"] == "a"


class TestQueueMessageDestroy:
    """Test cases for QueueMessage.destroy."""

    @pytest.mark.asyncio
    async def test_destroy_uses_receive_target_and_receipt(self, raw_entry, fake_transport):
        """Test delete targets the queue the message came from."""
        message = QueueMessage(raw_entry(), URL, fake_transport)

        await message.destroy()

        fake_transport.delete.assert_awaited_once_with(URL, "rcpt-1")
        assert message.destroyed is True
        assert message.receipt is None
        assert message.payload is None
        assert message.id == "msg-1"

    @pytest.mark.asyncio
    async def test_destroy_twice_deletes_once(self, raw_entry, fake_transport):
        """Test a second destroy resolves without a transport call."""
        message = QueueMessage(raw_entry(), URL, fake_transport)

        await message.destroy()
        await message.destroy()

        assert fake_transport.delete.await_count == 1

    @pytest.mark.asyncio
    async def test_destroy_failure_keeps_message(self, raw_entry, fake_transport):
        """Test a failed delete raises mapped and leaves the message intact."""
        fake_transport.delete.side_effect = ClientError(
            error_response={'Error': {'Code': 'ReceiptHandleIsInvalid', 'Message': 'bad receipt'}},
            operation_name='DeleteMessage'
        )
        message = QueueMessage(raw_entry(), URL, fake_transport)

        with pytest.raises(TransportError) as exc_info:
            await message.destroy()

        assert exc_info.value.kind == "ReceiptHandleIsInvalid"
        assert exc_info.value.namespace == "QUEUE"
        assert message.destroyed is False
        assert message.receipt == "rcpt-1"

        fake_transport.delete.side_effect = None
        await message.destroy()
        assert message.destroyed is True
        assert fake_transport.delete.await_count == 2

    @pytest.mark.asyncio
    async def test_destroy_with_callback(self, raw_entry, fake_transport):
        """Test destroy supports callback-style completion."""
        message = QueueMessage(raw_entry(), URL, fake_transport)
        calls = []

        task = message.destroy(callback=lambda err, res: calls.append((err, res)))
        await task

        assert calls == [(None, None)]
        assert message.destroyed is True
