#!/usr/bin/env python3
"""Unit tests for MessagePublisher module."""

import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from migration_relayer.message_publisher import MessagePublisher
from migration_relayer.models import MessageEventType

QUEUE_URL = "https://sqs.us-east-1.amazonaws.com/123456789012/migrations.fifo"


@pytest.fixture
def mock_sqs_utility():
    """Create a mock SqsUtility instance."""
    mock = MagicMock()
    mock.send_message = AsyncMock(return_value={"MessageId": "m-1"})
    return mock


@pytest.fixture
def publisher(mock_sqs_utility):
    return MessagePublisher(mock_sqs_utility, QUEUE_URL)


class TestMessagePublisher:
    """Test suite for MessagePublisher class."""

    @pytest.mark.asyncio
    async def test_publish_success(self, publisher, mock_sqs_utility):
        data = {"tokenAddress": "0XABC", "amountToken": 2}

        result = await publisher.publish(MessageEventType.TOKEN_MIGRATED, data, "0x1", 0, 0, 42)

        assert result is True
        mock_sqs_utility.send_message.assert_awaited_once()
        payload = mock_sqs_utility.send_message.call_args.args[0]
        assert payload["QueueUrl"] == QUEUE_URL
        assert payload["MessageGroupId"] == "0x1/0/0"
        assert payload["MessageDeduplicationId"] == "0x1/0/0"
        assert json.loads(payload["MessageBody"]) == {
            "type": "TokenMigrated",
            "msg": data,
            "txHash": "0x1",
            "txIndex": 0,
            "logIndex": 0,
            "blockNumber": 42,
        }
        assert publisher.get_metrics() == {"messages_sent": 1, "messages_failed": 0}

    @pytest.mark.asyncio
    async def test_delivery_exhausted_is_swallowed(self, publisher, mock_sqs_utility):
        """Test exhausted delivery is reported as a failure, not raised."""
        mock_sqs_utility.send_message = AsyncMock(return_value=None)

        result = await publisher.publish(MessageEventType.TOKEN_MIGRATED, {}, "0x2", 1, 3, 43)

        assert result is False
        assert publisher.get_metrics() == {"messages_sent": 0, "messages_failed": 1}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        Exception("boom"),
        httpx.ConnectError("refused"),
        RuntimeError("unexpected"),
    ])
    async def test_delivery_exception_never_escapes(self, publisher, mock_sqs_utility, error):
        mock_sqs_utility.send_message = AsyncMock(side_effect=error)

        result = await publisher.publish(MessageEventType.TOKEN_MIGRATED, {}, "0x3", 0, 0, 44)

        assert result is False
        assert publisher.messages_failed == 1

    @pytest.mark.asyncio
    async def test_unserializable_data_is_swallowed(self, publisher, mock_sqs_utility):
        """Test envelope construction errors are caught as well."""
        result = await publisher.publish(MessageEventType.TOKEN_MIGRATED, {"bad": object()}, "0x4", 0, 0, 45)

        assert result is False
        mock_sqs_utility.send_message.assert_not_called()
        assert publisher.messages_failed == 1
