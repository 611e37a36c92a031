"""
Message publishing for the Migration Relayer.

This module wraps queue envelopes around transformed events and hands
them to the delivery client. Publishing never raises: a message that
cannot be delivered is logged and counted so the scan can move on.
"""

import logging
from typing import TYPE_CHECKING, Any

from .models import MessageEventType, QueueEnvelope
from .utils.log_utility import describe_error, format_context, log_success

if TYPE_CHECKING:
    from .utils.sqs_utility import SqsUtility

logger = logging.getLogger(__name__)


class MessagePublisher:
    """Publishes chain events to the FIFO queue."""

    def __init__(self, sqs_utility: "SqsUtility", queue_url: str) -> None:
        """
        Initialize the MessagePublisher.

        Args:
            sqs_utility: Delivery client used to send messages
            queue_url: Target queue URL
        """
        self.sqs_utility = sqs_utility
        self.queue_url = queue_url

        self.messages_sent = 0
        self.messages_failed = 0

    async def publish(
        self,
        event_type: MessageEventType,
        data: dict[str, Any],
        tx_hash: str,
        tx_index: int,
        log_index: int,
        block_number: int
    ) -> bool:
        """
        Send one event to the queue.

        Args:
            event_type: Message type for consumers
            data: JSON-serializable event payload
            tx_hash: Transaction hash of the event
            tx_index: Transaction index within the block
            log_index: Log index within the block
            block_number: Block containing the event

        Returns:
            True if the queue service answered, False otherwise
        """
        log_context = {
            "service": "MessageService",
            "action": "sendMessage",
            "messageType": event_type.value,
            "txHash": tx_hash,
            "txIndex": tx_index,
            "logIndex": log_index,
            "blockNumber": block_number,
        }

        try:
            envelope = QueueEnvelope(
                queue_url=self.queue_url,
                message_type=event_type,
                data=data,
                tx_hash=tx_hash,
                tx_index=tx_index,
                log_index=log_index,
                block_number=block_number,
            )
            payload = envelope.to_payload()
            logger.info(f"Preparing to send message {envelope.message_id} {format_context(log_context)}")

            response = await self.sqs_utility.send_message(payload)
            if response is None:
                raise RuntimeError(f"Delivery exhausted for message {envelope.message_id}")

            self.messages_sent += 1
            log_success(logger, "Message sent successfully", {**log_context, "queueUrl": self.queue_url})
            return True

        except Exception as e:
            self.messages_failed += 1
            logger.error(
                f"Failed to send message {format_context({**log_context, 'error': describe_error(e)})}",
                exc_info=True
            )
            return False

    def get_metrics(self) -> dict[str, int]:
        """
        Get publishing counters.

        Returns:
            Dictionary of metric names to values
        """
        return {
            "messages_sent": self.messages_sent,
            "messages_failed": self.messages_failed,
        }
