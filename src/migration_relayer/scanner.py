"""
Migration scanner implementation.

This module contains the scan loop that walks the chain in fixed-size
block windows, turns every TokenMigrated log into a queue message and
paces itself against the RPC node.
"""

import asyncio
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any

from .event_transformer import EventDecodeError, normalize_tx_hash, transform_migration_event
from .models import MessageEventType, ScanWindow, calculate_processing_stats
from .utils.log_utility import describe_error, format_context, log_progress, log_success

if TYPE_CHECKING:
    from .config import RelayerConfig
    from .message_publisher import MessagePublisher
    from .utils.chain_utility import LogSource
    from .utils.sqs_utility import SqsUtility

logger = logging.getLogger(__name__)


class ScannerState(Enum):
    """Lifecycle state of the scanner."""
    IDLE = "idle"
    CONFIGURING = "configuring"
    SCANNING = "scanning"
    COMPLETED = "completed"
    FAULTED = "faulted"


def next_window_bounds(from_block: int, window_size: int, chain_head: int) -> tuple[int, int]:
    """Return the inclusive block range of the window starting at from_block."""
    return from_block, min(from_block + window_size, chain_head)


class MigrationScanner:
    """
    Scans TokenMigrated events and publishes them to the queue.

    Windows are processed strictly in order. A failed window is retried
    from the same start block without limit, so no range is ever skipped;
    a persistently failing log source keeps the scanner retrying forever.
    """

    EVENT_NAME = "TokenMigrated"

    def __init__(
        self,
        config: "RelayerConfig",
        log_source: "LogSource",
        publisher: "MessagePublisher",
        sqs_utility: "SqsUtility"
    ) -> None:
        """
        Initialize the scanner.

        Args:
            config: Relayer configuration
            log_source: Chain client providing head, logs and block timestamps
            publisher: Publisher used for every transformed event
            sqs_utility: Delivery client, used to probe the queue before scanning
        """
        self.config = config
        self.log_source = log_source
        self.publisher = publisher
        self.sqs_utility = sqs_utility
        self.state = ScannerState.IDLE

        self.windows_completed = 0
        self.windows_failed = 0

    async def validate_configuration(self) -> None:
        """Check that the queue is reachable with the configured credentials."""
        self.state = ScannerState.CONFIGURING
        await self.sqs_utility.verify_queue(self.config.aws.queue_url)

    async def process_event(self, event: Any) -> None:
        """
        Transform one log and publish it.

        Raises:
            Exception: If the block lookup or transformation fails, or the
                message could not be delivered
        """
        block_timestamp = self.log_source.get_block_timestamp(event["blockNumber"])
        message = transform_migration_event(event, block_timestamp)

        delivered = await self.publisher.publish(
            MessageEventType.TOKEN_MIGRATED,
            message.to_dict(),
            message.transaction_hash,
            event["transactionIndex"],
            event["logIndex"],
            event["blockNumber"],
        )
        if not delivered:
            raise RuntimeError(f"Message for {message.transaction_hash} was not delivered")

    async def scan_window(self, from_block: int, chain_head: int) -> ScanWindow:
        """
        Query and process every log in one window.

        Per-event failures are counted and never stop the window. Errors
        raised by the log query itself propagate to the caller.

        Args:
            from_block: First block of the window
            chain_head: Chain head captured when the scan started

        Returns:
            The finished window with its counters
        """
        start, end = next_window_bounds(from_block, self.config.scan.window_size, chain_head)
        window = ScanWindow(from_block=start, to_block=end)

        log_progress(logger, from_block, chain_head, "Scanning blocks")

        events = self.log_source.get_logs(self.EVENT_NAME, window.from_block, window.to_block)
        window.event_count = len(events)

        if events:
            logger.info(f"Found {len(events)} events in block range {window.block_range}")

        for event in events:
            try:
                await self.process_event(event)
                window.processed_count += 1
            except Exception as event_error:
                window.failed_count += 1
                logger.error(
                    "Event Processing Failed " + format_context({
                        "txHash": _describe_tx_hash(event.get("transactionHash")),
                        "blockNumber": event.get("blockNumber"),
                        "error": describe_error(event_error),
                    })
                )

        stats = calculate_processing_stats(window)
        if window.event_count > 0:
            logger.info("Block Range Summary " + format_context({
                "blockRange": window.block_range,
                "processed": f"{stats.successful_events}/{stats.total_events}",
                "successRate": stats.success_rate,
                "failureRate": stats.failure_rate,
            }))

        return window

    async def run(self) -> None:
        """
        Run the scan from the configured start block to the current head.

        The chain head is read once; blocks produced during the run are
        left for the next run.

        Raises:
            ConfigurationError: If the queue probe fails
            Exception: Any error escaping the scan loop
        """
        logger.info(f"Token Migration Scanner Started {format_context({'startTime': _now_iso()})}")

        try:
            await self.validate_configuration()
        except Exception as e:
            self.state = ScannerState.FAULTED
            logger.error(f"Configuration validation failed: {e}")
            raise

        try:
            chain_head = self.log_source.get_block_number()
            from_block = self.config.chain.start_block
            window_delay = self.config.scan.window_delay

            logger.info("Scanner Configuration " + format_context({
                "contractAddress": self.config.chain.contract_address,
                "startBlock": from_block,
                "currentBlock": chain_head,
                "blockRange": self.config.scan.window_size,
            }))

            self.state = ScannerState.SCANNING
            while from_block < chain_head:
                try:
                    window = await self.scan_window(from_block, chain_head)
                except Exception as range_error:
                    self.windows_failed += 1
                    _, to_block = next_window_bounds(from_block, self.config.scan.window_size, chain_head)
                    logger.error("Block Range Processing Failed " + format_context({
                        "range": f"{from_block}-{to_block}",
                        "error": describe_error(range_error),
                    }))
                    await asyncio.sleep(window_delay * 2)
                    continue

                self.windows_completed += 1
                from_block = window.to_block + 1
                await asyncio.sleep(window_delay)

            self.state = ScannerState.COMPLETED
            log_success(logger, "Scanner Completed", {
                "finalBlock": chain_head,
                "endTime": _now_iso(),
                **self.publisher.get_metrics(),
            })

        except Exception as e:
            self.state = ScannerState.FAULTED
            logger.error("Scanner Failed " + format_context({
                "error": describe_error(e),
                "timestamp": _now_iso(),
            }))
            raise


def _describe_tx_hash(tx_hash: Any) -> str:
    try:
        return normalize_tx_hash(tx_hash)
    except EventDecodeError:
        return str(tx_hash)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
