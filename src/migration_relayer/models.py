#!/usr/bin/env python3
"""Data models for the Migration Relayer.

This module provides the data classes passed between the scanner, the
event transformer and the message publisher.
"""

import json
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any


class MessageEventType(str, Enum):
    """Message types understood by queue consumers.

    Only TOKEN_MIGRATED is produced by this relayer.
    """
    TOKEN_CREATED = "TokenCreated"
    TOKEN_MIGRATED = "TokenMigrated"
    TRADE = "Trade"
    REFERRAL_ADDED = "ReferralAdded"
    REFERRAL_REMOVED = "ReferralRemoved"
    REFERRAL_UPDATED = "ReferralUpdated"
    REFERRAL_TYPE_UPDATED = "ReferralTypeUpdated"
    WITHDRAWAL = "Withdrawal"


def to_json_number(value: Decimal) -> int | float:
    """Convert a decimal amount to a JSON number, keeping integral values as ints."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def dumps_compact(value: Any) -> str:
    """Serialize to JSON without insignificant whitespace."""
    return json.dumps(value, separators=(",", ":"))


@dataclass(frozen=True, slots=True)
class MigrationMessage:
    """Normalized payload for one TokenMigrated event.

    Attributes:
        token_address: Migrated token address, upper-cased
        pool_id: Pair/pool address, upper-cased
        amount_token: Token amount in whole units (18 decimals)
        amount_eth: Native currency amount in whole units (18 decimals)
        timestamp_ms: Block timestamp in milliseconds
        transaction_hash: Hash of the emitting transaction
    """

    token_address: str
    pool_id: str
    amount_token: Decimal
    amount_eth: Decimal
    timestamp_ms: int
    transaction_hash: str

    def __str__(self) -> str:
        """Human-readable string representation."""
        return (
            f"MigrationMessage(token={self.token_address[:10]}..., "
            f"pool={self.pool_id[:10]}..., "
            f"tx={self.transaction_hash[:10]}...)"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire format consumed downstream."""
        return {
            "tokenAddress": self.token_address,
            "poolId": self.pool_id,
            "amountToken": to_json_number(self.amount_token),
            "amountETH": to_json_number(self.amount_eth),
            "timestamp": self.timestamp_ms,
            "transactionHash": self.transaction_hash,
        }


@dataclass(frozen=True, slots=True)
class QueueEnvelope:
    """SendMessage request for one event.

    Group and deduplication ids are both derived from the on-chain
    coordinates of the event, never from the payload.
    """

    queue_url: str
    message_type: MessageEventType
    data: dict[str, Any]
    tx_hash: str
    tx_index: int
    log_index: int
    block_number: int

    @property
    def message_id(self) -> str:
        return f"{self.tx_hash}/{self.tx_index}/{self.log_index}"

    @property
    def message_body(self) -> str:
        return dumps_compact({
            "type": self.message_type.value,
            "msg": self.data,
            "txHash": self.tx_hash,
            "txIndex": self.tx_index,
            "logIndex": self.log_index,
            "blockNumber": self.block_number,
        })

    def to_payload(self) -> dict[str, str]:
        """Build the SendMessage request body."""
        return {
            "QueueUrl": self.queue_url,
            "MessageBody": self.message_body,
            "MessageGroupId": self.message_id,
            "MessageDeduplicationId": self.message_id,
        }


@dataclass(slots=True)
class ScanWindow:
    """Counters for one block window, created fresh each iteration."""
    from_block: int
    to_block: int
    event_count: int = 0
    processed_count: int = 0
    failed_count: int = 0

    @property
    def block_range(self) -> str:
        return f"{self.from_block}-{self.to_block}"


@dataclass(frozen=True, slots=True)
class ProcessingStats:
    """Success and failure rates of a finished window."""
    success_rate: str
    failure_rate: str
    total_events: int
    successful_events: int
    failed_events: int


def calculate_processing_stats(window: ScanWindow) -> ProcessingStats:
    """Compute percentage rates for a window.

    Both rates are "0.00%" for an empty window.
    """
    if window.event_count == 0:
        success_rate = failure_rate = 0.0
    else:
        success_rate = window.processed_count / window.event_count * 100
        failure_rate = window.failed_count / window.event_count * 100

    return ProcessingStats(
        success_rate=f"{success_rate:.2f}%",
        failure_rate=f"{failure_rate:.2f}%",
        total_events=window.event_count,
        successful_events=window.processed_count,
        failed_events=window.failed_count,
    )
