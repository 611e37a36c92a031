#!/usr/bin/env python3
"""Event transformation for the Migration Relayer.

This module maps a decoded TokenMigrated log and the timestamp of its
block into the normalized MigrationMessage sent downstream.
"""

from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from web3 import Web3

from .models import MigrationMessage

REQUIRED_ARGS: tuple[str, ...] = ("token", "pairAddress", "amountToken", "amountETH")


class EventDecodeError(ValueError):
    """Raised when a log lacks a field the transformation needs."""


def normalize_tx_hash(tx_hash: Any) -> str:
    """Return a transaction hash as a 0x-prefixed hex string."""
    match tx_hash:
        case bytes():
            return Web3.to_hex(tx_hash)
        case str() if tx_hash.startswith("0x"):
            return tx_hash
        case str():
            return "0x" + tx_hash
        case _:
            raise EventDecodeError(f"Unexpected transaction hash type: {type(tx_hash).__name__}")


def from_base_units(amount: int) -> Decimal:
    """Scale an 18-decimal base unit amount to whole units."""
    return Decimal(Web3.from_wei(int(amount), "ether"))


def transform_migration_event(event: Mapping[str, Any], block_timestamp: int) -> MigrationMessage:
    """
    Build a MigrationMessage from a decoded TokenMigrated log.

    Args:
        event: Decoded log (web3 EventData or an equivalent mapping)
        block_timestamp: Timestamp of the containing block, in seconds

    Returns:
        The normalized message

    Raises:
        EventDecodeError: If a required argument or the transaction hash is missing
    """
    args: Mapping[str, Any] = event.get("args") or {}
    if missing := [name for name in REQUIRED_ARGS if args.get(name) is None]:
        raise EventDecodeError(f"TokenMigrated event missing arguments: {', '.join(missing)}")

    if (tx_hash := event.get("transactionHash")) is None:
        raise EventDecodeError("TokenMigrated event missing transactionHash")

    return MigrationMessage(
        token_address=str(args["token"]).upper(),
        pool_id=str(args["pairAddress"]).upper(),
        amount_token=from_base_units(args["amountToken"]),
        amount_eth=from_base_units(args["amountETH"]),
        timestamp_ms=int(block_timestamp) * 1000,
        transaction_hash=normalize_tx_hash(tx_hash),
    )
