"""
Chain log source for TokenMigrated events.

"""

import logging
from typing import Any, Protocol, Sequence

from web3 import Web3
from web3.types import EventData


class LogSource(Protocol):
    """Port defining what the scanner needs from a chain client."""

    def get_block_number(self) -> int:
        """Return the current chain head."""

    def get_logs(self, event_name: str, from_block: int, to_block: int) -> Sequence[EventData]:
        """Return decoded logs of ``event_name`` for [from_block, to_block] inclusive."""

    def get_block_timestamp(self, block_number: int) -> int:
        """Return the block timestamp in seconds since epoch."""


class Web3LogSource:
    """
    LogSource backed by a web3 HTTP provider.

    """

    def __init__(
        self,
        rpc_url: str,
        contract_address: str,
        request_timeout: int = 30,
        abi: list[dict[str, Any]] | None = None
    ):
        """
        Initialize the log source.

        Args:
            rpc_url: HTTP RPC endpoint URL
            contract_address: Address of the contract to query
            request_timeout: RPC request timeout in seconds
            abi: Contract ABI (defaults to the TokenMigrated event ABI)
        """
        self.rpc_url = rpc_url
        self.contract_address = Web3.to_checksum_address(contract_address)

        self.w3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={'timeout': request_timeout}))
        self.contract = self.w3.eth.contract(
            address=self.contract_address,
            abi=abi if abi is not None else self._load_migration_abi()
        )

        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @staticmethod
    def _load_migration_abi() -> list[dict[str, Any]]:
        """Minimal ABI containing only the TokenMigrated event."""
        return [
            {
                "anonymous": False,
                "inputs": [
                    {"indexed": True, "internalType": "address", "name": "token", "type": "address"},
                    {"indexed": True, "internalType": "address", "name": "pairAddress", "type": "address"},
                    {"indexed": False, "internalType": "uint256", "name": "poolId", "type": "uint256"},
                    {"indexed": False, "internalType": "uint256", "name": "amountToken", "type": "uint256"},
                    {"indexed": False, "internalType": "uint256", "name": "amountETH", "type": "uint256"}
                ],
                "name": "TokenMigrated",
                "type": "event"
            }
        ]

    def get_block_number(self) -> int:
        return self.w3.eth.block_number

    def get_logs(self, event_name: str, from_block: int, to_block: int) -> Sequence[EventData]:
        if not hasattr(self.contract.events, event_name):
            raise ValueError(f"Event {event_name} not found in contract ABI")
        event_obj = getattr(self.contract.events, event_name)
        return event_obj.get_logs(from_block=from_block, to_block=to_block)

    def get_block_timestamp(self, block_number: int) -> int:
        block = self.w3.eth.get_block(block_number)
        return int(block["timestamp"])
