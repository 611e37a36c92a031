#!/usr/bin/env python3
"""Unit tests for the web3-backed log source."""

from unittest.mock import MagicMock

import pytest

from migration_relayer.utils.chain_utility import Web3LogSource

CONTRACT = "0x85BfE05492aFC3D04Ff3B2ca6771ACF6f853d90d"


@pytest.fixture
def log_source():
    """Log source pointed at an unused endpoint; no request is made on construction."""
    return Web3LogSource(rpc_url="http://localhost:8545", contract_address=CONTRACT.lower())


class TestWeb3LogSource:
    """Test suite for Web3LogSource."""

    def test_init_checksums_address(self, log_source):
        assert log_source.contract_address == CONTRACT
        assert log_source.contract.address == CONTRACT

    def test_migration_abi(self):
        abi = Web3LogSource._load_migration_abi()

        assert len(abi) == 1
        assert abi[0]["name"] == "TokenMigrated"
        assert abi[0]["type"] == "event"
        assert [i["name"] for i in abi[0]["inputs"]] == [
            "token", "pairAddress", "poolId", "amountToken", "amountETH"
        ]

    def test_get_logs_uses_event_filter(self, log_source):
        log_source.contract = MagicMock()
        log_source.contract.events.TokenMigrated.get_logs.return_value = ["log"]

        result = log_source.get_logs("TokenMigrated", 100, 150)

        assert result == ["log"]
        log_source.contract.events.TokenMigrated.get_logs.assert_called_once_with(
            from_block=100, to_block=150
        )

    def test_get_logs_unknown_event(self, log_source):
        with pytest.raises(ValueError, match="not found in contract ABI"):
            log_source.get_logs("TokenCreated", 1, 2)

    def test_get_block_number(self, log_source):
        log_source.w3 = MagicMock()
        log_source.w3.eth.block_number = 12345

        assert log_source.get_block_number() == 12345

    def test_get_block_timestamp(self, log_source):
        log_source.w3 = MagicMock()
        log_source.w3.eth.get_block.return_value = {"timestamp": 1700000000, "number": 42}

        assert log_source.get_block_timestamp(42) == 1700000000
        log_source.w3.eth.get_block.assert_called_once_with(42)
