#!/usr/bin/env python3
"""Configuration management for the Migration Relayer.

This module provides type-safe configuration dataclasses with validation
for the relayer. Configuration is loaded from environment variables with
sensible defaults where appropriate.
"""

import logging
import os
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import ClassVar
from urllib.parse import urlparse

from web3 import Web3

# Get logger for this module
logger = logging.getLogger(__name__)


class AwsConfigErrorCode(str, Enum):
    """Error codes reported for invalid or unusable queue configuration."""
    CONFIG_NOT_FOUND = "CONFIG_NOT_FOUND"
    REGION_INVALID = "REGION_INVALID"
    CREDENTIALS_MISSING = "CREDENTIALS_MISSING"
    QUEUE_URL_MISSING = "QUEUE_URL_MISSING"
    AWS_SERVICE_ERROR = "AWS_SERVICE_ERROR"


class ConfigurationError(ValueError):
    """Raised when the relayer cannot start with the given configuration.

    Attributes:
        code: Machine readable error code
        message: Human readable description
    """

    def __init__(self, code: AwsConfigErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"


VALID_AWS_REGIONS: frozenset[str] = frozenset({
    'us-east-1', 'us-east-2', 'us-west-1', 'us-west-2',
    'ap-south-1', 'ap-northeast-1', 'ap-northeast-2', 'ap-northeast-3',
    'ap-southeast-1', 'ap-southeast-2',
    'eu-central-1', 'eu-west-1', 'eu-west-2', 'eu-west-3',
    'sa-east-1',
})


@dataclass(frozen=True, slots=True)
class AwsConfig:
    """Credentials and target queue for message delivery.

    Attributes:
        region: AWS region hosting the queue
        access_key_id: Access key id used in the credential scope
        secret_access_key: Secret key used to derive the signing key
        queue_url: Full URL of the target FIFO queue
    """

    region: str
    access_key_id: str
    secret_access_key: str = field(repr=False)
    queue_url: str

    SERVICE_NAME: ClassVar[str] = "sqs"

    def __post_init__(self) -> None:
        """Validate queue configuration."""
        if not self.region:
            raise ConfigurationError(
                AwsConfigErrorCode.REGION_INVALID,
                "AWS Region is required (AWS_REGION)"
            )

        if self.region not in VALID_AWS_REGIONS:
            raise ConfigurationError(
                AwsConfigErrorCode.REGION_INVALID,
                f"Invalid region: {self.region}. "
                "Please use a valid AWS region (e.g., us-east-1, ap-southeast-1)"
            )

        if not self.access_key_id or not self.secret_access_key:
            raise ConfigurationError(
                AwsConfigErrorCode.CREDENTIALS_MISSING,
                "AWS Credentials (AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY) are required"
            )

        if not self.queue_url:
            raise ConfigurationError(
                AwsConfigErrorCode.QUEUE_URL_MISSING,
                "SQS Queue URL is required (SQS_QUEUE_URL)"
            )

        if urlparse(self.queue_url).scheme not in ('http', 'https'):
            raise ConfigurationError(
                AwsConfigErrorCode.QUEUE_URL_MISSING,
                f"Invalid SQS Queue URL: {self.queue_url}"
            )

    @property
    def sqs_host(self) -> str:
        """Regional queue service endpoint host."""
        return f"sqs.{self.region}.amazonaws.com"


@dataclass(frozen=True, slots=True)
class ChainConfig:
    """Configuration for the scanned chain.

    Attributes:
        rpc_url: HTTP(S) RPC endpoint
        contract_address: Checksummed address of the contract emitting TokenMigrated
        start_block: First block of the scan
        request_timeout: RPC request timeout in seconds
    """

    rpc_url: str
    contract_address: str
    start_block: int = 0
    request_timeout: int = 30

    def __post_init__(self) -> None:
        """Validate chain configuration."""
        if not self.rpc_url:
            raise ValueError("RPC URL is required (RPC_URL)")

        parsed = urlparse(self.rpc_url)
        if parsed.scheme not in ('http', 'https'):
            raise ValueError(
                f"Invalid RPC URL scheme: {parsed.scheme}. Expected http or https"
            )

        if not self.contract_address:
            raise ValueError("Contract address is required (CONTRACT_ADDRESS)")

        if not Web3.is_address(self.contract_address):
            raise ValueError(f"Invalid contract address: {self.contract_address}")

        checksummed = Web3.to_checksum_address(self.contract_address)
        if checksummed != self.contract_address:
            # Use object.__setattr__ since dataclass is frozen
            object.__setattr__(self, 'contract_address', checksummed)

        if self.start_block < 0:
            raise ValueError(f"Start block must be non-negative, got {self.start_block}")

        if self.request_timeout <= 0:
            raise ValueError(f"Request timeout must be positive, got {self.request_timeout}")


@dataclass(frozen=True, slots=True)
class ScanConfig:
    """Pacing and retry settings for the scan loop and delivery."""
    window_size: int = 1000  # blocks per log query
    window_delay: float = 1.0  # seconds between windows, doubled after a failed window
    max_delivery_attempts: int = 3
    delivery_retry_delay: float = 1.0  # seconds between delivery attempts

    def __post_init__(self) -> None:
        """Validate scan configuration."""
        if self.window_size <= 0:
            raise ValueError(f"Window size must be positive, got {self.window_size}")
        if self.window_delay < 0:
            raise ValueError(f"Window delay must be non-negative, got {self.window_delay}")
        if self.max_delivery_attempts < 1:
            raise ValueError(
                f"Max delivery attempts must be at least 1, got {self.max_delivery_attempts}"
            )
        if self.delivery_retry_delay < 0:
            raise ValueError(
                f"Delivery retry delay must be non-negative, got {self.delivery_retry_delay}"
            )


@dataclass(frozen=True, slots=True)
class RelayerConfig:
    """Main configuration for the Migration Relayer.

    Attributes:
        chain: Chain endpoint and scan start
        aws: Queue credentials and target
        scan: Pacing and retry settings
    """

    chain: ChainConfig
    aws: AwsConfig
    scan: ScanConfig = field(default_factory=ScanConfig)

    @classmethod
    def from_env(cls) -> "RelayerConfig":
        """Load configuration from environment variables.

        Returns:
            RelayerConfig instance with loaded values

        Raises:
            ValueError: If required environment variables are missing or invalid
        """
        chain_config = ChainConfig(
            rpc_url=os.environ.get("RPC_URL", ""),
            contract_address=os.environ.get("CONTRACT_ADDRESS", ""),
            start_block=int(os.environ.get("START_BLOCK", "0")),
            request_timeout=int(os.environ.get("REQUEST_TIMEOUT", "30")),
        )

        aws_config = AwsConfig(
            region=os.environ.get("AWS_REGION", ""),
            access_key_id=os.environ.get("AWS_ACCESS_KEY_ID", ""),
            secret_access_key=os.environ.get("AWS_SECRET_ACCESS_KEY", ""),
            queue_url=os.environ.get("SQS_QUEUE_URL", ""),
        )

        scan_config = ScanConfig(
            window_size=int(os.environ.get("BLOCK_WINDOW_SIZE", "1000")),
            window_delay=float(os.environ.get("WINDOW_DELAY", "1.0")),
            max_delivery_attempts=int(os.environ.get("MAX_DELIVERY_ATTEMPTS", "3")),
            delivery_retry_delay=float(os.environ.get("DELIVERY_RETRY_DELAY", "1.0")),
        )

        return cls(chain=chain_config, aws=aws_config, scan=scan_config)

    def with_overrides(
        self,
        start_block: int | None = None,
        window_size: int | None = None
    ) -> "RelayerConfig":
        """Create a new config with command line overrides applied.

        Args:
            start_block: Replacement start block, if given
            window_size: Replacement window size, if given

        Returns:
            New RelayerConfig instance
        """
        chain = self.chain if start_block is None else replace(self.chain, start_block=start_block)
        scan = self.scan if window_size is None else replace(self.scan, window_size=window_size)
        return RelayerConfig(chain=chain, aws=self.aws, scan=scan)

    def log_config(self) -> None:
        """Log the configuration in a readable format for debugging."""
        logger.info("=" * 60)
        logger.info("Migration Relayer Configuration")
        logger.info("=" * 60)

        logger.info("Chain:")
        logger.info(f"  RPC URL: {self.chain.rpc_url}")
        logger.info(f"  Contract: {self.chain.contract_address}")
        logger.info(f"  Start Block: {self.chain.start_block}")

        logger.info("Queue:")
        logger.info(f"  Region: {self.aws.region}")
        logger.info(f"  Queue URL: {self.aws.queue_url}")
        logger.info(f"  Access Key: {'[SET]' if self.aws.access_key_id else '[NOT SET]'}")
        logger.info(f"  Secret Key: {'[SET]' if self.aws.secret_access_key else '[NOT SET]'}")

        logger.info("Scan Settings:")
        logger.info(f"  Window Size: {self.scan.window_size} blocks")
        logger.info(f"  Window Delay: {self.scan.window_delay} seconds")
        logger.info(f"  Delivery Attempts: {self.scan.max_delivery_attempts}")
        logger.info(f"  Delivery Retry Delay: {self.scan.delivery_retry_delay} seconds")
        logger.info("=" * 60)
