#!/usr/bin/env python3
"""Entry point for the Migration Relayer.

Scans the configured contract for TokenMigrated events from the start
block up to the current chain head and relays each one to the queue.
"""

import argparse
import asyncio
import logging
import os
import sys


def setup_logging(level: str = "INFO") -> None:
    """Configure logging for the application.

    Args:
        level: Logging level as string (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    log_level: int = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

# Get logger for this module
logger = logging.getLogger(__name__)

from migration_relayer.config import ConfigurationError, RelayerConfig
from migration_relayer.message_publisher import MessagePublisher
from migration_relayer.scanner import MigrationScanner
from migration_relayer.utils.chain_utility import Web3LogSource
from migration_relayer.utils.sqs_utility import SqsUtility


def build_scanner(config: RelayerConfig) -> MigrationScanner:
    """Wire the scanner and its collaborators from configuration."""
    sqs_utility = SqsUtility.from_config(
        config.aws,
        max_attempts=config.scan.max_delivery_attempts,
        retry_delay=config.scan.delivery_retry_delay
    )
    log_source = Web3LogSource(
        rpc_url=config.chain.rpc_url,
        contract_address=config.chain.contract_address,
        request_timeout=config.chain.request_timeout
    )
    publisher = MessagePublisher(sqs_utility, config.aws.queue_url)
    return MigrationScanner(config, log_source, publisher, sqs_utility)


async def main() -> None:
    """Main entry point for the Migration Relayer.

    Raises:
        SystemExit: On configuration or runtime errors
    """
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        description="Migration Relayer - relay TokenMigrated events to a FIFO queue",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""Environment Variables:
  RPC_URL                - RPC endpoint of the scanned chain
  CONTRACT_ADDRESS       - Contract emitting TokenMigrated
  START_BLOCK            - First block to scan (default: 0)
  REQUEST_TIMEOUT        - RPC timeout in seconds (default: 30)
  AWS_REGION             - Queue region
  AWS_ACCESS_KEY_ID      - Access key id
  AWS_SECRET_ACCESS_KEY  - Secret access key
  SQS_QUEUE_URL          - Target FIFO queue URL
  BLOCK_WINDOW_SIZE      - Blocks per log query (default: 1000)
  WINDOW_DELAY           - Seconds between windows (default: 1.0)
  MAX_DELIVERY_ATTEMPTS  - Attempts per message (default: 3)
  DELIVERY_RETRY_DELAY   - Seconds between attempts (default: 1.0)
  LOG_LEVEL              - Logging level (can be overridden with --log-level)
        """
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("LOG_LEVEL", "INFO"),
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging level (default: INFO)"
    )
    parser.add_argument(
        "--start-block",
        type=int,
        default=None,
        help="Override START_BLOCK"
    )
    parser.add_argument(
        "--window-size",
        type=int,
        default=None,
        help="Override BLOCK_WINDOW_SIZE"
    )
    args: argparse.Namespace = parser.parse_args()

    setup_logging(args.log_level)
    logger.info("=== Migration Relayer Starting ===")

    try:
        config: RelayerConfig = RelayerConfig.from_env().with_overrides(
            start_block=args.start_block,
            window_size=args.window_size
        )
    except ValueError as e:
        logger.error(f"Configuration Error: {e}")
        logger.error("Please check your environment variables (see --help)")
        sys.exit(1)

    config.log_config()

    try:
        scanner: MigrationScanner = build_scanner(config)
        await scanner.run()

    except ConfigurationError as e:
        logger.error(f"Configuration Error: {e}")
        sys.exit(1)

    except KeyboardInterrupt:
        logger.info("\nReceived interrupt signal, shutting down...")
        sys.exit(0)

    except Exception as e:
        logger.error(f"Fatal Error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
