"""
Migration Relayer package.

Scans TokenMigrated events from a chain and relays them to a FIFO queue.
"""

from .config import ConfigurationError, RelayerConfig
from .message_publisher import MessagePublisher
from .models import MessageEventType, MigrationMessage
from .scanner import MigrationScanner

__all__ = [
    "ConfigurationError",
    "MessageEventType",
    "MessagePublisher",
    "MigrationMessage",
    "MigrationScanner",
    "RelayerConfig",
]
__version__ = "0.1.0"
