"""Console log helpers shared by the scanner and the publisher."""

import json
import logging
from typing import Any


def format_context(data: dict[str, Any] | None) -> str:
    """Render structured log context as indented JSON."""
    if not data:
        return ""
    return json.dumps(data, indent=2, default=str)


def log_success(logger: logging.Logger, message: str, data: dict[str, Any] | None = None) -> None:
    logger.info(f"✓ {message} {format_context(data)}".rstrip())


def format_progress(current: int, total: int, message: str) -> str:
    """Format a progress line such as ``→ Scanning blocks: 50.00% [50/100]``."""
    percentage = current / total * 100 if total else 100.0
    return f"→ {message}: {percentage:.2f}% [{current}/{total}]"


def log_progress(logger: logging.Logger, current: int, total: int, message: str) -> None:
    logger.info(format_progress(current, total, message))


def describe_error(error: BaseException) -> dict[str, str]:
    """Error kind and message for structured log context."""
    return {"type": type(error).__name__, "message": str(error)}
