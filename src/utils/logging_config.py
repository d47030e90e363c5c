"""Central logging configuration.

Usage:
    from utils.logging_config import configure_logging
    configure_logging(level="INFO", json_logs=False)

Idempotent: safe to call multiple times (Streamlit re-executes the script on
every interaction).
"""
from __future__ import annotations
import sys
from typing import Optional

from loguru import logger

_CONFIGURED = False

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <7}</level> | "
    "<cyan>{name}</cyan> | {message}"
)


def configure_logging(level: str = "INFO", json_logs: bool = False, log_file: Optional[str] = None) -> None:
    global _CONFIGURED
    if _CONFIGURED:
        return
    logger.remove()
    if json_logs:
        logger.add(sys.stderr, level=level.upper(), serialize=True)
    else:
        logger.add(sys.stderr, level=level.upper(), format=CONSOLE_FORMAT)

    # Optional rotating file sink
    if log_file:
        logger.add(
            log_file,
            level=level.upper(),
            rotation="5 MB",
            retention=3,
            serialize=json_logs,
        )
    _CONFIGURED = True


def reset_logging() -> None:
    """Allow a fresh configure_logging call (tests, settings reload)."""
    global _CONFIGURED
    _CONFIGURED = False
