"""
Logging Module
==============

Structured logging using structlog with JSON output for production
and colored console output for development.

Usage:
    from shared.logging import get_logger, setup_logging

    # Setup at application start
    setup_logging()

    # Get logger for a module
    logger = get_logger(__name__)

    # Log with context
    logger.info("certificate_issued", certificate_id="CERT_123", block_number=7)
    logger.error("ledger_commit_failed", error=str(e))
"""

from shared.logging.logger import get_logger, setup_logging


__all__ = [
    "get_logger",
    "setup_logging",
]
