"""
Logger Implementation
=====================

structlog configuration for the ledger, the proof engine and the registry
service.

Every entry carries the service name and package version. Credentials,
salts and holder PII are redacted; proof payloads and raw document data are
replaced by a short summary so a single verification never dumps a whole
proof into the log stream.

Version: 0.1.0
"""

import logging
import sys
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger


if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger


# Substring match, case-insensitive
SECRET_FIELDS = frozenset(
    {
        "password",
        "secret",
        "token",
        "authorization",
        "private_key",
        "salt",
        "holder_dob",
    }
)

# Exact match; bulky or personal payloads
PAYLOAD_FIELDS = frozenset(
    {
        "proof",
        "public_signals",
        "pi_a",
        "pi_b",
        "pi_c",
        "document_data",
        "content",
    }
)

REDACTED = "***REDACTED***"

QUIET_LOGGERS = ("httpx", "httpcore", "asyncio", "redis", "uvicorn.access")


def _summarize(value: Any) -> str:
    if isinstance(value, dict):
        return f"<omitted dict, {len(value)} keys>"
    if isinstance(value, list | tuple):
        return f"<omitted {type(value).__name__}, {len(value)} items>"
    if isinstance(value, str | bytes):
        return f"<omitted {type(value).__name__}, {len(value)} chars>"
    return f"<omitted {type(value).__name__}>"


def _redact(value: Any) -> Any:
    if not isinstance(value, dict):
        return value
    cleaned: dict[str, Any] = {}
    for key, item in value.items():
        lowered = str(key).lower()
        if any(s in lowered for s in SECRET_FIELDS):
            cleaned[key] = REDACTED
        elif lowered in PAYLOAD_FIELDS:
            cleaned[key] = _summarize(item)
        else:
            cleaned[key] = _redact(item)
    return cleaned


def redact_sensitive(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Redact credentials and PII, summarize proof payloads."""
    return _redact(event_dict)


def service_context(service_name: str, version: str) -> Callable[[WrappedLogger, str, EventDict], EventDict]:
    """Processor stamping every entry with the service name and version."""

    def add_context(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", service_name)
        event_dict.setdefault("version", version)
        return event_dict

    return add_context


def setup_logging(
    log_level: str = "INFO",
    json_logs: bool = False,
    service_name: str = "zkvault",
) -> None:
    """
    Configure structlog for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Whether to output JSON format (True for production)
        service_name: Name of the service for context
    """
    from shared import __version__

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
        service_context(service_name, __version__),
        redact_sensitive,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_logs:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        shared_processors.append(structlog.dev.set_exc_info)
        renderer = structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.RichTracebackFormatter(
                show_locals=False,
                max_frames=10,
            ),
        )

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)


def get_logger(name: str | None = None) -> "BoundLogger":
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Example:
        logger = get_logger(__name__)
        logger.info("proof_verified", nullifier="0xabc", valid=True)
    """
    return structlog.stdlib.get_logger(name)
