#!/usr/bin/env python3
"""
Structured Logging Module using structlog

Production logging for the cache service:
- Request ID correlation across HTTP handlers, the store and the warmer
- Stage tags (CACHE.GET, WARM.2, ...) for following an operation
- JSON output for log aggregation, console output for local work
- Redaction of bearer credentials and tokens in messages

Author: Creo Platform Team
Date: 2026-01-14
"""

import logging
import re
import sys
from contextvars import ContextVar
from datetime import datetime

import structlog
from structlog.types import EventDict, WrappedLogger

from creo_cache.config.settings import get_settings

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

_BEARER_PATTERN = re.compile(r"\bBearer\s+[A-Za-z0-9._~+/=-]+", re.IGNORECASE)
_TOKEN_PATTERN = re.compile(r"\b(token|password|secret)=([^\s&]+)", re.IGNORECASE)
_SENSITIVE_FIELDS = {"token", "password", "authorization", "admin_token"}


def add_request_id(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Add the request ID from context to the log event.

    STAGE-L.1: Request ID injection
    """
    request_id = request_id_ctx.get()
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


def add_timestamp(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Add ISO timestamp to log event.

    STAGE-L.2: Timestamp injection
    """
    event_dict["timestamp"] = datetime.utcnow().isoformat() + "Z"
    return event_dict


def redact_secrets(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Redact credentials from the message and from well-known field names.

    STAGE-L.3: Secret redaction

    Patterns redacted:
    - "Bearer <token>" → "Bearer [REDACTED]"
    - token=/password=/secret= query-style pairs
    - fields named token, password, authorization, admin_token
    """
    message = event_dict.get("event", "")

    if isinstance(message, str):
        message = _BEARER_PATTERN.sub("Bearer [REDACTED]", message)
        message = _TOKEN_PATTERN.sub(r"\1=[REDACTED]", message)
        event_dict["event"] = message

    for field in _SENSITIVE_FIELDS.intersection(event_dict):
        if event_dict[field] is not None:
            event_dict[field] = "[REDACTED]"

    return event_dict


def add_log_level_name(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Uppercase the log level.

    STAGE-L.4: Log level injection
    """
    if "level" in event_dict:
        event_dict["level"] = event_dict["level"].upper()
    return event_dict


def setup_logging(log_level: str | None = None, log_format: str | None = None) -> None:
    """
    Setup structured logging with structlog.

    STAGE-L: Logging initialization

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log format ('json' or 'console')
    """
    settings = get_settings()

    log_level = log_level or settings.logging.LOG_LEVEL
    log_format = log_format or settings.logging.LOG_FORMAT

    # Logs go to stderr so CLI output on stdout stays machine readable
    logging.basicConfig(
        format="%(message)s", stream=sys.stderr, level=getattr(logging, log_level.upper())
    )

    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_request_id,
            add_timestamp,
            structlog.stdlib.add_log_level,
            add_log_level_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            redact_secrets,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Usage:
        logger = get_logger(__name__)
        logger.info("message", key="value", stage="CACHE.GET")
    """
    return structlog.get_logger(name)


def set_request_id(request_id: str) -> None:
    """Set request ID in context for the current request."""
    request_id_ctx.set(request_id)


def get_request_id() -> str | None:
    return request_id_ctx.get()


def clear_request_id() -> None:
    """
    Clear request ID from context.

    STAGE-6: Request context cleanup
    """
    request_id_ctx.set(None)


def log_stage(
    logger: structlog.stdlib.BoundLogger, stage: str, message: str, level: str = "info", **kwargs
) -> None:
    """
    Log a message with stage information.

    Usage:
        log_stage(logger, "WARM.2", "Job settled", job="ai-styles")
    """
    log_func = getattr(logger, level.lower())
    log_func(message, stage=stage, **kwargs)
