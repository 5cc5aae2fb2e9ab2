"""Structured logging utilities with correlation ID support.

Provides:
- Correlation ID context management for request tracing
- A formatter that prefixes every record with its correlation ID
- configure_logging() for process start
- log_webhook_event() so every webhook outcome carries enough context to
  reconcile a payment by hand

Usage:
    from shared.utils.logging import get_logger, log_webhook_event

    logger = get_logger(__name__)
    log_webhook_event(logger, "paystack", "charge.success", order_id=42, result="updated")
"""

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any

_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# Deliveries refused or handled without an order update
_WARNING_RESULTS = {"rejected", "malformed", "ignored", "already_at_status", "order_not_found"}
_ERROR_RESULTS = {"transient_failure", "error"}


def generate_correlation_id() -> str:
    return str(uuid.uuid4())


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Set the correlation ID for the current request context.

    Args:
        correlation_id: Optional existing correlation ID. If None, generates new one.

    Returns:
        The correlation ID that was set
    """
    cid = correlation_id or generate_correlation_id()
    _correlation_id.set(cid)
    return cid


def get_correlation_id() -> str | None:
    return _correlation_id.get()


def clear_correlation_id() -> None:
    _correlation_id.set(None)


class CorrelationIdFilter(logging.Filter):
    """Logging filter that adds correlation_id to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or "no-correlation-id"
        return True


class StructuredFormatter(logging.Formatter):
    """Formatter for structured log output with correlation ID."""

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = get_correlation_id() or "no-correlation-id"
        base = super().format(record)
        return f"[{record.correlation_id}] {base}"


def configure_logging(level: str | int = "INFO") -> None:
    """Install a stdout handler with correlation IDs on the root logger.

    Safe to call more than once; an existing handler is reused.
    """
    root = logging.getLogger()
    root.setLevel(level)

    for handler in root.handlers:
        if isinstance(handler.formatter, StructuredFormatter):
            return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter(LOG_FORMAT))
    handler.addFilter(CorrelationIdFilter())
    root.addHandler(handler)

    # Statement logging would print bound parameters
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with correlation ID support.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, CorrelationIdFilter) for f in logger.filters):
        logger.addFilter(CorrelationIdFilter())
    return logger


def log_webhook_event(
    logger: logging.Logger,
    provider: str,
    event_kind: str | None,
    *,
    order_id: int | None = None,
    reference: str | None = None,
    result: str | None = None,
    error: str | None = None,
    **extra: Any,
) -> None:
    """Log a webhook event with structured context.

    The level follows the result: failed order updates log at ERROR,
    refused deliveries and events handled without an order update at
    WARNING, everything else at INFO unless an error is given.

    Args:
        logger: Logger instance
        provider: Payment provider name (paystack, stripe)
        event_kind: Provider event type (e.g. "charge.success")
        order_id: Order ID if it could be resolved
        reference: Provider reference (transaction reference or event id)
        result: Processing result (received, updated, ignored, transient_failure, ...)
        error: Error message if processing failed
        **extra: Additional context fields
    """
    context: dict[str, Any] = {
        "provider": provider,
        "event_kind": event_kind,
    }
    if order_id is not None:
        context["order_id"] = order_id
    if reference:
        context["reference"] = reference
    if result:
        context["result"] = result
    if error:
        context["error"] = error
    context.update(extra)

    msg_parts = [f"Webhook event: {provider} {event_kind or '<unknown>'}"]
    for key, value in context.items():
        if key not in ("provider", "event_kind"):
            msg_parts.append(f"{key}={value}")
    message = " | ".join(msg_parts)

    if result in _ERROR_RESULTS:
        logger.error(message, extra={"webhook": context})
    elif result in _WARNING_RESULTS:
        logger.warning(message, extra={"webhook": context})
    elif error:
        logger.error(message, extra={"webhook": context})
    else:
        logger.info(message, extra={"webhook": context})
