"""Logging and observability configuration using Pydantic Logfire.

All modules use Python's standard logging library (logging.getLogger(__name__));
Logfire captures and enriches these records once configured.

Standard usage:
    import logging
    logger = logging.getLogger(__name__)
    logger.info("Message", extra={"key": "value"})

Structured logging utilities:
    log_with_context(logger, "info", "Message", task_id="123", batch_id="abc")
"""

import logging

import logfire

from upkeep.core.config import settings


def configure_logfire() -> None:
    """Configure Pydantic Logfire with token from environment.

    Without a token nothing is exported; spans still work locally.
    """
    logfire.configure(
        token=settings.logfire_token,
        service_name="upkeep",
        service_version="0.1.0",
        environment=settings.environment,
        send_to_logfire="if-token-present",
    )

    logger = logging.getLogger(__name__)
    logger.info("Logfire configured successfully")


def instrument_pydantic_ai() -> None:
    """Configure automatic tracing for the advisory agent calls."""
    logfire.instrument_pydantic_ai()
    logger = logging.getLogger(__name__)
    logger.info("Pydantic AI instrumentation configured")


def span(name: str) -> logfire.LogfireSpan:
    """Create a custom span for service layer functions.

    Usage:
        with span("task_service.create_task"):
            ...
    """
    return logfire.span(name)


def log_with_context(
    logger: logging.Logger,
    level: str,
    message: str,
    **context: object,
) -> None:
    """Log a message with structured context fields.

    Args:
        logger: Logger instance to use
        level: Log level ("debug", "info", "warning", "error", "critical")
        message: Log message
        **context: Additional context fields (task_id, property_id, batch_id, etc.)

    Usage:
        log_with_context(logger, "info", "Fan-out created", batch_id="abc", created=3)
    """
    log_method = getattr(logger, level.lower())
    log_method(message, extra=context)
