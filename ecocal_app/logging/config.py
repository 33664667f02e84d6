"""
Centralized logging configuration for the economic calendar service.

This module provides standardized logging configuration using structlog
for all components. The refresher, the cache endpoint and the client
controller all log through loggers obtained here so fallback decisions
and state transitions share one structured format.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None
) -> None:
    """
    Configure structlog for the entire application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: If True, output JSON format; otherwise human-readable
        include_timestamp: Include timestamp in log output
        include_caller: Include caller information (filename, line number)
        extra_processors: Additional structlog processors to include
    """
    log_level = getattr(logging, level.upper())

    logging.basicConfig(
        level=log_level,
        stream=sys.stdout,
        format="%(message)s"  # structlog will handle formatting
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                        structlog.processors.CallsiteParameter.LINENO]
        ))

    if extra_processors:
        processors.extend(extra_processors)

    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_refresh_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger for the server-side refresh path (scheduled and cold start).

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger bound to the refresh subsystem
    """
    return get_logger(name).bind(subsystem="refresh")


def get_state_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger for client controller state transitions.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger bound to the state machine subsystem
    """
    return get_logger(name).bind(
        subsystem="state_machine",
        audit_trail=True
    )


def log_fallback_decision(
    logger: FilteringBoundLogger,
    tier: str,
    replaced: bool,
    reason: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a merge-if-better decision with standardized format.

    Args:
        logger: Structlog logger instance
        tier: Cache tier the decision applies to (cold_start, client_refresh, weekend_hold)
        replaced: Whether the candidate replaced the current value
        reason: Short machine-readable reason
        context: Additional context data
    """
    bound_logger = logger.bind(
        tier=tier,
        decision="REPLACE" if replaced else "KEEP",
        reason=reason,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    if replaced:
        bound_logger.info("fallback_decision")
    else:
        bound_logger.warning("fallback_decision")


def log_state_transition(
    logger: FilteringBoundLogger,
    controller_id: str,
    from_state: str,
    to_state: str,
    trigger: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a state transition with standardized format.

    Args:
        logger: Structlog logger instance
        controller_id: Identifier of the controller transitioning
        from_state: Current state
        to_state: Target state
        trigger: What triggered the transition
        context: Additional context data
    """
    bound_logger = logger.bind(
        controller_id=controller_id,
        from_state=from_state,
        to_state=to_state,
        trigger=trigger,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    bound_logger.info("state_transition")
