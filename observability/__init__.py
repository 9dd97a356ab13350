"""
OpenBibles - Observability Package

Structured logging (structlog) with OpenTelemetry trace context.

Usage:
    from observability import get_logger, get_tracer

    logger = get_logger(__name__)
    tracer = get_tracer(__name__)
"""
from opentelemetry.trace import get_tracer

from .logging import (
    setup_logging,
    get_logger,
    set_level,
    LoggingConfig,
    LogContext,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "get_tracer",
    "set_level",
    "LoggingConfig",
    "LogContext",
]
