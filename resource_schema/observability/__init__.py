"""
Observability components.

Provides structured logging scoped to the resource definition being processed.
"""

from .logging import (
    ContextualLoggerAdapter,
    get_correlation_id,
    get_logger,
    get_logging_context,
    log_operation,
    schema_context,
)

__all__ = [
    "schema_context",
    "get_correlation_id",
    "get_logging_context",
    "ContextualLoggerAdapter",
    "get_logger",
    "log_operation",
]
