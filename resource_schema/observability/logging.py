"""
Structured logging for resource-schema.

Records emitted while a resource definition is processed carry the typeName
being processed and a correlation id shared by every record of that run.
Both live in context variables, so concurrent loads in other threads or
tasks keep their own.
"""

import contextlib
import contextvars
import logging
import uuid
from datetime import datetime
from typing import Any, Iterator, Optional

_correlation_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "correlation_id", default=None
)

_schema_context: contextvars.ContextVar[Optional[dict[str, Any]]] = contextvars.ContextVar(
    "schema_context", default=None
)


def get_correlation_id() -> Optional[str]:
    """Correlation id of the definition being processed, if any."""
    return _correlation_id.get()


@contextlib.contextmanager
def schema_context(
    type_name: Optional[str] = None,
    operation: Optional[str] = None,
    correlation_id: Optional[str] = None,
) -> Iterator[str]:
    """
    Scope log records to the processing of one resource definition.

    Inside the block every contextual record and every ``log_operation``
    record carries ``type_name``, ``operation`` and ``correlation_id``.
    The correlation id is ``correlation_id`` when given, else the one of an
    enclosing block, else a new uuid4. The previous context is restored on
    exit, also when the block raises.

    Example:
        with schema_context("Org::Svc::Res", "load_resource_definition") as cid:
            ...

    Yields:
        The correlation id in effect
    """
    correlation_id = correlation_id or _correlation_id.get() or str(uuid.uuid4())
    id_token = _correlation_id.set(correlation_id)
    context_token = _schema_context.set({"type_name": type_name, "operation": operation})
    try:
        yield correlation_id
    finally:
        _schema_context.reset(context_token)
        _correlation_id.reset(id_token)


def get_logging_context() -> dict[str, Any]:
    """Timestamp plus whatever ``schema_context`` currently holds."""
    context: dict[str, Any] = {"timestamp": datetime.now().isoformat()}

    correlation_id = _correlation_id.get()
    if correlation_id:
        context["correlation_id"] = correlation_id

    current = _schema_context.get()
    if current:
        context.update({key: value for key, value in current.items() if value is not None})

    return context


class ContextualLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter stamping the schema context onto every record."""

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        context = get_logging_context()
        context.update(kwargs.get("extra") or {})
        kwargs["extra"] = context
        return msg, kwargs


def get_logger(name: str) -> ContextualLoggerAdapter:
    """Contextual logger for module ``name``."""
    return ContextualLoggerAdapter(logging.getLogger(name), {})


def log_operation(
    logger: logging.Logger,
    operation: str,
    level: int = logging.INFO,
    success: bool = True,
    duration_ms: Optional[float] = None,
    **context: Any,
) -> None:
    """
    Log the outcome of an operation with structured context.

    Args:
        logger: Logger instance
        operation: Operation name; overrides the operation of the schema context
        level: Log level
        success: Whether operation succeeded
        duration_ms: Operation duration in milliseconds
        **context: Additional record attributes
    """
    record_context = get_logging_context()
    record_context.update(operation=operation, success=success, **context)
    if duration_ms is not None:
        record_context["duration_ms"] = round(duration_ms, 2)

    status = "Operation" if success else "Operation failed"
    message = f"{status}: {operation}"
    if duration_ms is not None:
        message += f" (duration: {duration_ms:.2f}ms)"

    logger.log(level, message, extra=record_context)
