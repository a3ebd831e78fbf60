"""
Structured logging helpers.

Renders arbitrary context values (vectors, payload bytes, pydantic
models, large texts) into short strings so a log line never carries a
full embedding or document body.

Dependencies: logging (stdlib), pydantic
System role: Logging helper functions
"""

import logging
from typing import Any

from pydantic import BaseModel


def _summarise(value: Any) -> str:
    if value is None:
        return "None"
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float):
        return f"{value:.2f}"
    if isinstance(value, (bytes, bytearray)):
        return f"bytes({len(value)})"
    if isinstance(value, (list, tuple)):
        if value and all(isinstance(v, float) for v in value):
            return f"vector({len(value)} dims)"
        return f"{type(value).__name__}({len(value)} items)"
    if isinstance(value, dict):
        return f"dict({len(value)} keys)"
    if isinstance(value, BaseModel):
        return type(value).__name__
    return str(value)


def safe_log_value(value: Any, max_length: int = 500) -> str:
    """
    Render a value for a log line without ever raising.

    Args:
        value: Value to render
        max_length: Length after which the rendering is cut

    Returns:
        str: Short, safe representation
    """
    try:
        rendered = _summarise(value)
    except Exception as e:
        return f"<unable to log: {type(e).__name__}>"
    if len(rendered) > max_length:
        return rendered[:max_length] + f"... (truncated, {len(rendered)} total)"
    return rendered


def format_context(**context) -> str:
    """Render context as ``key=value`` pairs in insertion order."""
    return " ".join(f"{key}={safe_log_value(val)}" for key, val in context.items())


def _extra(context: dict[str, Any]) -> dict[str, str]:
    # LogRecord reserves names like "message" and "args"
    return {f"ctx_{key}": safe_log_value(val) for key, val in context.items()}


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    **context,
) -> None:
    """
    Log a message followed by its rendered context.

    The rendered values are also attached to the record as ``ctx_<key>``
    attributes for handlers that emit structured output.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, etc.)
        message: Log message
        **context: Values describing the operation
    """
    if not logger.isEnabledFor(level):
        return
    rendered = format_context(**context)
    logger.log(level, f"{message} {rendered}" if rendered else message, extra=_extra(context))


def log_exception_with_context(
    logger: logging.Logger,
    message: str,
    exc: Exception,
    **context,
) -> None:
    """
    Log an exception, its type and message, and the operation context.

    Args:
        logger: Logger instance
        message: Log message
        exc: Exception being reported
        **context: Values describing the failed operation
    """
    context = {**context, "error_type": type(exc).__name__, "error_msg": str(exc)}
    logger.error(f"{message} {format_context(**context)}", exc_info=exc, extra=_extra(context))
