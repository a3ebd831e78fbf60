"""
Observability module.

Provides logging configuration, safe structured logging helpers and
operation id tracking.
"""

from ragcore.observability.correlation import (
    clear_operation_id,
    get_operation_id,
    operation_context,
    set_operation_id,
)
from ragcore.observability.log_utils import (
    log_exception_with_context,
    log_with_context,
    safe_log_value,
)
from ragcore.observability.logger import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
    "log_with_context",
    "log_exception_with_context",
    "safe_log_value",
    "set_operation_id",
    "get_operation_id",
    "clear_operation_id",
    "operation_context",
]
