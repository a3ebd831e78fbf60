"""
Operation id context.

Tracks the id of the engine operation (ingest, retrieve, rerank, delete)
currently running, across await points, using contextvars.

Dependencies: contextvars
System role: Operation tracing across component boundaries
"""

from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Iterator
import uuid

operation_id_ctx: ContextVar[str] = ContextVar("operation_id", default="")


def set_operation_id(operation_id: str | None = None) -> tuple[str, Token]:
    """
    Set operation id in context.

    Args:
        operation_id: Optional operation id (generates new if None)

    Returns:
        tuple[str, Token]: The id that was set and the token to reset it
    """
    value = operation_id or uuid.uuid4().hex[:12]
    token = operation_id_ctx.set(value)
    return value, token


def get_operation_id() -> str:
    """
    Get current operation id from context.

    Returns:
        str: Current operation id, empty when outside an operation
    """
    return operation_id_ctx.get()


def clear_operation_id(token: Token | None = None) -> None:
    """Restore the previous operation id, or clear it when no token is given."""
    if token is not None:
        operation_id_ctx.reset(token)
    else:
        operation_id_ctx.set("")


@contextmanager
def operation_context(operation_id: str | None = None) -> Iterator[str]:
    """
    Run a block under an operation id.

    Usage:
        with operation_context() as op_id:
            await engine.ingest(...)
    """
    value, token = set_operation_id(operation_id)
    try:
        yield value
    finally:
        clear_operation_id(token)
