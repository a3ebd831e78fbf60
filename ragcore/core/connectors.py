"""
Connector stream runner.

Consumes the events a connector yields and applies them to the engine,
one at a time and in order. Checkpoints are handed back to the caller to
persist; the runner itself keeps no state between runs.

Dependencies: asyncio, pydantic, ragcore.models.connectors
System role: Bridge between source connectors and the context engine
"""

import asyncio
import inspect
import logging
from typing import Any, AsyncIterable, Awaitable, Callable, Iterable, Protocol, Union

from pydantic import TypeAdapter

from ragcore.core.exceptions import ConnectorAbortedError
from ragcore.models.connectors import (
    CheckpointEvent,
    ConnectorEvent,
    ConnectorRunResult,
    DeleteEvent,
    UpsertEvent,
    WarningEvent,
)
from ragcore.models.document import DeleteInput
from ragcore.models.ingest import IngestInput, IngestResult

logger = logging.getLogger(__name__)

_event_adapter: TypeAdapter = TypeAdapter(ConnectorEvent)

ConnectorStream = Union[AsyncIterable[Any], Iterable[Any]]
EventCallback = Callable[[Any], Union[None, Awaitable[None]]]


class ConnectorTarget(Protocol):
    """The engine surface a connector run needs."""

    async def ingest_input(self, input: IngestInput) -> IngestResult:
        ...

    async def delete(self, target: DeleteInput) -> int:
        ...


async def _maybe_await(value: Any) -> None:
    if inspect.isawaitable(value):
        await value


async def _iterate(stream: ConnectorStream):
    if hasattr(stream, "__aiter__"):
        async for item in stream:
            yield item
    else:
        for item in stream:
            yield item


async def run_connector_stream(
    engine: ConnectorTarget,
    stream: ConnectorStream,
    on_event: EventCallback | None = None,
    on_checkpoint: EventCallback | None = None,
    stop_event: asyncio.Event | None = None,
) -> ConnectorRunResult:
    """
    Apply a connector's event stream to the engine.

    Upserts go to ``engine.ingest_input``, deletes to ``engine.delete``.
    Progress and warning events are only reported. Any error raised while
    applying an event stops consumption and propagates.

    Args:
        engine: Engine (or compatible object) to apply events to
        stream: Async or sync iterable of events or event dictionaries
        on_event: Called with every event before it is applied
        on_checkpoint: Called with the payload of every checkpoint event
        stop_event: When set, consumption stops before the next event

    Returns:
        ConnectorRunResult: Counts of applied events and the last checkpoint

    Raises:
        ConnectorAbortedError: stop_event was set
        pydantic.ValidationError: An event dictionary is malformed
    """
    result = ConnectorRunResult()

    async for raw in _iterate(stream):
        if stop_event is not None and stop_event.is_set():
            logger.info(f"{__name__}:run_connector_stream - Stopped after {result.upserts} upserts")
            raise ConnectorAbortedError(
                "Connector run aborted",
                details={"upserts": result.upserts, "deletes": result.deletes},
            )

        event = raw if not isinstance(raw, dict) else _event_adapter.validate_python(raw)

        if on_event is not None:
            await _maybe_await(on_event(event))

        if isinstance(event, UpsertEvent):
            await engine.ingest_input(event.input)
            result.upserts += 1
        elif isinstance(event, DeleteEvent):
            await engine.delete(event.input)
            result.deletes += 1
        elif isinstance(event, WarningEvent):
            result.warnings += 1
            logger.warning(f"{__name__}:run_connector_stream - {event.code}: {event.message}")
        elif isinstance(event, CheckpointEvent):
            result.last_checkpoint = event.checkpoint
            if on_checkpoint is not None:
                await _maybe_await(on_checkpoint(event.checkpoint))

    logger.info(
        f"{__name__}:run_connector_stream - Completed: upserts={result.upserts} "
        f"deletes={result.deletes} warnings={result.warnings}"
    )
    return result
