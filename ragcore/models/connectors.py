"""
Connector event models.

A connector yields these events; the runner applies them in order.

Dependencies: pydantic, ragcore.models.ingest, ragcore.models.document
System role: Connector stream contract
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

from ragcore.models.document import DeleteInput
from ragcore.models.ingest import IngestInput


class UpsertEvent(BaseModel):
    type: Literal["upsert"] = "upsert"
    input: IngestInput


class DeleteEvent(BaseModel):
    type: Literal["delete"] = "delete"
    input: DeleteInput


class ProgressEvent(BaseModel):
    type: Literal["progress"] = "progress"
    message: str = ""
    current: int | None = None
    total: int | None = None
    source_id: str | None = None


class WarningEvent(BaseModel):
    type: Literal["warning"] = "warning"
    code: str
    message: str
    source_id: str | None = None


class CheckpointEvent(BaseModel):
    type: Literal["checkpoint"] = "checkpoint"
    checkpoint: Any


ConnectorEvent = Annotated[
    Union[UpsertEvent, DeleteEvent, ProgressEvent, WarningEvent, CheckpointEvent],
    Field(discriminator="type"),
]


class ConnectorRunResult(BaseModel):
    """Counts of what a connector run applied."""

    upserts: int = 0
    deletes: int = 0
    warnings: int = 0
    last_checkpoint: Any = None
