"""
Asset and extraction models.

Dependencies: pydantic
System role: Contracts between ingest and asset extractors
"""

from typing import Any, Literal

from pydantic import BaseModel, Field

AssetKind = Literal["pdf", "image", "audio", "video", "file"]


class AssetInput(BaseModel):
    """A non-text payload attached to an ingested document."""

    asset_id: str
    kind: AssetKind
    data: bytes | None = Field(default=None, description="Raw bytes of the asset")
    url: str | None = Field(default=None, description="Remote location when bytes are not inlined")
    media_type: str | None = None
    uri: str | None = Field(default=None, description="Original location, kept for citation")
    text: str | None = Field(default=None, description="Caption or alt text supplied by the caller")
    metadata: dict[str, Any] = Field(default_factory=dict)


class ExtractionContext(BaseModel):
    """What an extractor knows about the document it is working for."""

    source_id: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    max_bytes: int


class ExtractedText(BaseModel):
    """One labelled piece of text pulled out of an asset."""

    label: str
    content: str
    page_range: tuple[int, int] | None = None


class ExtractionResult(BaseModel):
    """Texts produced by an extractor for a single asset."""

    texts: list[ExtractedText] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
