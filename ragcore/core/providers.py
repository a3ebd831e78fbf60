"""
Provider capability protocols.

Embedding providers and rerankers are duck-typed; these runtime-checkable
protocols describe the methods the engine looks for. A provider may
optionally expose ``name`` and ``model`` attributes for reporting.

Dependencies: ragcore.models
System role: Seams between the engine and external model providers
"""

from typing import Protocol, Sequence, runtime_checkable

from ragcore.models.assets import AssetInput, ExtractionContext, ExtractionResult
from ragcore.models.rerank import RerankerResult


@runtime_checkable
class TextEmbedder(Protocol):
    """Embeds a single text, used for queries."""

    async def embed(self, text: str) -> list[float]:
        ...


@runtime_checkable
class BatchEmbedder(Protocol):
    """Embeds many texts in one call."""

    async def embed_many(self, texts: list[str]) -> Sequence[Sequence[float]]:
        ...


@runtime_checkable
class ImageEmbedder(Protocol):
    """Embeds raw image bytes into the same space as text."""

    async def embed_image(self, data: bytes, media_type: str | None = None) -> list[float]:
        ...


@runtime_checkable
class Reranker(Protocol):
    """
    Scores documents against a query.

    ``rerank`` returns indices into ``documents`` in preference order and,
    optionally, one score per returned index.
    """

    async def rerank(self, query: str, documents: list[str]) -> RerankerResult:
        ...


def provider_name(provider: object) -> str:
    """Reporting name of a provider: its ``name`` attribute or class name."""
    name = getattr(provider, "name", None)
    return name if isinstance(name, str) and name else type(provider).__name__


def provider_model(provider: object) -> str | None:
    model = getattr(provider, "model", None)
    return model if isinstance(model, str) and model else None


@runtime_checkable
class AssetExtractor(Protocol):
    """
    Turns an asset into text.

    The first extractor whose ``supports`` returns True handles the asset.
    """

    def supports(self, asset: AssetInput, ctx: ExtractionContext) -> bool:
        ...

    async def extract(self, asset: AssetInput, ctx: ExtractionContext) -> ExtractionResult:
        ...
