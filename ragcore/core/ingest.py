"""
Ingest orchestrator.

Composes asset extraction, chunking, embedding and the store upsert into
one operation per source document. Everything that can fail on the
network (extraction, embedding) happens before the store transaction, so
a failed ingest leaves the previously stored version untouched.

Dependencies: ragcore.core (chunker, embedding gateway, providers), ragcore.boundary.vdb, ragcore.configs
System role: Write path of the context engine
"""

import logging
import time
import uuid
from typing import Any, Callable, Sequence

from ragcore.boundary.vdb.vector_store import VectorStore
from ragcore.configs.chunking import ChunkingSettings
from ragcore.configs.storage import AssetSettings, StorageSettings
from ragcore.core.chunker import Chunker, infer_language
from ragcore.core.embedding_gateway import EmbeddingGateway
from ragcore.core.exceptions import ValidationError
from ragcore.core.providers import AssetExtractor
from ragcore.models.assets import AssetInput, ExtractionContext
from ragcore.models.chunk import Chunk, ChunkingOptions
from ragcore.models.ingest import IngestDurations, IngestInput, IngestResult, IngestWarning
from ragcore.observability.log_utils import log_with_context

logger = logging.getLogger(__name__)

IdGenerator = Callable[[], str]


def default_id_generator() -> str:
    return str(uuid.uuid4())


class _PreparedAssets:
    """Outcome of asset processing for one ingest."""

    def __init__(self) -> None:
        self.texts: list[str] = []
        self.extracted: list[dict[str, Any]] = []
        self.images: list[tuple[AssetInput, str]] = []
        self.warnings: list[IngestWarning] = []

    def warn(self, code: str, message: str, asset: AssetInput) -> None:
        self.warnings.append(IngestWarning(code=code, message=message, asset_id=asset.asset_id))
        logger.warning(f"{__name__}:ingest - {code}: asset_id={asset.asset_id} kind={asset.kind}")


class IngestOrchestrator:
    """
    Chunk, embed and upsert one source document.

    Storage policy is applied here: with ``store_chunk_content`` off the
    chunks are embedded from their text but persisted with empty content;
    with ``store_document_content`` off the document row keeps no text.
    """

    def __init__(
        self,
        chunker: Chunker,
        gateway: EmbeddingGateway,
        store: VectorStore,
        chunking: ChunkingSettings | None = None,
        storage: StorageSettings | None = None,
        assets: AssetSettings | None = None,
        extractors: Sequence[AssetExtractor] = (),
        id_generator: IdGenerator | None = None,
    ) -> None:
        self.chunker = chunker
        self.gateway = gateway
        self.store = store
        self.chunking = chunking or ChunkingSettings()
        self.storage = storage or StorageSettings()
        self.assets = assets or AssetSettings()
        self.extractors = list(extractors)
        self.id_generator = id_generator or default_id_generator

    def chunking_options(self, input: IngestInput) -> ChunkingOptions:
        """
        Effective chunking options for an ingest.

        Per-call overrides win over configured defaults; the language is
        inferred from file extensions when not given.
        """
        options = ChunkingOptions(
            chunk_size=self.chunking.chunk_size,
            chunk_overlap=self.chunking.chunk_overlap,
            min_chunk_size=self.chunking.min_chunk_size,
            method=self.chunking.method,
        )
        if input.chunking is not None:
            options = options.model_copy(update=input.chunking.model_dump(exclude_unset=True))
        if options.language is None:
            options = options.model_copy(update={"language": infer_language(input.source_id, input.metadata)})
        return options

    async def ingest(self, input: IngestInput) -> IngestResult:
        """
        Replace the stored version of a source document.

        Args:
            input: Source id, content, metadata, assets and chunking overrides

        Returns:
            IngestResult: Canonical document id, chunk count, warnings and timings

        Raises:
            ValidationError: Empty source id, nothing to index, or an
                unsupported asset with on_unsupported_asset="fail"
            EmbeddingError: Embedding provider failure (nothing persisted)
            VectorStoreError: Store transaction failure (rolled back)
        """
        if not input.source_id or not input.source_id.strip():
            raise ValidationError("source_id must not be empty", field="source_id")

        total_start = time.perf_counter()
        log_with_context(
            logger,
            logging.INFO,
            f"{__name__}:ingest - Starting",
            source_id=input.source_id,
            assets=input.assets,
        )

        prepared = await self._prepare_assets(input)
        content = "\n\n".join(part for part in [input.content, *prepared.texts] if part and part.strip())

        chunking_start = time.perf_counter()
        options = self.chunking_options(input)
        chunk_texts = self.chunker.chunk(content, options)
        chunking_ms = (time.perf_counter() - chunking_start) * 1000

        if not chunk_texts and not prepared.images:
            raise ValidationError(
                "Document produced no chunks; nothing to ingest",
                field="content",
                details={"source_id": input.source_id},
            )

        document_id = input.document_id or self.id_generator()
        metadata = dict(input.metadata)
        document_metadata = dict(metadata)
        if prepared.extracted:
            document_metadata["extracted_assets"] = prepared.extracted

        embedding_start = time.perf_counter()
        vectors = await self.gateway.embed_texts([c.content for c in chunk_texts])

        chunks = [
            Chunk(
                id=self.id_generator(),
                document_id=document_id,
                source_id=input.source_id,
                index=c.index,
                content=c.content if self.storage.store_chunk_content else "",
                token_count=c.token_count,
                metadata=metadata,
                embedding=vector,
            )
            for c, vector in zip(chunk_texts, vectors)
        ]

        for asset, caption in prepared.images:
            vector = await self.gateway.embed_image(asset.data, asset.media_type)
            chunks.append(
                Chunk(
                    id=self.id_generator(),
                    document_id=document_id,
                    source_id=input.source_id,
                    index=len(chunks),
                    content=caption if self.storage.store_chunk_content else "",
                    token_count=self.chunker.tokenizer.count(caption),
                    metadata={**metadata, **_asset_metadata(asset), "extractor": "image:embed"},
                    embedding=vector,
                )
            )
        embedding_ms = (time.perf_counter() - embedding_start) * 1000

        storage_start = time.perf_counter()
        result = await self.store.upsert(
            chunks,
            document_content=content if self.storage.store_document_content else "",
            document_metadata=document_metadata,
        )
        storage_ms = (time.perf_counter() - storage_start) * 1000
        total_ms = (time.perf_counter() - total_start) * 1000

        log_with_context(
            logger,
            logging.INFO,
            f"{__name__}:ingest - Completed",
            source_id=input.source_id,
            document_id=result.document_id,
            chunks=len(chunks),
            warnings=len(prepared.warnings),
            total_ms=total_ms,
        )
        return IngestResult(
            document_id=result.document_id,
            source_id=input.source_id,
            chunk_count=len(chunks),
            embedding_model=self.gateway.name,
            warnings=prepared.warnings,
            durations=IngestDurations(
                total_ms=total_ms,
                chunking_ms=chunking_ms,
                embedding_ms=embedding_ms,
                storage_ms=storage_ms,
            ),
        )

    async def _prepare_assets(self, input: IngestInput) -> _PreparedAssets:
        prepared = _PreparedAssets()
        ctx = ExtractionContext(
            source_id=input.source_id,
            metadata=input.metadata,
            max_bytes=self.assets.max_bytes,
        )

        for asset in input.assets:
            if asset.data is not None and len(asset.data) > self.assets.max_bytes:
                prepared.warn(
                    "asset_skipped_too_large",
                    f"Asset skipped: {len(asset.data)} bytes exceeds the {self.assets.max_bytes} byte limit.",
                    asset,
                )
                continue

            extractor = next((e for e in self.extractors if e.supports(asset, ctx)), None)
            if extractor is not None:
                await self._extract(extractor, asset, ctx, prepared)
                continue

            if asset.kind == "image":
                caption = (asset.text or "").strip()
                if self.gateway.supports_images and asset.data is not None:
                    prepared.images.append((asset, caption))
                elif caption:
                    prepared.texts.append(caption)
                    prepared.extracted.append({**_asset_metadata(asset), "label": "caption", "extractor": "image:caption"})
                else:
                    prepared.warn(
                        "asset_skipped_image_no_multimodal_and_no_caption",
                        "Image skipped: the embedding provider cannot embed images and the asset has no caption text.",
                        asset,
                    )
                continue

            if self.assets.on_unsupported_asset == "fail":
                raise ValidationError(
                    f"Unsupported asset kind: {asset.kind}",
                    field="assets",
                    details={"asset_id": asset.asset_id},
                )
            prepared.warn(
                "asset_skipped_unsupported_kind",
                f'Asset skipped: no extractor handles kind "{asset.kind}".',
                asset,
            )

        return prepared

    async def _extract(
        self,
        extractor: AssetExtractor,
        asset: AssetInput,
        ctx: ExtractionContext,
        prepared: _PreparedAssets,
    ) -> None:
        extractor_name = type(extractor).__name__
        try:
            result = await extractor.extract(asset, ctx)
        except Exception as e:
            if self.assets.on_error == "fail":
                raise
            prepared.warn("asset_processing_error", f"{extractor_name} failed: {e}", asset)
            return

        for message in result.warnings:
            prepared.warn("asset_extraction_warning", message, asset)

        texts = [t for t in result.texts if t.content.strip()]
        if not texts:
            prepared.warn(
                "asset_skipped_empty_extraction",
                f"{extractor_name} returned no text.",
                asset,
            )
            return

        for text in texts:
            prepared.texts.append(text.content.strip())
            entry = {**_asset_metadata(asset), "label": text.label, "extractor": extractor_name}
            if text.page_range is not None:
                entry["page_range"] = list(text.page_range)
            prepared.extracted.append(entry)


def _asset_metadata(asset: AssetInput) -> dict[str, Any]:
    meta: dict[str, Any] = {**asset.metadata, "asset_kind": asset.kind, "asset_id": asset.asset_id}
    uri = asset.uri or asset.url
    if uri:
        meta["asset_uri"] = uri
    if asset.media_type:
        meta["asset_media_type"] = asset.media_type
    return meta
