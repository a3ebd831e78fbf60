"""
Plain text file extractor.

Decodes ``file`` assets carrying text-like media types (text/*, JSON,
markdown, CSV, YAML) as UTF-8.

Dependencies: ragcore.models.assets
System role: Built-in asset extractor
"""

import logging

from ragcore.models.assets import AssetInput, ExtractedText, ExtractionContext, ExtractionResult

logger = logging.getLogger(__name__)

TEXT_MEDIA_TYPES = {
    "application/json",
    "application/x-ndjson",
    "application/xml",
    "application/yaml",
    "application/x-yaml",
    "text/csv",
    "text/markdown",
}


class TextFileExtractor:
    """
    Extracts the text of text-like files.

    Output longer than ``max_output_chars`` is truncated; output shorter
    than ``min_chars`` is still returned, with a warning.
    """

    def __init__(self, max_output_chars: int = 200_000, min_chars: int = 1) -> None:
        self.max_output_chars = max_output_chars
        self.min_chars = min_chars

    def supports(self, asset: AssetInput, ctx: ExtractionContext) -> bool:
        if asset.kind != "file" or asset.data is None:
            return False
        media_type = (asset.media_type or "").split(";")[0].strip().lower()
        return media_type.startswith("text/") or media_type in TEXT_MEDIA_TYPES

    async def extract(self, asset: AssetInput, ctx: ExtractionContext) -> ExtractionResult:
        """
        Decode the asset bytes.

        Args:
            asset: File asset with inline bytes
            ctx: Extraction context

        Returns:
            ExtractionResult: A single text labelled with the asset uri or id
        """
        text = asset.data.decode("utf-8", errors="replace").strip()
        warnings = []

        if len(text) > self.max_output_chars:
            warnings.append(f"Text truncated from {len(text)} to {self.max_output_chars} characters.")
            text = text[: self.max_output_chars]
        if len(text) < self.min_chars:
            warnings.append(f"Extracted text is shorter than {self.min_chars} characters.")

        logger.debug(f"{__name__}:extract - asset_id={asset.asset_id} chars={len(text)} source_id={ctx.source_id}")
        if not text:
            return ExtractionResult(warnings=warnings)
        return ExtractionResult(
            texts=[ExtractedText(label=asset.uri or asset.asset_id, content=text)],
            warnings=warnings,
        )
