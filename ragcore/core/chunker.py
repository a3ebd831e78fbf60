"""
Token-bounded chunker.

Splits document text into an ordered list of chunks whose token counts
stay within ``chunk_size``:

1. Split the text into coarse units: paragraphs for prose, top-level
   function and class definitions for Python source.
2. Merge consecutive units while the merged text fits ``chunk_size``.
3. Force-split any unit that is still too large into overlapping token
   windows advancing by ``chunk_size - chunk_overlap``.
4. Fold a merged chunk smaller than ``min_chunk_size`` into the chunk
   before it.

Every chunk is an exact substring of the input, trimmed of surrounding
whitespace.

Dependencies: ragcore.core.tokenizer, ragcore.models.chunk
System role: First stage of the ingest pipeline
"""

import ast
import logging
import re
from pathlib import PurePosixPath
from typing import Any, Protocol

from ragcore.core.exceptions import ValidationError
from ragcore.core.tokenizer import TiktokenTokenizer, Tokenizer
from ragcore.models.chunk import ChunkingOptions, ChunkText

logger = logging.getLogger(__name__)

_PARAGRAPH = re.compile(r"\n[ \t]*\n\s*")
_SENTENCE = re.compile(r"\n+|[.?!]+[ \t]+")
_NEWLINE = re.compile(r"\r\n|\r|\n")

_MAJOR_PYTHON_NODES = (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)

_PATH_KEYS = ("path", "file_path", "filename", "name", "source_path")

_EXTENSION_LANGUAGES = {
    ".py": "python",
    ".pyi": "python",
    ".pyw": "python",
}

Span = tuple[int, int]


class Chunker(Protocol):
    """Anything that turns document text into ordered chunks."""

    tokenizer: Tokenizer

    def chunk(self, content: str, options: ChunkingOptions | None = None) -> list[ChunkText]:
        ...


def infer_language(source_id: str, metadata: dict[str, Any] | None = None) -> str | None:
    """
    Guess the source language from a file extension.

    Looks at well-known path keys in metadata first, then at the source id.
    Only languages the chunker can split on definitions are recognised.

    Args:
        source_id: Document source id
        metadata: Document metadata

    Returns:
        Language name, or None when no recognised extension is found
    """
    metadata = metadata or {}
    candidates = [metadata.get(key) for key in _PATH_KEYS] + [source_id]
    for value in candidates:
        if not isinstance(value, str) or not value:
            continue
        language = _EXTENSION_LANGUAGES.get(PurePosixPath(value).suffix.lower())
        if language:
            return language
    return None


def validate_options(options: ChunkingOptions) -> None:
    """
    Reject chunking options that cannot produce chunks.

    Raises:
        ValidationError: chunk_size < 1, chunk_overlap < 0 or min_chunk_size < 0
    """
    if options.chunk_size < 1:
        raise ValidationError("chunk_size must be at least 1", field="chunk_size")
    if options.chunk_overlap < 0:
        raise ValidationError("chunk_overlap must not be negative", field="chunk_overlap")
    if options.min_chunk_size < 0:
        raise ValidationError("min_chunk_size must not be negative", field="min_chunk_size")


class RecursiveChunker:
    """
    Default chunker.

    ``method="recursive"`` runs the unit/merge/force-split algorithm;
    ``method="token"`` emits forced windows only and folds a short final
    window into the one before it.
    """

    def __init__(self, tokenizer: Tokenizer | None = None) -> None:
        self.tokenizer = tokenizer or TiktokenTokenizer()

    def chunk(self, content: str, options: ChunkingOptions | None = None) -> list[ChunkText]:
        """
        Split content into ordered chunks.

        Args:
            content: Document text
            options: Chunk sizing and strategy, defaults apply when None

        Returns:
            list[ChunkText]: Chunks numbered from 0, empty for blank input

        Raises:
            ValidationError: Invalid options
        """
        options = options or ChunkingOptions()
        validate_options(options)

        if not content or not content.strip():
            return []

        if options.method == "token":
            spans = self._token_windows(content, options)
        else:
            spans = self._merge(content, options)

        chunks = self._build(content, spans)
        logger.debug(
            f"{__name__}:chunk - method={options.method} language={options.language} "
            f"chars={len(content)} chunks={len(chunks)}"
        )
        return chunks

    def _merge(self, content: str, options: ChunkingOptions) -> list[Span]:
        pieces: list[Span] = []
        buffer: Span | None = None

        for kind, start, end in self._atoms(content, options):
            if kind == "window":
                self._flush(content, buffer, pieces, options)
                buffer = None
                pieces.append((start, end))
                continue
            if buffer is None:
                buffer = (start, end)
            elif self.tokenizer.count(content[buffer[0]:end]) <= options.chunk_size:
                buffer = (buffer[0], end)
            else:
                self._flush(content, buffer, pieces, options)
                buffer = (start, end)

        self._flush(content, buffer, pieces, options)
        return pieces

    def _flush(
        self,
        content: str,
        buffer: Span | None,
        pieces: list[Span],
        options: ChunkingOptions,
    ) -> None:
        if buffer is None:
            return
        start, end = _trim(content, *buffer)
        if start >= end:
            return
        if pieces and self.tokenizer.count(content[start:end]) < options.min_chunk_size:
            pieces[-1] = (pieces[-1][0], end)
        else:
            pieces.append((start, end))

    def _atoms(self, content: str, options: ChunkingOptions):
        """Yield ("unit" | "window", start, end) in document order."""
        code_units = None
        if options.language == "python":
            code_units = _python_units(content)
            if code_units is None:
                logger.debug(f"{__name__}:_atoms - Python source does not parse, using one unit")
                code_units = [(0, len(content))]

        if code_units is not None:
            for start, end in code_units:
                if self.tokenizer.count(content[start:end]) <= options.chunk_size:
                    yield "unit", start, end
                else:
                    for window in self._windows(content, start, end, options):
                        yield "window", *window
            return

        for start, end in _split(content, 0, len(content), _PARAGRAPH):
            if self.tokenizer.count(content[start:end]) <= options.chunk_size:
                yield "unit", start, end
                continue
            for s_start, s_end in _split(content, start, end, _SENTENCE):
                if self.tokenizer.count(content[s_start:s_end]) <= options.chunk_size:
                    yield "unit", s_start, s_end
                else:
                    for window in self._windows(content, s_start, s_end, options):
                        yield "window", *window

    def _windows(self, content: str, start: int, end: int, options: ChunkingOptions) -> list[Span]:
        return [span for span, _ in self._windows_with_counts(content, start, end, options)]

    def _windows_with_counts(
        self,
        content: str,
        start: int,
        end: int,
        options: ChunkingOptions,
    ) -> list[tuple[Span, int]]:
        token_spans = [(a + start, b + start) for a, b in self.tokenizer.spans(content[start:end])]
        size = options.chunk_size
        stride = max(1, size - options.chunk_overlap)
        total = len(token_spans)

        windows = []
        for i in range(0, total, stride):
            window = token_spans[i:i + size]
            windows.append(((window[0][0], window[-1][1]), len(window)))
            if i + size >= total:
                break
        return windows

    def _token_windows(self, content: str, options: ChunkingOptions) -> list[Span]:
        windows = self._windows_with_counts(content, 0, len(content), options)
        if len(windows) > 1 and windows[-1][1] < options.min_chunk_size:
            (_, last_end), _ = windows.pop()
            (prev_start, _), prev_count = windows[-1]
            windows[-1] = ((prev_start, last_end), prev_count)
        return [span for span, _ in windows]

    def _build(self, content: str, spans: list[Span]) -> list[ChunkText]:
        chunks = []
        for start, end in spans:
            start, end = _trim(content, start, end)
            if start >= end:
                continue
            text = content[start:end]
            chunks.append(
                ChunkText(
                    index=len(chunks),
                    content=text,
                    token_count=self.tokenizer.count(text),
                    start=start,
                    end=end,
                )
            )
        return chunks


def _trim(content: str, start: int, end: int) -> Span:
    while start < end and content[start].isspace():
        start += 1
    while end > start and content[end - 1].isspace():
        end -= 1
    return start, end


def _split(content: str, start: int, end: int, separator: re.Pattern) -> list[Span]:
    """Split content[start:end] after each separator match, keeping separators."""
    units = []
    pos = start
    for match in separator.finditer(content, start, end):
        if match.end() > pos:
            units.append((pos, match.end()))
            pos = match.end()
    if pos < end:
        units.append((pos, end))
    return units


def _python_units(content: str) -> list[Span] | None:
    """
    Units ending after each top-level function or class definition.

    Text between definitions (imports, constants, comments) is folded into
    the unit of the definition that follows it. Returns None when the
    source does not parse.
    """
    try:
        tree = ast.parse(content)
    except (SyntaxError, ValueError):
        return None

    line_starts = [0] + [m.end() for m in _NEWLINE.finditer(content)]

    units = []
    pos = 0
    for node in tree.body:
        if not isinstance(node, _MAJOR_PYTHON_NODES) or node.end_lineno is None:
            continue
        line_start = line_starts[node.end_lineno - 1]
        line_end = line_starts[node.end_lineno] if node.end_lineno < len(line_starts) else len(content)
        line_bytes = content[line_start:line_end].encode("utf-8")
        col = len(line_bytes[:node.end_col_offset].decode("utf-8", errors="ignore"))
        newline = content.find("\n", line_start + col)
        cut = len(content) if newline == -1 else newline + 1
        if cut > pos:
            units.append((pos, cut))
            pos = cut
    if pos < len(content):
        units.append((pos, len(content)))
    return units
