"""
Tokenizers used for chunk sizing.

A tokenizer reports token counts and the character span of every token,
so the chunker can cut text on token boundaries and still return exact
substrings of its input.

Dependencies: tiktoken
System role: Token accounting for the chunker
"""

import re
from typing import Protocol, runtime_checkable

import tiktoken

_WORD = re.compile(r"\S+")


@runtime_checkable
class Tokenizer(Protocol):
    """Counts tokens and locates them in the source text."""

    def count(self, text: str) -> int:
        ...

    def spans(self, text: str) -> list[tuple[int, int]]:
        ...


class TiktokenTokenizer:
    """
    BPE tokenizer backed by a tiktoken encoding.

    The encoding is loaded on first use. Special-token strings in the
    input are tokenized as ordinary text.
    """

    def __init__(self, encoding_name: str = "o200k_base") -> None:
        self.encoding_name = encoding_name
        self._encoding: tiktoken.Encoding | None = None

    @property
    def encoding(self) -> tiktoken.Encoding:
        if self._encoding is None:
            self._encoding = tiktoken.get_encoding(self.encoding_name)
        return self._encoding

    def count(self, text: str) -> int:
        if not text:
            return 0
        return len(self.encoding.encode(text, disallowed_special=()))

    def spans(self, text: str) -> list[tuple[int, int]]:
        """
        Character span of each token.

        Tokens that start inside a multi-byte character are attributed to
        that character, so a span can be empty but spans never overlap.
        """
        if not text:
            return []
        tokens = self.encoding.encode(text, disallowed_special=())
        _, offsets = self.encoding.decode_with_offsets(tokens)
        ends = offsets[1:] + [len(text)]
        return list(zip(offsets, ends))


class WhitespaceTokenizer:
    """Treats every run of non-whitespace characters as one token."""

    def count(self, text: str) -> int:
        return sum(1 for _ in _WORD.finditer(text))

    def spans(self, text: str) -> list[tuple[int, int]]:
        return [m.span() for m in _WORD.finditer(text)]
