"""
Test suite for tokenizers.

System role: Verification of token accounting used by the chunker
"""

from ragcore.core.tokenizer import TiktokenTokenizer, Tokenizer, WhitespaceTokenizer


class TestWhitespaceTokenizer:
    """Test suite for WhitespaceTokenizer."""

    def test_spans_should_locate_each_word(self) -> None:
        # Arrange
        text = " ab  cd\n"

        # Act
        spans = WhitespaceTokenizer().spans(text)

        # Assert
        assert spans == [(1, 3), (5, 7)]
        assert [text[s:e] for s, e in spans] == ["ab", "cd"]

    def test_count_should_ignore_whitespace(self) -> None:
        assert WhitespaceTokenizer().count("\n one\ttwo  three \n") == 3
        assert WhitespaceTokenizer().count("   ") == 0


class TestTiktokenTokenizer:
    """Test suite for TiktokenTokenizer construction."""

    def test_init_should_not_load_encoding(self) -> None:
        """Test the encoding is loaded lazily on first use."""
        # Act
        tokenizer = TiktokenTokenizer("cl100k_base")

        # Assert
        assert tokenizer.encoding_name == "cl100k_base"
        assert tokenizer._encoding is None

    def test_empty_text_should_not_need_encoding(self) -> None:
        tokenizer = TiktokenTokenizer()

        assert tokenizer.count("") == 0
        assert tokenizer.spans("") == []
        assert tokenizer._encoding is None

    def test_tokenizers_should_satisfy_protocol(self) -> None:
        assert isinstance(TiktokenTokenizer(), Tokenizer)
        assert isinstance(WhitespaceTokenizer(), Tokenizer)
