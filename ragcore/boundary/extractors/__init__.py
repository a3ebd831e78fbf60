"""Built-in asset extractors."""

from ragcore.boundary.extractors.text_file import TextFileExtractor

__all__ = ["TextFileExtractor"]
