"""
Embedding gateway.

Batches texts to the embedding provider with bounded concurrency and
returns vectors in input order, whatever order the batches finish in.
Every provider call is bounded by a timeout and its output is checked
before it reaches the store.

Dependencies: asyncio, ragcore.core.providers, ragcore.configs
System role: Single entry point to the embedding provider
"""

import asyncio
import logging
import numbers
import time
from typing import Any, Awaitable, Sequence

from ragcore.configs.embedding import EmbeddingSettings
from ragcore.core.exceptions import ConfigurationError, EmbeddingError
from ragcore.core.providers import (
    BatchEmbedder,
    ImageEmbedder,
    TextEmbedder,
    provider_model,
    provider_name,
)

logger = logging.getLogger(__name__)


class EmbeddingGateway:
    """
    Order-preserving, concurrency-bounded access to an embedding provider.

    Capabilities are inspected once: ``embed_many`` is used for ingest
    when present, otherwise texts go one by one through ``embed``.
    """

    def __init__(
        self,
        provider: Any,
        batch_size: int = 32,
        concurrency: int = 4,
        timeout_ms: int = 30_000,
    ) -> None:
        """
        Initialize the gateway.

        Args:
            provider: Object implementing at least ``embed``
            batch_size: Texts per ``embed_many`` call
            concurrency: Maximum provider calls in flight
            timeout_ms: Timeout per provider call in milliseconds

        Raises:
            ConfigurationError: Provider has no ``embed`` method or limits are invalid
        """
        if not isinstance(provider, TextEmbedder):
            raise ConfigurationError(
                "Embedding provider must implement embed(text)",
                details={"provider": type(provider).__name__},
            )
        if batch_size < 1 or concurrency < 1:
            raise ConfigurationError(
                "batch_size and concurrency must be at least 1",
                details={"batch_size": batch_size, "concurrency": concurrency},
            )
        self.provider = provider
        self.batch_size = batch_size
        self.concurrency = concurrency
        self.timeout_s = timeout_ms / 1000
        self.supports_batch = isinstance(provider, BatchEmbedder)
        self.supports_images = isinstance(provider, ImageEmbedder)

    @classmethod
    def from_settings(cls, provider: Any, settings: EmbeddingSettings) -> "EmbeddingGateway":
        return cls(
            provider,
            batch_size=settings.batch_size,
            concurrency=settings.concurrency,
            timeout_ms=settings.timeout_ms,
        )

    @property
    def name(self) -> str:
        return provider_name(self.provider)

    @property
    def model(self) -> str | None:
        return provider_model(self.provider)

    async def embed_query(self, text: str) -> list[float]:
        """
        Embed a single query text.

        Raises:
            EmbeddingError: Provider failure, timeout or malformed vector
        """
        vector = await self._call(self.provider.embed(text), "embed")
        return self._check_vector(vector, 0)

    async def embed_texts(self, texts: list[str]) -> list[list[float]]:
        """
        Embed texts in batches, preserving input order.

        Args:
            texts: Texts to embed

        Returns:
            list[list[float]]: One vector per text, same order as ``texts``

        Raises:
            EmbeddingError: Any batch failed, timed out or returned malformed
                vectors; no partial result is returned
        """
        if not texts:
            return []

        start = time.perf_counter()
        semaphore = asyncio.Semaphore(self.concurrency)

        if self.supports_batch:
            batches = [
                (offset, texts[offset:offset + self.batch_size])
                for offset in range(0, len(texts), self.batch_size)
            ]

            async def run(offset: int, batch: list[str]) -> list[list[float]]:
                async with semaphore:
                    vectors = await self._call(self.provider.embed_many(batch), "embed_many")
                return self._check_batch(vectors, batch, offset)

            jobs = [run(offset, batch) for offset, batch in batches]
        else:
            async def run_one(i: int, text: str) -> list[list[float]]:
                async with semaphore:
                    vector = await self._call(self.provider.embed(text), "embed")
                return [self._check_vector(vector, i)]

            jobs = [run_one(i, text) for i, text in enumerate(texts)]

        tasks = [asyncio.ensure_future(job) for job in jobs]
        try:
            # gather returns results in submission order
            results = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        vectors = [vector for part in results for vector in part]
        dimensions = {len(v) for v in vectors}
        if len(dimensions) > 1:
            raise EmbeddingError(
                "Embedding provider returned vectors of different dimensions",
                provider=self.name,
                details={"dimensions": sorted(dimensions)},
            )

        logger.debug(
            f"{__name__}:embed_texts - texts={len(texts)} calls={len(tasks)} "
            f"batched={self.supports_batch} ({(time.perf_counter() - start) * 1000:.1f}ms)"
        )
        return vectors

    async def embed_image(self, data: bytes, media_type: str | None = None) -> list[float]:
        """
        Embed image bytes through a multimodal provider.

        Raises:
            ConfigurationError: Provider cannot embed images
            EmbeddingError: Provider failure, timeout or malformed vector
        """
        if not self.supports_images:
            raise ConfigurationError(
                "Embedding provider does not support images",
                details={"provider": self.name},
            )
        vector = await self._call(self.provider.embed_image(data, media_type), "embed_image")
        return self._check_vector(vector, 0)

    async def _call(self, awaitable: Awaitable[Any], operation: str) -> Any:
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout_s)
        except asyncio.TimeoutError as e:
            raise EmbeddingError(
                f"Embedding provider timed out after {self.timeout_s:.1f}s",
                provider=self.name,
                details={"operation": operation},
            ) from e
        except EmbeddingError:
            raise
        except Exception as e:
            raise EmbeddingError(
                f"Embedding provider failed: {e}",
                provider=self.name,
                details={"operation": operation, "error_type": type(e).__name__},
            ) from e

    def _check_batch(self, vectors: Any, batch: list[str], offset: int) -> list[list[float]]:
        if vectors is None or len(vectors) != len(batch):
            raise EmbeddingError(
                "Embedding provider returned the wrong number of vectors",
                provider=self.name,
                details={
                    "expected": len(batch),
                    "received": None if vectors is None else len(vectors),
                    "offset": offset,
                },
            )
        return [self._check_vector(vector, offset + i) for i, vector in enumerate(vectors)]

    def _check_vector(self, vector: Sequence[Any] | None, index: int) -> list[float]:
        if vector is None or len(vector) == 0:
            raise EmbeddingError(
                "Embedding provider returned an empty vector",
                provider=self.name,
                details={"index": index},
            )
        values = []
        for value in vector:
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise EmbeddingError(
                    "Embedding provider returned a non-numeric value",
                    provider=self.name,
                    details={"index": index, "value_type": type(value).__name__},
                )
            values.append(float(value))
        return values
