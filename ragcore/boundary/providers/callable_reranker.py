"""
Callable reranker.

Wraps an async scoring function so it can be plugged into the rerank
engine without writing a class.

Dependencies: ragcore.models.rerank
System role: Reranker provider adapter
"""

from typing import Awaitable, Callable

from ragcore.models.rerank import RerankerResult

RerankFn = Callable[[str, list[str]], Awaitable[RerankerResult]]


class CallableReranker:
    """
    Reranker delegating to ``fn(query, documents)``.

    Usage:
        async def by_length(query, documents):
            order = sorted(range(len(documents)), key=lambda i: -len(documents[i]))
            return RerankerResult(order=order)

        reranker = CallableReranker("by-length", by_length)
    """

    def __init__(self, name: str, fn: RerankFn, model: str | None = None) -> None:
        self.name = name
        self.fn = fn
        self.model = model

    async def rerank(self, query: str, documents: list[str]) -> RerankerResult:
        result = await self.fn(query, documents)
        if result.model is None and self.model is not None:
            result = result.model_copy(update={"model": self.model})
        return result
