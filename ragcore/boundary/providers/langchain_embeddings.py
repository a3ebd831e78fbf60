"""
LangChain embeddings adapter.

Exposes any ``langchain_core.embeddings.Embeddings`` implementation
(Bedrock, Google GenAI, OpenAI, fakes) as an embedding provider with
``embed`` and ``embed_many``.

Dependencies: langchain-core
System role: Embedding provider adapter
"""

from langchain_core.embeddings import Embeddings


class LangChainEmbeddingProvider:
    """Embedding provider backed by a LangChain Embeddings object."""

    def __init__(
        self,
        embeddings: Embeddings,
        name: str | None = None,
        model: str | None = None,
    ) -> None:
        """
        Initialize the adapter.

        Args:
            embeddings: LangChain embeddings instance
            name: Reporting name, defaults to ``langchain:<class name>``
            model: Model id, read from the embeddings object when omitted
        """
        self.embeddings = embeddings
        self.name = name or f"langchain:{type(embeddings).__name__}"
        self.model = model or _model_of(embeddings)

    async def embed(self, text: str) -> list[float]:
        return await self.embeddings.aembed_query(text)

    async def embed_many(self, texts: list[str]) -> list[list[float]]:
        return await self.embeddings.aembed_documents(texts)


def _model_of(embeddings: Embeddings) -> str | None:
    for attr in ("model", "model_id", "model_name"):
        value = getattr(embeddings, attr, None)
        if isinstance(value, str) and value:
            return value
    return None
