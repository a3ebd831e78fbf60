"""
Rerank engine.

Reorders retrieved candidates with a pluggable reranker. Candidates
without text are resolved through an optional hook, then either fail the
call or are skipped and appended after the scored ones. Equal scores keep
the candidates' input order, so identical inputs always produce identical
rankings.

Dependencies: asyncio, ragcore.core.providers, ragcore.models
System role: Second-stage ranking after retrieval
"""

import asyncio
import inspect
import logging
import time
from typing import Any, Awaitable, Callable, Literal, Union

from ragcore.core.exceptions import ConfigurationError, MissingTextError, RerankError
from ragcore.core.providers import Reranker, provider_name
from ragcore.models.chunk import RerankedChunk, ScoredChunk
from ragcore.models.rerank import RerankDurations, RerankerResult, RerankMeta, RerankResult

logger = logging.getLogger(__name__)

MissingTextPolicy = Literal["throw", "skip"]
MissingRerankerPolicy = Literal["throw", "skip"]
ResolveText = Callable[[ScoredChunk], Union[str, None, Awaitable[str | None]]]


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


def _reranked(candidate: ScoredChunk, score: float | None = None) -> RerankedChunk:
    data = candidate.model_dump()
    data["rerank_score"] = score
    return RerankedChunk(**data)


class RerankEngine:
    """
    Applies a reranker to retrieval candidates.

    The engine never touches the store; it only reorders what it is given.
    """

    def __init__(self, reranker: Any | None = None, timeout_ms: int = 30_000) -> None:
        """
        Initialize the rerank engine.

        Args:
            reranker: Object implementing ``rerank(query, documents)``, or None
            timeout_ms: Timeout per reranker call in milliseconds

        Raises:
            ConfigurationError: reranker does not implement ``rerank``
        """
        if reranker is not None and not isinstance(reranker, Reranker):
            raise ConfigurationError(
                "Reranker must implement rerank(query, documents)",
                details={"reranker": type(reranker).__name__},
            )
        self.reranker = reranker
        self.timeout_s = timeout_ms / 1000

    async def rerank(
        self,
        query: str,
        candidates: list[ScoredChunk],
        top_k: int | None = None,
        on_missing_text: MissingTextPolicy = "throw",
        on_missing_reranker: MissingRerankerPolicy = "throw",
        resolve_text: ResolveText | None = None,
    ) -> RerankResult:
        """
        Rerank candidates and keep the top_k.

        Args:
            query: Query text handed to the reranker
            candidates: Retrieved chunks in retrieval order
            top_k: Number of chunks to return, clamped to [1, len(candidates)];
                all candidates when None
            on_missing_text: "throw" fails on a candidate without text,
                "skip" appends it after the scored candidates
            on_missing_reranker: "throw" fails when no reranker is wired,
                "skip" returns the input order
            resolve_text: Hook returning text for a candidate with empty content

        Returns:
            RerankResult: ``ranking`` over every candidate, ``chunks`` its top_k prefix

        Raises:
            ConfigurationError: No reranker and on_missing_reranker="throw"
            MissingTextError: Candidate without text and on_missing_text="throw"
            RerankError: Reranker failed, timed out or returned malformed output
        """
        total_start = time.perf_counter()
        warnings: list[str] = []

        if not candidates:
            return RerankResult(
                warnings=["No candidates provided for reranking."],
                meta=RerankMeta(reranker_name="none"),
                durations=RerankDurations(total_ms=_elapsed_ms(total_start)),
            )

        limit = max(1, min(top_k if top_k is not None else len(candidates), len(candidates)))

        if self.reranker is None:
            if on_missing_reranker == "skip":
                warnings.append("Reranker not configured; returning original order.")
                return self._original_order(candidates, limit, warnings, "none", total_start)
            raise ConfigurationError(
                "Reranker not configured. Wire a reranker into the engine, "
                "or use on_missing_reranker='skip'."
            )

        reranker_name = provider_name(self.reranker)
        documents: list[str] = []
        scorable: list[int] = []
        skipped: list[int] = []

        for i, candidate in enumerate(candidates):
            text = (candidate.content or "").strip()

            if not text and resolve_text is not None:
                try:
                    resolved = resolve_text(candidate)
                    if inspect.isawaitable(resolved):
                        resolved = await resolved
                    text = (resolved or "").strip()
                except Exception as e:
                    warnings.append(f"resolve_text failed for candidate {i}: {e}")
                    logger.warning(f"{__name__}:rerank - resolve_text failed for candidate {i}: {e}")

            if not text:
                if on_missing_text == "skip":
                    skipped.append(i)
                    warnings.append(f"Candidate {i} has no text; skipped.")
                    continue
                raise MissingTextError(candidate_index=i, candidate_id=candidate.id)

            documents.append(text)
            scorable.append(i)

        if not documents:
            warnings.append("All candidates have missing text; returning original order.")
            return self._original_order(candidates, limit, warnings, reranker_name, total_start)

        rerank_start = time.perf_counter()
        result = await self._call_reranker(query, documents, reranker_name)
        rerank_ms = _elapsed_ms(rerank_start)

        ordered = self._order(result, len(documents), reranker_name)

        ranking = [
            _reranked(candidates[scorable[doc_index]], score)
            for doc_index, score in ordered
        ]
        ranking.extend(_reranked(candidates[i]) for i in skipped)

        total_ms = _elapsed_ms(total_start)
        logger.info(
            f"{__name__}:rerank - reranker={reranker_name} candidates={len(candidates)} "
            f"scored={len(documents)} skipped={len(skipped)} top_k={limit} "
            f"({rerank_ms:.1f}ms rerank, {total_ms:.1f}ms total)"
        )
        return RerankResult(
            chunks=ranking[:limit],
            ranking=ranking,
            warnings=warnings,
            meta=RerankMeta(reranker_name=reranker_name, model=result.model),
            durations=RerankDurations(rerank_ms=rerank_ms, total_ms=total_ms),
        )

    async def _call_reranker(self, query: str, documents: list[str], reranker_name: str) -> RerankerResult:
        try:
            result = await asyncio.wait_for(
                self.reranker.rerank(query, documents),
                timeout=self.timeout_s,
            )
        except asyncio.TimeoutError as e:
            raise RerankError(
                f"Reranker timed out after {self.timeout_s:.1f}s",
                provider=reranker_name,
            ) from e
        except RerankError:
            raise
        except Exception as e:
            raise RerankError(
                f"Reranker failed: {e}",
                provider=reranker_name,
                details={"error_type": type(e).__name__},
            ) from e

        if isinstance(result, dict):
            result = RerankerResult(**result)
        if not isinstance(result, RerankerResult):
            raise RerankError(
                "Reranker returned an unexpected result type",
                provider=reranker_name,
                details={"result_type": type(result).__name__},
            )
        return result

    @staticmethod
    def _order(result: RerankerResult, count: int, reranker_name: str) -> list[tuple[int, float | None]]:
        """
        Turn reranker output into (document index, score) pairs, best first.

        Without scores the reranker's order is taken as is. With scores the
        pairs are sorted by descending score, ties broken by input position.
        Documents the reranker left out follow in input order.
        """
        if result.scores is not None and len(result.scores) != len(result.order):
            raise RerankError(
                "Reranker returned a different number of scores and indices",
                provider=reranker_name,
                details={"order": len(result.order), "scores": len(result.scores)},
            )

        seen: set[int] = set()
        for index in result.order:
            if index < 0 or index >= count or index in seen:
                raise RerankError(
                    "Reranker returned an invalid or duplicate index",
                    provider=reranker_name,
                    details={"index": index, "document_count": count},
                )
            seen.add(index)

        if result.scores is None:
            ordered: list[tuple[int, float | None]] = [(index, None) for index in result.order]
        else:
            pairs = list(zip(result.order, result.scores))
            ordered = sorted(pairs, key=lambda pair: (-pair[1], pair[0]))

        ordered.extend((index, None) for index in range(count) if index not in seen)
        return ordered

    @staticmethod
    def _original_order(
        candidates: list[ScoredChunk],
        limit: int,
        warnings: list[str],
        reranker_name: str,
        total_start: float,
    ) -> RerankResult:
        ranking = [_reranked(candidate) for candidate in candidates]
        return RerankResult(
            chunks=ranking[:limit],
            ranking=ranking,
            warnings=warnings,
            meta=RerankMeta(reranker_name=reranker_name),
            durations=RerankDurations(total_ms=_elapsed_ms(total_start)),
        )
