"""Embedding gateway — thin adapter over the embedding provider and vector search.

Responsibilities:
1. Embed single texts and ordered batches (throttled fan-out)
2. Enforce a single vector dimensionality
3. Validate search parameters and delegate the distance math to the store

No caching and no retries; callers decide whether to retry.
"""

import asyncio
import logging
import math
import time
from collections.abc import Sequence

from ragdesk.application.interfaces.chunk_repository import ChunkRepository
from ragdesk.application.interfaces.embedding_provider import EmbeddingProvider
from ragdesk.domain.entities import SearchMatch
from ragdesk.domain.exceptions import (
    EmbeddingProviderError,
    SearchError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_DEFAULT_BATCH_SIZE = 10
_DEFAULT_BATCH_DELAY_SECONDS = 1.0


class EmbeddingGateway:
    """Application service wrapping an injected EmbeddingProvider and ChunkRepository."""

    def __init__(
        self,
        embedding_provider: EmbeddingProvider,
        chunk_repository: ChunkRepository,
        *,
        batch_size: int = _DEFAULT_BATCH_SIZE,
        batch_delay_seconds: float = _DEFAULT_BATCH_DELAY_SECONDS,
    ):
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self._provider = embedding_provider
        self._chunk_repo = chunk_repository
        self._batch_size = batch_size
        self._batch_delay = batch_delay_seconds

    @property
    def dimensions(self) -> int:
        return self._provider.dimensions

    async def embed(self, text: str) -> list[float]:
        """Embed one document text."""
        vectors = await self._call_provider(self._provider.generate_embeddings([text]))
        if len(vectors) != 1:
            raise EmbeddingProviderError(
                "embedding", 502, f"Expected 1 embedding, got {len(vectors)}"
            )
        return self._checked(vectors[0])

    async def embed_query(self, query: str) -> list[float]:
        """Embed a search query (some models use a query-specific prefix)."""
        vector = await self._call_provider(self._provider.generate_query_embedding(query))
        return self._checked(vector)

    async def embed_batch(
        self,
        texts: Sequence[str],
        *,
        isolate_failures: bool = False,
    ) -> list[list[float] | None]:
        """Embed many texts; output is one-to-one with ``texts`` and in the same order.

        Texts are sent in groups of ``batch_size`` concurrent calls with a
        fixed pause between groups to stay under provider rate limits.

        By default the first failure fails the whole batch and cancels the
        group's remaining calls; later groups are never sent. With
        ``isolate_failures=True`` a failed item yields ``None`` in its slot
        and the rest still complete.
        """
        results: list[list[float] | None] = []
        total = len(texts)
        start = time.monotonic()

        for group_start in range(0, total, self._batch_size):
            if group_start > 0 and self._batch_delay > 0:
                await asyncio.sleep(self._batch_delay)

            group = texts[group_start : group_start + self._batch_size]
            if isolate_failures:
                outcomes = await asyncio.gather(
                    *(self.embed(text) for text in group), return_exceptions=True
                )
            else:
                outcomes = await self._embed_all_or_cancel(group)

            for offset, outcome in enumerate(outcomes):
                if isinstance(outcome, BaseException):
                    if not isinstance(outcome, Exception):
                        raise outcome
                    logger.warning(
                        "Embedding failed for item %d/%d: %s",
                        group_start + offset + 1,
                        total,
                        outcome,
                    )
                    results.append(None)
                else:
                    results.append(outcome)

        logger.info(
            "Embedded %d texts in %d group(s), %dms",
            total,
            math.ceil(total / self._batch_size),
            int((time.monotonic() - start) * 1000),
        )
        return results

    async def similarity_search(
        self,
        query_vector: list[float],
        threshold: float,
        limit: int,
    ) -> list[SearchMatch]:
        """Ranked chunks with similarity >= ``threshold``, best first.

        Raises:
            ValidationError: threshold outside [0, 1], limit <= 0, or a
                query vector of the wrong dimensionality.
            SearchError: the vector store query failed.
        """
        if not 0.0 <= threshold <= 1.0:
            raise ValidationError("Threshold must be between 0 and 1", field="threshold")
        if limit <= 0:
            raise ValidationError("Limit must be positive", field="limit")
        if len(query_vector) != self.dimensions:
            raise ValidationError(
                f"Query vector has {len(query_vector)} dimensions, expected {self.dimensions}",
                field="query_vector",
            )

        try:
            matches = await self._chunk_repo.search_similar(
                query_vector, threshold=threshold, limit=limit
            )
        except SearchError:
            logger.exception("Similarity search failed (threshold=%.2f, limit=%d)", threshold, limit)
            raise
        except Exception as exc:
            logger.exception("Similarity search failed (threshold=%.2f, limit=%d)", threshold, limit)
            raise SearchError(str(exc)) from exc

        # Sort is stable, so equal scores keep the store's insertion order.
        return sorted(matches, key=lambda m: m.score, reverse=True)

    # ── Internals ────────────────────────────────────────────────────

    async def _embed_all_or_cancel(self, group: Sequence[str]) -> list[list[float]]:
        """Embed a group concurrently; the first failure cancels the calls still in flight."""
        try:
            async with asyncio.TaskGroup() as task_group:
                tasks = [task_group.create_task(self.embed(text)) for text in group]
        except ExceptionGroup as failures:
            raise failures.exceptions[0]
        return [task.result() for task in tasks]

    async def _call_provider(self, call):
        try:
            return await call
        except EmbeddingProviderError:
            raise
        except Exception as exc:
            logger.exception("Embedding provider call failed")
            raise EmbeddingProviderError("embedding", 502, str(exc)) from exc

    def _checked(self, vector: list[float]) -> list[float]:
        if len(vector) != self.dimensions:
            raise EmbeddingProviderError(
                "embedding",
                502,
                f"Provider returned {len(vector)} dimensions, expected {self.dimensions}",
            )
        return vector
