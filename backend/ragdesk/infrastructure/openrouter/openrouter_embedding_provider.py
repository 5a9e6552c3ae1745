"""OpenRouter-based embedding provider — calls the /embeddings endpoint.

Default model: google/gemini-embedding-001, truncated to the configured
dimensionality (768 by default, matching the pgvector column).
"""

import logging
import time
from typing import Any

import httpx

from ragdesk.application.interfaces.embedding_provider import EmbeddingProvider
from ragdesk.domain.exceptions import EmbeddingProviderError

logger = logging.getLogger(__name__)

PROVIDER_NAME = "openrouter"

# nomic-embed-text models expect a task prefix; Gemini models do not.
_NOMIC_DOCUMENT_PREFIX = "search_document: "
_NOMIC_QUERY_PREFIX = "search_query: "


class OpenRouterEmbeddingProvider(EmbeddingProvider):
    """Infrastructure adapter — generates embeddings via the OpenRouter /embeddings API.

    The httpx client is injected so one pooled client can be shared by the
    application (and replaced by a ``MockTransport`` client in tests). When
    none is given, a short-lived client is opened per call.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://openrouter.ai/api/v1",
        app_name: str = "RAG Desk",
        model: str = "google/gemini-embedding-001",
        model_dimensions: int = 768,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 60.0,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._app_name = app_name
        self._model = model
        self._dimensions = model_dimensions
        self._http_client = http_client
        self._timeout = timeout

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def _get_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
            "X-Title": self._app_name,
        }

    @property
    def _is_nomic(self) -> bool:
        return "nomic" in self._model.lower()

    def _prepare(self, texts: list[str], query_mode: bool) -> list[str]:
        if not self._is_nomic:
            return texts
        prefix = _NOMIC_QUERY_PREFIX if query_mode else _NOMIC_DOCUMENT_PREFIX
        return [f"{prefix}{t}" for t in texts]

    async def generate_embeddings(self, texts: list[str]) -> list[list[float]]:
        return await self._embed(texts, query_mode=False)

    async def generate_query_embedding(self, query: str) -> list[float]:
        results = await self._embed([query], query_mode=True)
        return results[0]

    async def _embed(self, texts: list[str], *, query_mode: bool) -> list[list[float]]:
        if not texts:
            return []

        payload: dict[str, Any] = {
            "model": self._model,
            "input": self._prepare(texts, query_mode),
            "dimensions": self._dimensions,
        }

        client = self._http_client or httpx.AsyncClient(timeout=self._timeout)
        should_close = self._http_client is None
        start = time.monotonic()

        try:
            response = await client.post(
                f"{self._base_url}/embeddings",
                headers=self._get_headers(),
                json=payload,
            )
        except httpx.HTTPError as exc:
            logger.error("Embedding request to %s failed: %s", self._base_url, exc)
            raise EmbeddingProviderError(PROVIDER_NAME, 503, f"Request failed: {exc}") from exc
        finally:
            if should_close:
                await client.aclose()

        if response.status_code != 200:
            error_text = response.text[:500]
            logger.error("Embedding API error %d: %s", response.status_code, error_text)
            raise EmbeddingProviderError(PROVIDER_NAME, response.status_code, error_text)

        try:
            items = sorted(response.json().get("data", []), key=lambda x: x.get("index", 0))
            vectors = [item["embedding"] for item in items]
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            raise EmbeddingProviderError(
                PROVIDER_NAME, 502, f"Malformed embedding response: {exc}"
            ) from exc

        if len(vectors) != len(texts):
            raise EmbeddingProviderError(
                PROVIDER_NAME, 502, f"Expected {len(texts)} embeddings, got {len(vectors)}"
            )

        logger.info(
            "Generated %d embeddings (model=%s, dims=%d, %dms)",
            len(vectors),
            self._model,
            len(vectors[0]),
            int((time.monotonic() - start) * 1000),
        )
        return vectors
