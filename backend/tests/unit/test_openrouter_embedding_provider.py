"""Unit tests for the OpenRouterEmbeddingProvider."""

import json

import httpx
import pytest

from ragdesk.domain.exceptions import EmbeddingProviderError
from ragdesk.infrastructure.openrouter import OpenRouterEmbeddingProvider


# ── Helpers ──


def _embedding_response(vectors: list[list[float]], *, shuffled: bool = False) -> dict:
    data = [{"object": "embedding", "index": i, "embedding": v} for i, v in enumerate(vectors)]
    if shuffled:
        data.reverse()
    return {"object": "list", "data": data, "model": "google/gemini-embedding-001"}


def _provider(handler, **kwargs) -> OpenRouterEmbeddingProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    kwargs.setdefault("model_dimensions", 3)
    return OpenRouterEmbeddingProvider(api_key="test-key", http_client=client, **kwargs)


# ── Tests ──


@pytest.mark.asyncio
async def test_posts_model_input_and_dimensions():
    captured: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["auth"] = request.headers["Authorization"]
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json=_embedding_response([[0.1, 0.2, 0.3]]))

    provider = _provider(handler)
    vectors = await provider.generate_embeddings(["hello"])

    assert vectors == [[0.1, 0.2, 0.3]]
    assert captured["url"] == "https://openrouter.ai/api/v1/embeddings"
    assert captured["auth"] == "Bearer test-key"
    assert captured["body"] == {
        "model": "google/gemini-embedding-001",
        "input": ["hello"],
        "dimensions": 3,
    }


@pytest.mark.asyncio
async def test_results_are_ordered_by_index():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, json=_embedding_response([[1.0, 0, 0], [0, 1.0, 0]], shuffled=True)
        )

    vectors = await _provider(handler).generate_embeddings(["a", "b"])
    assert vectors == [[1.0, 0, 0], [0, 1.0, 0]]


@pytest.mark.asyncio
async def test_empty_input_makes_no_request():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    assert await _provider(handler).generate_embeddings([]) == []


@pytest.mark.asyncio
async def test_http_error_status_raises_provider_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, json={"error": {"message": "rate limited"}})

    with pytest.raises(EmbeddingProviderError) as exc_info:
        await _provider(handler).generate_embeddings(["x"])
    assert exc_info.value.status_code == 429
    assert exc_info.value.provider == "openrouter"


@pytest.mark.asyncio
async def test_transport_failure_raises_provider_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(EmbeddingProviderError) as exc_info:
        await _provider(handler).generate_embeddings(["x"])
    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
async def test_count_mismatch_raises_provider_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=_embedding_response([[0.1, 0.2, 0.3]]))

    with pytest.raises(EmbeddingProviderError):
        await _provider(handler).generate_embeddings(["a", "b"])


@pytest.mark.asyncio
async def test_malformed_body_raises_provider_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"data": [{"index": 0}]})

    with pytest.raises(EmbeddingProviderError):
        await _provider(handler).generate_embeddings(["a"])


@pytest.mark.asyncio
async def test_nomic_models_get_task_prefixes():
    inputs: list[list[str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        inputs.append(body["input"])
        return httpx.Response(200, json=_embedding_response([[0.0, 0.0, 1.0]] * len(body["input"])))

    provider = _provider(handler, model="nomic-ai/nomic-embed-text-v1.5")
    await provider.generate_embeddings(["doc"])
    await provider.generate_query_embedding("question")

    assert inputs == [["search_document: doc"], ["search_query: question"]]
