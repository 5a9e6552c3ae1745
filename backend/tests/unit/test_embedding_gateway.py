"""Unit tests for the EmbeddingGateway."""

import asyncio

import pytest

from ragdesk.application.services import EmbeddingGateway
from ragdesk.domain.entities import DocumentChunk
from ragdesk.domain.exceptions import EmbeddingProviderError, SearchError, ValidationError

from conftest import FakeChunkRepository, FakeEmbeddingProvider, vector_for


def _gateway(provider, chunks=None, **kwargs) -> EmbeddingGateway:
    kwargs.setdefault("batch_delay_seconds", 0)
    return EmbeddingGateway(provider, chunks or FakeChunkRepository(), **kwargs)


@pytest.mark.asyncio
async def test_embed_returns_provider_vector():
    gateway = _gateway(FakeEmbeddingProvider())
    assert await gateway.embed("hello") == vector_for("hello")


@pytest.mark.asyncio
async def test_embed_batch_preserves_input_order_under_concurrency():
    # "a" answers last, "c" first.
    provider = FakeEmbeddingProvider(delays={"a": 0.03, "b": 0.02, "c": 0.0})
    gateway = _gateway(provider)

    vectors = await gateway.embed_batch(["a", "b", "c"])

    assert vectors == [vector_for("a"), vector_for("b"), vector_for("c")]


@pytest.mark.asyncio
async def test_embed_batch_groups_calls_by_batch_size():
    provider = FakeEmbeddingProvider()
    gateway = _gateway(provider, batch_size=2)
    texts = [f"t{i}" for i in range(5)]

    vectors = await gateway.embed_batch(texts)

    assert vectors == [vector_for(t) for t in texts]
    assert sorted(t for call in provider.calls for t in call) == sorted(texts)


@pytest.mark.asyncio
async def test_embed_batch_sleeps_between_groups(monkeypatch):
    sleeps: list[float] = []

    async def fake_sleep(seconds):
        sleeps.append(seconds)

    monkeypatch.setattr("ragdesk.application.services.embedding_gateway.asyncio.sleep", fake_sleep)
    gateway = EmbeddingGateway(
        FakeEmbeddingProvider(), FakeChunkRepository(), batch_size=10, batch_delay_seconds=1.0
    )

    await gateway.embed_batch([f"t{i}" for i in range(25)])

    assert sleeps == [1.0, 1.0]


@pytest.mark.asyncio
async def test_embed_batch_fails_fast_by_default():
    gateway = _gateway(FakeEmbeddingProvider(fail_on=["b"]))
    with pytest.raises(EmbeddingProviderError):
        await gateway.embed_batch(["a", "b", "c"])


class _CompletionTrackingProvider(FakeEmbeddingProvider):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.finished: list[str] = []

    async def generate_embeddings(self, texts):
        vectors = await super().generate_embeddings(texts)
        self.finished.extend(texts)
        return vectors


@pytest.mark.asyncio
async def test_first_failure_cancels_calls_still_in_flight():
    provider = _CompletionTrackingProvider(fail_on=["bad"], delays={"a": 0.05, "b": 0.05})
    gateway = _gateway(provider, batch_size=3)

    with pytest.raises(EmbeddingProviderError):
        await gateway.embed_batch(["bad", "a", "b", "later"])

    await asyncio.sleep(0.1)
    assert provider.finished == []
    # The second group is never sent.
    assert ["later"] not in provider.calls


@pytest.mark.asyncio
async def test_embed_batch_can_isolate_failures():
    gateway = _gateway(FakeEmbeddingProvider(fail_on=["b"]))
    vectors = await gateway.embed_batch(["a", "b", "c"], isolate_failures=True)
    assert vectors == [vector_for("a"), None, vector_for("c")]


@pytest.mark.asyncio
async def test_wrong_dimensionality_is_a_provider_error():
    provider = FakeEmbeddingProvider()
    provider.wrong_dimensions = True
    with pytest.raises(EmbeddingProviderError):
        await _gateway(provider).embed("hello")


@pytest.mark.asyncio
async def test_unexpected_provider_exception_is_wrapped():
    class Exploding(FakeEmbeddingProvider):
        async def generate_embeddings(self, texts):
            raise ConnectionResetError("peer went away")

    with pytest.raises(EmbeddingProviderError) as exc_info:
        await _gateway(Exploding()).embed("x")
    assert "peer went away" in str(exc_info.value)


@pytest.mark.asyncio
async def test_similarity_search_filters_and_ranks():
    chunks = FakeChunkRepository()
    await chunks.store_chunks(
        [
            DocumentChunk(document_id="d1", chunk_index=0, content="near", embedding=[1.0, 0.0, 0.0, 0.0]),
            DocumentChunk(document_id="d1", chunk_index=1, content="far", embedding=[0.0, 1.0, 0.0, 0.0]),
            DocumentChunk(document_id="d2", chunk_index=0, content="close", embedding=[0.9, 0.1, 0.0, 0.0]),
        ]
    )
    gateway = _gateway(FakeEmbeddingProvider(), chunks)

    matches = await gateway.similarity_search([1.0, 0.0, 0.0, 0.0], threshold=0.7, limit=5)

    assert [m.content for m in matches] == ["near", "close"]
    assert matches[0].score == pytest.approx(1.0)
    assert all(m.score >= 0.7 for m in matches)


@pytest.mark.asyncio
async def test_similarity_search_equal_scores_keep_insertion_order():
    chunks = FakeChunkRepository()
    same = [1.0, 1.0, 0.0, 0.0]
    await chunks.store_chunks(
        [
            DocumentChunk(document_id="d", chunk_index=i, content=f"c{i}", embedding=same)
            for i in range(3)
        ]
    )
    matches = await _gateway(FakeEmbeddingProvider(), chunks).similarity_search(
        same, threshold=0.5, limit=10
    )
    assert [m.content for m in matches] == ["c0", "c1", "c2"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "vector,threshold,limit",
    [
        ([1.0, 0.0, 0.0, 0.0], 1.5, 5),
        ([1.0, 0.0, 0.0, 0.0], -0.1, 5),
        ([1.0, 0.0, 0.0, 0.0], 0.5, 0),
        ([1.0, 0.0], 0.5, 5),
    ],
)
async def test_similarity_search_validates_arguments(vector, threshold, limit):
    with pytest.raises(ValidationError):
        await _gateway(FakeEmbeddingProvider()).similarity_search(vector, threshold, limit)


@pytest.mark.asyncio
async def test_store_failure_becomes_search_error():
    chunks = FakeChunkRepository()
    chunks.fail_search = True
    with pytest.raises(SearchError):
        await _gateway(FakeEmbeddingProvider(), chunks).similarity_search(
            [1.0, 0.0, 0.0, 0.0], threshold=0.5, limit=3
        )


def test_batch_size_must_be_positive():
    with pytest.raises(ValueError):
        EmbeddingGateway(FakeEmbeddingProvider(), FakeChunkRepository(), batch_size=0)
