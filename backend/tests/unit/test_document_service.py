"""Unit tests for DocumentService — ingestion pipeline, dedupe and search."""

import pytest

from ragdesk.application.schemas import DocumentIngestRequest
from ragdesk.application.services import DocumentService, EmbeddingGateway
from ragdesk.application.services.text_chunker import ChunkingOptions
from ragdesk.application.services.url_normalizer import compute_content_hash
from ragdesk.domain.entities import Document, SourceType
from ragdesk.domain.exceptions import (
    DuplicateEntityError,
    EntityNotFoundError,
    ValidationError,
)

TEXT = "abcdefghij" * 5  # 50 chars -> windows at 0, 15, 30


@pytest.fixture
def service(embedding_provider, document_repository, chunk_repository) -> DocumentService:
    gateway = EmbeddingGateway(
        embedding_provider, chunk_repository, batch_size=2, batch_delay_seconds=0
    )
    return DocumentService(
        document_repository,
        chunk_repository,
        gateway,
        chunking=ChunkingOptions(chunk_size=20, overlap=5),
    )


def _web(content: str = TEXT, url: str = "https://example.com/guide/", **kwargs) -> DocumentIngestRequest:
    return DocumentIngestRequest(
        title="Guide", content=content, source_type="web", source_url=url, **kwargs
    )


# ── Ingestion ────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_ingest_stores_ordered_chunks_with_offsets(service, chunk_repository, document_repository):
    result = await service.ingest(_web())

    assert result.chunks_created == 3
    assert result.total_chunks == 3
    assert result.errors == []
    assert [c.chunk_index for c in chunk_repository.chunks] == [0, 1, 2]
    assert [c.start_offset for c in chunk_repository.chunks] == [0, 15, 30]
    for chunk in chunk_repository.chunks:
        assert TEXT[chunk.start_offset :].startswith(chunk.content)

    stored = document_repository.items[result.document.id]
    assert stored.source_url == "https://example.com/guide"
    assert stored.chunk_count == 3
    assert stored.content_hash == compute_content_hash(TEXT)


@pytest.mark.asyncio
async def test_file_hash_is_taken_over_raw_bytes(service):
    raw = b"%PDF-1.7 binary payload"
    result = await service.ingest(
        DocumentIngestRequest(title="Report", content=TEXT, source_type="file"),
        raw_bytes=raw,
    )
    assert result.document.content_hash == compute_content_hash(raw)
    assert result.document.source_url is None


@pytest.mark.asyncio
async def test_user_metadata_overrides_extracted(service):
    result = await service.ingest(_web(content="# Heading\n\nbody text", metadata={"title": "Mine"}))
    assert result.document.metadata["title"] == "Mine"
    assert result.document.metadata["word_count"] == 4


@pytest.mark.asyncio
async def test_same_url_variant_is_a_duplicate(service):
    await service.ingest(_web(url="https://example.com/guide"))

    with pytest.raises(DuplicateEntityError) as exc_info:
        await service.ingest(_web(url="https://EXAMPLE.com/guide/#intro"))

    assert exc_info.value.field == "source_url"


@pytest.mark.asyncio
async def test_same_file_twice_is_a_duplicate(service):
    data = DocumentIngestRequest(title="Notes", content=TEXT, source_type="file")
    first = await service.ingest(data)

    with pytest.raises(DuplicateEntityError) as exc_info:
        await service.ingest(data)

    assert exc_info.value.existing_id == first.document.id


@pytest.mark.asyncio
async def test_document_without_chunks_is_reused(service, document_repository, chunk_repository):
    leftover = Document(
        title="Old title",
        content="stale",
        content_hash="0" * 64,
        source_type=SourceType.WEB,
        source_url="https://example.com/guide",
    )
    await document_repository.create(leftover)

    result = await service.ingest(_web())

    assert result.document.id == leftover.id
    assert result.document.title == "Guide"
    assert len(document_repository.items) == 1
    assert await chunk_repository.count_by_document(leftover.id) == 3


@pytest.mark.asyncio
async def test_failed_chunk_embeddings_are_reported_not_stored(
    service, embedding_provider, chunk_repository
):
    embedding_provider.fail_on = {TEXT[15:35]}

    result = await service.ingest(_web())

    assert result.chunks_created == 2
    assert result.total_chunks == 3
    assert [(e.chunk, e.error) for e in result.errors] == [(1, "Embedding generation failed")]
    assert [c.chunk_index for c in chunk_repository.chunks] == [0, 2]
    assert result.document.chunk_count == 2


@pytest.mark.asyncio
async def test_paragraph_mode_keeps_paragraphs_whole(service, chunk_repository):
    text = "First paragraph.\n\nSecond one here.\n\n\nThird paragraph is long enough."
    await service.ingest(_web(content=text, chunking="paragraph"))

    contents = [c.content for c in chunk_repository.chunks]
    assert contents == ["First paragraph.", "Second one here.", "Third paragraph is long enough."]
    offsets = [c.start_offset for c in chunk_repository.chunks]
    assert offsets == [text.index(c) for c in contents]


@pytest.mark.asyncio
async def test_blank_text_has_nothing_to_chunk(service):
    with pytest.raises(ValidationError, match="no text"):
        await service.ingest(_web(content=" \n\n \n", chunking="paragraph"))


@pytest.mark.asyncio
async def test_youtube_source_must_be_a_video(service):
    data = DocumentIngestRequest(
        title="Talk", content=TEXT, source_type="youtube", source_url="https://example.com/talk"
    )
    with pytest.raises(ValidationError, match="Not a valid YouTube URL"):
        await service.ingest(data)


@pytest.mark.asyncio
async def test_url_source_requires_url(service):
    data = DocumentIngestRequest(title="Page", content=TEXT, source_type="web")
    with pytest.raises(ValidationError):
        await service.ingest(data)


# ── Duplicate check ──────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_check_duplicate_by_file_hash(service):
    raw = b"same bytes"
    await service.ingest(
        DocumentIngestRequest(title="Handbook", content=TEXT, source_type="file"), raw_bytes=raw
    )

    hit = await service.check_duplicate("file", file_hash=compute_content_hash(raw))
    miss = await service.check_duplicate("file", file_hash="f" * 64)

    assert hit.is_duplicate
    assert hit.message == 'This file has already been uploaded as "Handbook"'
    assert not miss.is_duplicate
    assert miss.message is None


@pytest.mark.asyncio
async def test_check_duplicate_youtube_variants(service):
    await service.ingest(
        DocumentIngestRequest(
            title="Video",
            content=TEXT,
            source_type="youtube",
            source_url="https://youtu.be/dQw4w9WgXcQ",
        )
    )

    result = await service.check_duplicate(
        "youtube", url="https://www.youtube.com/watch?v=dQw4w9WgXcQ&t=42"
    )

    assert result.is_duplicate
    assert result.normalized_url == "https://youtube.com/watch?v=dQw4w9WgXcQ"
    assert result.message == 'This youtube has already been added as "Video"'


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "source_type, kwargs, message",
    [
        ("pdf", {"file_hash": "abc"}, "Invalid type"),
        ("file", {"url": "https://example.com"}, "Missing required parameters"),
        ("web", {}, "Missing required parameters"),
        ("web", {"url": "ftp://example.com/file"}, "Invalid URL format"),
        ("youtube", {"url": "https://vimeo.com/123"}, "Not a valid YouTube URL"),
    ],
)
async def test_check_duplicate_rejects_bad_input(service, source_type, kwargs, message):
    with pytest.raises(ValidationError, match=message):
        await service.check_duplicate(source_type, **kwargs)


# ── Search & management ──────────────────────────────────────────────


@pytest.mark.asyncio
async def test_search_uses_configured_defaults(service, embedding_provider):
    await service.ingest(_web())

    matches = await service.search(TEXT[:20])

    assert embedding_provider.query_calls == [TEXT[:20]]
    assert matches[0].content == TEXT[:20]
    assert matches[0].score == pytest.approx(1.0)
    assert matches[0].document_title == "Guide"
    assert all(m.score >= 0.7 for m in matches)
    assert len(matches) <= 5


@pytest.mark.asyncio
async def test_search_rejects_blank_query(service):
    with pytest.raises(ValidationError):
        await service.search("   ")


@pytest.mark.asyncio
async def test_delete_document(service, document_repository):
    result = await service.ingest(_web())

    assert await service.delete_document(result.document.id) is True
    assert result.document.id not in document_repository.items

    with pytest.raises(EntityNotFoundError):
        await service.delete_document(result.document.id)
