"""Document service — ingestion pipeline, duplicate detection and semantic search.

Pipeline stages (one ``ingest`` call):
    1. NORMALIZE: canonicalize the source URL (URL sources only)
    2. DEDUPE:    look up an existing document by content hash or canonical URL
    3. CHUNK:     split the text into overlapping windows or paragraph groups
    4. EMBED:     embed every chunk in throttled groups, isolating failures
    5. STORE:     persist the chunks that embedded successfully
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any

from ragdesk.application.interfaces import ChunkRepository, DocumentRepository
from ragdesk.application.schemas.documents import DocumentIngestRequest
from ragdesk.application.services.embedding_gateway import EmbeddingGateway
from ragdesk.application.services.text_chunker import (
    ChunkingOptions,
    chunk_by_paragraph,
    chunk_with_options,
    extract_text_metadata,
)
from ragdesk.application.services.url_normalizer import (
    UrlKind,
    compute_content_hash,
    is_supported_scheme,
    normalize_url,
)
from ragdesk.domain.entities import Document, DocumentChunk, SearchMatch, SourceType
from ragdesk.domain.exceptions import (
    DuplicateEntityError,
    EntityNotFoundError,
    ValidationError,
)
from ragdesk.infrastructure.logging.colored_logger import PipelineLogger, PipelineStage

logger = logging.getLogger(__name__)
pipeline_log = PipelineLogger("DocumentIngestion")


@dataclass
class DuplicateCheckResult:
    is_duplicate: bool
    existing_document: Document | None = None
    normalized_url: str | None = None
    message: str | None = None


@dataclass
class ChunkFailure:
    chunk: int
    error: str


@dataclass
class IngestResult:
    document: Document
    chunks_created: int
    total_chunks: int
    errors: list[ChunkFailure] = field(default_factory=list)


class DocumentService:
    """Orchestrates document ingestion, dedupe and retrieval."""

    def __init__(
        self,
        document_repository: DocumentRepository,
        chunk_repository: ChunkRepository,
        embedding_gateway: EmbeddingGateway,
        *,
        chunking: ChunkingOptions | None = None,
        match_threshold: float = 0.7,
        default_limit: int = 5,
    ):
        self._documents = document_repository
        self._chunks = chunk_repository
        self._embeddings = embedding_gateway
        self._chunking = chunking or ChunkingOptions()
        self._match_threshold = match_threshold
        self._default_limit = default_limit

    # ── Duplicate detection ──────────────────────────────────────────

    async def check_duplicate(
        self,
        source_type: str,
        *,
        url: str | None = None,
        file_hash: str | None = None,
    ) -> DuplicateCheckResult:
        """Report whether a file (by hash) or URL (by canonical form) is already stored."""
        try:
            kind = SourceType(source_type)
        except ValueError:
            raise ValidationError(
                "Invalid type. Must be 'file', 'youtube', or 'web'", field="type"
            ) from None

        if kind is SourceType.FILE and file_hash:
            existing = await self._documents.find_by_content_hash(file_hash)
            return DuplicateCheckResult(
                is_duplicate=existing is not None,
                existing_document=existing,
                message=(
                    f'This file has already been uploaded as "{existing.title}"'
                    if existing else None
                ),
            )

        if kind.is_url and url:
            normalized = self._canonical_url(kind, url)
            existing = await self._documents.find_by_source_url(normalized)
            return DuplicateCheckResult(
                is_duplicate=existing is not None,
                existing_document=existing,
                normalized_url=normalized,
                message=(
                    f'This {kind.value} has already been added as "{existing.title}"'
                    if existing else None
                ),
            )

        raise ValidationError("Missing required parameters")

    # ── Ingestion ────────────────────────────────────────────────────

    async def ingest(
        self,
        data: DocumentIngestRequest,
        *,
        raw_bytes: bytes | None = None,
    ) -> IngestResult:
        """Store a document and its embedded chunks.

        ``raw_bytes`` are the original file bytes when the text was
        extracted from an upload; the content hash is taken over them so
        re-uploading the same file is detected even if extraction changes.

        Raises:
            ValidationError: bad URL, or nothing to chunk.
            DuplicateEntityError: the document exists and still has chunks.
        """
        start = time.perf_counter()
        pipeline_log.separator(data.title[:40])

        source_url = None
        if data.source_type.is_url:
            if not data.source_url:
                raise ValidationError("source_url is required for URL sources", field="source_url")
            with pipeline_log.timed_step(PipelineStage.NORMALIZE, "Normalizing source URL"):
                source_url = self._canonical_url(data.source_type, data.source_url)
            pipeline_log.detail(source_url)

        content_hash = compute_content_hash(raw_bytes if raw_bytes is not None else data.content)

        pipeline_log.step_start(PipelineStage.DEDUPE, "Checking for an existing document")
        existing = (
            await self._documents.find_by_source_url(source_url)
            if source_url
            else await self._documents.find_by_content_hash(content_hash)
        )
        document = await self._reuse_or_create(data, existing, content_hash, source_url)
        pipeline_log.step_complete(
            PipelineStage.DEDUPE,
            "Re-using empty document" if existing else "New document",
            id=document.id,
        )

        pipeline_log.step_start(PipelineStage.CHUNK, f"Chunking ({data.chunking})")
        pieces = self._split(data.content, data.chunking)
        if not pieces:
            pipeline_log.step_error(PipelineStage.CHUNK, "No text to chunk")
            raise ValidationError("Document has no text content", field="content")
        pipeline_log.step_complete(PipelineStage.CHUNK, f"{len(pieces)} chunk(s)")

        with pipeline_log.timed_step(PipelineStage.EMBED, f"Embedding {len(pieces)} chunk(s)"):
            vectors = await self._embeddings.embed_batch(
                [text for text, _ in pieces], isolate_failures=True
            )

        chunks: list[DocumentChunk] = []
        errors: list[ChunkFailure] = []
        for index, ((text, offset), vector) in enumerate(zip(pieces, vectors)):
            if vector is None:
                errors.append(ChunkFailure(chunk=index, error="Embedding generation failed"))
                continue
            chunks.append(
                DocumentChunk(
                    document_id=document.id,
                    chunk_index=index,
                    content=text,
                    start_offset=offset,
                    embedding=vector,
                )
            )

        with pipeline_log.timed_step(PipelineStage.STORE, f"Storing {len(chunks)} chunk(s)"):
            if chunks:
                await self._chunks.store_chunks(chunks)
            document.chunk_count = len(chunks)
            document = await self._documents.update(document)

        for failure in errors:
            pipeline_log.step_error(PipelineStage.ERROR, f"Chunk {failure.chunk}: {failure.error}")

        elapsed = time.perf_counter() - start
        pipeline_log.step_complete(
            PipelineStage.COMPLETE,
            f"'{document.title}' ingested",
            chunks=len(chunks),
            failed=len(errors),
        )
        pipeline_log.stats(total_time=f"{elapsed:.2f}s", chunks=len(pieces))

        return IngestResult(
            document=document,
            chunks_created=len(chunks),
            total_chunks=len(pieces),
            errors=errors,
        )

    # ── Search ───────────────────────────────────────────────────────

    async def search(
        self,
        query: str,
        *,
        limit: int | None = None,
        threshold: float | None = None,
    ) -> list[SearchMatch]:
        if not query.strip():
            raise ValidationError("Query is required", field="query")
        vector = await self._embeddings.embed_query(query)
        return await self._embeddings.similarity_search(
            vector,
            threshold=self._match_threshold if threshold is None else threshold,
            limit=limit or self._default_limit,
        )

    # ── Management ───────────────────────────────────────────────────

    async def get_document(self, document_id: str) -> Document:
        document = await self._documents.get_by_id(document_id)
        if document is None:
            raise EntityNotFoundError("Document", document_id)
        return document

    async def list_documents(
        self,
        *,
        source_type: SourceType | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[Document]:
        return await self._documents.get_all(source_type=source_type, skip=skip, limit=limit)

    async def delete_document(self, document_id: str) -> bool:
        await self.get_document(document_id)
        deleted = await self._documents.delete(document_id)
        logger.info("Deleted document %s", document_id)
        return deleted

    # ── Internals ────────────────────────────────────────────────────

    @staticmethod
    def _canonical_url(kind: SourceType, url: str) -> str:
        if not is_supported_scheme(url):
            raise ValidationError("Invalid URL format", field="url")
        result = normalize_url(url)
        if not result.is_valid:
            raise ValidationError("Invalid URL format", field="url")
        if kind is SourceType.YOUTUBE and result.type is not UrlKind.YOUTUBE:
            raise ValidationError("Not a valid YouTube URL", field="url")
        return result.normalized

    async def _reuse_or_create(
        self,
        data: DocumentIngestRequest,
        existing: Document | None,
        content_hash: str,
        source_url: str | None,
    ) -> Document:
        metadata: dict[str, Any] = {**extract_text_metadata(data.content), **data.metadata}

        if existing is not None:
            active = await self._chunks.count_by_document(existing.id)
            if active > 0:
                field_name, value = existing.dedupe_key
                pipeline_log.step_error(
                    PipelineStage.DEDUPE, f"Already ingested as '{existing.title}'"
                )
                raise DuplicateEntityError("Document", field_name, value, existing_id=existing.id)
            existing.title = data.title
            existing.content = data.content
            existing.content_hash = content_hash
            existing.metadata = metadata
            return existing

        return await self._documents.create(
            Document(
                title=data.title,
                content=data.content,
                content_hash=content_hash,
                source_type=data.source_type,
                source_url=source_url,
                metadata=metadata,
            )
        )

    def _split(self, text: str, mode: str) -> list[tuple[str, int]]:
        """Chunk texts paired with their start offset in ``text``."""
        if mode == "paragraph":
            pieces: list[tuple[str, int]] = []
            cursor = 0
            for piece in chunk_by_paragraph(text, self._chunking.chunk_size):
                # Paragraph chunks are re-joined, so locate them by their first line.
                head = piece.split("\n", 1)[0]
                found = text.find(head, cursor)
                offset = found if found >= 0 else cursor
                pieces.append((piece, offset))
                cursor = offset + len(head)
            return pieces

        return [
            (piece, self._chunking.offset_of(index))
            for index, piece in enumerate(chunk_with_options(text, self._chunking))
        ]
