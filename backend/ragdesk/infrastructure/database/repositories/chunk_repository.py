"""SQLAlchemy implementation of ChunkRepository — pgvector-powered vector search."""

import logging

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ragdesk.application.interfaces import ChunkRepository
from ragdesk.domain.entities import DocumentChunk, SearchMatch
from ragdesk.domain.exceptions import SearchError
from ragdesk.infrastructure.database.models import DocumentChunkModel, DocumentModel

logger = logging.getLogger(__name__)


class PgChunkRepository(ChunkRepository):
    """Concrete chunk repository backed by PostgreSQL + pgvector."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def store_chunks(self, chunks: list[DocumentChunk]) -> None:
        """Persist a batch of document chunks with their embeddings."""
        if not chunks:
            return

        models = [
            DocumentChunkModel(
                document_id=chunk.document_id,
                chunk_index=chunk.chunk_index,
                start_offset=chunk.start_offset,
                content=chunk.content,
                embedding=chunk.embedding if chunk.embedding else None,
            )
            for chunk in chunks
        ]

        self._session.add_all(models)
        await self._session.flush()
        logger.info("Stored %d chunks for document %s", len(models), chunks[0].document_id)

    async def delete_by_document(self, document_id: str) -> int:
        result = await self._session.execute(
            delete(DocumentChunkModel).where(DocumentChunkModel.document_id == document_id)
        )
        count = result.rowcount
        if count > 0:
            logger.info("Deleted %d chunks for document %s", count, document_id)
        return count

    async def count_by_document(self, document_id: str) -> int:
        result = await self._session.execute(
            select(func.count())
            .select_from(DocumentChunkModel)
            .where(DocumentChunkModel.document_id == document_id)
        )
        return int(result.scalar_one())

    async def search_similar(
        self,
        query_embedding: list[float],
        *,
        threshold: float,
        limit: int,
    ) -> list[SearchMatch]:
        """Chunks with cosine similarity >= ``threshold``, best first.

        ``1 - (embedding <=> query)`` is the cosine similarity; ties fall
        back to chunk id, i.e. insertion order.
        """
        distance = DocumentChunkModel.embedding.cosine_distance(query_embedding)
        similarity = (1 - distance).label("similarity")

        query = (
            select(
                DocumentChunkModel.id,
                DocumentChunkModel.document_id,
                DocumentChunkModel.chunk_index,
                DocumentChunkModel.content,
                DocumentModel.title,
                DocumentModel.source_url,
                DocumentModel.metadata_.label("document_metadata"),
                similarity,
            )
            .select_from(DocumentChunkModel)
            .join(DocumentModel, DocumentModel.id == DocumentChunkModel.document_id)
            .where(DocumentChunkModel.embedding.is_not(None))
            .where(distance <= 1 - threshold)
            .order_by(distance.asc(), DocumentChunkModel.id.asc())
            .limit(limit)
        )

        try:
            result = await self._session.execute(query)
        except SQLAlchemyError as exc:
            logger.error("Vector search failed: %s", exc)
            raise SearchError(str(exc)) from exc

        return [
            SearchMatch(
                chunk_id=row.id,
                document_id=row.document_id,
                chunk_index=row.chunk_index,
                content=row.content,
                score=float(row.similarity),
                document_title=row.title,
                source_url=row.source_url,
                metadata=row.document_metadata or {},
            )
            for row in result.all()
        ]
