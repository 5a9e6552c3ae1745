"""Abstract repository interface (port) for document chunks and vector search."""

from abc import ABC, abstractmethod

from ragdesk.domain.entities import DocumentChunk, SearchMatch


class ChunkRepository(ABC):
    """Port for document chunk persistence and vector search."""

    @abstractmethod
    async def store_chunks(self, chunks: list[DocumentChunk]) -> None:
        """Persist a batch of document chunks with their embeddings."""
        ...

    @abstractmethod
    async def delete_by_document(self, document_id: str) -> int:
        """Delete all chunks for a document. Returns count of deleted rows."""
        ...

    @abstractmethod
    async def count_by_document(self, document_id: str) -> int:
        """Number of stored chunks for a document."""
        ...

    @abstractmethod
    async def search_similar(
        self,
        query_embedding: list[float],
        *,
        threshold: float,
        limit: int,
    ) -> list[SearchMatch]:
        """Find chunks whose cosine similarity to the query is at least ``threshold``.

        Returns:
            At most ``limit`` matches ordered by descending similarity; equal
            scores keep chunk insertion order.
        """
        ...
