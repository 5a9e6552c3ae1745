"""Abstract repository interface (port) for Document persistence."""

from abc import ABC, abstractmethod

from ragdesk.domain.entities import Document, SourceType


class DocumentRepository(ABC):
    """Port for document persistence — implemented in the infrastructure layer."""

    @abstractmethod
    async def get_by_id(self, document_id: str) -> Document | None:
        ...

    @abstractmethod
    async def find_by_content_hash(self, content_hash: str) -> Document | None:
        """Look up a file-type document by the digest of its original bytes."""
        ...

    @abstractmethod
    async def find_by_source_url(self, source_url: str) -> Document | None:
        """Look up a URL-type document by its canonical URL."""
        ...

    @abstractmethod
    async def get_all(
        self,
        *,
        source_type: SourceType | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[Document]:
        """Retrieve a filtered, paginated list, newest first."""
        ...

    @abstractmethod
    async def create(self, document: Document) -> Document:
        ...

    @abstractmethod
    async def update(self, document: Document) -> Document:
        ...

    @abstractmethod
    async def delete(self, document_id: str) -> bool:
        """Hard-delete a document and its chunks. Returns False if not found."""
        ...
