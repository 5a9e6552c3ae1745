"""Concrete repository implementation for Document backed by SQLAlchemy."""

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ragdesk.application.interfaces import DocumentRepository
from ragdesk.domain.entities import Document, SourceType
from ragdesk.domain.exceptions import DuplicateEntityError
from ragdesk.infrastructure.database.models import DocumentChunkModel, DocumentModel


class SQLAlchemyDocumentRepository(DocumentRepository):
    """Implements the DocumentRepository port using SQLAlchemy async sessions."""

    def __init__(self, session: AsyncSession):
        self._session = session

    def _to_entity(self, model: DocumentModel) -> Document:
        return Document(
            id=model.id,
            title=model.title,
            content=model.content,
            content_hash=model.content_hash,
            source_type=SourceType(model.source_type),
            source_url=model.source_url,
            metadata=model.metadata_ or {},
            chunk_count=model.chunk_count,
            created_at=model.created_at,
        )

    def _to_model(self, entity: Document) -> DocumentModel:
        return DocumentModel(
            id=entity.id,
            title=entity.title,
            content=entity.content,
            content_hash=entity.content_hash,
            source_type=entity.source_type.value,
            source_url=entity.source_url,
            metadata_=entity.metadata,
            chunk_count=entity.chunk_count,
            created_at=entity.created_at,
        )

    async def get_by_id(self, document_id: str) -> Document | None:
        model = await self._session.get(DocumentModel, document_id)
        return self._to_entity(model) if model else None

    async def find_by_content_hash(self, content_hash: str) -> Document | None:
        stmt = select(DocumentModel).where(
            DocumentModel.content_hash == content_hash,
            DocumentModel.source_type == SourceType.FILE.value,
        )
        result = await self._session.execute(stmt)
        model = result.scalars().first()
        return self._to_entity(model) if model else None

    async def find_by_source_url(self, source_url: str) -> Document | None:
        stmt = select(DocumentModel).where(DocumentModel.source_url == source_url)
        result = await self._session.execute(stmt)
        model = result.scalars().first()
        return self._to_entity(model) if model else None

    async def get_all(
        self,
        *,
        source_type: SourceType | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[Document]:
        stmt = select(DocumentModel)
        if source_type is not None:
            stmt = stmt.where(DocumentModel.source_type == source_type.value)

        stmt = stmt.order_by(DocumentModel.created_at.desc()).offset(skip).limit(limit)
        result = await self._session.execute(stmt)
        return [self._to_entity(row) for row in result.scalars().all()]

    async def create(self, document: Document) -> Document:
        """Insert a document.

        Raises:
            DuplicateEntityError: a concurrent insert already claimed the same
                file hash or canonical URL (partial unique indexes).
        """
        model = self._to_model(document)
        try:
            async with self._session.begin_nested():
                self._session.add(model)
        except IntegrityError as exc:
            field_name, value = document.dedupe_key
            existing = (
                await self.find_by_source_url(value)
                if field_name == "source_url"
                else await self.find_by_content_hash(value)
            )
            raise DuplicateEntityError(
                "Document", field_name, value, existing_id=existing.id if existing else None
            ) from exc
        return self._to_entity(model)

    async def update(self, document: Document) -> Document:
        model = await self._session.get(DocumentModel, document.id)
        if model is None:
            raise ValueError(f"Document {document.id} not found in database")
        model.title = document.title
        model.content = document.content
        model.content_hash = document.content_hash
        model.metadata_ = document.metadata
        model.chunk_count = document.chunk_count
        await self._session.flush()
        return self._to_entity(model)

    async def delete(self, document_id: str) -> bool:
        model = await self._session.get(DocumentModel, document_id)
        if model is None:
            return False
        # SQLite only honours ON DELETE CASCADE with foreign keys enabled.
        await self._session.execute(
            delete(DocumentChunkModel).where(DocumentChunkModel.document_id == document_id)
        )
        await self._session.delete(model)
        await self._session.flush()
        return True
