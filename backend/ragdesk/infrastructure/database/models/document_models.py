"""SQLAlchemy ORM models for documents and their pgvector-embedded chunks."""

from datetime import datetime

from pgvector.sqlalchemy import Vector
from sqlalchemy import (
    JSON,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from ragdesk.config import get_settings
from ragdesk.infrastructure.database.base import Base, utcnow

EMBEDDING_DIMENSIONS = get_settings().embedding_dimensions  # HNSW max: 2000


class DocumentModel(Base):
    """ORM model — maps to the 'documents' table."""

    __tablename__ = "documents"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    content_hash: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    source_type: Mapped[str] = mapped_column(String(20), nullable=False)
    source_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    metadata_: Mapped[dict] = mapped_column("metadata", JSON, nullable=False, default=dict)
    chunk_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    __table_args__ = (
        # Files dedupe by hash, URL sources by canonical URL.
        Index(
            "uq_documents_file_hash",
            "content_hash",
            unique=True,
            postgresql_where=text("source_type = 'file'"),
            sqlite_where=text("source_type = 'file'"),
        ),
        Index(
            "uq_documents_source_url",
            "source_url",
            unique=True,
            postgresql_where=text("source_url IS NOT NULL"),
            sqlite_where=text("source_url IS NOT NULL"),
        ),
    )

    def __repr__(self) -> str:
        return f"<DocumentModel(id={self.id}, type='{self.source_type}', title='{self.title[:30]}')>"


class DocumentChunkModel(Base):
    """A text chunk of a document with its vector embedding."""

    __tablename__ = "document_chunks"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    document_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    chunk_index: Mapped[int] = mapped_column(Integer, nullable=False)
    start_offset: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    embedding = mapped_column(Vector(EMBEDDING_DIMENSIONS), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("document_id", "chunk_index", name="uq_document_chunk_index"),
        Index(
            "idx_document_chunks_embedding_hnsw",
            "embedding",
            postgresql_using="hnsw",
            postgresql_ops={"embedding": "vector_cosine_ops"},
        ),
    )
