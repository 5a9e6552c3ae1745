"""Pydantic schemas for document ingestion, duplicate checks and search."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from ragdesk.domain.entities import SourceType


# ── Request Schemas ──────────────────────────────────────────────────


class NormalizeUrlRequest(BaseModel):
    url: str


class DuplicateCheckRequest(BaseModel):
    type: str = Field(..., description="'file', 'youtube' or 'web'")
    url: str | None = None
    file_hash: str | None = Field(None, description="SHA-256 hex digest of the file bytes")


class DocumentIngestRequest(BaseModel):
    """Text ingestion for URL sources or already-extracted file text."""

    title: str = Field(..., min_length=1, max_length=500)
    content: str = Field(..., min_length=1)
    source_type: SourceType
    source_url: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    chunking: Literal["fixed", "paragraph"] = "fixed"


class SearchRequest(BaseModel):
    query: str = Field(..., min_length=1)
    limit: int | None = Field(None, ge=1, le=100)
    threshold: float | None = Field(None, ge=0.0, le=1.0)


# ── Response Schemas ─────────────────────────────────────────────────


class NormalizeUrlResponse(BaseModel):
    normalized: str | None
    type: Literal["youtube", "web", "invalid"]


class ExistingDocumentSchema(BaseModel):
    id: str
    title: str
    source_url: str | None = None
    uploaded_at: datetime


class DuplicateCheckResponse(BaseModel):
    is_duplicate: bool
    existing_document: ExistingDocumentSchema | None = None
    normalized_url: str | None = None
    message: str | None = None


class DocumentSummarySchema(BaseModel):
    id: str
    title: str
    source_type: SourceType
    source_url: str | None = None
    content_hash: str
    chunk_count: int
    metadata: dict[str, Any] = {}
    created_at: datetime


class ChunkErrorSchema(BaseModel):
    chunk: int
    error: str


class IngestResultResponse(BaseModel):
    success: bool = True
    document: DocumentSummarySchema
    chunks_created: int
    total_chunks: int
    errors: list[ChunkErrorSchema] = []


class SearchResultSchema(BaseModel):
    id: int
    document_id: str
    chunk_index: int
    content: str
    similarity: float
    document_title: str | None = None
    source_url: str | None = None
    metadata: dict[str, Any] = {}


class SearchResponse(BaseModel):
    success: bool = True
    query: str
    results: list[SearchResultSchema]
    count: int
