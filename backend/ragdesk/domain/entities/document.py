"""Domain entities for ingested documents and their retrievable chunks."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4


class SourceType(str, Enum):
    """Where a document's text came from."""

    FILE = "file"
    YOUTUBE = "youtube"
    WEB = "web"

    @property
    def is_url(self) -> bool:
        return self is not SourceType.FILE


@dataclass
class Document:
    """A source document in the knowledge base.

    Unique per content hash for file sources and per canonical URL for
    URL sources.
    """

    title: str
    content: str
    content_hash: str
    source_type: SourceType
    source_url: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: str(uuid4()))
    chunk_count: int = 0
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def dedupe_key(self) -> tuple[str, str]:
        """The (field, value) pair that identifies this document for deduplication."""
        if self.source_type.is_url and self.source_url:
            return ("source_url", self.source_url)
        return ("content_hash", self.content_hash)


@dataclass
class DocumentChunk:
    """An ordered slice of a document's text with its embedding.

    ``start_offset`` is the character position of the slice in the source
    text, so chunks can be put back in order.
    """

    document_id: str
    chunk_index: int
    content: str
    start_offset: int = 0
    embedding: list[float] = field(default_factory=list)
    id: int | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class SearchMatch:
    """One ranked row from a vector similarity search."""

    chunk_id: int
    document_id: str
    chunk_index: int
    content: str
    score: float  # 0.0 – 1.0 (cosine similarity)
    document_title: str | None = None
    source_url: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
