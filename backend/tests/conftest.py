"""Shared in-memory fakes implementing the application ports."""

import asyncio
import copy
import math
from collections.abc import Sequence

import pytest

from ragdesk.application.interfaces import (
    AuditLogRepository,
    ChunkRepository,
    ConsentRepository,
    DataRequestRepository,
    DocumentRepository,
    EmbeddingProvider,
    SubjectDataEraser,
)
from ragdesk.domain.entities import (
    AuditEntry,
    ConsentRecord,
    ConsentType,
    DataSubjectRequest,
    Document,
    DocumentChunk,
    RequestStatus,
    RequestType,
    SearchMatch,
    SourceType,
    SubjectCollection,
)
from ragdesk.domain.exceptions import ConcurrentModificationError, EmbeddingProviderError

DIMENSIONS = 4


def vector_for(text: str) -> list[float]:
    """Deterministic, non-zero 4-d vector derived from the text."""
    base = sum(ord(c) for c in text) or 1
    return [float(base % 7 + 1), float(len(text) % 5 + 1), 1.0, float(base % 3)]


class FakeEmbeddingProvider(EmbeddingProvider):
    """Returns ``vector_for(text)``; texts in ``fail_on`` raise.

    ``delays`` maps a text to a sleep before answering, so concurrent calls
    can finish out of input order.
    """

    def __init__(self, *, fail_on: Sequence[str] = (), delays: dict[str, float] | None = None):
        self.fail_on = set(fail_on)
        self.delays = delays or {}
        self.calls: list[list[str]] = []
        self.query_calls: list[str] = []
        self.wrong_dimensions = False

    @property
    def dimensions(self) -> int:
        return DIMENSIONS

    async def generate_embeddings(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        for text in texts:
            if text in self.delays:
                await asyncio.sleep(self.delays[text])
            if text in self.fail_on:
                raise EmbeddingProviderError("fake", 500, f"cannot embed {text!r}")
        if self.wrong_dimensions:
            return [[1.0, 2.0] for _ in texts]
        return [vector_for(t) for t in texts]

    async def generate_query_embedding(self, query: str) -> list[float]:
        self.query_calls.append(query)
        return vector_for(query)


def cosine(a: list[float], b: list[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b))
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    return dot / norm if norm else 0.0


class FakeChunkRepository(ChunkRepository):
    def __init__(self, documents: "FakeDocumentRepository | None" = None):
        self.chunks: list[DocumentChunk] = []
        self._documents = documents
        self._next_id = 1
        self.fail_search = False

    async def store_chunks(self, chunks: list[DocumentChunk]) -> None:
        for chunk in chunks:
            chunk.id = self._next_id
            self._next_id += 1
            self.chunks.append(chunk)

    async def delete_by_document(self, document_id: str) -> int:
        before = len(self.chunks)
        self.chunks = [c for c in self.chunks if c.document_id != document_id]
        return before - len(self.chunks)

    async def count_by_document(self, document_id: str) -> int:
        return sum(1 for c in self.chunks if c.document_id == document_id)

    async def search_similar(self, query_embedding, *, threshold, limit) -> list[SearchMatch]:
        if self.fail_search:
            raise RuntimeError("vector index unavailable")
        matches = []
        for chunk in self.chunks:
            score = cosine(query_embedding, chunk.embedding)
            if score < threshold:
                continue
            document = self._documents.items.get(chunk.document_id) if self._documents else None
            matches.append(
                SearchMatch(
                    chunk_id=chunk.id,
                    document_id=chunk.document_id,
                    chunk_index=chunk.chunk_index,
                    content=chunk.content,
                    score=score,
                    document_title=document.title if document else None,
                )
            )
        matches.sort(key=lambda m: (-m.score, m.chunk_id))
        return matches[:limit]


class FakeDocumentRepository(DocumentRepository):
    def __init__(self):
        self.items: dict[str, Document] = {}

    async def get_by_id(self, document_id: str) -> Document | None:
        return self.items.get(document_id)

    async def find_by_content_hash(self, content_hash: str) -> Document | None:
        return next(
            (
                d for d in self.items.values()
                if d.content_hash == content_hash and d.source_type is SourceType.FILE
            ),
            None,
        )

    async def find_by_source_url(self, source_url: str) -> Document | None:
        return next((d for d in self.items.values() if d.source_url == source_url), None)

    async def get_all(self, *, source_type=None, skip=0, limit=100) -> list[Document]:
        docs = [d for d in self.items.values() if source_type is None or d.source_type is source_type]
        docs.sort(key=lambda d: d.created_at, reverse=True)
        return docs[skip : skip + limit]

    async def create(self, document: Document) -> Document:
        self.items[document.id] = document
        return document

    async def update(self, document: Document) -> Document:
        if document.id not in self.items:
            raise ValueError(f"Document {document.id} not found")
        self.items[document.id] = document
        return document

    async def delete(self, document_id: str) -> bool:
        return self.items.pop(document_id, None) is not None


class FakeDataRequestRepository(DataRequestRepository):
    """Stores copies so in-place changes on returned entities are not persisted."""

    def __init__(self):
        self.items: dict[str, DataSubjectRequest] = {}

    async def get_by_id(self, request_id: str) -> DataSubjectRequest | None:
        stored = self.items.get(request_id)
        return copy.deepcopy(stored) if stored else None

    def _matching(self, status, request_type, subject_id):
        return [
            r for r in self.items.values()
            if (status is None or r.status is status)
            and (request_type is None or r.request_type is request_type)
            and (subject_id is None or r.subject_id == subject_id)
        ]

    async def get_all(self, *, status=None, request_type=None, subject_id=None, skip=0, limit=50):
        found = sorted(
            self._matching(status, request_type, subject_id),
            key=lambda r: r.submitted_at,
            reverse=True,
        )
        return [copy.deepcopy(r) for r in found[skip : skip + limit]]

    async def count(self, *, status=None, request_type=None, subject_id=None) -> int:
        return len(self._matching(status, request_type, subject_id))

    async def count_by_status(self) -> dict[RequestStatus, int]:
        counts: dict[RequestStatus, int] = {}
        for r in self.items.values():
            counts[r.status] = counts.get(r.status, 0) + 1
        return counts

    async def list_open(self) -> list[DataSubjectRequest]:
        return [copy.deepcopy(r) for r in self.items.values() if not r.status.is_terminal]

    async def create(self, request: DataSubjectRequest) -> DataSubjectRequest:
        self.items[request.id] = copy.deepcopy(request)
        return request

    async def update(self, request: DataSubjectRequest, *, expected_version: int) -> DataSubjectRequest:
        stored = self.items.get(request.id)
        if stored is None or stored.version != expected_version:
            raise ConcurrentModificationError("DataSubjectRequest", request.id, expected_version)
        request.version = expected_version + 1
        self.items[request.id] = copy.deepcopy(request)
        return request


class FakeAuditLogRepository(AuditLogRepository):
    def __init__(self):
        self.entries: list[AuditEntry] = []
        self.fail = False

    async def create(self, entry: AuditEntry) -> AuditEntry:
        if self.fail:
            raise RuntimeError("audit table is read-only")
        entry.id = len(self.entries) + 1
        self.entries.append(entry)
        return entry

    async def list_for_resource(self, resource_type: str, resource_id: str) -> list[AuditEntry]:
        found = [
            e for e in self.entries
            if e.resource_type == resource_type and e.resource_id == resource_id
        ]
        return list(reversed(found))


class FakeConsentRepository(ConsentRepository):
    def __init__(self):
        self.records: list[ConsentRecord] = []

    async def create(self, record: ConsentRecord) -> ConsentRecord:
        self.records.append(record)
        return record

    async def list_for_subject(self, subject_id: str, *, consent_type: ConsentType | None = None):
        return [
            r for r in self.records
            if r.subject_id == subject_id and (consent_type is None or r.consent_type is consent_type)
        ]


class FakeSubjectDataEraser(SubjectDataEraser):
    """Rows per collection as (row id, owner id) pairs."""

    def __init__(self, rows: dict[str, list[tuple[str, str]]] | None = None, *, failing=()):
        self.rows = rows or {}
        self.failing = set(failing)
        self.visited: list[str] = []

    async def delete_subject_rows(
        self,
        collection: SubjectCollection,
        subject_id: str,
        *,
        keep_ids: Sequence[str] = (),
    ) -> int:
        self.visited.append(collection.name)
        if collection.name in self.failing:
            raise RuntimeError(f"relation \"{collection.name}\" is locked")
        existing = self.rows.get(collection.name, [])
        kept = [
            (row_id, owner) for row_id, owner in existing
            if owner != subject_id or row_id in keep_ids
        ]
        self.rows[collection.name] = kept
        return len(existing) - len(kept)


# ── Fixtures ──


@pytest.fixture
def embedding_provider() -> FakeEmbeddingProvider:
    return FakeEmbeddingProvider()


@pytest.fixture
def document_repository() -> FakeDocumentRepository:
    return FakeDocumentRepository()


@pytest.fixture
def chunk_repository(document_repository: FakeDocumentRepository) -> FakeChunkRepository:
    return FakeChunkRepository(document_repository)


@pytest.fixture
def data_request_repository() -> FakeDataRequestRepository:
    return FakeDataRequestRepository()


@pytest.fixture
def audit_repository() -> FakeAuditLogRepository:
    return FakeAuditLogRepository()


@pytest.fixture
def consent_repository() -> FakeConsentRepository:
    return FakeConsentRepository()


@pytest.fixture
def eraser() -> FakeSubjectDataEraser:
    return FakeSubjectDataEraser()


def make_request(
    request_type: RequestType = RequestType.DELETION,
    subject_id: str = "user-1",
    **kwargs,
) -> DataSubjectRequest:
    return DataSubjectRequest(subject_id=subject_id, request_type=request_type, **kwargs)


@pytest.fixture
def request_factory():
    return make_request
