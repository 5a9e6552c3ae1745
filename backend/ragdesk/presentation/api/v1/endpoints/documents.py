"""Document ingestion, duplicate-check and management endpoints."""

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status

from ragdesk.application.schemas.documents import (
    ChunkErrorSchema,
    DocumentIngestRequest,
    DocumentSummarySchema,
    DuplicateCheckRequest,
    DuplicateCheckResponse,
    ExistingDocumentSchema,
    IngestResultResponse,
    NormalizeUrlRequest,
    NormalizeUrlResponse,
)
from ragdesk.application.services import DocumentService
from ragdesk.application.services.document_service import IngestResult
from ragdesk.application.services.url_normalizer import normalize_url
from ragdesk.domain.entities import Document, SourceType
from ragdesk.infrastructure.dependencies import get_document_service
from ragdesk.presentation.api.v1.request_context import (
    DOMAIN_ERRORS,
    get_actor_id,
    to_http_exception,
)

router = APIRouter(prefix="/documents", tags=["Documents"])


def _summary(document: Document) -> DocumentSummarySchema:
    return DocumentSummarySchema(
        id=document.id,
        title=document.title,
        source_type=document.source_type,
        source_url=document.source_url,
        content_hash=document.content_hash,
        chunk_count=document.chunk_count,
        metadata=document.metadata,
        created_at=document.created_at,
    )


def _ingest_response(result: IngestResult) -> IngestResultResponse:
    return IngestResultResponse(
        document=_summary(result.document),
        chunks_created=result.chunks_created,
        total_chunks=result.total_chunks,
        errors=[ChunkErrorSchema(chunk=e.chunk, error=e.error) for e in result.errors],
    )


@router.post("/normalize-url", response_model=NormalizeUrlResponse)
async def normalize(data: NormalizeUrlRequest) -> NormalizeUrlResponse:
    """Canonical form of a URL as used for duplicate detection."""
    result = normalize_url(data.url)
    return NormalizeUrlResponse(normalized=result.normalized, type=result.type.value)


@router.post("/check-duplicate", response_model=DuplicateCheckResponse)
async def check_duplicate(
    data: DuplicateCheckRequest,
    service: DocumentService = Depends(get_document_service),
) -> DuplicateCheckResponse:
    try:
        result = await service.check_duplicate(data.type, url=data.url, file_hash=data.file_hash)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e) from e

    existing = result.existing_document
    return DuplicateCheckResponse(
        is_duplicate=result.is_duplicate,
        existing_document=(
            ExistingDocumentSchema(
                id=existing.id,
                title=existing.title,
                source_url=existing.source_url,
                uploaded_at=existing.created_at,
            )
            if existing else None
        ),
        normalized_url=result.normalized_url,
        message=result.message,
    )


@router.post(
    "",
    response_model=IngestResultResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(get_actor_id)],
)
async def ingest_document(
    data: DocumentIngestRequest,
    service: DocumentService = Depends(get_document_service),
) -> IngestResultResponse:
    """Chunk, embed and store already-extracted text (URL sources or pasted text)."""
    try:
        result = await service.ingest(data)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e) from e
    return _ingest_response(result)


@router.post(
    "/upload",
    response_model=IngestResultResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(get_actor_id)],
)
async def upload_document(
    file: UploadFile = File(...),
    title: str | None = Form(None),
    service: DocumentService = Depends(get_document_service),
) -> IngestResultResponse:
    """Ingest a UTF-8 text file; the dedupe hash covers the raw bytes."""
    raw = await file.read()
    if not raw:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file provided")
    try:
        content = raw.decode("utf-8")
    except UnicodeDecodeError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="File is not UTF-8 text"
        ) from None

    data = DocumentIngestRequest(
        title=title or file.filename or "Untitled",
        content=content,
        source_type=SourceType.FILE,
        metadata={"file_name": file.filename, "file_size": len(raw)},
    )
    try:
        result = await service.ingest(data, raw_bytes=raw)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e) from e
    return _ingest_response(result)


@router.get("", response_model=list[DocumentSummarySchema])
async def list_documents(
    source_type: SourceType | None = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    service: DocumentService = Depends(get_document_service),
) -> list[DocumentSummarySchema]:
    documents = await service.list_documents(source_type=source_type, skip=skip, limit=limit)
    return [_summary(d) for d in documents]


@router.get("/{document_id}", response_model=DocumentSummarySchema)
async def get_document(
    document_id: str,
    service: DocumentService = Depends(get_document_service),
) -> DocumentSummarySchema:
    try:
        document = await service.get_document(document_id)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e) from e
    return _summary(document)


@router.delete("/{document_id}", dependencies=[Depends(get_actor_id)])
async def delete_document(
    document_id: str,
    service: DocumentService = Depends(get_document_service),
) -> dict:
    """Hard-delete a document and all of its chunks."""
    try:
        await service.delete_document(document_id)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e) from e
    return {"success": True, "deleted_id": document_id}
