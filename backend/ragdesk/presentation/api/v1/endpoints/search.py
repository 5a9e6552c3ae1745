"""Semantic search over document chunks."""

from fastapi import APIRouter, Depends

from ragdesk.application.schemas.documents import (
    SearchRequest,
    SearchResponse,
    SearchResultSchema,
)
from ragdesk.application.services import DocumentService
from ragdesk.infrastructure.dependencies import get_document_service
from ragdesk.presentation.api.v1.request_context import DOMAIN_ERRORS, to_http_exception

router = APIRouter(prefix="/search", tags=["Search"])


@router.post("", response_model=SearchResponse)
async def search(
    data: SearchRequest,
    service: DocumentService = Depends(get_document_service),
) -> SearchResponse:
    try:
        matches = await service.search(data.query, limit=data.limit, threshold=data.threshold)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e) from e

    results = [
        SearchResultSchema(
            id=m.chunk_id,
            document_id=m.document_id,
            chunk_index=m.chunk_index,
            content=m.content,
            similarity=m.score,
            document_title=m.document_title,
            source_url=m.source_url,
            metadata=m.metadata,
        )
        for m in matches
    ]
    return SearchResponse(query=data.query, results=results, count=len(results))
