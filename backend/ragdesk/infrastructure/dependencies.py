"""FastAPI dependency injection — wires infrastructure to application layer."""

from collections.abc import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ragdesk.config import get_settings
from ragdesk.application.interfaces import EmbeddingProvider
from ragdesk.application.services import (
    AuditTrail,
    CascadingDeletion,
    ConsentService,
    DataRequestService,
    DocumentService,
    EmbeddingGateway,
)
from ragdesk.application.services.text_chunker import ChunkingOptions
from ragdesk.infrastructure.database.session import get_db_session
from ragdesk.infrastructure.database.repositories import (
    PgChunkRepository,
    SQLAlchemyAuditLogRepository,
    SQLAlchemyConsentRepository,
    SQLAlchemyDataRequestRepository,
    SQLAlchemyDocumentRepository,
    SQLAlchemySubjectDataEraser,
)
from ragdesk.infrastructure.openrouter import OpenRouterEmbeddingProvider


def get_embedding_provider(request: Request) -> EmbeddingProvider:
    """OpenRouter embedding provider sharing the app-wide pooled httpx client."""
    settings = get_settings()
    return OpenRouterEmbeddingProvider(
        api_key=settings.openrouter_api_key,
        base_url=settings.openrouter_base_url,
        app_name=settings.openrouter_app_name,
        model=settings.embedding_model,
        model_dimensions=settings.embedding_dimensions,
        http_client=getattr(request.app.state, "http_client", None),
    )


async def get_document_service(
    session: AsyncSession = Depends(get_db_session),
    provider: EmbeddingProvider = Depends(get_embedding_provider),
) -> AsyncGenerator[DocumentService, None]:
    """Provides a DocumentService with repositories and the embedding gateway wired up."""
    settings = get_settings()
    chunk_repository = PgChunkRepository(session)
    gateway = EmbeddingGateway(
        provider,
        chunk_repository,
        batch_size=settings.embedding_batch_size,
        batch_delay_seconds=settings.embedding_batch_delay_seconds,
    )
    yield DocumentService(
        SQLAlchemyDocumentRepository(session),
        chunk_repository,
        gateway,
        chunking=ChunkingOptions(
            chunk_size=settings.chunk_size,
            overlap=settings.chunk_overlap,
            max_chunks=settings.chunk_max_chunks,
        ),
        match_threshold=settings.search_match_threshold,
        default_limit=settings.search_default_limit,
    )


async def get_data_request_service(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[DataRequestService, None]:
    """Provides a DataRequestService with audit trail and cascading deletion."""
    settings = get_settings()
    yield DataRequestService(
        SQLAlchemyDataRequestRepository(session),
        AuditTrail(SQLAlchemyAuditLogRepository(session)),
        CascadingDeletion(SQLAlchemySubjectDataEraser(session)),
        sla_days=settings.data_request_sla_days,
        sla_warning_days=settings.data_request_sla_warning_days,
        export_retention_days=settings.export_retention_days,
    )


async def get_consent_service(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[ConsentService, None]:
    yield ConsentService(
        SQLAlchemyConsentRepository(session),
        AuditTrail(SQLAlchemyAuditLogRepository(session)),
    )
