from .audit_log_repository import AuditLogRepository
from .chunk_repository import ChunkRepository
from .consent_repository import ConsentRepository
from .data_request_repository import DataRequestRepository
from .document_repository import DocumentRepository
from .embedding_provider import EmbeddingProvider
from .subject_data_eraser import SubjectDataEraser

__all__ = [
    "AuditLogRepository",
    "ChunkRepository",
    "ConsentRepository",
    "DataRequestRepository",
    "DocumentRepository",
    "EmbeddingProvider",
    "SubjectDataEraser",
]
