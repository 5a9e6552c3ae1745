from .audit_log_repository import SQLAlchemyAuditLogRepository
from .chunk_repository import PgChunkRepository
from .consent_repository import SQLAlchemyConsentRepository
from .data_request_repository import SQLAlchemyDataRequestRepository
from .document_repository import SQLAlchemyDocumentRepository
from .subject_data_eraser import SQLAlchemySubjectDataEraser

__all__ = [
    "SQLAlchemyAuditLogRepository",
    "PgChunkRepository",
    "SQLAlchemyConsentRepository",
    "SQLAlchemyDataRequestRepository",
    "SQLAlchemyDocumentRepository",
    "SQLAlchemySubjectDataEraser",
]
