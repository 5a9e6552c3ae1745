from .data_request_models import AuditLogModel, ConsentRecordModel, DataSubjectRequestModel
from .document_models import DocumentChunkModel, DocumentModel

__all__ = [
    "AuditLogModel",
    "ConsentRecordModel",
    "DataSubjectRequestModel",
    "DocumentChunkModel",
    "DocumentModel",
]
